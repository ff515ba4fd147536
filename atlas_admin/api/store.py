"""
In-memory order store behind the sandbox API.
Seeded with a handful of demo orders so the dashboard has something to show.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..orders.models import (
    CustomerSummary,
    Order,
    OrderCreate,
    OrderItem,
    OrderStatus,
    PaymentStatus,
)

logger = logging.getLogger(__name__)

DEMO_CUSTOMERS = {
    1: CustomerSummary(id=1, name='Ana Souza', email='ana@example.com', phone='(11) 98765-4321'),
    2: CustomerSummary(id=2, name='Bruno Lima', email='bruno@example.com'),
    3: CustomerSummary(id=3, name='Carla Mendes', email='carla@example.com', phone='(21) 99888-1234'),
}

DEMO_CERTIFICATES = {
    10: ('Certificado Digital e-CPF A1', 189.90),
    11: ('Certificado Digital e-CNPJ A1', 249.90),
    12: ('Certificado Digital e-CNPJ A3 (token)', 419.00),
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class OrderStore:
    """Thread-safe in-memory orders, keyed by id."""

    def __init__(self, seed: bool = True):
        self._orders: Dict[int, Order] = {}
        self._next_order_id = 1
        self._next_item_id = 1
        self._lock = threading.Lock()
        if seed:
            self._seed()

    def _seed(self) -> None:
        demo = [
            (1, [(10, 1)], OrderStatus.PENDING, PaymentStatus.PENDING),
            (2, [(11, 1), (12, 2)], OrderStatus.PROCESSING, PaymentStatus.PAID),
            (1, [(12, 1)], OrderStatus.COMPLETED, PaymentStatus.PAID),
            (3, [(10, 3)], OrderStatus.CANCELLED, PaymentStatus.FAILED),
        ]
        for user_id, lines, status, payment_status in demo:
            order = self.create(OrderCreate(
                user_id=user_id,
                certificate_items=[{'certificate_id': c, 'quantity': q} for c, q in lines],
            ))
            self.update(order.id, status=status, payment_status=payment_status)
        logger.info(f"Seeded {len(self._orders)} demo orders")

    def list(self) -> List[Order]:
        with self._lock:
            return list(self._orders.values())

    def list_for_user(self, user_id: int) -> List[Order]:
        with self._lock:
            return [o for o in self._orders.values() if o.user_id == user_id]

    def get(self, order_id: int) -> Optional[Order]:
        with self._lock:
            return self._orders.get(order_id)

    def create(self, data: OrderCreate) -> Order:
        with self._lock:
            items = []
            for line in data.certificate_items:
                name, list_price = DEMO_CERTIFICATES.get(
                    line.certificate_id, (f"Certificado #{line.certificate_id}", 0.0)
                )
                items.append(OrderItem(
                    id=self._next_item_id,
                    certificate_id=line.certificate_id,
                    certificate_name=name,
                    price=line.price if line.price is not None else list_price,
                    quantity=line.quantity,
                    certificate_data=line.certificate_data,
                ))
                self._next_item_id += 1

            now = _now()
            order = Order(
                id=self._next_order_id,
                user_id=data.user_id,
                total_amount=round(sum(i.price * i.quantity for i in items), 2),
                notes=data.notes,
                created_at=now,
                updated_at=now,
                items=items,
                user=DEMO_CUSTOMERS.get(data.user_id),
            )
            self._orders[order.id] = order
            self._next_order_id += 1
            return order

    def update(
        self,
        order_id: int,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None
    ) -> Optional[Order]:
        """Set order-level fields. Every transition is accepted."""
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return None
            changes = {'updated_at': _now()}
            if status is not None:
                changes['status'] = status
            if payment_status is not None:
                changes['payment_status'] = payment_status
            order = order.model_copy(update=changes)
            self._orders[order_id] = order
            return order

    def update_item(self, order_id: int, item_id: int, status: OrderStatus) -> Optional[OrderItem]:
        with self._lock:
            order = self._orders.get(order_id)
            if order is None or order.find_item(item_id) is None:
                return None
            items = [
                i.model_copy(update={'status': status}) if i.id == item_id else i
                for i in order.items
            ]
            self._orders[order_id] = order.model_copy(update={'items': items, 'updated_at': _now()})
            return self._orders[order_id].find_item(item_id)


_store_instance: Optional[OrderStore] = None


def get_store() -> OrderStore:
    """Get the global store instance."""
    global _store_instance
    if _store_instance is None:
        _store_instance = OrderStore()
    return _store_instance
