"""
View state for the order pages.

Each view owns its orders in memory and is rebuilt whenever the page is
activated, so nothing is shared or cached across pages.
"""

import logging
from typing import List, Optional

from .client import OrdersClient
from .controller import Outcome, OrderStatusController, TransitionResult
from .display import orders_to_csv
from .filters import ALL, filter_orders
from .models import Order, OrderStatus, PaymentStatus
from .workflow import OrderActions, available_actions
from ..core.errors import ApiError
from ..core.notifications import ERROR, Notification, Notifier

logger = logging.getLogger(__name__)


class OrderListView:
    """All orders, filtered client-side."""

    LOAD_ERROR = 'Falha ao carregar pedidos. Tente novamente mais tarde.'

    def __init__(self, client: OrdersClient, controller: OrderStatusController, notify: Notifier):
        self.client = client
        self.controller = controller
        self.notify = notify
        self.orders: List[Order] = []
        self.error: Optional[str] = None

    def load_orders(self) -> List[Order]:
        """Fetch every order. Never raises: failures give an empty list."""
        try:
            self.orders = self.client.get_orders()
            self.error = None
            logger.info(f"Loaded {len(self.orders)} orders")
        except ApiError as e:
            logger.error(f"Failed to load orders: {e}")
            self.orders = []
            self.error = self.LOAD_ERROR
            self.notify(Notification(ERROR, self.LOAD_ERROR))
        return self.orders

    def filtered(
        self,
        search_term: str = '',
        status_filter: str = ALL,
        payment_filter: str = ALL
    ) -> List[Order]:
        return filter_orders(self.orders, search_term, status_filter, payment_filter)

    def export_csv(
        self,
        search_term: str = '',
        status_filter: str = ALL,
        payment_filter: str = ALL
    ) -> str:
        return orders_to_csv(self.filtered(search_term, status_filter, payment_filter))

    def _find(self, order_id: int) -> Optional[Order]:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    def _patch(self, order_id: int, **fields) -> None:
        self.orders = [
            o.model_copy(update=fields) if o.id == order_id else o
            for o in self.orders
        ]

    def set_order_status(self, order_id: int, status: OrderStatus) -> TransitionResult:
        result = self.controller.set_order_status(order_id, status, self._find(order_id))
        if result.outcome == Outcome.CONFIRMED:
            self._patch(order_id, status=result.order.status)
        elif result.outcome == Outcome.UNCONFIRMED:
            self.load_orders()
        return result

    def set_payment_status(self, order_id: int, payment_status: PaymentStatus) -> TransitionResult:
        result = self.controller.set_payment_status(order_id, payment_status, self._find(order_id))
        if result.outcome == Outcome.CONFIRMED:
            self._patch(order_id, payment_status=result.order.payment_status)
        elif result.outcome == Outcome.UNCONFIRMED:
            self.load_orders()
        return result


class OrderDetailView:
    """One order and the transitions it currently offers."""

    LOAD_ERROR = 'Falha ao carregar detalhes do pedido. Tente novamente mais tarde.'

    def __init__(
        self,
        client: OrdersClient,
        controller: OrderStatusController,
        order_id: int
    ):
        self.client = client
        self.controller = controller
        self.order_id = order_id
        self.order: Optional[Order] = None
        self.error: Optional[str] = None
        self.loaded = False

    def load(self) -> Optional[Order]:
        try:
            self.order = self.client.get_order(self.order_id)
            self.error = None
        except ApiError as e:
            logger.error(f"Failed to load order {self.order_id}: {e}")
            self.order = None
            self.error = self.LOAD_ERROR
        self.loaded = True
        return self.order

    @property
    def not_found(self) -> bool:
        return self.loaded and self.order is None and self.error is None

    def actions(self) -> Optional[OrderActions]:
        if self.order is None:
            return None
        return available_actions(self.order)

    def _adopt(self, result: TransitionResult) -> TransitionResult:
        if result.order is not None:
            self.order = result.order
        return result

    def set_order_status(self, status: OrderStatus) -> Optional[TransitionResult]:
        if self.order is None:
            return None
        return self._adopt(self.controller.set_order_status(self.order.id, status, self.order))

    def set_payment_status(self, payment_status: PaymentStatus) -> Optional[TransitionResult]:
        if self.order is None:
            return None
        return self._adopt(
            self.controller.set_payment_status(self.order.id, payment_status, self.order)
        )

    def set_item_status(self, item_id: int, status: OrderStatus) -> Optional[TransitionResult]:
        if self.order is None:
            return None
        return self._adopt(
            self.controller.set_item_status(self.order.id, item_id, status, self.order)
        )

    def complete(self) -> Optional[TransitionResult]:
        return self.set_order_status(OrderStatus.COMPLETED)

    def cancel(self) -> Optional[TransitionResult]:
        return self.set_order_status(OrderStatus.CANCELLED)

    def mark_paid(self) -> Optional[TransitionResult]:
        return self.set_payment_status(PaymentStatus.PAID)

    def mark_failed(self) -> Optional[TransitionResult]:
        return self.set_payment_status(PaymentStatus.FAILED)


class CustomerOrdersView:
    """Orders of the signed-in customer (account page)."""

    LOAD_ERROR = 'Não foi possível carregar seus pedidos. Tente novamente.'

    def __init__(self, client: OrdersClient, notify: Notifier):
        self.client = client
        self.notify = notify
        self.orders: List[Order] = []

    def load(self, user_id: int) -> List[Order]:
        try:
            self.orders = self.client.get_user_orders(user_id)
        except ApiError as e:
            logger.error(f"Failed to load orders of user {user_id}: {e}")
            self.orders = []
            self.notify(Notification(ERROR, self.LOAD_ERROR))
        return self.orders
