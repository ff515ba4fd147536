"""
Order Status Controller.
Turns one status change into one mutating API call plus one confirmation read.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Set

from .client import OrdersClient
from .models import Order, OrderStatus, PaymentStatus
from .workflow import TransitionPolicy, payment_status_label, status_label
from ..core.errors import ApiError, IllegalTransitionError, NetworkError
from ..core.notifications import ERROR, SUCCESS, WARNING, Notification, Notifier

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    CONFIRMED = "confirmed"      # applied and re-read
    UNCONFIRMED = "unconfirmed"  # applied, re-read failed or came back empty
    FAILED = "failed"            # mutating call failed
    REJECTED = "rejected"        # refused locally, nothing sent
    BUSY = "busy"                # same action already in flight


@dataclass
class TransitionResult:
    outcome: Outcome
    order: Optional[Order] = None
    message: str = ""

    @property
    def applied(self) -> bool:
        return self.outcome in (Outcome.CONFIRMED, Outcome.UNCONFIRMED)


class OrderStatusController:
    """
    Mediates status changes for orders, payments and order items.

    Every change goes through `apply` (exactly one PUT) and then `reconcile`
    (exactly one GET of the full order). The re-read order is the only thing
    callers should render. Nothing is retried.
    """

    def __init__(
        self,
        client: OrdersClient,
        notify: Notifier,
        policy: Optional[TransitionPolicy] = None
    ):
        self.client = client
        self.notify = notify
        self.policy = policy or TransitionPolicy()
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    # ==================== Busy markers ====================

    def _acquire(self, key: str) -> bool:
        with self._lock:
            if key in self._in_flight:
                return False
            self._in_flight.add(key)
            return True

    def _release(self, key: str) -> None:
        with self._lock:
            self._in_flight.discard(key)

    def is_busy(self, key: str) -> bool:
        with self._lock:
            return key in self._in_flight

    # ==================== Public operations ====================

    def set_order_status(
        self,
        order_id: int,
        status: OrderStatus,
        current: Optional[Order] = None
    ) -> TransitionResult:
        status = OrderStatus(status)
        label = status_label(status)
        check = None
        if current is not None:
            check = lambda: self.policy.check_order(current.status, status)

        return self._transition(
            key=order_key(order_id),
            order_id=order_id,
            check=check,
            apply=lambda: self.client.update_order_status(order_id, status),
            success=f"Status do pedido #{order_id} atualizado para {label}",
            unconfirmed=(
                f"Status do pedido #{order_id} enviado ({label}), "
                f"mas não foi possível confirmar a atualização"
            ),
            failure="Falha ao atualizar status do pedido. Tente novamente.",
        )

    def set_payment_status(
        self,
        order_id: int,
        payment_status: PaymentStatus,
        current: Optional[Order] = None
    ) -> TransitionResult:
        payment_status = PaymentStatus(payment_status)
        label = payment_status_label(payment_status)
        check = None
        if current is not None:
            check = lambda: self.policy.check_payment(current.payment_status, payment_status)

        return self._transition(
            key=order_key(order_id),
            order_id=order_id,
            check=check,
            apply=lambda: self.client.update_payment_status(order_id, payment_status),
            success=f"Status de pagamento do pedido #{order_id} atualizado para {label}",
            unconfirmed=(
                f"Status de pagamento do pedido #{order_id} enviado ({label}), "
                f"mas não foi possível confirmar a atualização"
            ),
            failure="Falha ao atualizar status de pagamento. Tente novamente.",
        )

    def set_item_status(
        self,
        order_id: int,
        item_id: int,
        status: OrderStatus,
        current: Optional[Order] = None
    ) -> TransitionResult:
        status = OrderStatus(status)
        label = status_label(status)
        key = item_key(order_id, item_id)
        check = None

        if current is not None:
            item = current.find_item(item_id)
            if item is None:
                message = f"Item #{item_id} não pertence ao pedido #{order_id}"
                logger.warning(message)
                self.notify(Notification(ERROR, message, key=f"update-item-error-{item_id}"))
                return TransitionResult(Outcome.REJECTED, message=message)
            check = lambda: self.policy.check_item(item.status, status)

        return self._transition(
            key=key,
            order_id=order_id,
            check=check,
            apply=lambda: self.client.update_item_status(order_id, item_id, status),
            success=f"Status do item #{item_id} atualizado para {label}",
            unconfirmed=(
                f"Status do item #{item_id} enviado ({label}), "
                f"mas não foi possível confirmar a atualização"
            ),
            failure="Falha ao atualizar status do item. Tente novamente.",
            toast_key=f"update-item-{item_id}",
        )

    def reconcile(self, order_id: int) -> Optional[Order]:
        """Re-read the order after a mutation. None when that read fails."""
        try:
            return self.client.get_order(order_id)
        except ApiError as e:
            logger.warning(f"Could not re-read order {order_id}: {e}")
            return None

    # ==================== Internals ====================

    def _transition(
        self,
        key: str,
        order_id: int,
        check: Optional[Callable[[], None]],
        apply: Callable[[], object],
        success: str,
        unconfirmed: str,
        failure: str,
        toast_key: Optional[str] = None
    ) -> TransitionResult:
        if not self._acquire(key):
            message = "Uma atualização já está em andamento para este registro"
            self.notify(Notification(WARNING, message, key=toast_key))
            return TransitionResult(Outcome.BUSY, message=message)

        try:
            if check is not None:
                try:
                    check()
                except IllegalTransitionError as e:
                    logger.warning(f"Rejected transition on order {order_id}: {e}")
                    message = f"Transição não permitida: {e}"
                    self.notify(Notification(ERROR, message, key=toast_key))
                    return TransitionResult(Outcome.REJECTED, message=message)

            try:
                apply()
            except ApiError as e:
                logger.error(f"Status change failed for {key}: {e}")
                message = e.message if isinstance(e, NetworkError) else failure
                self.notify(Notification(ERROR, message, key=toast_key))
                return TransitionResult(Outcome.FAILED, message=message)

            order = self.reconcile(order_id)
            if order is None:
                logger.warning(f"Status change for {key} applied but not confirmed")
                self.notify(Notification(WARNING, unconfirmed, key=toast_key))
                return TransitionResult(Outcome.UNCONFIRMED, message=unconfirmed)

            logger.info(success)
            self.notify(Notification(SUCCESS, success, key=toast_key))
            return TransitionResult(Outcome.CONFIRMED, order=order, message=success)
        finally:
            self._release(key)


def order_key(order_id: int) -> str:
    return f"order:{order_id}"


def item_key(order_id: int, item_id: int) -> str:
    return f"order:{order_id}:item:{item_id}"


def create_controller_from_config(client: OrdersClient, notify: Notifier) -> OrderStatusController:
    """Create a controller with the transition policy from config."""
    from ..core.config import get_config

    strict = get_config().get_bool('workflow', 'strict_transitions', default=False)
    return OrderStatusController(client, notify, TransitionPolicy(strict=strict))
