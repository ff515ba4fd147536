"""
Order status workflow.

Labels, badge colours, which actions the dashboard offers for an order, and
the transition tables checked before a status change is sent to the API.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Union

from .models import Order, OrderItem, OrderStatus, PaymentStatus
from ..core.errors import IllegalTransitionError

ORDER_STATUS_LABELS: Dict[str, str] = {
    'pending': 'Pendente',
    'processing': 'Em Processamento',
    'completed': 'Concluído',
    'cancelled': 'Cancelado',
}

PAYMENT_STATUS_LABELS: Dict[str, str] = {
    'pending': 'Pendente',
    'paid': 'Pago',
    'failed': 'Falhou',
}

ORDER_STATUS_COLORS: Dict[str, str] = {
    'pending': 'orange',
    'processing': 'blue',
    'completed': 'green',
    'cancelled': 'red',
}

PAYMENT_STATUS_COLORS: Dict[str, str] = {
    'pending': 'orange',
    'paid': 'green',
    'failed': 'red',
}

DEFAULT_COLOR = 'gray'


def _value(status: Union[str, OrderStatus, PaymentStatus]) -> str:
    return status.value if isinstance(status, (OrderStatus, PaymentStatus)) else str(status)


def status_label(status: Union[str, OrderStatus]) -> str:
    value = _value(status)
    return ORDER_STATUS_LABELS.get(value, value)


def payment_status_label(status: Union[str, PaymentStatus]) -> str:
    value = _value(status)
    return PAYMENT_STATUS_LABELS.get(value, value)


def status_color(status: Union[str, OrderStatus]) -> str:
    return ORDER_STATUS_COLORS.get(_value(status), DEFAULT_COLOR)


def payment_status_color(status: Union[str, PaymentStatus]) -> str:
    return PAYMENT_STATUS_COLORS.get(_value(status), DEFAULT_COLOR)


def customer_status_label(status: Union[str, OrderStatus]) -> str:
    """Coarse label shown to customers on their account page."""
    value = _value(status)
    if value == 'completed':
        return 'Concluído'
    if value == 'cancelled':
        return 'Cancelado'
    return 'Em andamento'


# ==================== Action availability ====================

@dataclass
class OrderActions:
    """Actions the detail view offers for the current state of an order."""
    can_complete: bool
    can_cancel: bool
    can_mark_paid: bool
    can_mark_failed: bool
    item_targets: Dict[int, List[OrderStatus]] = field(default_factory=dict)


def item_status_targets(item: OrderItem) -> List[OrderStatus]:
    """Every item status except the current one, in declaration order."""
    return [s for s in OrderStatus if s != item.status]


def available_actions(order: Order) -> OrderActions:
    payment_open = order.payment_status != PaymentStatus.PAID
    return OrderActions(
        can_complete=order.status not in (OrderStatus.COMPLETED, OrderStatus.CANCELLED),
        can_cancel=order.status != OrderStatus.CANCELLED,
        can_mark_paid=payment_open,
        can_mark_failed=payment_open and order.payment_status != PaymentStatus.FAILED,
        item_targets={item.id: item_status_targets(item) for item in order.items},
    )


# ==================== Transition policy ====================

def _everything(states) -> Dict[str, FrozenSet[str]]:
    values = frozenset(s.value for s in states)
    return {v: values for v in values}


PERMISSIVE_ORDER_TRANSITIONS = _everything(OrderStatus)
PERMISSIVE_PAYMENT_TRANSITIONS = _everything(PaymentStatus)

# Terminal states cannot be left
STRICT_ORDER_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    'pending': frozenset({'pending', 'processing', 'completed', 'cancelled'}),
    'processing': frozenset({'pending', 'processing', 'completed', 'cancelled'}),
    'completed': frozenset({'completed'}),
    'cancelled': frozenset({'cancelled'}),
}

STRICT_PAYMENT_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    'pending': frozenset({'pending', 'paid', 'failed'}),
    'failed': frozenset({'pending', 'paid', 'failed'}),
    'paid': frozenset({'paid'}),
}


class TransitionPolicy:
    """
    Explicit transition tables for order, item and payment status.

    The backend's own legality rules are unknown, so the default policy lets
    everything through. `strict=True` refuses to leave terminal states.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        if strict:
            self.order_transitions = STRICT_ORDER_TRANSITIONS
            self.payment_transitions = STRICT_PAYMENT_TRANSITIONS
        else:
            self.order_transitions = PERMISSIVE_ORDER_TRANSITIONS
            self.payment_transitions = PERMISSIVE_PAYMENT_TRANSITIONS

    @staticmethod
    def _allowed(table: Dict[str, FrozenSet[str]], current: str, target: str) -> bool:
        return target in table[current]

    def check_order(self, current: Union[str, OrderStatus], target: Union[str, OrderStatus]) -> None:
        current, target = _value(current), _value(target)
        if not self._allowed(self.order_transitions, current, target):
            raise IllegalTransitionError('status', current, target)

    def check_item(self, current: Union[str, OrderStatus], target: Union[str, OrderStatus]) -> None:
        current, target = _value(current), _value(target)
        if not self._allowed(self.order_transitions, current, target):
            raise IllegalTransitionError('item status', current, target)

    def check_payment(self, current: Union[str, PaymentStatus], target: Union[str, PaymentStatus]) -> None:
        current, target = _value(current), _value(target)
        if not self._allowed(self.payment_transitions, current, target):
            raise IllegalTransitionError('payment_status', current, target)
