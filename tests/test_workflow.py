"""
Tests for action availability, labels and the transition tables.
"""

import pytest

from atlas_admin.core.errors import IllegalTransitionError
from atlas_admin.orders.models import OrderItem, OrderStatus
from atlas_admin.orders.workflow import (
    TransitionPolicy,
    available_actions,
    customer_status_label,
    item_status_targets,
    payment_status_color,
    payment_status_label,
    status_color,
    status_label,
)

from conftest import make_item, make_order


@pytest.mark.parametrize("status, can_complete, can_cancel", [
    ('pending', True, True),
    ('processing', True, True),
    ('completed', False, True),
    ('cancelled', False, False),
])
def test_order_actions(status, can_complete, can_cancel):
    actions = available_actions(make_order(status=status))
    assert actions.can_complete is can_complete
    assert actions.can_cancel is can_cancel


@pytest.mark.parametrize("payment_status, can_mark_paid, can_mark_failed", [
    ('pending', True, True),
    ('failed', True, False),
    ('paid', False, False),
])
def test_payment_actions(payment_status, can_mark_paid, can_mark_failed):
    actions = available_actions(make_order(payment_status=payment_status))
    assert actions.can_mark_paid is can_mark_paid
    assert actions.can_mark_failed is can_mark_failed


def test_item_targets_exclude_current_status():
    item = OrderItem.model_validate(make_item(1, 'processing'))
    assert item_status_targets(item) == [
        OrderStatus.PENDING, OrderStatus.COMPLETED, OrderStatus.CANCELLED
    ]


def test_actions_list_targets_per_item():
    order = make_order(items=[make_item(1, 'pending'), make_item(2, 'cancelled')])
    targets = available_actions(order).item_targets
    assert OrderStatus.PENDING not in targets[1]
    assert OrderStatus.CANCELLED not in targets[2]
    assert len(targets[1]) == len(targets[2]) == 3


def test_labels():
    assert status_label('completed') == 'Concluído'
    assert status_label(OrderStatus.PROCESSING) == 'Em Processamento'
    assert payment_status_label('failed') == 'Falhou'
    # Unknown values render as themselves
    assert status_label('on-hold') == 'on-hold'
    assert status_color('on-hold') == 'gray'
    assert payment_status_color('paid') == 'green'


def test_customer_label_collapses_open_states():
    assert customer_status_label('completed') == 'Concluído'
    assert customer_status_label('cancelled') == 'Cancelado'
    assert customer_status_label('pending') == 'Em andamento'
    assert customer_status_label('processing') == 'Em andamento'


def test_permissive_policy_allows_everything():
    policy = TransitionPolicy()
    for current in OrderStatus:
        for target in OrderStatus:
            policy.check_order(current, target)
    policy.check_payment('paid', 'pending')


def test_strict_policy_keeps_terminal_states():
    policy = TransitionPolicy(strict=True)
    policy.check_order('pending', 'completed')
    policy.check_order('completed', 'completed')
    policy.check_payment('failed', 'paid')

    with pytest.raises(IllegalTransitionError):
        policy.check_order('completed', 'pending')
    with pytest.raises(IllegalTransitionError):
        policy.check_item('cancelled', 'processing')
    with pytest.raises(IllegalTransitionError) as exc:
        policy.check_payment('paid', 'failed')
    assert exc.value.field == 'payment_status'
