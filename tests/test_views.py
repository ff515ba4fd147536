"""
Tests for the list, detail and customer order views.
"""

import pytest

from atlas_admin.core.errors import NetworkError, ServerError
from atlas_admin.core.notifications import ERROR, SUCCESS, WARNING
from atlas_admin.orders.controller import OrderStatusController, Outcome
from atlas_admin.orders.models import OrderStatus, PaymentStatus
from atlas_admin.orders.views import CustomerOrdersView, OrderDetailView, OrderListView


@pytest.fixture
def controller(fake_client, notifications):
    return OrderStatusController(fake_client, notifications)


@pytest.fixture
def list_view(fake_client, controller, notifications):
    view = OrderListView(fake_client, controller, notifications)
    view.load_orders()
    return view


@pytest.fixture
def detail_view(fake_client, controller):
    view = OrderDetailView(fake_client, controller, 5)
    view.load()
    return view


# ==================== List view ====================

def test_load_orders(list_view):
    assert [o.id for o in list_view.orders] == [1, 2, 5]
    assert list_view.error is None


def test_load_failure_gives_empty_list_and_notification(fake_client, controller, notifications):
    fake_client.fail_read = NetworkError("offline")
    view = OrderListView(fake_client, controller, notifications)

    assert view.load_orders() == []
    assert view.error == OrderListView.LOAD_ERROR
    [note] = notifications.drain()
    assert note.level == ERROR


def test_filtering_does_not_call_the_api(list_view, fake_client):
    calls_before = len(fake_client.calls)
    assert [o.id for o in list_view.filtered(status_filter='completed')] == [2]
    assert len(fake_client.calls) == calls_before


def test_list_status_change_patches_only_that_field(list_view, fake_client):
    untouched = list_view.orders[0]

    result = list_view.set_order_status(5, OrderStatus.COMPLETED)

    assert result.outcome == Outcome.CONFIRMED
    assert list_view.orders[2].status == OrderStatus.COMPLETED
    assert list_view.orders[0] is untouched


def test_list_payment_change(list_view):
    list_view.set_payment_status(5, PaymentStatus.PAID)
    assert list_view.orders[2].payment_status == PaymentStatus.PAID


def test_list_reloads_when_unconfirmed(list_view, fake_client):
    fake_client.read_returns_none = True

    result = list_view.set_order_status(1, OrderStatus.PROCESSING)

    assert result.outcome == Outcome.UNCONFIRMED
    assert fake_client.calls[-1] == ('GET', 'orders', None)
    assert list_view.orders[0].status == OrderStatus.PROCESSING


def test_export_csv_uses_filters(list_view):
    csv = list_view.export_csv(payment_filter='paid')
    lines = csv.strip().splitlines()
    assert lines[0].startswith('ID,Cliente')
    assert len(lines) == 3


# ==================== Detail view ====================

def test_detail_load(detail_view):
    assert detail_view.order.id == 5
    assert not detail_view.not_found
    assert detail_view.actions().can_complete


def test_detail_not_found(fake_client, controller):
    view = OrderDetailView(fake_client, controller, 404)
    assert view.load() is None
    assert view.not_found
    assert view.actions() is None


def test_detail_load_error(fake_client, controller):
    fake_client.fail_read = ServerError("down", 500)
    view = OrderDetailView(fake_client, controller, 5)
    view.load()
    assert view.error == OrderDetailView.LOAD_ERROR
    assert not view.not_found


def test_complete_replaces_order_with_reread(detail_view, notifications):
    before = detail_view.order
    detail_view.complete()

    assert detail_view.order is not before
    assert detail_view.order.status == OrderStatus.COMPLETED
    assert not detail_view.actions().can_complete
    assert notifications.drain()[0].level == SUCCESS


def test_failed_mutation_keeps_same_order_object(detail_view, fake_client, notifications):
    fake_client.fail_mutation = ServerError("boom", 500)
    before = detail_view.order

    result = detail_view.cancel()

    assert result.outcome == Outcome.FAILED
    assert detail_view.order is before
    assert notifications.drain()[0].level == ERROR


def test_unconfirmed_keeps_stale_order(detail_view, fake_client, notifications):
    fake_client.read_returns_none = True
    before = detail_view.order

    detail_view.mark_paid()

    assert detail_view.order is before
    assert detail_view.order.payment_status == PaymentStatus.PENDING
    assert notifications.drain()[0].level == WARNING


def test_item_status_change(detail_view):
    detail_view.set_item_status(11, OrderStatus.PROCESSING)
    assert detail_view.order.find_item(11).status == OrderStatus.PROCESSING
    assert detail_view.actions().item_targets[11] == [
        OrderStatus.PENDING, OrderStatus.COMPLETED, OrderStatus.CANCELLED
    ]


def test_actions_without_order_do_nothing(fake_client, controller):
    view = OrderDetailView(fake_client, controller, 404)
    view.load()
    assert view.mark_failed() is None
    assert fake_client.mutations() == []


# ==================== Customer view ====================

def test_customer_orders(fake_client, notifications):
    view = CustomerOrdersView(fake_client, notifications)
    assert len(view.load(1)) == 3
    assert fake_client.calls[-1] == ('GET', 'orders/user/1', None)


def test_customer_orders_failure(fake_client, notifications):
    fake_client.fail_read = NetworkError("offline")
    view = CustomerOrdersView(fake_client, notifications)
    assert view.load(1) == []
    assert notifications.drain()[0].level == ERROR
