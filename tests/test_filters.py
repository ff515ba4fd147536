"""
Tests for client-side order filtering.
"""

from atlas_admin.orders.filters import filter_orders, matches_search

from conftest import make_order

ORDERS = [
    make_order(1, 'pending', 'paid', name='Ana'),
    make_order(2, 'completed', 'paid', name='Bruno'),
    make_order(13, 'completed', 'failed', name='Mariana'),
    make_order(20, 'cancelled', 'pending', name=None),
]


def ids(orders):
    return [o.id for o in orders]


def test_status_filter_exact_match():
    assert ids(filter_orders(ORDERS[:2], status_filter='completed')) == [2]


def test_all_filters_default_to_everything():
    assert ids(filter_orders(ORDERS)) == [1, 2, 13, 20]


def test_search_matches_order_id_text():
    # "1" is a substring of 1 and 13
    assert ids(filter_orders(ORDERS, search_term='1')) == [1, 13]


def test_search_matches_customer_name_case_insensitive():
    assert ids(filter_orders(ORDERS, search_term='ana')) == [1, 13]
    assert ids(filter_orders(ORDERS, search_term='BRU')) == [2]


def test_search_without_customer_only_matches_id():
    order = ORDERS[3]
    assert matches_search(order, '20')
    assert not matches_search(order, 'ana')


def test_filters_are_combined():
    result = filter_orders(ORDERS, search_term='ana', status_filter='completed', payment_filter='failed')
    assert ids(result) == [13]


def test_payment_filter():
    assert ids(filter_orders(ORDERS, payment_filter='paid')) == [1, 2]


def test_no_match_gives_empty_list():
    assert filter_orders(ORDERS, status_filter='processing') == []


def test_source_order_is_preserved():
    shuffled = [ORDERS[2], ORDERS[0], ORDERS[1]]
    assert ids(filter_orders(shuffled, payment_filter='all')) == [13, 1, 2]
