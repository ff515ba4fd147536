"""
Client-side filtering of the order list.
"""

from typing import Iterable, List

from .models import Order

ALL = 'all'


def matches_search(order: Order, search_term: str) -> bool:
    """Order id (as text) or customer name contains the term, ignoring case."""
    if not search_term:
        return True
    term = search_term.lower()
    return term in str(order.id) or term in order.customer_name.lower()


def filter_orders(
    orders: Iterable[Order],
    search_term: str = '',
    status_filter: str = ALL,
    payment_filter: str = ALL
) -> List[Order]:
    """
    Keep the orders matching search, status and payment filters (all three).

    Source order is preserved. "all" disables the status or payment filter.
    """
    result = []
    for order in orders:
        if not matches_search(order, search_term):
            continue
        if status_filter != ALL and order.status.value != status_filter:
            continue
        if payment_filter != ALL and order.payment_status.value != payment_filter:
            continue
        result.append(order)
    return result
