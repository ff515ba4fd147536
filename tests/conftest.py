"""
Shared fixtures: order factories and an in-memory stand-in for OrdersClient.
"""

import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from atlas_admin.core.notifications import NotificationQueue
from atlas_admin.orders.models import Order, OrderStatus, PaymentStatus


def make_order(
    order_id: int = 1,
    status: str = 'pending',
    payment_status: str = 'pending',
    name: Optional[str] = 'Ana',
    items: Optional[List[Dict[str, Any]]] = None,
    **extra
) -> Order:
    data = {
        'id': order_id,
        'user_id': 1,
        'total_amount': 189.9,
        'status': status,
        'payment_status': payment_status,
        'created_at': '2024-03-05T14:30:00',
        'updated_at': '2024-03-05T14:30:00',
        'items': items if items is not None else [],
    }
    if name is not None:
        data['user'] = {'id': 1, 'name': name, 'email': f'{name.lower()}@example.com'}
    data.update(extra)
    return Order.model_validate(data)


def make_item(item_id: int, status: str = 'pending', certificate_id: int = 10) -> Dict[str, Any]:
    return {
        'id': item_id,
        'certificate_id': certificate_id,
        'certificate_name': 'e-CPF A1',
        'price': 189.9,
        'quantity': 1,
        'status': status,
        'certificate_data': {'validity': '1 year'},
    }


def make_response(status_code: int = 200, body: Any = None, reason: str = 'OK') -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response._content = b'' if body is None else json.dumps(body).encode('utf-8')
    response.headers['Content-Type'] = 'application/json'
    return response


class FakeOrdersClient:
    """
    Keeps orders in a dict and records every call as (method, path, body).

    Set `fail_mutation` / `fail_read` to an exception to make the next calls
    raise it, or `read_returns_none` to simulate an empty GET body.
    """

    def __init__(self, orders=None):
        self.orders = {o.id: o for o in orders or []}
        self.calls = []
        self.fail_mutation = None
        self.fail_read = None
        self.read_returns_none = False

    def _read(self):
        if self.fail_read:
            raise self.fail_read

    def _mutate(self):
        if self.fail_mutation:
            raise self.fail_mutation

    def get_orders(self):
        self.calls.append(('GET', 'orders', None))
        self._read()
        return list(self.orders.values())

    def get_user_orders(self, user_id):
        self.calls.append(('GET', f'orders/user/{user_id}', None))
        self._read()
        return [o for o in self.orders.values() if o.user_id == user_id]

    def get_order(self, order_id):
        self.calls.append(('GET', f'orders/{order_id}', None))
        self._read()
        if self.read_returns_none:
            return None
        return self.orders.get(order_id)

    def update_order_status(self, order_id, status):
        self.calls.append(('PUT', f'orders/{order_id}', {'status': OrderStatus(status).value}))
        self._mutate()
        self.orders[order_id] = self.orders[order_id].model_copy(update={'status': OrderStatus(status)})
        return {'id': order_id}

    def update_payment_status(self, order_id, payment_status):
        body = {'payment_status': PaymentStatus(payment_status).value}
        self.calls.append(('PUT', f'orders/{order_id}', body))
        self._mutate()
        self.orders[order_id] = self.orders[order_id].model_copy(
            update={'payment_status': PaymentStatus(payment_status)}
        )
        return {'id': order_id}

    def update_item_status(self, order_id, item_id, status):
        self.calls.append(('PUT', f'orders/{order_id}/items/{item_id}', {'status': OrderStatus(status).value}))
        self._mutate()
        order = self.orders[order_id]
        items = [
            i.model_copy(update={'status': OrderStatus(status)}) if i.id == item_id else i
            for i in order.items
        ]
        self.orders[order_id] = order.model_copy(update={'items': items})
        return {'id': item_id}

    def create_session(self, email, password):
        self.calls.append(('POST', 'sessions', {'email': email, 'password': password}))
        self._mutate()
        return {'token': 'tok-123', 'user': {'id': 7, 'name': 'Ana', 'email': email}}

    def mutations(self):
        return [c for c in self.calls if c[0] != 'GET']

    def reads(self):
        return [c for c in self.calls if c[0] == 'GET']


@pytest.fixture
def notifications():
    return NotificationQueue()


@pytest.fixture
def fake_client():
    return FakeOrdersClient([
        make_order(1, 'pending', 'paid', name='Ana'),
        make_order(2, 'completed', 'paid', name='Bruno'),
        make_order(5, 'processing', 'pending', name='Carla', items=[
            make_item(11, 'pending'),
            make_item(12, 'processing'),
        ]),
    ])
