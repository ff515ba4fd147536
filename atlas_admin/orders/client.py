"""
Orders API Client.
Talks to the certificate-sales REST API for order reads and status changes.
"""

import requests
import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urljoin

from pydantic import ValidationError

from .models import Order, OrderCreate, OrderStatus, PaymentStatus
from ..core.errors import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    NetworkError,
    ServerError,
)

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class OrdersClient:
    """
    Client for the orders REST API.

    The bearer token is pulled from `token_provider` on every request, so the
    client never owns session state. `on_unauthorized` runs on any 401 before
    the error is raised.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[TokenProvider] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
        timeout: float = 15.0
    ):
        self.base_url = base_url.rstrip('/') + '/'
        self.token_provider = token_provider
        self.on_unauthorized = on_unauthorized
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else None
        if token:
            return {'Authorization': f'Bearer {token}'}
        return {}

    def _request(self, method: str, endpoint: str, json: Optional[Dict[str, Any]] = None) -> Any:
        """Make a request and return the decoded body (None when empty)."""
        url = urljoin(self.base_url, endpoint.lstrip('/'))
        try:
            response = self.session.request(
                method,
                url,
                json=json,
                headers=self._headers(),
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Network error on {method} {url}: {e}")
            raise NetworkError("Sem resposta do servidor. Tente novamente mais tarde.") from e

        if not response.ok:
            self._raise_for_status(method, url, response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning(f"Non-JSON body from {method} {url}")
            return None

    def _raise_for_status(self, method: str, url: str, response: requests.Response) -> None:
        status = response.status_code
        message = _error_message(response)

        if status == 401:
            logger.warning(f"Unauthorized on {method} {url}, clearing session")
            if self.on_unauthorized:
                self.on_unauthorized()
            raise AuthenticationError(message, status)

        if status == 403:
            logger.error(f"Permission denied on {method} {url}: {message}")
            raise AuthorizationError(message, status)

        if status >= 500:
            logger.error(f"Server error on {method} {url}: {status} {message}")
            raise ServerError(message, status)

        logger.error(f"API error on {method} {url}: {status} {message}")
        raise ApiError(message, status)

    # ==================== Reads ====================

    def get_orders(self) -> List[Order]:
        """Fetch every order (admin listing)."""
        data = self._request('GET', 'orders')
        return _parse_orders(data)

    def get_user_orders(self, user_id: int) -> List[Order]:
        """Fetch the orders of one customer."""
        data = self._request('GET', f'orders/user/{user_id}')
        return _parse_orders(data)

    def get_order(self, order_id: int) -> Optional[Order]:
        """Fetch single order. Returns None on 404 or an empty body."""
        try:
            data = self._request('GET', f'orders/{order_id}')
        except ApiError as e:
            if e.status_code == 404:
                logger.info(f"Order {order_id} not found")
                return None
            raise
        if not data:
            return None
        return _parse_order(data)

    # ==================== Mutations ====================

    def create_order(self, order: OrderCreate) -> Order:
        data = self._request('POST', 'orders', json=order.model_dump(exclude_none=True))
        return _parse_order(data)

    def update_order_status(self, order_id: int, status: OrderStatus) -> Any:
        return self._request('PUT', f'orders/{order_id}', json={'status': OrderStatus(status).value})

    def update_payment_status(self, order_id: int, payment_status: PaymentStatus) -> Any:
        return self._request(
            'PUT',
            f'orders/{order_id}',
            json={'payment_status': PaymentStatus(payment_status).value}
        )

    def update_item_status(self, order_id: int, item_id: int, status: OrderStatus) -> Any:
        return self._request(
            'PUT',
            f'orders/{order_id}/items/{item_id}',
            json={'status': OrderStatus(status).value}
        )

    def cancel_order(self, order_id: int) -> Order:
        """Cancel in one call (status cancelled, payment failed)."""
        data = self._request('PATCH', f'orders/{order_id}', json={
            'status': OrderStatus.CANCELLED.value,
            'payment_status': PaymentStatus.FAILED.value,
        })
        return _parse_order(data)

    # ==================== Sessions ====================

    def create_session(self, email: str, password: str) -> Dict[str, Any]:
        """Log in. Returns the raw `{user, token}` payload."""
        data = self._request('POST', 'sessions', json={'email': email, 'password': password})
        if not isinstance(data, dict) or not data.get('token'):
            raise ApiError("Resposta de login inválida")
        return data


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get('message'):
        return str(body['message'])
    return response.reason or f"HTTP {response.status_code}"


def _parse_order(data: Any) -> Order:
    try:
        return Order.model_validate(data)
    except ValidationError as e:
        logger.error(f"Malformed order payload: {e}")
        raise ApiError("Resposta inválida do servidor") from e


def _parse_orders(data: Any) -> List[Order]:
    # Anything but a list is treated as "no orders"
    if not isinstance(data, list):
        return []
    return [_parse_order(item) for item in data]


def create_client_from_config(session_store=None) -> OrdersClient:
    """Create OrdersClient from config, wired to the persisted session."""
    from ..core.config import get_config

    config = get_config()
    return OrdersClient(
        base_url=config.api_base_url,
        token_provider=session_store,
        on_unauthorized=session_store.clear if session_store else None,
        timeout=config.api_timeout
    )
