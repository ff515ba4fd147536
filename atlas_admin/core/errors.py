"""
Error types raised by the API client and the order workflow.
"""

from typing import Optional


class ApiError(Exception):
    """A request to the orders API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"[{self.status_code}] {self.message}"
        return self.message


class NetworkError(ApiError):
    """No HTTP response was received (connection refused, timeout...)."""


class AuthenticationError(ApiError):
    """401: the session token is missing or expired."""


class AuthorizationError(ApiError):
    """403: the session is valid but not allowed to do this."""


class ServerError(ApiError):
    """5xx from the API."""


class IllegalTransitionError(Exception):
    """A status change rejected locally by the transition policy."""

    def __init__(self, field: str, current: str, target: str):
        super().__init__(f"Cannot change {field} from '{current}' to '{target}'")
        self.field = field
        self.current = current
        self.target = target
