"""
Customer session management with token persistence.
Keeps the bearer token and the signed-in user in a YAML file so the
dashboard survives restarts, and hands the token to the API client.
"""

import logging
import threading
import yaml
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.errors import ApiError

logger = logging.getLogger(__name__)


@dataclass
class SessionUser:
    """Signed-in user."""
    id: int
    name: str
    email: str
    phone: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> 'SessionUser':
        return cls(
            id=int(data['id']),
            name=data.get('name', ''),
            email=data.get('email', ''),
            phone=data.get('phone'),
        )


class SessionStore:
    """
    Persisted session (token + user).

    Calling the store returns the current token, so it can be passed to
    `OrdersClient` as its token provider.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._token: Optional[str] = None
        self._user: Optional[SessionUser] = None
        self._lock = threading.Lock()
        self._load()

    def __call__(self) -> Optional[str]:
        return self.token

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not read session file {self.path}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed session file {self.path}")
            return

        token = data.get('token')
        user = data.get('user')
        if not (token and user):
            return
        try:
            restored = SessionUser.from_payload(user)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Ignoring malformed session user in {self.path}: {e}")
            return

        self._token = token
        self._user = restored
        logger.info(f"Restored session for {restored.email}")

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            'token': self._token,
            'user': asdict(self._user) if self._user else None,
            'saved_at': datetime.now().isoformat(),
        }
        with open(self.path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True)

    @property
    def token(self) -> Optional[str]:
        with self._lock:
            return self._token

    @property
    def user(self) -> Optional[SessionUser]:
        with self._lock:
            return self._user

    @property
    def is_authenticated(self) -> bool:
        with self._lock:
            return bool(self._token and self._user)

    def start(self, token: str, user: SessionUser) -> None:
        with self._lock:
            self._token = token
            self._user = user
            self._save()
        logger.info(f"Session started for {user.email}")

    def clear(self) -> None:
        """Forget the session (sign-out, or any 401 from the API)."""
        with self._lock:
            self._token = None
            self._user = None
            if self.path.exists():
                self.path.unlink()
        logger.info("Session cleared")


def sign_in(client, store: SessionStore, email: str, password: str) -> SessionUser:
    """
    Log in through the API and persist the session.

    Raises:
        ValueError: empty email or password
        ApiError: the API refused the credentials or is unreachable
    """
    if not email or not password:
        raise ValueError("Preencha todos os campos")

    logger.info(f"Signing in {email}...")
    payload = client.create_session(email, password)

    try:
        user = SessionUser.from_payload(payload['user'])
    except (KeyError, TypeError, ValueError) as e:
        raise ApiError("Resposta de login inválida") from e

    store.start(payload['token'], user)
    return user


def create_session_store_from_config() -> SessionStore:
    """Create SessionStore at the configured path."""
    from ..core.config import get_config

    return SessionStore(get_config().session_path)
