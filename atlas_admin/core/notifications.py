"""
One-shot user notifications (toasts) raised by dashboard actions.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

SUCCESS = 'success'
INFO = 'info'
WARNING = 'warning'
ERROR = 'error'


@dataclass
class Notification:
    level: str
    message: str
    key: Optional[str] = None


Notifier = Callable[[Notification], None]


class NotificationQueue:
    """
    Collects notifications until the UI drains them.

    Streamlit reruns the page after most actions, so toasts are queued in
    session state and shown on the next render.
    """

    def __init__(self):
        self._pending: List[Notification] = []

    def __call__(self, notification: Notification) -> None:
        logger.debug(f"Notification [{notification.level}] {notification.message}")
        # Same key replaces the previous toast (one per item row)
        if notification.key:
            self._pending = [n for n in self._pending if n.key != notification.key]
        self._pending.append(notification)

    def drain(self) -> List[Notification]:
        pending, self._pending = self._pending, []
        return pending

    def __len__(self) -> int:
        return len(self._pending)
