"""
In-memory notification repository.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..core.logging import get_logger

if TYPE_CHECKING:
    from ..engine.models import Notification

logger = get_logger(__name__)


class InMemoryNotificationRepository:
    """
    Thread-safe single-store repository.

    All access goes through one lock. snapshot() deep-copies under the lock
    (copy-on-read), so an orchestration pass never sees a half-applied
    mutation and cannot mutate the store.
    """

    def __init__(self, notifications: Iterable[Notification] = ()) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, Notification] = {}
        for n in notifications:
            self._items[n.id] = copy.deepcopy(n)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def snapshot(self) -> list[Notification]:
        with self._lock:
            return copy.deepcopy(list(self._items.values()))

    def get(self, notification_id: str) -> Notification | None:
        with self._lock:
            item = self._items.get(notification_id)
            return copy.deepcopy(item) if item is not None else None

    def add(self, notification: Notification) -> None:
        with self._lock:
            self._items[notification.id] = copy.deepcopy(notification)
        self._changed()

    def mark_read(self, notification_id: str) -> bool:
        with self._lock:
            item = self._items.get(notification_id)
            if item is None:
                logger.debug(f"mark_read: unknown notification {notification_id}")
                return False
            item.is_read = True
        self._changed()
        return True

    def mark_all_read(self) -> int:
        with self._lock:
            changed = 0
            for item in self._items.values():
                if not item.is_read:
                    item.is_read = True
                    changed += 1
        if changed:
            self._changed()
        return changed

    def dismiss(self, notification_id: str) -> bool:
        with self._lock:
            item = self._items.get(notification_id)
            if item is None:
                logger.debug(f"dismiss: unknown notification {notification_id}")
                return False
            item.is_dismissed = True
        self._changed()
        return True

    def _changed(self) -> None:
        """Hook for subclasses that persist after every mutation."""
