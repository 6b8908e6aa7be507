"""
Notification Repository Protocol Interface.

The orchestration engine never owns read/dismiss state. It reads immutable
snapshots from a repository; the UI mutates state only through this
interface and the next read re-derives every feed.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..engine.models import Notification


@runtime_checkable
class NotificationRepository(Protocol):
    """
    Abstract interface for notification storage.

    Design notes:
    - snapshot() must return copies that later mutations cannot affect
    - Mutations on unknown ids are no-ops that return False, not errors
    """

    @abstractmethod
    def snapshot(self) -> list[Notification]:
        """Copy of every stored notification, in insertion order."""
        ...

    @abstractmethod
    def get(self, notification_id: str) -> Notification | None:
        """Copy of one notification, or None."""
        ...

    @abstractmethod
    def add(self, notification: Notification) -> None:
        """Append a notification; replaces an existing one with the same id in place."""
        ...

    @abstractmethod
    def mark_read(self, notification_id: str) -> bool:
        """Set is_read. Returns False if the id is unknown."""
        ...

    @abstractmethod
    def mark_all_read(self) -> int:
        """Set is_read everywhere. Returns how many changed."""
        ...

    @abstractmethod
    def dismiss(self, notification_id: str) -> bool:
        """Set is_dismissed. Returns False if the id is unknown."""
        ...
