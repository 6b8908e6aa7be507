"""
Notification Feed Service.

Binds a repository to the orchestrator. Feeds are re-derived from a fresh
snapshot on every read; mutations only touch the repository.
"""

from __future__ import annotations

from datetime import datetime

from .core.logging import get_logger
from .engine.models import Channel, FeedResult, ScoreBreakdown
from .engine.orchestrator import Orchestrator
from .store.protocol import NotificationRepository

logger = get_logger(__name__)


class NotificationFeedService:
    """
    Read/mutate facade used by the inbox UI.

    Usage:
        service = NotificationFeedService(InMemoryNotificationRepository(items))
        feeds = service.feeds()
        service.dismiss("notif_1")
        feeds = service.feeds()  # recomputed without notif_1
    """

    def __init__(
        self,
        repository: NotificationRepository,
        orchestrator: Orchestrator | None = None,
    ) -> None:
        self._repository = repository
        self._orchestrator = orchestrator or Orchestrator()

    @property
    def repository(self) -> NotificationRepository:
        return self._repository

    def feeds(self, now: datetime | None = None) -> FeedResult:
        """Orchestrate the current snapshot."""
        return self._orchestrator.orchestrate(self._repository.snapshot(), now)

    def unread_count(self, now: datetime | None = None) -> int:
        """Unique unread notifications across the direct and watching feeds."""
        return len(self.feeds(now).unread_ids())

    def explain(
        self,
        notification_id: str,
        channel: Channel = Channel.DIRECT,
        now: datetime | None = None,
    ) -> ScoreBreakdown | None:
        return self._orchestrator.explain(
            self._repository.snapshot(), notification_id, channel, now
        )

    def mark_read(self, notification_id: str) -> bool:
        changed = self._repository.mark_read(notification_id)
        if changed:
            logger.info(f"Marked {notification_id} read")
        return changed

    def mark_all_read(self) -> int:
        changed = self._repository.mark_all_read()
        logger.info(f"Marked {changed} notifications read")
        return changed

    def dismiss(self, notification_id: str) -> bool:
        changed = self._repository.dismiss(notification_id)
        if changed:
            logger.info(f"Dismissed {notification_id}")
        return changed
