"""
Notification Suppression Filter.

Drops dismissed notifications and collapses repeat alerts for the same
(case, category) pair seen within a dedup window.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from ..core.logging import get_logger

if TYPE_CHECKING:
    from .models import Notification

logger = get_logger(__name__)


@dataclass
class SuppressionFilter:
    """
    Suppresses repeat notifications per (case_id, category).

    Ordering contract: notifications are considered oldest-first by
    timestamp (ties keep input order), so the earliest alert of a run is the
    one kept. The last-kept timestamp for a key resets on every kept item.
    Survivors are returned in their original input order.

    The recency index is rebuilt on every call; nothing carries between calls.
    """

    window_hours: float = 24.0

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.window_hours)

    def filter(self, notifications: list[Notification]) -> list[Notification]:
        """
        Remove dismissed and duplicate notifications.

        Args:
            notifications: Notifications in any stable order

        Returns:
            Kept notifications, in input order
        """
        active = [
            (position, n) for position, n in enumerate(notifications) if not n.is_dismissed
        ]
        dismissed = len(notifications) - len(active)

        # sorted() is stable, so equal timestamps keep input order
        chronological = sorted(active, key=lambda item: item[1].timestamp)

        last_kept: dict[tuple[str, str], datetime] = {}
        kept_positions: set[int] = set()

        for position, n in chronological:
            key = (n.case_id, n.category)
            last_time = last_kept.get(key)
            if last_time is not None and (n.timestamp - last_time) < self.window:
                continue
            last_kept[key] = n.timestamp
            kept_positions.add(position)

        kept = [n for position, n in active if position in kept_positions]

        logger.debug(
            f"Suppression kept {len(kept)} of {len(notifications)} "
            f"({dismissed} dismissed, {len(active) - len(kept)} duplicates)"
        )
        return kept
