"""
Notification Bundling.

Collapses bursts of similar alerts (same cluster key, close together in
time) into one synthetic bundle notification.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta
from typing import TYPE_CHECKING

from ..core.formatters import to_epoch_ms
from ..core.logging import get_logger
from .models import NotificationAction, NotificationCategory, Priority

if TYPE_CHECKING:
    from .models import Notification

logger = get_logger(__name__)


@dataclass
class BundlingClusterer:
    """
    Groups notifications sharing metadata.cluster_key.

    A cluster is bundled when it has more than `threshold` members and the
    span between its newest and oldest member is strictly less than the
    window. Bundled members are removed from the output; every other
    notification passes through unchanged.
    """

    threshold: int = 3
    window_hours: float = 6.0

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.window_hours)

    def bundle(self, notifications: list[Notification]) -> list[Notification]:
        """
        Bundle eligible clusters.

        Returns:
            Unbundled notifications in input order, followed by bundle
            representatives in cluster first-seen order
        """
        clusters: dict[str, list[Notification]] = {}
        for n in notifications:
            key = n.cluster_key
            if key:
                clusters.setdefault(key, []).append(n)

        bundles: list[Notification] = []
        absorbed: set[str] = set()

        for key, members in clusters.items():
            if len(members) <= self.threshold:
                continue
            newest_first = sorted(members, key=lambda m: m.timestamp, reverse=True)
            span = newest_first[0].timestamp - newest_first[-1].timestamp
            if span >= self.window:
                logger.debug(f"Cluster {key} spans {span}, not bundled")
                continue

            bundles.append(self._make_bundle(key, newest_first))
            absorbed.update(m.id for m in members)

        unbundled = [n for n in notifications if n.id not in absorbed]

        if bundles:
            logger.debug(f"Bundled {len(absorbed)} notifications into {len(bundles)} bundles")
        return unbundled + bundles

    def _make_bundle(self, cluster_key: str, newest_first: list[Notification]) -> Notification:
        """Build the synthetic representative from the newest member."""
        rep = newest_first[0]
        payer = rep.signals.payer or cluster_key
        count = len(newest_first)

        return replace(
            rep,
            id=f"bundle_{cluster_key}_{to_epoch_ms(rep.timestamp)}",
            category=NotificationCategory.BULK_PATTERN.value,
            priority=Priority.HIGH,
            title=f"{count} similar alerts for {payer}",
            description=f'Multiple items require attention. The latest is: "{rep.title}"',
            actions=(
                NotificationAction(
                    label="Open in Worklist",
                    type="link",
                    url=f"/worklist?filter=payer:{payer}",
                    primary=True,
                ),
            ),
            is_bundled=True,
            count=count,
            bundled_items=tuple(newest_first),
            score=None,
            layout=None,
            ai_score=None,
        )
