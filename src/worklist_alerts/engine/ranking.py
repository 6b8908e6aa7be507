"""
Notification Ranking.

Computes a bounded relevance score per notification, parameterized by the
destination channel, and orders notifications by it.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING

from ..core.logging import get_logger
from . import factors
from .config import RankingConfig
from .models import FactorScore, ScoreBreakdown

if TYPE_CHECKING:
    from .models import Channel, Notification

logger = get_logger(__name__)


class RankingScorer:
    """
    Weighted-sum scorer.

    score = clamp(sum(weight_i * factor_i) * 100 * channel_modifier, 0, 100)

    A notification without metadata is scored on recency alone; every other
    factor contributes nothing.

    Usage:
        scorer = RankingScorer(RankingConfig())
        ranked = scorer.rank(notifications, Channel.DIRECT, now)
    """

    def __init__(self, config: RankingConfig | None = None) -> None:
        self._config = config or RankingConfig()

    @property
    def config(self) -> RankingConfig:
        return self._config

    def breakdown(
        self,
        notification: Notification,
        channel: Channel,
        now: datetime,
    ) -> ScoreBreakdown:
        """
        Score one notification with a full factor breakdown.

        Args:
            notification: Notification to score
            channel: Destination channel (selects the modifier)
            now: Reference instant for recency

        Returns:
            ScoreBreakdown whose .score is the clamped channel score
        """
        weights = self._config.weights
        result = ScoreBreakdown(
            notification_id=notification.id,
            channel=channel,
            modifier=self._config.modifier_for(channel),
            has_metadata=notification.metadata is not None,
        )

        for name, factor in factors.SIGNAL_FACTORS.items():
            weight = weights.get(name, 0.0)
            if notification.metadata is None:
                result.factors[name] = FactorScore(name, 0.0, weight, reason="No metadata")
            else:
                result.factors[name] = factor(notification.metadata, weight)

        result.factors["recency"] = factors.recency(
            notification.timestamp,
            now,
            weights.get("recency", 0.0),
            self._config.recency_half_life_hours,
        )
        return result

    def score(self, notification: Notification, channel: Channel, now: datetime) -> float:
        """Clamped channel score in [0, 100]."""
        return self.breakdown(notification, channel, now).score

    def rank(
        self,
        notifications: list[Notification],
        channel: Channel,
        now: datetime,
    ) -> list[Notification]:
        """
        Score and sort notifications for a channel.

        Returns:
            Copies carrying `score`, sorted descending; ties keep input order
        """
        scored = [replace(n, score=self.score(n, channel, now)) for n in notifications]
        # sorted() is stable
        ranked = sorted(scored, key=lambda n: n.score, reverse=True)
        logger.debug(f"Ranked {len(ranked)} notifications for {channel.value}")
        return ranked
