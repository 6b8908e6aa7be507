"""
Notification Orchestrator - Main Pipeline.

Composes the stages into the three output feeds:

    raw -> suppress -> bundle -> route -> {direct, watching} -> rank -> layout
                              \\-> rank(ai_boost) -> curate -> layout

Every pass is computed from scratch from the input snapshot and an explicit
reference instant, so identical inputs yield identical feeds.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

from ..core.formatters import ensure_utc, get_utc_now
from ..core.logging import get_logger
from .bundling import BundlingClusterer
from .config import EngineConfig
from .curation import AIBoostCurator
from .layout import LayoutAssigner
from .models import Channel, FeedResult, Notification, ScoreBreakdown
from .ranking import RankingScorer
from .routing import ChannelRouter
from .suppression import SuppressionFilter

logger = get_logger(__name__)


class Orchestrator:
    """
    Notification orchestration engine.

    The orchestrator never raises from orchestrate(): any unexpected stage
    failure, or a pass that overruns the wall-clock budget, yields three
    empty feeds and a logged diagnostic.

    Usage:
        orchestrator = Orchestrator(EngineConfig())
        feeds = orchestrator.orchestrate(notifications)
        feeds.direct, feeds.watching, feeds.ai_boost
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Engine tuning (validated here)
            timer: Monotonic clock in seconds, used for the time budget

        Raises:
            EngineConfigError: If the configuration is invalid
        """
        self._config = (config or EngineConfig()).ensure_valid()
        self._timer = timer

        self.suppression = SuppressionFilter(self._config.suppression.window_hours)
        self.bundler = BundlingClusterer(
            threshold=self._config.bundling.threshold,
            window_hours=self._config.bundling.window_hours,
        )
        self.router = ChannelRouter()
        self.scorer = RankingScorer(self._config.ranking)
        self.curator = AIBoostCurator(self._config.curation)
        self.layout = LayoutAssigner(self._config.layout)

    @property
    def config(self) -> EngineConfig:
        return self._config

    def orchestrate(
        self,
        notifications: list[Notification],
        now: datetime | None = None,
    ) -> FeedResult:
        """
        Run the full pipeline.

        Args:
            notifications: Snapshot of all notifications
            now: Reference instant (default: current UTC time)

        Returns:
            FeedResult with direct, watching and ai_boost feeds
        """
        now = ensure_utc(now) if now is not None else get_utc_now()
        started = self._timer()

        try:
            result = self._run(list(notifications), now)
        except Exception:
            logger.error(
                f"Orchestration failed for {len(notifications)} notifications; "
                "returning empty feeds",
                exc_info=True,
            )
            return FeedResult.empty()

        elapsed_ms = (self._timer() - started) * 1000.0
        budget = self._config.time_budget_ms
        if budget and elapsed_ms > budget:
            logger.warning(
                f"Orchestration took {elapsed_ms:.0f}ms, over the {budget}ms budget; "
                "returning empty feeds"
            )
            return FeedResult.empty()

        logger.debug(
            f"Orchestrated {len(notifications)} notifications in {elapsed_ms:.1f}ms: "
            f"direct={len(result.direct)} watching={len(result.watching)} "
            f"ai_boost={len(result.ai_boost)}"
        )
        return result

    def prepare(self, notifications: list[Notification]) -> list[Notification]:
        """Suppression then bundling: the pool every channel draws from."""
        return self.bundler.bundle(self.suppression.filter(notifications))

    def _run(self, notifications: list[Notification], now: datetime) -> FeedResult:
        bundled = self.prepare(notifications)

        feeds: dict[Channel, list[Notification]] = {}
        for channel, members in self.router.route(bundled).items():
            ranked = self.scorer.rank(members, channel, now)
            feeds[channel] = self.layout.assign_layout(ranked, channel)

        boosted = self.curator.curate(self.scorer.rank(bundled, Channel.AI_BOOST, now), now)
        feeds[Channel.AI_BOOST] = self.layout.assign_layout(boosted, Channel.AI_BOOST)

        return FeedResult(
            direct=feeds.get(Channel.DIRECT, []),
            watching=feeds.get(Channel.WATCHING, []),
            ai_boost=feeds[Channel.AI_BOOST],
        )

    def explain(
        self,
        notifications: list[Notification],
        notification_id: str,
        channel: Channel,
        now: datetime | None = None,
    ) -> ScoreBreakdown | None:
        """
        Score breakdown for one notification as the pipeline would see it.

        Looks the id up after suppression and bundling, so bundle ids are
        explainable and suppressed notifications are not.

        Returns:
            ScoreBreakdown, or None if the id does not survive to ranking
        """
        now = ensure_utc(now) if now is not None else get_utc_now()
        for n in self.prepare(list(notifications)):
            if n.id == notification_id:
                return self.scorer.breakdown(n, channel, now)
        return None


def create_orchestrator(engine_config: dict[str, Any] | None = None) -> Orchestrator:
    """
    Factory function to create an orchestrator from a config dict.

    Args:
        engine_config: Engine tuning mapping (see EngineConfig.from_dict)

    Returns:
        Configured Orchestrator
    """
    return Orchestrator(EngineConfig.from_dict(engine_config))


def orchestrate(
    notifications: list[Notification],
    now: datetime | None = None,
    config: EngineConfig | None = None,
) -> FeedResult:
    """Run one orchestration pass with the given (or default) tuning."""
    return Orchestrator(config).orchestrate(notifications, now)
