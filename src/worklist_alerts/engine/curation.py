"""
AI Boost Curation.

Re-scores the head of the ai_boost-ranked pool with an impact model,
keeps the few highest-impact items, and attaches rationale and suggested
next steps to each survivor.

Score rules (additive):
| Rule              | Points | Condition                          |
|-------------------|--------|------------------------------------|
| high_value        | 40     | case value > $10,000               |
| high_denial_risk  | 30     | denial risk > 80                   |
| imminent_service  | 10     | date of service within 1 day       |

Explanation rules are evaluated in order; the first match wins.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING

from ..core.formatters import format_usd
from ..core.logging import get_logger
from .config import CurationConfig
from .models import AIInsight, NotificationCategory, SuggestedAction

if TYPE_CHECKING:
    from .models import Notification

logger = get_logger(__name__)

HIGH_VALUE_THRESHOLD = 10_000
HIGH_DENIAL_RISK_THRESHOLD = 80
IMMINENT_SERVICE_DAYS = 1.0

DEFAULT_EXPLANATION = "Shown for its high potential impact."


@dataclass(frozen=True)
class AIScoreRule:
    """Additive impact rule."""

    name: str
    points: float
    predicate: Callable[[Notification, datetime], bool]


@dataclass(frozen=True)
class ExplanationRule:
    """
    Rationale template.

    The template is formatted with `case_value`, `denial_risk` and `payer`.
    """

    name: str
    predicate: Callable[[Notification], bool]
    template: str


def _high_value(n: Notification, now: datetime | None = None) -> bool:
    value = n.signals.case_value
    return value is not None and value > HIGH_VALUE_THRESHOLD


def _high_denial_risk(n: Notification, now: datetime | None = None) -> bool:
    risk = n.signals.denial_risk_score
    return risk is not None and risk > HIGH_DENIAL_RISK_THRESHOLD


def days_to_service(n: Notification, now: datetime) -> float | None:
    """Days until the date of service; None when unknown."""
    dos = n.signals.dos
    if dos is None:
        return None
    return (dos - now).total_seconds() / 86400.0


def _imminent_service(n: Notification, now: datetime) -> bool:
    days = days_to_service(n, now)
    return days is not None and days <= IMMINENT_SERVICE_DAYS


AI_SCORE_RULES = (
    AIScoreRule("high_value", 40, _high_value),
    AIScoreRule("high_denial_risk", 30, _high_denial_risk),
    AIScoreRule("imminent_service", 10, _imminent_service),
)

# Synthetic alerts always explain themselves as simulations
EXPLANATION_RULES = (
    ExplanationRule(
        "synthetic",
        lambda n: n.signals.synthetic is True,
        "This is a simulated alert for {payer} based on your work patterns, "
        "shown to keep your workflow warm.",
    ),
    ExplanationRule(
        "high_value",
        _high_value,
        "This high-value case ({case_value}) requires immediate attention.",
    ),
    ExplanationRule(
        "high_denial_risk",
        _high_denial_risk,
        "Our model predicts a {denial_risk}% chance of denial based on the provided "
        "DX/CPT combo for this payer.",
    ),
    ExplanationRule(
        "auth_expired",
        lambda n: n.category == NotificationCategory.AUTH_EXPIRED.value,
        "This authorization expired, putting a high-value case at immediate risk of denial.",
    ),
)

AUTH_SUGGESTED_ACTIONS = (SuggestedAction("Renew Auth", 0.87),)
DEFAULT_SUGGESTED_ACTIONS = (SuggestedAction("Review Case", 0.92),)


def _template_context(n: Notification) -> dict[str, str]:
    signals = n.signals
    return {
        "case_value": format_usd(signals.case_value) if signals.case_value is not None else "",
        "denial_risk": (
            f"{signals.denial_risk_score:g}" if signals.denial_risk_score is not None else ""
        ),
        "payer": signals.payer or "this payer",
    }


class AIBoostCurator:
    """
    Secondary curation gate for the ai_boost feed.

    Usage:
        curator = AIBoostCurator()
        boosted = curator.curate(scorer.rank(bundled, Channel.AI_BOOST, now), now)
    """

    def __init__(
        self,
        config: CurationConfig | None = None,
        score_rules: tuple[AIScoreRule, ...] = AI_SCORE_RULES,
        explanation_rules: tuple[ExplanationRule, ...] = EXPLANATION_RULES,
    ) -> None:
        self._config = config or CurationConfig()
        self._score_rules = score_rules
        self._explanation_rules = explanation_rules

    def ai_score(self, notification: Notification, now: datetime) -> float:
        """Sum of points for every matching score rule."""
        return float(
            sum(rule.points for rule in self._score_rules if rule.predicate(notification, now))
        )

    def explain(self, notification: Notification) -> tuple[str, str]:
        """
        Pick the rationale for a notification.

        Returns:
            (rule name, explanation); ("default", ...) when nothing matches
        """
        for rule in self._explanation_rules:
            if rule.predicate(notification):
                return rule.name, rule.template.format(**_template_context(notification))
        return "default", DEFAULT_EXPLANATION

    def suggested_actions(self, notification: Notification) -> tuple[SuggestedAction, ...]:
        if "auth" in notification.category:
            return AUTH_SUGGESTED_ACTIONS
        return DEFAULT_SUGGESTED_ACTIONS

    def curate(self, ranked_pool: list[Notification], now: datetime) -> list[Notification]:
        """
        Curate the ai_boost feed.

        Args:
            ranked_pool: Full bundled set, already ranked for ai_boost
            now: Reference instant for time-to-service

        Returns:
            At most max_items enriched copies, by descending ai_score
            (ties keep ranked order)
        """
        pool = ranked_pool[: self._config.pool_size]
        scored = [replace(n, ai_score=self.ai_score(n, now)) for n in pool]
        survivors = sorted(scored, key=lambda n: n.ai_score, reverse=True)
        survivors = survivors[: self._config.max_items]

        curated = []
        for n in survivors:
            rule_name, explanation = self.explain(n)
            existing = n.ai or AIInsight()
            curated.append(
                replace(
                    n,
                    ai=replace(
                        existing,
                        explanation=explanation,
                        suggested_actions=self.suggested_actions(n),
                    ),
                )
            )
            logger.debug(f"AI boost kept {n.id} (ai_score={n.ai_score}, rule={rule_name})")

        return curated
