"""
Notification Engine Data Models.

Core data structures flowing through the orchestration pipeline: the
notification record and its optional signal bag, the derived scoring
breakdown, and the three-channel feed result.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from ..core.errors import NotificationFormatError
from ..core.formatters import format_datetime, parse_datetime
from ..core.logging import get_logger

logger = get_logger(__name__)


class Priority(str, Enum):
    """Ordinal notification severity."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Severity rank, higher is more severe."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.CRITICAL: 3,
}


class NotificationCategory(str, Enum):
    """Known alert kinds. Unknown kinds are kept as raw strings."""

    ELIGIBILITY_CHANGE = "eligibility_change"
    AUTH_EXPIRED = "auth_expired"
    AUTH_EXPIRING = "auth_expiring"
    AUTH_MISSING = "auth_missing"
    SUBMISSION_FAILED = "submission_failed"
    ESTIMATE_CHANGED = "estimate_changed"
    HIGH_DENIAL_RISK = "high_denial_risk"
    BULK_PATTERN = "bulk_pattern"
    AI_RECOMMENDATION = "ai_recommendation"


class Channel(str, Enum):
    """Destination feed."""

    DIRECT = "direct"
    WATCHING = "watching"
    AI_BOOST = "ai_boost"


class LayoutTier(str, Enum):
    """Display tier assigned after ranking."""

    TOP = "top"
    SECONDARY = "secondary"
    BUNDLE = "bundle"


class WorkflowStep(str, Enum):
    """Revenue-cycle stage the case is in."""

    PRE_SERVICE = "pre_service"
    CLAIMS = "claims"
    POST_SERVICE = "post_service"


class InsuranceTier(str, Enum):
    """Patient insurance plan tier."""

    PREMIUM = "premium"
    STANDARD = "standard"
    BUDGET = "budget"


# =============================================================================
# Value Coercion
# =============================================================================


def _coerce_number(value: Any, name: str) -> float | None:
    """Return a finite float, or None for anything else."""
    if value is None:
        return None
    if isinstance(value, bool):
        logger.debug(f"Ignoring boolean value for metadata.{name}")
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            logger.debug(f"Ignoring non-numeric metadata.{name}: {value!r}")
            return None
    else:
        logger.debug(f"Ignoring {type(value).__name__} for metadata.{name}")
        return None
    if not math.isfinite(number):
        logger.debug(f"Ignoring non-finite metadata.{name}")
        return None
    return number


def _coerce_bool(value: Any, name: str) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    logger.debug(f"Ignoring non-boolean {name}: {value!r}")
    return None


def _coerce_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _coerce_enum(enum_cls: type[Enum], value: Any, name: str) -> Any:
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug(f"Unknown metadata.{name}: {value!r}")
        return None


def _format_number(value: float) -> int | float:
    """Emit whole numbers as ints so wire output round-trips cleanly."""
    return int(value) if float(value).is_integer() else value


# =============================================================================
# Signals and Actions
# =============================================================================


@dataclass(frozen=True)
class PartialSignals:
    """
    Situational signals attached to a notification (the `metadata` bag).

    Every field is optional. Consumers must supply their own default when a
    field is None; parsing never raises and drops malformed values.
    """

    payer: str | None = None
    policy_id: str | None = None
    denial_risk_score: float | None = None  # 0-100
    days_until_expiration: float | None = None  # negative = already expired
    case_value: float | None = None  # dollars
    workflow_step: WorkflowStep | None = None
    patient_insurance_tier: InsuranceTier | None = None
    dos: datetime | None = None  # date of service
    watch: bool | None = None
    cluster_key: str | None = None
    source: str | None = None
    synthetic: bool | None = None

    @classmethod
    def from_dict(cls, data: Any) -> PartialSignals | None:
        """
        Create from a wire-format metadata dict.

        Returns None when metadata is absent or not a mapping at all.
        """
        if data is None:
            return None
        if not isinstance(data, dict):
            logger.debug(f"Ignoring malformed metadata of type {type(data).__name__}")
            return None

        dos = data.get("dos")
        return cls(
            payer=_coerce_str(data.get("payer")),
            policy_id=_coerce_str(data.get("policyId")),
            denial_risk_score=_coerce_number(data.get("denialRiskScore"), "denialRiskScore"),
            days_until_expiration=_coerce_number(
                data.get("daysUntilExpiration"), "daysUntilExpiration"
            ),
            case_value=_coerce_number(data.get("caseValue"), "caseValue"),
            workflow_step=_coerce_enum(WorkflowStep, data.get("workflowStep"), "workflowStep"),
            patient_insurance_tier=_coerce_enum(
                InsuranceTier, data.get("patientInsuranceTier"), "patientInsuranceTier"
            ),
            dos=parse_datetime(dos) if isinstance(dos, str) else None,
            watch=_coerce_bool(data.get("watch"), "metadata.watch"),
            cluster_key=_coerce_str(data.get("clusterKey")),
            source=_coerce_str(data.get("source")),
            synthetic=_coerce_bool(data.get("synthetic"), "metadata.synthetic"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to wire format, omitting absent fields."""
        result: dict[str, Any] = {}
        if self.payer is not None:
            result["payer"] = self.payer
        if self.policy_id is not None:
            result["policyId"] = self.policy_id
        if self.denial_risk_score is not None:
            result["denialRiskScore"] = _format_number(self.denial_risk_score)
        if self.days_until_expiration is not None:
            result["daysUntilExpiration"] = _format_number(self.days_until_expiration)
        if self.case_value is not None:
            result["caseValue"] = _format_number(self.case_value)
        if self.workflow_step is not None:
            result["workflowStep"] = self.workflow_step.value
        if self.patient_insurance_tier is not None:
            result["patientInsuranceTier"] = self.patient_insurance_tier.value
        if self.dos is not None:
            result["dos"] = format_datetime(self.dos)
        if self.watch is not None:
            result["watch"] = self.watch
        if self.cluster_key is not None:
            result["clusterKey"] = self.cluster_key
        if self.source is not None:
            result["source"] = self.source
        if self.synthetic is not None:
            result["synthetic"] = self.synthetic
        return result


@dataclass(frozen=True)
class NotificationAction:
    """User-invocable action. Opaque to the engine."""

    label: str
    type: str = "link"
    url: str | None = None
    primary: bool = False
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NotificationAction:
        known = ("label", "type", "url", "primary")
        return cls(
            label=str(data.get("label", "")),
            type=str(data.get("type", "link")),
            url=data.get("url"),
            primary=bool(data.get("primary", False)),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"label": self.label, "type": self.type}
        if self.url is not None:
            result["url"] = self.url
        if self.primary:
            result["primary"] = True
        result.update(self.extra)
        return result


@dataclass(frozen=True)
class SuggestedAction:
    """Curated next step with model confidence."""

    label: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "confidence": self.confidence}


@dataclass(frozen=True)
class AIInsight:
    """Human-readable rationale attached to a notification."""

    explanation: str | None = None
    suggested_actions: tuple[SuggestedAction, ...] = ()
    suppression_reason: str | None = None
    confidence: float | None = None

    @classmethod
    def from_dict(cls, data: Any) -> AIInsight | None:
        if not isinstance(data, dict):
            return None
        actions = []
        suggested = data.get("suggestedActions")
        if not isinstance(suggested, list):
            suggested = []
        for item in suggested:
            if isinstance(item, dict) and "label" in item:
                confidence = _coerce_number(item.get("confidence"), "confidence")
                actions.append(SuggestedAction(str(item["label"]), confidence or 0.0))
        return cls(
            explanation=_coerce_str(data.get("explanation")),
            suggested_actions=tuple(actions),
            suppression_reason=_coerce_str(data.get("suppressionReason")),
            confidence=_coerce_number(data.get("confidence"), "confidence"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.explanation is not None:
            result["explanation"] = self.explanation
        if self.suggested_actions:
            result["suggestedActions"] = [a.to_dict() for a in self.suggested_actions]
        if self.suppression_reason is not None:
            result["suppressionReason"] = self.suppression_reason
        if self.confidence is not None:
            result["confidence"] = self.confidence
        return result


# =============================================================================
# Notification
# =============================================================================


_REQUIRED_FIELDS = ("id", "priority", "timestamp", "caseId", "patientName")


@dataclass
class Notification:
    """
    A single alert event.

    Only is_read / is_dismissed are ever mutated, and only by the owning
    repository. Pipeline stages produce copies carrying the derived fields
    (score, bundle membership, layout, ai_score); they never modify inputs.
    """

    id: str
    category: str
    priority: Priority
    timestamp: datetime
    case_id: str
    patient_name: str
    is_read: bool = False
    is_dismissed: bool = False
    metadata: PartialSignals | None = None
    actions: tuple[NotificationAction, ...] = ()
    title: str = ""
    description: str = ""
    channel: str | None = None  # source system (auth, rcm, ops, ...)
    patient_mrn: str | None = None
    ai: AIInsight | None = None

    # Derived by the pipeline
    score: float | None = None
    is_bundled: bool = False
    count: int | None = None
    bundled_items: tuple[Notification, ...] = ()
    layout: LayoutTier | None = None
    ai_score: float | None = None

    @property
    def known_category(self) -> NotificationCategory | None:
        """Category as an enum, or None for kinds this engine does not know."""
        try:
            return NotificationCategory(self.category)
        except ValueError:
            return None

    @property
    def signals(self) -> PartialSignals:
        """Metadata, or an empty signal bag when absent."""
        return self.metadata if self.metadata is not None else _EMPTY_SIGNALS

    @property
    def cluster_key(self) -> str | None:
        return self.metadata.cluster_key if self.metadata else None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Notification:
        """
        Create from a wire-format (camelCase) record.

        Raises:
            NotificationFormatError: Missing required field, unknown priority
                or unparseable timestamp
        """
        if not isinstance(data, dict):
            raise NotificationFormatError(f"Expected object, got {type(data).__name__}")

        notification_id = data.get("id")
        for name in _REQUIRED_FIELDS:
            if data.get(name) in (None, ""):
                raise NotificationFormatError(f"Missing required field '{name}'", notification_id)

        category = data.get("category") or data.get("type")
        if not category:
            raise NotificationFormatError("Missing required field 'category'", notification_id)

        try:
            priority = Priority(data["priority"])
        except ValueError:
            raise NotificationFormatError(
                f"Unknown priority {data['priority']!r}", notification_id
            ) from None

        timestamp = parse_datetime(data["timestamp"])
        if timestamp is None:
            raise NotificationFormatError(
                f"Unparseable timestamp {data['timestamp']!r}", notification_id
            )

        raw_actions = data.get("actions")
        if raw_actions is None:
            raw_actions = []
        if not isinstance(raw_actions, list):
            raise NotificationFormatError(
                f"Expected a list of actions, got {type(raw_actions).__name__}", notification_id
            )
        actions = tuple(NotificationAction.from_dict(a) for a in raw_actions if isinstance(a, dict))

        return cls(
            id=str(notification_id),
            category=str(category),
            priority=priority,
            timestamp=timestamp,
            case_id=str(data["caseId"]),
            patient_name=str(data["patientName"]),
            is_read=_coerce_bool(data.get("isRead"), "isRead") or False,
            is_dismissed=_coerce_bool(data.get("isDismissed"), "isDismissed") or False,
            metadata=PartialSignals.from_dict(data.get("metadata")),
            actions=actions,
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            channel=_coerce_str(data.get("channel")),
            patient_mrn=_coerce_str(data.get("patientMrn")),
            ai=AIInsight.from_dict(data.get("ai")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to wire format, including derived fields that are set."""
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.category,
            "category": self.category,
            "priority": self.priority.value,
            "timestamp": format_datetime(self.timestamp),
            "caseId": self.case_id,
            "patientName": self.patient_name,
            "title": self.title,
            "description": self.description,
            "isRead": self.is_read,
            "isDismissed": self.is_dismissed,
            "actions": [a.to_dict() for a in self.actions],
        }
        if self.channel is not None:
            result["channel"] = self.channel
        if self.patient_mrn is not None:
            result["patientMrn"] = self.patient_mrn
        if self.metadata is not None:
            result["metadata"] = self.metadata.to_dict()
        if self.ai is not None:
            result["ai"] = self.ai.to_dict()

        if self.score is not None:
            result["score"] = round(self.score, 3)
        if self.is_bundled:
            result["isBundled"] = True
            result["count"] = self.count
            result["bundledItems"] = [item.to_dict() for item in self.bundled_items]
        if self.layout is not None:
            result["layout"] = self.layout.value
        if self.ai_score is not None:
            result["aiScore"] = _format_number(self.ai_score)
        return result

    def __repr__(self) -> str:
        return (
            f"Notification(id={self.id!r}, category={self.category!r}, "
            f"priority={self.priority.value!r}, score={self.score})"
        )


_EMPTY_SIGNALS = PartialSignals()


# =============================================================================
# Scoring Breakdown
# =============================================================================


@dataclass
class FactorScore:
    """
    Score from a single ranking factor.

    Factors produce normalized values [0, 1]; the weight is the factor's
    share of the blended base score.
    """

    factor: str
    value: float
    weight: float
    reason: str | None = None
    raw_value: Any = None

    def __post_init__(self) -> None:
        """Clamp value to valid range."""
        self.value = max(0.0, min(1.0, self.value))

    @property
    def contribution(self) -> float:
        """Weighted contribution to the base score."""
        return self.value * self.weight

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "factor": self.factor,
            "value": round(self.value, 3),
            "weight": self.weight,
            "contribution": round(self.contribution, 4),
        }
        if self.reason:
            result["reason"] = self.reason
        if self.raw_value is not None:
            result["raw_value"] = self.raw_value
        return result


@dataclass
class ScoreBreakdown:
    """
    Complete ranking calculation for one notification on one channel.

    score = clamp(sum(factor contributions) * 100 * modifier, 0, 100)
    """

    notification_id: str
    channel: Channel
    factors: dict[str, FactorScore] = field(default_factory=dict)
    modifier: float = 1.0
    has_metadata: bool = True

    @property
    def base_score(self) -> float:
        """Weighted factor sum in [0, 1] before the channel modifier."""
        return sum(f.contribution for f in self.factors.values())

    @property
    def score(self) -> float:
        return max(0.0, min(100.0, self.base_score * 100.0 * self.modifier))

    @property
    def dominant_factor(self) -> str | None:
        """Factor with the largest weighted contribution."""
        if not self.factors:
            return None
        return max(self.factors.values(), key=lambda f: f.contribution).factor

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.notification_id,
            "channel": self.channel.value,
            "score": round(self.score, 3),
            "base_score": round(self.base_score * 100.0, 3),
            "modifier": self.modifier,
            "has_metadata": self.has_metadata,
            "dominant_factor": self.dominant_factor,
            "factors": [f.to_dict() for f in self.factors.values()],
        }

    def explain(self) -> str:
        """
        Generate human-readable explanation of the score.

        Returns:
            Multi-line explanation string
        """
        lines = [f"Notification {self.notification_id} ({self.channel.value})", "─" * 40]

        for f in sorted(self.factors.values(), key=lambda f: f.contribution, reverse=True):
            reason_str = f" [{f.reason}]" if f.reason else ""
            lines.append(
                f"{f.factor:12} {f.value:.2f} x {f.weight * 100:.0f}% = "
                f"{f.contribution * 100:5.2f}{reason_str}"
            )

        lines.append("─" * 40)
        lines.append(f"Base:       {self.base_score * 100:.2f}")
        lines.append(f"Modifier:   x{self.modifier:.2f}")
        lines.append(f"Score:      {self.score:.2f}")
        return "\n".join(lines)


# =============================================================================
# Feed Result
# =============================================================================


@dataclass
class FeedResult:
    """The three ordered output feeds of one orchestration pass."""

    direct: list[Notification] = field(default_factory=list)
    watching: list[Notification] = field(default_factory=list)
    ai_boost: list[Notification] = field(default_factory=list)

    @classmethod
    def empty(cls) -> FeedResult:
        return cls()

    def get(self, channel: Channel) -> list[Notification]:
        """Feed for a channel."""
        return getattr(self, channel.value)

    @property
    def is_empty(self) -> bool:
        return not (self.direct or self.watching or self.ai_boost)

    def all_ids(self) -> set[str]:
        """Ids appearing in any feed."""
        return {n.id for feed in (self.direct, self.watching, self.ai_boost) for n in feed}

    def unread_ids(self) -> set[str]:
        """Unique unread ids across the inbox channels (direct, watching)."""
        return {n.id for n in (*self.direct, *self.watching) if not n.is_read}

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            Channel.DIRECT.value: [n.to_dict() for n in self.direct],
            Channel.WATCHING.value: [n.to_dict() for n in self.watching],
            Channel.AI_BOOST.value: [n.to_dict() for n in self.ai_boost],
        }
