"""
Notification Engine Configuration.

Tuning for every pipeline stage. Defaults reproduce the standard product
behavior; a YAML file may override any subset:

    suppression:
      window_hours: 24
    bundling:
      threshold: 3
      window_hours: 6
    ranking:
      weights: {denial_risk: 0.30, expiry: 0.20, ...}
      channel_modifiers: {direct: 1.15, watching: 1.0, ai_boost: 1.3}
      recency_half_life_hours: 2
    curation:
      pool_size: 50
      max_items: 5
    layout:
      max_top: 3
      top_score_threshold: 80
    time_budget_ms: 2000
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..core.errors import EngineConfigError
from ..core.logging import get_logger
from .models import Channel

logger = get_logger(__name__)


# Factor weights; must sum to 1.0
DEFAULT_WEIGHTS = {
    "denial_risk": 0.30,
    "expiry": 0.20,
    "case_value": 0.20,
    "insurance_tier": 0.10,
    "workflow_step": 0.10,
    "recency": 0.05,
}

DEFAULT_CHANNEL_MODIFIERS = {
    Channel.DIRECT.value: 1.15,
    Channel.WATCHING.value: 1.0,
    Channel.AI_BOOST.value: 1.3,
}

DEFAULT_TIME_BUDGET_MS = 2000

WEIGHT_SUM_TOLERANCE = 0.001


@dataclass
class SuppressionConfig:
    """Repeat-alert dedup window per (case, category)."""

    window_hours: float = 24.0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SuppressionConfig:
        if not data:
            return cls()
        return cls(window_hours=float(data.get("window_hours", 24.0)))

    def to_dict(self) -> dict[str, Any]:
        return {"window_hours": self.window_hours}

    def validate(self) -> list[str]:
        if self.window_hours <= 0:
            return [f"suppression.window_hours must be positive, got {self.window_hours}"]
        return []


@dataclass
class BundlingConfig:
    """Cluster collapse rules."""

    threshold: int = 3  # bundle when cluster size > threshold
    window_hours: float = 6.0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> BundlingConfig:
        if not data:
            return cls()
        return cls(
            threshold=int(data.get("threshold", 3)),
            window_hours=float(data.get("window_hours", 6.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"threshold": self.threshold, "window_hours": self.window_hours}

    def validate(self) -> list[str]:
        errors = []
        if self.threshold < 1:
            errors.append(f"bundling.threshold must be >= 1, got {self.threshold}")
        if self.window_hours <= 0:
            errors.append(f"bundling.window_hours must be positive, got {self.window_hours}")
        return errors


@dataclass
class RankingConfig:
    """Factor weights, per-channel modifiers and recency decay."""

    weights: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    channel_modifiers: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_CHANNEL_MODIFIERS)
    )
    recency_half_life_hours: float = 2.0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RankingConfig:
        """
        Create from dictionary.

        Partial weight or modifier maps are merged over the defaults.
        """
        if not data:
            return cls()
        weights = dict(DEFAULT_WEIGHTS)
        weights.update({k: float(v) for k, v in (data.get("weights") or {}).items()})
        modifiers = dict(DEFAULT_CHANNEL_MODIFIERS)
        modifiers.update(
            {k: float(v) for k, v in (data.get("channel_modifiers") or {}).items()}
        )
        return cls(
            weights=weights,
            channel_modifiers=modifiers,
            recency_half_life_hours=float(data.get("recency_half_life_hours", 2.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "weights": dict(self.weights),
            "channel_modifiers": dict(self.channel_modifiers),
            "recency_half_life_hours": self.recency_half_life_hours,
        }

    def modifier_for(self, channel: Channel) -> float:
        return self.channel_modifiers.get(channel.value, 1.0)

    def validate(self) -> list[str]:
        errors = []
        unknown = set(self.weights) - set(DEFAULT_WEIGHTS)
        if unknown:
            errors.append(f"Unknown ranking factors: {sorted(unknown)}")
        negative = [k for k, v in self.weights.items() if v < 0]
        if negative:
            errors.append(f"Ranking weights must be non-negative: {sorted(negative)}")
        total = sum(self.weights.values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            errors.append(f"Ranking weights must sum to 1.0, got {total:.3f}")
        unknown_channels = set(self.channel_modifiers) - {c.value for c in Channel}
        if unknown_channels:
            errors.append(f"Unknown channels in channel_modifiers: {sorted(unknown_channels)}")
        if any(v < 0 for v in self.channel_modifiers.values()):
            errors.append("Channel modifiers must be non-negative")
        if self.recency_half_life_hours <= 0:
            errors.append(
                f"ranking.recency_half_life_hours must be positive, "
                f"got {self.recency_half_life_hours}"
            )
        return errors


@dataclass
class CurationConfig:
    """AI boost pool and output size."""

    pool_size: int = 50
    max_items: int = 5

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CurationConfig:
        if not data:
            return cls()
        return cls(
            pool_size=int(data.get("pool_size", 50)),
            max_items=int(data.get("max_items", 5)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"pool_size": self.pool_size, "max_items": self.max_items}

    def validate(self) -> list[str]:
        errors = []
        if self.pool_size < 0:
            errors.append(f"curation.pool_size must be >= 0, got {self.pool_size}")
        if self.max_items < 0:
            errors.append(f"curation.max_items must be >= 0, got {self.max_items}")
        return errors


@dataclass
class LayoutConfig:
    """Top-tier cap and score gate."""

    max_top: int = 3
    top_score_threshold: float = 80.0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> LayoutConfig:
        if not data:
            return cls()
        return cls(
            max_top=int(data.get("max_top", 3)),
            top_score_threshold=float(data.get("top_score_threshold", 80.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"max_top": self.max_top, "top_score_threshold": self.top_score_threshold}

    def validate(self) -> list[str]:
        errors = []
        if self.max_top < 0:
            errors.append(f"layout.max_top must be >= 0, got {self.max_top}")
        if not (0.0 <= self.top_score_threshold <= 100.0):
            errors.append(
                f"layout.top_score_threshold must be between 0 and 100, "
                f"got {self.top_score_threshold}"
            )
        return errors


@dataclass
class EngineConfig:
    """
    Complete orchestration engine configuration.

    time_budget_ms bounds one orchestration pass; None or 0 disables it.
    """

    suppression: SuppressionConfig = field(default_factory=SuppressionConfig)
    bundling: BundlingConfig = field(default_factory=BundlingConfig)
    ranking: RankingConfig = field(default_factory=RankingConfig)
    curation: CurationConfig = field(default_factory=CurationConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    time_budget_ms: int | None = DEFAULT_TIME_BUDGET_MS

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> EngineConfig:
        """Create from dictionary."""
        if not data:
            return cls()
        return cls(
            suppression=SuppressionConfig.from_dict(data.get("suppression")),
            bundling=BundlingConfig.from_dict(data.get("bundling")),
            ranking=RankingConfig.from_dict(data.get("ranking")),
            curation=CurationConfig.from_dict(data.get("curation")),
            layout=LayoutConfig.from_dict(data.get("layout")),
            time_budget_ms=data.get("time_budget_ms", DEFAULT_TIME_BUDGET_MS),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "suppression": self.suppression.to_dict(),
            "bundling": self.bundling.to_dict(),
            "ranking": self.ranking.to_dict(),
            "curation": self.curation.to_dict(),
            "layout": self.layout.to_dict(),
            "time_budget_ms": self.time_budget_ms,
        }

    def validate(self) -> list[str]:
        """
        Validate all sections.

        Returns:
            List of validation errors (empty when valid)
        """
        errors: list[str] = []
        errors.extend(self.suppression.validate())
        errors.extend(self.bundling.validate())
        errors.extend(self.ranking.validate())
        errors.extend(self.curation.validate())
        errors.extend(self.layout.validate())
        if self.time_budget_ms is not None and self.time_budget_ms < 0:
            errors.append(f"time_budget_ms must be >= 0, got {self.time_budget_ms}")
        return errors

    def ensure_valid(self) -> EngineConfig:
        """
        Raises:
            EngineConfigError: If validate() reports any error
        """
        errors = self.validate()
        if errors:
            raise EngineConfigError(errors)
        return self


def load_engine_config(path: Path) -> EngineConfig:
    """
    Load engine tuning from a YAML file.

    Args:
        path: YAML file; an empty file yields the defaults

    Returns:
        Validated EngineConfig

    Raises:
        EngineConfigError: File is not a mapping or fails validation
        OSError: File cannot be read
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise EngineConfigError([f"{path}: top level must be a mapping"])

    try:
        config = EngineConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        raise EngineConfigError([f"{path}: {e}"]) from e

    logger.debug(f"Loaded engine config from {path}")
    return config.ensure_valid()


def resolve_engine_config() -> EngineConfig:
    """
    Build the engine config from process settings.

    Reads WORKLIST_ENGINE_CONFIG when set and applies the
    WORKLIST_TIME_BUDGET_MS override.
    """
    from ..core.config import get_settings

    settings = get_settings()
    if settings.engine_config:
        config = load_engine_config(settings.engine_config)
    else:
        config = EngineConfig()

    if settings.time_budget_ms is not None:
        config.time_budget_ms = settings.time_budget_ms or None

    return config
