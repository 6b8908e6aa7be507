"""
Notification Orchestration Engine.

Turns a raw stream of worklist alerts into three ranked, deduplicated,
size-bounded feeds for the inbox UI.

Key Components:
- SuppressionFilter: drops dismissed alerts and repeats per (case, category)
- BundlingClusterer: collapses bursts sharing a cluster key into one bundle
- ChannelRouter: splits the pool into the direct and watching channels
- RankingScorer: weighted, channel-modified relevance score in [0, 100]
- AIBoostCurator: impact re-scoring and rationale for the ai_boost feed
- LayoutAssigner: top / secondary / bundle tiers under a top-tier cap
- Orchestrator: composes the stages and fails closed on error
"""

from .bundling import BundlingClusterer
from .config import (
    BundlingConfig,
    CurationConfig,
    EngineConfig,
    LayoutConfig,
    RankingConfig,
    SuppressionConfig,
    load_engine_config,
    resolve_engine_config,
)
from .curation import AIBoostCurator
from .layout import LayoutAssigner
from .models import (
    AIInsight,
    Channel,
    FactorScore,
    FeedResult,
    InsuranceTier,
    LayoutTier,
    Notification,
    NotificationAction,
    NotificationCategory,
    PartialSignals,
    Priority,
    ScoreBreakdown,
    SuggestedAction,
    WorkflowStep,
)
from .orchestrator import Orchestrator, create_orchestrator, orchestrate
from .ranking import RankingScorer
from .routing import ChannelRouter
from .suppression import SuppressionFilter

__all__ = [
    # Models
    "AIInsight",
    "Channel",
    "FactorScore",
    "FeedResult",
    "InsuranceTier",
    "LayoutTier",
    "Notification",
    "NotificationAction",
    "NotificationCategory",
    "PartialSignals",
    "Priority",
    "ScoreBreakdown",
    "SuggestedAction",
    "WorkflowStep",
    # Config
    "BundlingConfig",
    "CurationConfig",
    "EngineConfig",
    "LayoutConfig",
    "RankingConfig",
    "SuppressionConfig",
    "load_engine_config",
    "resolve_engine_config",
    # Stages
    "AIBoostCurator",
    "BundlingClusterer",
    "ChannelRouter",
    "LayoutAssigner",
    "RankingScorer",
    "SuppressionFilter",
    # Orchestration
    "Orchestrator",
    "create_orchestrator",
    "orchestrate",
]
