"""
Worklist Alerts - Notification Orchestration for the case worklist inbox.

Converts a raw, heterogeneous stream of worklist alerts into three ranked,
deduplicated, size-bounded feeds: direct, watching and ai_boost.

Usage as library:
    from worklist_alerts import Orchestrator, parse_notifications

    notifications = parse_notifications(records)
    feeds = Orchestrator().orchestrate(notifications)
    for n in feeds.direct:
        print(n.id, n.score, n.layout)

Usage as CLI:
    python -m worklist_alerts feed --file notifications.json
    python -m worklist_alerts feed-explain notif_1 --text

Package structure:
    worklist_alerts/
    ├── core/       # Settings, logging, errors, formatting
    ├── engine/     # Pipeline stages and orchestrator
    ├── store/      # Read/dismiss state repositories
    ├── feed.py     # Repository + orchestrator facade
    └── commands/   # CLI command implementations
"""

__version__ = "1.0.0"

from .engine import (
    Channel,
    EngineConfig,
    FeedResult,
    LayoutTier,
    Notification,
    Orchestrator,
    orchestrate,
)
from .feed import NotificationFeedService
from .store import (
    InMemoryNotificationRepository,
    JsonFileNotificationRepository,
    NotificationRepository,
    parse_notifications,
)

__all__ = [
    "__version__",
    "Channel",
    "EngineConfig",
    "FeedResult",
    "InMemoryNotificationRepository",
    "JsonFileNotificationRepository",
    "LayoutTier",
    "Notification",
    "NotificationFeedService",
    "NotificationRepository",
    "Orchestrator",
    "orchestrate",
    "parse_notifications",
]
