"""
Channel Routing.

Splits the bundled notification set into the inbox audience channels.
Membership is non-exclusive: a notification may land in both.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..core.logging import get_logger
from .models import Channel, Priority

if TYPE_CHECKING:
    from .models import Notification

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChannelRoute:
    """
    Routing predicate for one channel.

    Attributes:
        channel: Destination channel
        predicate: Returns True when the notification belongs on the channel
        description: Human-readable summary of the predicate
    """

    channel: Channel
    predicate: Callable[[Notification], bool]
    description: str


def _is_direct(n: Notification) -> bool:
    return n.priority in (Priority.CRITICAL, Priority.HIGH) or n.is_bundled


def _is_watching(n: Notification) -> bool:
    return n.signals.watch is True or n.priority == Priority.MEDIUM


DEFAULT_ROUTES = (
    ChannelRoute(Channel.DIRECT, _is_direct, "critical/high priority, or a bundle"),
    ChannelRoute(Channel.WATCHING, _is_watching, "watched, or medium priority"),
)


class ChannelRouter:
    """
    Routes notifications to the direct and watching channels.

    The ai_boost channel is not routed here; it is derived from the full
    bundled set by the curator.

    Usage:
        router = ChannelRouter()
        routed = router.route(bundled)
        direct = routed[Channel.DIRECT]
    """

    def __init__(self, routes: tuple[ChannelRoute, ...] = DEFAULT_ROUTES) -> None:
        self._routes = routes

    @property
    def channels(self) -> list[Channel]:
        return [r.channel for r in self._routes]

    def route(self, notifications: list[Notification]) -> dict[Channel, list[Notification]]:
        """
        Route notifications.

        Returns:
            Dict of channel -> notifications, each in input order
        """
        routed: dict[Channel, list[Notification]] = {}
        for route in self._routes:
            routed[route.channel] = [n for n in notifications if route.predicate(n)]
            logger.debug(f"Routed {len(routed[route.channel])} to {route.channel.value}")
        return routed

    def channels_for(self, notification: Notification) -> list[Channel]:
        """Channels a single notification would be routed to."""
        return [r.channel for r in self._routes if r.predicate(notification)]
