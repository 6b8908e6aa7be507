"""
Attention-Aware Layout Assignment.

Assigns each ranked notification a display tier, bounding how many items
compete for top attention.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from .config import LayoutConfig
from .models import Channel, LayoutTier

if TYPE_CHECKING:
    from .models import Notification


class LayoutAssigner:
    """
    Tier assignment in ranked order.

    - Bundles are always BUNDLE and do not consume the top budget.
    - Otherwise TOP while the budget lasts and the score clears the gate.
    - Everything else is SECONDARY.

    The ai_boost channel skips the score gate (curation already selected
    for impact) but keeps the cap.
    """

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self._config = config or LayoutConfig()

    def assign_layout(
        self,
        notifications: list[Notification],
        channel: Channel,
    ) -> list[Notification]:
        """
        Returns:
            Copies in the same order with only `layout` changed
        """
        gated = channel != Channel.AI_BOOST
        top_count = 0
        result = []

        for n in notifications:
            if n.is_bundled:
                tier = LayoutTier.BUNDLE
            elif top_count < self._config.max_top and (
                not gated or (n.score or 0.0) >= self._config.top_score_threshold
            ):
                tier = LayoutTier.TOP
                top_count += 1
            else:
                tier = LayoutTier.SECONDARY
            result.append(replace(n, layout=tier))

        return result
