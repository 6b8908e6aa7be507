"""
Tests for channel routing.
"""

from __future__ import annotations

from dataclasses import replace

import pytest

from worklist_alerts.engine.models import Channel, Priority
from worklist_alerts.engine.routing import ChannelRoute, ChannelRouter


class TestDefaultRoutes:
    """Direct and watching predicates."""

    @pytest.mark.parametrize(
        "priority,direct,watching",
        [
            (Priority.CRITICAL, True, False),
            (Priority.HIGH, True, False),
            (Priority.MEDIUM, False, True),
            (Priority.LOW, False, False),
        ],
    )
    def test_priority_routing(self, make_notification, priority, direct, watching):
        """Priority alone decides membership when nothing is watched."""
        n = make_notification(priority=priority)
        channels = ChannelRouter().channels_for(n)
        assert (Channel.DIRECT in channels) is direct
        assert (Channel.WATCHING in channels) is watching

    def test_watched_low_goes_to_watching(self, make_notification):
        """A watched low-priority item shows up in watching only."""
        n = make_notification(priority=Priority.LOW, metadata={"watch": True})
        assert ChannelRouter().channels_for(n) == [Channel.WATCHING]

    def test_watched_critical_in_both(self, make_notification):
        """Membership is non-exclusive."""
        n = make_notification(priority=Priority.CRITICAL, metadata={"watch": True})
        assert ChannelRouter().channels_for(n) == [Channel.DIRECT, Channel.WATCHING]

    def test_watch_false_not_watched(self, make_notification):
        """watch=false does not count as watched."""
        n = make_notification(priority=Priority.LOW, metadata={"watch": False})
        assert ChannelRouter().channels_for(n) == []

    def test_bundle_always_direct(self, make_notification):
        """Bundles go to direct whatever their priority."""
        n = replace(make_notification(priority=Priority.LOW), is_bundled=True, count=4)
        assert Channel.DIRECT in ChannelRouter().channels_for(n)


class TestRoute:
    """Routing a whole set."""

    def test_route_keeps_input_order(self, make_notification):
        """Each channel list preserves input order."""
        items = [
            make_notification(id="m1", priority=Priority.MEDIUM),
            make_notification(id="c1", priority=Priority.CRITICAL),
            make_notification(id="m2", priority=Priority.MEDIUM),
            make_notification(id="h1", priority=Priority.HIGH),
            make_notification(id="l1", priority=Priority.LOW),
        ]
        routed = ChannelRouter().route(items)
        assert [n.id for n in routed[Channel.DIRECT]] == ["c1", "h1"]
        assert [n.id for n in routed[Channel.WATCHING]] == ["m1", "m2"]

    def test_low_unwatched_dropped_from_inbox(self, make_notification):
        """Low unwatched items reach neither inbox channel."""
        routed = ChannelRouter().route([make_notification(priority=Priority.LOW)])
        assert routed == {Channel.DIRECT: [], Channel.WATCHING: []}

    def test_empty(self):
        """Empty input routes to empty channels."""
        routed = ChannelRouter().route([])
        assert routed[Channel.DIRECT] == []
        assert routed[Channel.WATCHING] == []

    def test_custom_routes(self, make_notification):
        """Routes are data and can be replaced."""
        routes = (ChannelRoute(Channel.WATCHING, lambda n: n.case_id == "42", "case 42"),)
        router = ChannelRouter(routes)
        items = [make_notification(id="a", case_id="42"), make_notification(id="b")]

        assert router.channels == [Channel.WATCHING]
        assert [n.id for n in router.route(items)[Channel.WATCHING]] == ["a"]
