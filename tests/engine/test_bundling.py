"""
Tests for cluster bundling.
"""

from __future__ import annotations

from worklist_alerts.engine.bundling import BundlingClusterer
from worklist_alerts.engine.models import NotificationCategory, Priority


def _cluster(make_notification, size, span_hours, key="bcbs-submission", payer="BCBS"):
    """Cluster members spread evenly across span_hours, newest first."""
    step = span_hours / (size - 1) if size > 1 else 0
    return [
        make_notification(
            id=f"{key}_{i}",
            category="submission_failed",
            priority=Priority.MEDIUM,
            case_id=f"30{i}",
            hours_ago=i * step,
            title=f"270 Submission Failed #{i}",
            metadata={"payer": payer, "clusterKey": key},
        )
        for i in range(size)
    ]


class TestBundlingThreshold:
    """Only clusters larger than the threshold bundle."""

    def test_three_items_not_bundled(self, make_notification):
        """Exactly 3 within an hour pass through individually."""
        items = _cluster(make_notification, 3, 1.0)
        result = BundlingClusterer().bundle(items)
        assert [n.id for n in result] == [n.id for n in items]
        assert not any(n.is_bundled for n in result)

    def test_four_items_bundled(self, make_notification):
        """4 within an hour collapse into one bundle."""
        items = _cluster(make_notification, 4, 1.0)
        result = BundlingClusterer().bundle(items)
        assert len(result) == 1
        bundle = result[0]
        assert bundle.is_bundled is True
        assert bundle.count == 4


class TestBundlingWindow:
    """All members must fall within the window."""

    def test_span_over_window_not_bundled(self, make_notification):
        """6h01m span does not bundle."""
        items = _cluster(make_notification, 4, 6 + 1 / 60)
        result = BundlingClusterer().bundle(items)
        assert len(result) == 4
        assert not any(n.is_bundled for n in result)

    def test_span_under_window_bundled(self, make_notification):
        """5h59m span bundles."""
        items = _cluster(make_notification, 4, 5 + 59 / 60)
        result = BundlingClusterer().bundle(items)
        assert len(result) == 1
        assert result[0].count == 4

    def test_span_exactly_window_not_bundled(self, make_notification):
        """The window bound is exclusive."""
        items = _cluster(make_notification, 4, 6.0)
        assert len(BundlingClusterer().bundle(items)) == 4


class TestBundleShape:
    """The synthetic bundle representative."""

    def test_bundle_fields(self, submission_burst):
        """Bundle summarizes the newest member and payer."""
        bundle = BundlingClusterer().bundle(submission_burst)[0]
        newest = submission_burst[0]

        assert bundle.category == NotificationCategory.BULK_PATTERN.value
        assert bundle.priority == Priority.HIGH
        assert bundle.count == 5
        assert bundle.timestamp == newest.timestamp
        assert bundle.case_id == newest.case_id
        assert bundle.title == "5 similar alerts for BCBS"
        assert newest.title in bundle.description
        assert bundle.metadata == newest.metadata

    def test_bundle_id(self, submission_burst):
        """Id combines cluster key and newest timestamp in epoch ms."""
        bundle = BundlingClusterer().bundle(submission_burst)[0]
        expected_ms = int(submission_burst[0].timestamp.timestamp() * 1000)
        assert bundle.id == f"bundle_bcbs-submission_{expected_ms}"

    def test_bundled_items_newest_first(self, submission_burst):
        """Members are stored newest first, even from shuffled input."""
        shuffled = [submission_burst[i] for i in (3, 0, 4, 1, 2)]
        bundle = BundlingClusterer().bundle(shuffled)[0]
        assert [m.id for m in bundle.bundled_items] == [n.id for n in submission_burst]

    def test_single_worklist_action(self, submission_burst):
        """Bundle carries one action linking to the filtered worklist."""
        bundle = BundlingClusterer().bundle(submission_burst)[0]
        assert len(bundle.actions) == 1
        action = bundle.actions[0]
        assert action.label == "Open in Worklist"
        assert action.url == "/worklist?filter=payer:BCBS"
        assert action.primary is True

    def test_missing_payer_uses_cluster_key(self, make_notification):
        """Without a payer the cluster key names the bundle."""
        items = [
            make_notification(
                id=f"n{i}", case_id=str(i), hours_ago=0.1 * i, metadata={"clusterKey": "ops-270"}
            )
            for i in range(4)
        ]
        bundle = BundlingClusterer().bundle(items)[0]
        assert bundle.title == "4 similar alerts for ops-270"


class TestMembership:
    """Bundled members are never re-emitted individually."""

    def test_absorbed_members_excluded(self, make_notification, submission_burst):
        """Only the bundle and unrelated notifications remain."""
        loner = make_notification(id="loner", case_id="999")
        result = BundlingClusterer().bundle([loner, *submission_burst])
        ids = [n.id for n in result]
        assert "loner" in ids
        assert not any(n.id in ids for n in submission_burst)

    def test_unbundled_first_then_bundles(self, make_notification, submission_burst):
        """Pass-through items keep input order; bundles follow."""
        a = make_notification(id="a", case_id="1")
        b = make_notification(id="b", case_id="2")
        result = BundlingClusterer().bundle([a, *submission_burst, b])
        assert [n.id for n in result[:2]] == ["a", "b"]
        assert result[2].is_bundled

    def test_no_cluster_key_passes_through(self, make_notification):
        """Notifications without a cluster key are never bundled."""
        items = [make_notification(id=f"n{i}", case_id=str(i)) for i in range(6)]
        assert BundlingClusterer().bundle(items) == items

    def test_multiple_clusters(self, make_notification):
        """Each cluster is judged independently."""
        big = _cluster(make_notification, 5, 1.0, key="aetna-auth", payer="Aetna")
        small = _cluster(make_notification, 2, 1.0, key="uhc-auth", payer="UHC")
        result = BundlingClusterer().bundle(big + small)
        assert [n.id for n in result[:2]] == [n.id for n in small]
        assert result[2].title == "5 similar alerts for Aetna"

    def test_input_not_mutated(self, submission_burst):
        """Members keep their own fields after bundling."""
        BundlingClusterer().bundle(submission_burst)
        assert not any(n.is_bundled for n in submission_burst)
        assert all(n.category == "submission_failed" for n in submission_burst)
