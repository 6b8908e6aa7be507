"""
Tests for engine data models and wire-format parsing.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from worklist_alerts.core.errors import NotificationFormatError
from worklist_alerts.engine.models import (
    AIInsight,
    Channel,
    FactorScore,
    FeedResult,
    InsuranceTier,
    Notification,
    NotificationCategory,
    PartialSignals,
    Priority,
    ScoreBreakdown,
    WorkflowStep,
)


class TestPriority:
    def test_rank_order(self):
        ranks = [p.rank for p in (Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.CRITICAL)]
        assert ranks == sorted(ranks)
        assert Priority.CRITICAL.rank == 3


class TestPartialSignals:
    """Metadata bag parsing."""

    def test_full(self):
        signals = PartialSignals.from_dict(
            {
                "payer": "Aetna",
                "policyId": "P-1",
                "denialRiskScore": 91,
                "daysUntilExpiration": -1,
                "caseValue": 32000,
                "workflowStep": "pre_service",
                "patientInsuranceTier": "premium",
                "dos": "2026-03-03T09:00:00Z",
                "watch": True,
                "clusterKey": "aetna-auth",
                "source": "payer_portal",
                "synthetic": False,
            }
        )
        assert signals.payer == "Aetna"
        assert signals.denial_risk_score == 91.0
        assert signals.days_until_expiration == -1.0
        assert signals.workflow_step == WorkflowStep.PRE_SERVICE
        assert signals.patient_insurance_tier == InsuranceTier.PREMIUM
        assert signals.dos == datetime(2026, 3, 3, 9, 0, tzinfo=timezone.utc)
        assert signals.watch is True
        assert signals.cluster_key == "aetna-auth"
        assert signals.synthetic is False

    def test_absent(self):
        assert PartialSignals.from_dict(None) is None

    def test_not_a_mapping(self):
        assert PartialSignals.from_dict(["payer"]) is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("42", 42.0),
            (" 7.5 ", 7.5),
            ("high", None),
            (True, None),
            (float("nan"), None),
            (float("inf"), None),
            ([1], None),
        ],
    )
    def test_number_coercion(self, value, expected):
        assert PartialSignals.from_dict({"caseValue": value}).case_value == expected

    @pytest.mark.parametrize(
        "value,expected",
        [(True, True), ("true", True), ("FALSE", False), ("yes", None), (1, None)],
    )
    def test_bool_coercion(self, value, expected):
        assert PartialSignals.from_dict({"watch": value}).watch is expected

    def test_malformed_fields_dropped(self):
        signals = PartialSignals.from_dict(
            {"workflowStep": "triage", "dos": "next tuesday", "payer": "  ", "clusterKey": 5}
        )
        assert signals == PartialSignals()

    def test_to_dict_omits_absent(self):
        data = PartialSignals(payer="BCBS", case_value=800.0, watch=False).to_dict()
        assert data == {"payer": "BCBS", "caseValue": 800, "watch": False}


class TestNotificationFromDict:
    """Wire-format parsing."""

    def test_parse(self, wire_records):
        n = Notification.from_dict(wire_records[0])
        assert n.id == "notif_1"
        assert n.category == "auth_expired"
        assert n.known_category == NotificationCategory.AUTH_EXPIRED
        assert n.priority == Priority.CRITICAL
        assert n.timestamp == datetime(2026, 3, 2, 14, 0, tzinfo=timezone.utc)
        assert n.case_id == "123456"
        assert n.channel == "auth"
        assert n.metadata.case_value == 32000.0
        assert n.actions[0].label == "Re-submit Auth"
        assert n.actions[0].primary is True

    def test_category_key_preferred(self, wire_records):
        record = dict(wire_records[0], category="auth_expiring")
        assert Notification.from_dict(record).category == "auth_expiring"

    def test_unknown_category_kept(self, wire_records):
        record = dict(wire_records[0], type="payer_portal_outage")
        n = Notification.from_dict(record)
        assert n.category == "payer_portal_outage"
        assert n.known_category is None

    def test_defaults(self, wire_records):
        record = {k: v for k, v in wire_records[0].items() if k not in ("isRead", "actions")}
        n = Notification.from_dict(record)
        assert n.is_read is False
        assert n.is_dismissed is False
        assert n.actions == ()

    @pytest.mark.parametrize(
        "value,expected",
        [(True, True), (False, False), ("true", True), ("false", False), ("maybe", False)],
    )
    def test_flag_strings(self, wire_records, value, expected):
        """String flags are read as booleans, not by truthiness."""
        record = dict(wire_records[0], isRead=value, isDismissed=value)
        n = Notification.from_dict(record)
        assert n.is_read is expected
        assert n.is_dismissed is expected

    def test_non_list_actions(self, wire_records):
        record = dict(wire_records[0], actions={"label": "Open"})
        with pytest.raises(NotificationFormatError, match="list of actions"):
            Notification.from_dict(record)

    @pytest.mark.parametrize("missing", ["id", "priority", "timestamp", "caseId", "patientName"])
    def test_missing_required(self, wire_records, missing):
        record = {k: v for k, v in wire_records[0].items() if k != missing}
        with pytest.raises(NotificationFormatError, match=missing):
            Notification.from_dict(record)

    def test_missing_category(self, wire_records):
        record = {k: v for k, v in wire_records[0].items() if k != "type"}
        with pytest.raises(NotificationFormatError, match="category"):
            Notification.from_dict(record)

    def test_unknown_priority(self, wire_records):
        record = dict(wire_records[0], priority="urgent")
        with pytest.raises(NotificationFormatError) as exc_info:
            Notification.from_dict(record)
        assert exc_info.value.notification_id == "notif_1"
        assert "notification notif_1" in str(exc_info.value)

    def test_bad_timestamp(self, wire_records):
        record = dict(wire_records[0], timestamp="yesterday")
        with pytest.raises(NotificationFormatError, match="timestamp"):
            Notification.from_dict(record)

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            Notification.from_dict("not a record")

    def test_ai_insight(self, wire_records):
        record = dict(
            wire_records[0],
            ai={
                "explanation": "Look here.",
                "suggestedActions": [{"label": "Call payer", "confidence": 0.7}],
                "confidence": 0.9,
            },
        )
        ai = Notification.from_dict(record).ai
        assert ai.explanation == "Look here."
        assert ai.suggested_actions[0].label == "Call payer"
        assert ai.confidence == 0.9


class TestNotificationToDict:
    """Wire-format output."""

    def test_camel_case(self, wire_records):
        data = Notification.from_dict(wire_records[0]).to_dict()
        assert data["caseId"] == "123456"
        assert data["patientName"] == "John Smith"
        assert data["type"] == data["category"] == "auth_expired"
        assert data["timestamp"] == "2026-03-02T14:00:00Z"
        assert data["metadata"]["caseValue"] == 32000
        assert "score" not in data
        assert "isBundled" not in data

    def test_derived_fields(self, make_notification):
        n = make_notification(id="x")
        n.score = 87.12345
        n.ai_score = 40.0
        data = n.to_dict()
        assert data["score"] == 87.123
        assert data["aiScore"] == 40

    def test_signals_default(self, make_notification):
        assert make_notification().signals == PartialSignals()
        assert make_notification().cluster_key is None


class TestScoreBreakdown:
    def test_clamped(self):
        breakdown = ScoreBreakdown(
            "n1",
            Channel.DIRECT,
            factors={"denial_risk": FactorScore("denial_risk", 1.0, 1.0)},
            modifier=1.15,
        )
        assert breakdown.base_score == 1.0
        assert breakdown.score == 100.0

    def test_factor_value_clamped(self):
        assert FactorScore("x", 1.7, 0.5).value == 1.0
        assert FactorScore("x", -0.2, 0.5).value == 0.0

    def test_empty(self):
        breakdown = ScoreBreakdown("n1", Channel.WATCHING)
        assert breakdown.score == 0.0
        assert breakdown.dominant_factor is None


class TestFeedResult:
    def test_unread_ids_unique(self, make_notification):
        shared = make_notification(id="both")
        read = make_notification(id="seen", is_read=True)
        boosted = make_notification(id="boost")
        feeds = FeedResult(direct=[shared, read], watching=[shared], ai_boost=[boosted])
        assert feeds.unread_ids() == {"both"}
        assert feeds.all_ids() == {"both", "seen", "boost"}

    def test_get(self, make_notification):
        n = make_notification()
        feeds = FeedResult(watching=[n])
        assert feeds.get(Channel.WATCHING) == [n]
        assert feeds.get(Channel.DIRECT) == []

    def test_empty(self):
        assert FeedResult.empty().is_empty

    def test_ai_insight_round_trip(self):
        data = {"explanation": "Why", "suppressionReason": "dup"}
        assert AIInsight.from_dict(data).to_dict() == data
