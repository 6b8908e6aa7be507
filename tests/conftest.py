"""
Worklist Alerts Test Suite - Shared Fixtures and Configuration
"""

from __future__ import annotations

import os

os.environ.setdefault("WORKLIST_LOG_LEVEL", "WARNING")

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from worklist_alerts.engine.models import (
    AIInsight,
    Notification,
    NotificationAction,
    PartialSignals,
    Priority,
)

# Fixed reference instant so recency and time-to-service are deterministic
NOW = datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc)


def build_notification(
    id: str = "notif_1",
    category: str = "eligibility_change",
    priority: str | Priority = Priority.HIGH,
    hours_ago: float = 0.0,
    case_id: str = "100001",
    patient_name: str = "Maria Garcia",
    metadata: dict[str, Any] | PartialSignals | None = None,
    is_read: bool = False,
    is_dismissed: bool = False,
    title: str = "",
    ai: AIInsight | None = None,
    now: datetime = NOW,
) -> Notification:
    """
    Build a notification relative to NOW.

    metadata may be a wire-format dict (parsed like real input) or a
    PartialSignals instance.
    """
    if isinstance(metadata, dict):
        metadata = PartialSignals.from_dict(metadata)
    return Notification(
        id=id,
        category=category,
        priority=Priority(priority),
        timestamp=now - timedelta(hours=hours_ago),
        case_id=case_id,
        patient_name=patient_name,
        is_read=is_read,
        is_dismissed=is_dismissed,
        metadata=metadata,
        actions=(NotificationAction("Review Case", url=f"/case/{case_id}", primary=True),),
        title=title or f"{category} for {patient_name}",
        ai=ai,
    )


@pytest.fixture
def now() -> datetime:
    """The fixed reference instant."""
    return NOW


@pytest.fixture
def make_notification() -> Callable[..., Notification]:
    """Factory fixture for notifications (see build_notification)."""
    return build_notification


@pytest.fixture
def critical_expired_auth() -> Notification:
    """Expired auth on a high-value premium pre-service case, created now."""
    return build_notification(
        id="notif_auth",
        category="auth_expired",
        priority=Priority.CRITICAL,
        case_id="123456",
        patient_name="John Smith",
        metadata={
            "payer": "Aetna",
            "daysUntilExpiration": -1,
            "caseValue": 32000,
            "denialRiskScore": 95,
            "patientInsuranceTier": "premium",
            "workflowStep": "pre_service",
        },
    )


@pytest.fixture
def submission_burst() -> list[Notification]:
    """Five BCBS submission failures inside ten minutes, newest first."""
    return [
        build_notification(
            id=f"sub_{i}",
            category="submission_failed",
            priority=Priority.MEDIUM,
            hours_ago=i * 2 / 60,
            case_id=f"20000{i}",
            metadata={"payer": "BCBS", "clusterKey": "bcbs-submission", "caseValue": 800},
        )
        for i in range(5)
    ]


@pytest.fixture
def wire_records() -> list[dict[str, Any]]:
    """Wire-format (camelCase) records as the UI would send them."""
    return [
        {
            "id": "notif_1",
            "channel": "auth",
            "type": "auth_expired",
            "title": "Auth Expired for John Smith",
            "description": "Prior auth #12345 for CPT 27447 expired yesterday.",
            "timestamp": "2026-03-02T14:00:00Z",
            "caseId": "123456",
            "patientName": "John Smith",
            "priority": "critical",
            "isRead": False,
            "actions": [
                {"label": "Re-submit Auth", "type": "link", "url": "/case/123456/auth", "primary": True}
            ],
            "metadata": {
                "payer": "Aetna",
                "daysUntilExpiration": -1,
                "caseValue": 32000,
                "denialRiskScore": 91,
                "workflowStep": "pre_service",
                "patientInsuranceTier": "premium",
            },
        },
        {
            "id": "notif_2",
            "channel": "eligibility",
            "type": "eligibility_change",
            "title": "Eligibility Change: Maria Garcia",
            "description": "Primary coverage with UHC has terminated.",
            "timestamp": "2026-03-02T13:00:00Z",
            "caseId": "654321",
            "patientName": "Maria Garcia",
            "priority": "medium",
            "isRead": True,
            "actions": [],
            "metadata": {"payer": "UHC", "watch": True, "caseValue": 1500},
        },
        {
            "id": "notif_3",
            "type": "estimate_changed",
            "title": "Estimate Ready for Review",
            "timestamp": "2026-03-02T05:00:00Z",
            "caseId": "777777",
            "patientName": "David Chen",
            "priority": "low",
            "isRead": False,
            "isDismissed": True,
            "actions": [],
        },
    ]


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset settings and logging between tests.

    Logging reset restores propagation so caplog sees engine records.
    """
    from worklist_alerts.core.config import reset_settings
    from worklist_alerts.core.logging import reset_logging

    reset_settings()
    reset_logging()
    yield
    reset_settings()
    reset_logging()
