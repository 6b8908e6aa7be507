"""
Exception hierarchy for worklist_alerts.
"""

from __future__ import annotations


class WorklistAlertsError(Exception):
    """Base class for all worklist_alerts errors."""


class NotificationFormatError(WorklistAlertsError, ValueError):
    """
    A wire-format notification record is missing a required field or
    carries a value that cannot be interpreted (priority, timestamp).
    """

    def __init__(self, message: str, notification_id: str | None = None) -> None:
        self.notification_id = notification_id
        if notification_id:
            message = f"{message} (notification {notification_id})"
        super().__init__(message)


class EngineConfigError(WorklistAlertsError):
    """Engine tuning failed validation."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Invalid engine configuration: " + "; ".join(errors))
