"""
Shared infrastructure: settings, logging, errors and formatting helpers.
"""

from .config import WorklistSettings, get_settings, reset_settings
from .errors import EngineConfigError, NotificationFormatError, WorklistAlertsError
from .formatters import (
    format_datetime,
    format_usd,
    get_utc_now,
    get_utc_timestamp,
    parse_datetime,
)
from .logging import get_logger

__all__ = [
    "EngineConfigError",
    "NotificationFormatError",
    "WorklistAlertsError",
    "WorklistSettings",
    "format_datetime",
    "format_usd",
    "get_logger",
    "get_settings",
    "get_utc_now",
    "get_utc_timestamp",
    "parse_datetime",
    "reset_settings",
]
