"""
Notification storage: the read/dismiss state the engine only reads.
"""

from .json_file import JsonFileNotificationRepository, load_notifications, parse_notifications
from .memory import InMemoryNotificationRepository
from .protocol import NotificationRepository

__all__ = [
    "InMemoryNotificationRepository",
    "JsonFileNotificationRepository",
    "NotificationRepository",
    "load_notifications",
    "parse_notifications",
]
