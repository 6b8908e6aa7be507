"""
JSON-file-backed notification repository.

File format: either a list of wire-format notifications or an object with a
"notifications" list.
"""

from __future__ import annotations

import json
import tempfile
import threading
from pathlib import Path
from typing import Any

from ..core.errors import NotificationFormatError
from ..core.logging import get_logger
from ..engine.models import Notification
from .memory import InMemoryNotificationRepository

logger = get_logger(__name__)


def parse_notifications(records: Any) -> list[Notification]:
    """
    Parse wire-format records, skipping malformed ones.

    Args:
        records: List of dicts, or {"notifications": [...]}

    Returns:
        Parsed notifications in input order
    """
    if isinstance(records, dict):
        records = records.get("notifications", [])
    if not isinstance(records, list):
        logger.warning(f"Expected a list of notifications, got {type(records).__name__}")
        return []

    parsed = []
    for index, record in enumerate(records):
        try:
            parsed.append(Notification.from_dict(record))
        except NotificationFormatError as e:
            logger.warning(f"Skipping notification #{index}: {e}")
    return parsed


def load_notifications(path: Path) -> list[Notification]:
    """
    Load notifications from a JSON file.

    Raises:
        OSError: File cannot be read
        json.JSONDecodeError: File is not valid JSON
    """
    with open(path, encoding="utf-8") as f:
        return parse_notifications(json.load(f))


class JsonFileNotificationRepository(InMemoryNotificationRepository):
    """
    Repository persisted to a JSON file.

    The file is read once at construction and rewritten after every
    mutation. A missing file starts an empty store. Saves are serialized
    and each snapshot is taken inside the save lock, so the last write to
    land always reflects the newest in-memory state.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._save_lock = threading.Lock()
        notifications = load_notifications(self._path) if self._path.exists() else []
        super().__init__(notifications)
        logger.debug(f"Loaded {len(notifications)} notifications from {self._path}")

    @property
    def path(self) -> Path:
        return self._path

    def _changed(self) -> None:
        self.save()

    def save(self) -> None:
        """Write the current state atomically."""
        with self._save_lock:
            data = [n.to_dict() for n in self.snapshot()]
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                json.dump(data, f, indent=2)
                tmp_path = Path(f.name)
            try:
                tmp_path.replace(self._path)
            except OSError:
                tmp_path.unlink(missing_ok=True)
                raise
