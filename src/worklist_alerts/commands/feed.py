"""
Notification Feed CLI Commands.

Commands for orchestrating and mutating a JSON notification snapshot.
"""

from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path

from ..core.config import get_settings
from ..core.errors import EngineConfigError
from ..core.formatters import format_datetime, get_utc_now, get_utc_timestamp, parse_datetime
from ..core.logging import get_logger
from ..engine.config import resolve_engine_config
from ..engine.models import Channel
from ..engine.orchestrator import Orchestrator
from ..feed import NotificationFeedService
from ..store.json_file import JsonFileNotificationRepository

logger = get_logger(__name__)

CHANNEL_CHOICES = [c.value for c in Channel]


class _CommandError(Exception):
    """Turns into an error JSON response."""

    def __init__(self, error_type: str, message: str) -> None:
        self.error_type = error_type
        super().__init__(message)


def _feed_path(args: argparse.Namespace) -> Path:
    return Path(args.file) if args.file else get_settings().feed_path


def _now(args: argparse.Namespace) -> datetime:
    raw = getattr(args, "now", None)
    if not raw:
        return get_utc_now()
    parsed = parse_datetime(raw)
    if parsed is None:
        raise _CommandError("invalid_argument", f"Cannot parse --now value: {raw}")
    return parsed


def _service(args: argparse.Namespace, must_exist: bool = True) -> NotificationFeedService:
    path = _feed_path(args)
    if must_exist and not path.exists():
        raise _CommandError("not_found", f"Notification file not found: {path}")
    try:
        orchestrator = Orchestrator(resolve_engine_config())
    except EngineConfigError as e:
        raise _CommandError("invalid_config", str(e)) from e
    return NotificationFeedService(JsonFileNotificationRepository(path), orchestrator)


def _error(e: _CommandError) -> dict:
    return {
        "error": e.error_type,
        "message": str(e),
        "query_timestamp": get_utc_timestamp(),
    }


# =============================================================================
# Commands
# =============================================================================


def cmd_feed(args: argparse.Namespace) -> dict:
    """Orchestrate the snapshot and print the feeds."""
    try:
        service = _service(args)
        now = _now(args)
    except _CommandError as e:
        return _error(e)

    feeds = service.feeds(now).to_dict()
    if args.channel:
        feeds = {args.channel: feeds[args.channel]}

    return {
        "query_timestamp": get_utc_timestamp(),
        "now": format_datetime(now),
        "counts": {name: len(items) for name, items in feeds.items()},
        **feeds,
    }


def cmd_feed_explain(args: argparse.Namespace) -> dict:
    """Show the factor breakdown for one notification."""
    try:
        service = _service(args)
        now = _now(args)
    except _CommandError as e:
        return _error(e)

    breakdown = service.explain(args.id, Channel(args.channel), now)
    if breakdown is None:
        return _error(
            _CommandError(
                "not_found",
                f"Notification {args.id} not found, or suppressed/bundled before ranking",
            )
        )

    if args.text:
        print(breakdown.explain())
        return {}
    return breakdown.to_dict()


def cmd_feed_unread(args: argparse.Namespace) -> dict:
    """Inbox badge count."""
    try:
        service = _service(args)
        now = _now(args)
    except _CommandError as e:
        return _error(e)

    return {"query_timestamp": get_utc_timestamp(), "unread": service.unread_count(now)}


def cmd_feed_read(args: argparse.Namespace) -> dict:
    """Mark one notification read."""
    try:
        service = _service(args)
    except _CommandError as e:
        return _error(e)

    if not service.mark_read(args.id):
        return _error(_CommandError("not_found", f"Unknown notification: {args.id}"))
    return {"id": args.id, "isRead": True}


def cmd_feed_read_all(args: argparse.Namespace) -> dict:
    """Mark every notification read."""
    try:
        service = _service(args)
    except _CommandError as e:
        return _error(e)

    return {"changed": service.mark_all_read()}


def cmd_feed_dismiss(args: argparse.Namespace) -> dict:
    """Dismiss one notification."""
    try:
        service = _service(args)
    except _CommandError as e:
        return _error(e)

    if not service.dismiss(args.id):
        return _error(_CommandError("not_found", f"Unknown notification: {args.id}"))
    return {"id": args.id, "isDismissed": True}


# =============================================================================
# Parser Registration
# =============================================================================


def _add_file_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--file",
        help="JSON notification snapshot (default: WORKLIST_FEED_PATH)",
    )


def _add_now_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--now",
        help="Reference instant as ISO 8601 (default: current UTC time)",
    )


def register_parsers(subparsers) -> None:
    """Register feed command parsers."""

    # feed
    feed_parser = subparsers.add_parser(
        "feed",
        help="Orchestrate notifications into direct/watching/ai_boost feeds",
    )
    _add_file_arg(feed_parser)
    _add_now_arg(feed_parser)
    feed_parser.add_argument(
        "--channel",
        choices=CHANNEL_CHOICES,
        help="Only print one channel",
    )
    feed_parser.set_defaults(func=cmd_feed)

    # feed-explain
    explain_parser = subparsers.add_parser(
        "feed-explain",
        help="Explain how a notification was scored",
    )
    explain_parser.add_argument("id", help="Notification id (bundle ids included)")
    _add_file_arg(explain_parser)
    _add_now_arg(explain_parser)
    explain_parser.add_argument(
        "--channel",
        choices=CHANNEL_CHOICES,
        default=Channel.DIRECT.value,
        help="Channel whose modifier applies (default: direct)",
    )
    explain_parser.add_argument(
        "--text",
        action="store_true",
        help="Human-readable output instead of JSON",
    )
    explain_parser.set_defaults(func=cmd_feed_explain)

    # feed-unread
    unread_parser = subparsers.add_parser(
        "feed-unread",
        help="Count unread notifications across direct and watching",
    )
    _add_file_arg(unread_parser)
    _add_now_arg(unread_parser)
    unread_parser.set_defaults(func=cmd_feed_unread)

    # feed-read
    read_parser = subparsers.add_parser("feed-read", help="Mark a notification read")
    read_parser.add_argument("id", help="Notification id")
    _add_file_arg(read_parser)
    read_parser.set_defaults(func=cmd_feed_read)

    # feed-read-all
    read_all_parser = subparsers.add_parser(
        "feed-read-all", help="Mark every notification read"
    )
    _add_file_arg(read_all_parser)
    read_all_parser.set_defaults(func=cmd_feed_read_all)

    # feed-dismiss
    dismiss_parser = subparsers.add_parser("feed-dismiss", help="Dismiss a notification")
    dismiss_parser.add_argument("id", help="Notification id")
    _add_file_arg(dismiss_parser)
    dismiss_parser.set_defaults(func=cmd_feed_dismiss)
