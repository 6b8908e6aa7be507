#!/usr/bin/env python3
"""
Worklist Alerts CLI Entry Point

Run with: python -m worklist_alerts <command> [args]
"""

import argparse
import json
import sys

from .core.formatters import get_utc_timestamp


def output_json(data: dict, indent: int = 2) -> None:
    """Print JSON output to stdout."""
    print(json.dumps(data, indent=indent))


def cmd_help(args: argparse.Namespace) -> dict:
    """Show help message."""
    help_text = """
═══════════════════════════════════════════════════════════════════
Worklist Alerts - Notification Orchestration
───────────────────────────────────────────────────────────────────

Feed Commands:
  feed [opts]                Orchestrate a snapshot into the three feeds
                             --file PATH, --now ISO, --channel <name>
  feed-explain <id> [opts]   Factor-by-factor score breakdown
                             --channel direct|watching|ai_boost, --text
  feed-unread [opts]         Unread count across direct + watching

Mutation Commands:
  feed-read <id>             Mark a notification read
  feed-read-all              Mark every notification read
  feed-dismiss <id>          Dismiss a notification

Environment:
  WORKLIST_FEED_PATH         Default snapshot file (notifications.json)
  WORKLIST_ENGINE_CONFIG     YAML engine tuning file
  WORKLIST_LOG_LEVEL         DEBUG, INFO, WARNING (default), ERROR

═══════════════════════════════════════════════════════════════════
"""
    print(help_text)
    return {}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="worklist-alerts",
        description="Worklist notification orchestration",
    )
    subparsers = parser.add_subparsers(dest="command")

    help_parser = subparsers.add_parser("help", help="Show help message")
    help_parser.set_defaults(func=cmd_help)

    from .commands import feed

    feed.register_parsers(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        cmd_help(args)
        return 0

    try:
        result = args.func(args)

        if isinstance(result, dict) and result:
            output_json(result)

            if "error" in result:
                return 1

        return 0

    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except Exception as e:
        output_json(
            {
                "error": "command_error",
                "message": str(e),
                "command": args.command,
                "query_timestamp": get_utc_timestamp(),
            }
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
