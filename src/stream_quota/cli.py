"""Command-line interface for stream-quota."""

from __future__ import annotations

import argparse
import sys

from stream_quota.core.config import Settings, get_settings
from stream_quota.core.exceptions import StreamQuotaError
from stream_quota.core.logging import setup_logging
from stream_quota.persistence import SQLiteRecordStore
from stream_quota.registry import Registry


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="stream-quota",
        description="Manage per-user concurrent stream limits",
    )
    parser.add_argument("--db", default=None, help="SQLite database path (default from settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_parser = subparsers.add_parser("register", help="Register a user")
    register_parser.add_argument("user_id")
    register_parser.add_argument("limit", type=int)

    delete_parser = subparsers.add_parser("delete", help="Delete a user")
    delete_parser.add_argument("user_id")

    check_parser = subparsers.add_parser("check", help="Check whether a user can start a stream")
    check_parser.add_argument("user_id")

    update_parser = subparsers.add_parser("update-limit", help="Change a user's limit")
    update_parser.add_argument("user_id")
    update_parser.add_argument("limit", type=int)

    start_parser = subparsers.add_parser("start", help="Start a stream")
    start_parser.add_argument("user_id")

    stop_parser = subparsers.add_parser("stop", help="Stop a stream")
    stop_parser.add_argument("user_id")

    show_parser = subparsers.add_parser("show", help="Show a user's limit and active streams")
    show_parser.add_argument("user_id")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")

    args = parser.parse_args(argv)
    settings = get_settings()

    if args.command == "serve":
        return cmd_serve(args, settings)

    try:
        registry = open_registry(settings, db_path=args.db)
    except StreamQuotaError as e:
        print(f"Error opening registry: {e}", file=sys.stderr)
        return 1

    try:
        return run_command(registry, args)
    finally:
        registry.store.close()


def open_registry(settings: Settings, *, db_path: str | None = None) -> Registry:
    """Open a SQLite-backed registry for one CLI invocation."""
    store = SQLiteRecordStore(db_path or settings.db_path)
    return Registry(store, max_concurrency=settings.max_concurrency)


def run_command(registry: Registry, args: argparse.Namespace) -> int:
    """Run one registry command, printing the outcome."""
    try:
        if args.command == "register":
            record = registry.register(args.user_id, args.limit)
            print(f"Registered {record.id} with limit {record.limit}")
        elif args.command == "delete":
            registry.delete_user(args.user_id)
            print(f"Deleted {args.user_id}")
        elif args.command == "check":
            can_start = registry.has_capacity(args.user_id)
            print("yes" if can_start else "no")
        elif args.command == "update-limit":
            record = registry.update_limit(args.user_id, args.limit)
            print(f"Limit of {record.id} is now {record.limit}")
        elif args.command == "start":
            record = registry.start_stream(args.user_id)
            print(f"Started stream for {record.id} ({record.active}/{record.limit})")
        elif args.command == "stop":
            registry.stop_stream(args.user_id)
            print(f"Stopped stream for {args.user_id}")
        elif args.command == "show":
            record = registry.get_user(args.user_id)
            print(f"{record.id}: {record.active}/{record.limit} streams active")
        return 0

    except StreamQuotaError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    """Handle 'serve' command."""
    import uvicorn

    setup_logging(settings.log_level, format_style=settings.log_format)
    # Single worker: the registry gate is per process
    uvicorn.run(
        "stream_quota.api.main:app",
        host=args.host if args.host is not None else settings.api_host,
        port=args.port if args.port is not None else settings.api_port,
        workers=1,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
