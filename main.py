"""Command-line interface for the subscription tracker service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from subtracker.config import ServiceConfig, load_config, resolve_config_path
from subtracker.database import Database, resolve_database_path
from subtracker.errors import SubscriptionError
from subtracker.manager import SubscriptionManager

logger = logging.getLogger("subtracker.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Subscription tracker utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML settings file (default: SUBTRACKER_CONFIG or config/service.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    init_parser = subparsers.add_parser("init-db", help="Initialise the subscriptions database")
    init_parser.add_argument("--db", dest="db_path", default=None, help="Path to the SQLite database")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address for the API")
    serve_parser.add_argument("--port", type=int, default=None, help="Port for the API (default: 8080)")
    serve_parser.add_argument("--db", dest="db_path", default=None, help="Path to the SQLite database")

    total_parser = subparsers.add_parser("total", help="Print the summed price of matching subscriptions")
    total_parser.add_argument("--user-id", default=None, help="Only count this user's subscriptions")
    total_parser.add_argument("--service-name", default=None, help="Only count this service")
    total_parser.add_argument("--start-date", default=None, help="Earliest start month (MM-YYYY)")
    total_parser.add_argument("--end-date", default=None, help="Latest start month (MM-YYYY)")
    total_parser.add_argument("--db", dest="db_path", default=None, help="Path to the SQLite database")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "total"}

    global_args: list[str] = []
    if args_list and args_list[0] == "--config":
        global_args, args_list = args_list[:2], args_list[2:]
    elif args_list and args_list[0].startswith("--config="):
        global_args, args_list = args_list[:1], args_list[1:]

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args([*global_args, *args_list])
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args([*global_args, *args_list])
            args_list = ["serve", *args_list]

    return parser.parse_args([*global_args, *args_list])


def _load_settings(args: argparse.Namespace) -> ServiceConfig:
    config = load_config(resolve_config_path(args.config or os.getenv("SUBTRACKER_CONFIG")))
    overrides = {}
    if getattr(args, "db_path", None):
        overrides["database_path"] = resolve_database_path(args.db_path)
    if getattr(args, "host", None):
        overrides["host"] = args.host
    if getattr(args, "port", None):
        overrides["port"] = args.port
    if overrides:
        config = replace(config, **overrides)
    return config


def _initialise_database(db_path: Path) -> Database:
    database = Database(db_path)
    database.initialize()
    logger.info("Database initialised at %s", db_path)
    return database


def _serve(*, database: Database, host: str, port: int, log_level: str) -> None:
    from subtracker.service import create_app
    import uvicorn

    logger.info("Starting subscription API on http://%s:%s", host, port)

    app = create_app(database=database)
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())


def _print_total(database: Database, args: argparse.Namespace) -> int:
    manager = SubscriptionManager(database)
    try:
        total = manager.calculate_total_cost(
            user_id=args.user_id,
            service_name=args.service_name,
            start_date=args.start_date,
            end_date=args.end_date,
        )
    except SubscriptionError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(total)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    try:
        settings = _load_settings(args)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(level=settings.logging_level, format="%(asctime)s [%(levelname)s] %(message)s")

    try:
        database = _initialise_database(settings.database_path)
    except SubscriptionError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.command == "serve":
        _serve(
            database=database,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level,
        )
    elif args.command == "total":
        return _print_total(database, args)
    elif args.command == "init-db":
        print("Database initialisation complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
