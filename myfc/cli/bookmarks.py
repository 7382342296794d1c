"""Drive the bookmark store against a running MYFC API from the command line.

Examples:
    python -m myfc.cli.bookmarks list
    python -m myfc.cli.bookmarks toggle 42
    python -m myfc.cli.bookmarks status 42 --fresh
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from myfc.adapters.bookmarks import BookmarkApiClient, BookmarkClientError
from myfc.application.bookmarks import BookmarkStore
from myfc.config import AppConfig, load_config
from myfc.core.logging_utils import setup_json_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="python -m myfc.cli.bookmarks",
        description="List, toggle or check workout bookmarks for the configured user",
        allow_abbrev=False,
    )
    parser.add_argument("--api-url", help="Override MYFC_API_URL for this run.")
    parser.add_argument("--token", help="Override MYFC_ACCESS_TOKEN for this run.")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level for this session.",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="Print every bookmarked workout id.")

    toggle = commands.add_parser("toggle", help="Toggle the bookmark of one workout.")
    toggle.add_argument("workout_id")

    status = commands.add_parser("status", help="Show whether one workout is bookmarked.")
    status.add_argument("workout_id")
    status.add_argument(
        "--fresh",
        action="store_true",
        help="Ask the single-workout status endpoint instead of the bulk list.",
    )
    return parser.parse_args(argv)


def _prepare_config(args: argparse.Namespace) -> AppConfig:
    """Load configuration, applying CLI overrides."""
    bookmarks: dict[str, Any] = {}
    if args.api_url:
        bookmarks["api_url"] = args.api_url
    if args.token:
        bookmarks["access_token"] = args.token
    runtime: dict[str, Any] = {}
    if args.log_level:
        runtime["log_level"] = args.log_level

    overrides: dict[str, Any] = {}
    if bookmarks:
        overrides["bookmarks"] = bookmarks
    if runtime:
        overrides["runtime"] = runtime
    try:
        return load_config(**overrides)
    except RuntimeError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc


def _emit(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, sort_keys=True))


async def run_bookmarks_cli(args: argparse.Namespace) -> int:
    cfg = _prepare_config(args)
    setup_json_logging(cfg.runtime.log_level, cfg.runtime.log_file)

    async with (
        BookmarkApiClient.from_config(cfg.bookmarks) as client,
        BookmarkStore.from_config(client, cfg.bookmarks) as store,
    ):
        if args.command == "list":
            ids = await store.load()
            _emit({"bookmarkedWorkoutIds": sorted(ids)})
            return 0

        if args.command == "toggle":
            outcome = await store.try_toggle(args.workout_id)
            payload: dict[str, Any] = {
                "workoutId": outcome.workout_id,
                "isBookmarked": outcome.is_bookmarked,
            }
            if outcome.failure is not None:
                payload["error"] = {
                    "kind": outcome.failure.kind.value,
                    "message": outcome.failure.message,
                }
            _emit(payload)
            return 0 if outcome.ok else 1

        if args.fresh:
            is_bookmarked = await store.reconcile(args.workout_id)
        else:
            is_bookmarked = await store.check(args.workout_id)
        _emit({"workoutId": store.state(args.workout_id).workout_id, "isBookmarked": is_bookmarked})
        return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``python -m myfc.cli.bookmarks``."""
    args = parse_args(argv)
    try:
        return asyncio.run(run_bookmarks_cli(args))
    except KeyboardInterrupt:  # pragma: no cover - user cancelled
        return 130
    except BookmarkClientError as exc:
        logger.error("cli_bookmarks_failed", extra={"error": str(exc)})
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
