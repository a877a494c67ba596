#!/usr/bin/env python3
"""
Queue CLI: inspect and drain the lookup queue from the terminal.

Commands:
    run-once  Process one batch of pending tasks.
    list      Show queue rows (optionally filtered by status).
    extract   Render one page and print the extracted name (no writes).

Usage examples::

    python queue_cli.py run-once --limit 3
    python queue_cli.py list --status error
    python queue_cli.py extract https://tool.readycrew.cloud/cases/x --id 3007608
"""

import argparse
import asyncio
import sys

from dotenv import load_dotenv

from corp_sync.browser_automation import PageRenderer, RenderFailure
from corp_sync.config import WorkerConfig
from corp_sync.errors import SyncError
from corp_sync.name_extractor import NameExtractor
from corp_sync.queue.store import QueueRepository
from corp_sync.sheets_integration import GoogleSheetsIntegration
from corp_sync.utils import setup_logging

import main as worker_main


# ------------------------------------------------------------------
# Subcommand handlers
# ------------------------------------------------------------------

def _handle_run_once(args: argparse.Namespace) -> int:
    """Handler for the ``run-once`` subcommand."""
    config = WorkerConfig.from_env()
    if args.limit is not None:
        config.batch_limit = args.limit
    result = worker_main.run(config)
    if not result.read:
        print("No pending tasks in the queue.")
        return 0
    for o in result.outcomes:
        label = f"skipped ({o.skipped})" if o.skipped else o.status
        print(f"row {o.row_number:<5} {o.record_id:<10} {label:<24} {o.resolved_name}")
    print(
        f"→ {result.done} done, {result.failed} failed, "
        f"{result.skipped} skipped, {result.ledger_updated} ledger updates"
    )
    return 0


def _handle_list(args: argparse.Namespace) -> int:
    """Handler for the ``list`` subcommand."""
    config = WorkerConfig.from_env()
    store = GoogleSheetsIntegration(config.spreadsheet_id, config.service_account_info)
    store.authenticate()
    tasks = QueueRepository.from_config(store, config).list_tasks(status=args.status)
    if not tasks:
        label = f" with status='{args.status}'" if args.status else ""
        print(f"No tasks found{label}.")
        return 0

    fmt = "{:<6} {:<10} {:<20} {:<20} {:<20} {}"
    print(fmt.format("ROW", "NO", "STATUS", "NAME", "LAST ATTEMPT", "URL"))
    print("-" * 100)
    for t in tasks:
        name = (t.resolved_name[:18] + "…") if len(t.resolved_name) > 18 else t.resolved_name
        print(fmt.format(t.row_number, t.record_id, t.status, name, t.last_attempt, t.target_url))
    return 0


def _handle_extract(args: argparse.Namespace) -> int:
    """Handler for the ``extract`` subcommand."""
    renderer = PageRenderer(headless=not args.headed)
    rendered = asyncio.run(renderer.render(args.url))
    if isinstance(rendered, RenderFailure):
        print(f"Render failed: {rendered.reason} {rendered.detail}")
        return 1

    print(f"HTTP {rendered.http_status}, {len(rendered.heading_texts)} heading(s)")
    for h in rendered.heading_texts:
        print(f"  h: {h}")
    name = NameExtractor().extract(rendered.heading_texts, rendered.body_text, args.id or "")
    print(f"→ name: {name or '(not found)'}")
    return 0 if name else 1


# ------------------------------------------------------------------
# Argument parser
# ------------------------------------------------------------------

def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="queue_cli",
        description="Manage the business-name lookup queue.",
    )
    subs = parser.add_subparsers(dest="command", required=True)

    # -- run-once --
    run = subs.add_parser("run-once", help="Process one batch of pending tasks.")
    run.add_argument(
        "--limit", type=_positive_int, default=None, help="Override BATCH_LIMIT"
    )

    # -- list --
    lst = subs.add_parser("list", help="List queue rows.")
    lst.add_argument(
        "--status",
        default=None,
        help="Filter by status (pending, done, retry, error or error:<reason>)",
    )

    # -- extract --
    ext = subs.add_parser("extract", help="Render a page and show the extracted name.")
    ext.add_argument("url", help="Page URL")
    ext.add_argument("--id", default="", help="Expected case number")
    ext.add_argument("--headed", action="store_true", help="Show the browser window")

    return parser


def main(argv=None) -> int:
    """CLI entry-point."""
    load_dotenv()
    setup_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    handlers = {
        "run-once": _handle_run_once,
        "list": _handle_list,
        "extract": _handle_extract,
    }
    try:
        return handlers[args.command](args)
    except SyncError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
