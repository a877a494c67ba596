#!/usr/bin/env python3
"""
Corp Name Sync - Main Entry Point
Runs one batch of business-name lookups from the queue sheet

Usage:
    # Local / cron
    python main.py

    # Cloud Function deployment (triggered by Cloud Scheduler)
    gcloud functions deploy corp_name_sync \
        --runtime python311 \
        --trigger-http \
        --entry-point main \
        --memory 1GiB \
        --timeout 540s
"""

import json
import logging
import sys
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv

from corp_sync.browser_automation import PageRenderer
from corp_sync.config import WorkerConfig
from corp_sync.errors import AuthorizationError, ConfigurationError
from corp_sync.ledger import LedgerReconciler
from corp_sync.queue.store import QueueRepository
from corp_sync.queue.worker import BatchResult, TaskRunner
from corp_sync.sheets_integration import GoogleSheetsIntegration
from corp_sync.utils import setup_logging

logger = logging.getLogger("corp_sync.main")


def build_runner(config: WorkerConfig, store=None, renderer=None) -> TaskRunner:
    """Wire the worker components for *config*.

    *store* and *renderer* default to the Google Sheets client (authenticated
    here, so credential problems surface before any task is touched) and the
    Playwright renderer.
    """
    if store is None:
        store = GoogleSheetsIntegration(config.spreadsheet_id, config.service_account_info)
        store.authenticate()
    if renderer is None:
        renderer = PageRenderer.from_config(config)

    return TaskRunner(
        queue=QueueRepository.from_config(store, config),
        ledger=LedgerReconciler.from_config(store, config),
        renderer=renderer,
        allowed_hosts=config.allowed_hosts,
        batch_limit=config.batch_limit,
        include_retry=config.include_retry,
    )


def run(config: Optional[WorkerConfig] = None) -> BatchResult:
    """Run one batch.  Configuration and authorization errors propagate."""
    if config is None:
        config = WorkerConfig.from_env()
    logger.info("Starting Corp Name Sync batch")
    return build_runner(config).run_batch()


def main(req=None):
    """
    Cloud Function entry point

    The request body is ignored; every invocation drains one batch.

    Returns:
        (json_body, http_status, headers)
    """
    try:
        result = run()
        response = {
            'success': True,
            'timestamp': datetime.now().isoformat(),
            'result': result.to_dict(),
        }
        return (json.dumps(response, ensure_ascii=False, indent=2), 200, {
            'Content-Type': 'application/json'
        })

    except Exception as e:
        logger.error("Batch failed: %s", e)
        error_response = {
            'success': False,
            'timestamp': datetime.now().isoformat(),
            'error': str(e)
        }
        return (json.dumps(error_response, ensure_ascii=False), 500, {
            'Content-Type': 'application/json'
        })


def cli() -> int:
    """Process entry point; returns the exit code."""
    load_dotenv()
    setup_logging()
    try:
        result = run()
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except AuthorizationError as e:
        logger.error("Authorization error: %s", e)
        return 1
    except Exception:
        logger.exception("Batch aborted")
        return 1

    if not result.read:
        print("no pending")
    return 0


if __name__ == "__main__":
    sys.exit(cli())
