"""
Shared pytest fixtures for the worker tests.
"""

import pytest

from corp_sync.browser_automation import RenderFailure, RenderResult
from corp_sync.config import WorkerConfig
from corp_sync.ledger import LedgerReconciler
from corp_sync.queue.store import QueueRepository

from fakes import ALLOWED_HOST, LEDGER, QUEUE, FakeSheets


@pytest.fixture()
def config():
    return WorkerConfig(
        spreadsheet_id='sheet-123',
        service_account_info={'client_email': 'svc@example.iam', 'private_key': 'k'},
        ledger_sheet=LEDGER,
        queue_sheet=QUEUE,
        allowed_hosts=(ALLOWED_HOST,),
    )


@pytest.fixture()
def sheets():
    return FakeSheets({
        QUEUE: [['no', 'url', 'corp', 'updated', 'status']],
        LEDGER: [['', '', '', '', '', '案件No', '企業名']],
    })


@pytest.fixture()
def queue(sheets, config):
    return QueueRepository.from_config(sheets, config)


@pytest.fixture()
def ledger(sheets, config):
    return LedgerReconciler.from_config(sheets, config)


@pytest.fixture()
def page():
    """Factory for a successful RenderResult."""
    def _page(headings=(), body='', status=200):
        return RenderResult(http_status=status, heading_texts=list(headings), body_text=body)
    return _page


@pytest.fixture()
def failure():
    def _failure(reason, detail=''):
        return RenderFailure(reason, detail)
    return _failure
