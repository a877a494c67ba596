"""
Queue Worker

Runs one bounded batch: render each task's page, extract the business
name, write the queue row back and fill the ledger.  A failing task is
recorded on its own row and never stops the batch.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..browser_automation import RenderFailure, is_allowed_host
from ..errors import AuthorizationError, ConfigurationError
from ..ledger import LedgerReconciler
from ..name_extractor import NameExtractor, TextExtractionStrategy
from .models import QueueTask, STATUS_DONE
from .store import QueueRepository

logger = logging.getLogger(__name__)

# Skip reason for tasks whose URL is outside the allow-list
SKIPPED_HOST = 'host_not_allowed'


@dataclass
class TaskOutcome:
    """What happened to one task in this batch."""
    row_number: int
    record_id: str
    status: str
    resolved_name: str = ""
    skipped: Optional[str] = None
    ledger_updated: bool = False
    ledger_error: str = ""


@dataclass
class BatchResult:
    """Summary of one :meth:`TaskRunner.run_batch` call."""
    read: int = 0
    done: int = 0
    failed: int = 0
    skipped: int = 0
    ledger_updated: int = 0
    outcomes: List[TaskOutcome] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'read': self.read,
            'done': self.done,
            'failed': self.failed,
            'skipped': self.skipped,
            'ledger_updated': self.ledger_updated,
            'outcomes': [o.__dict__ for o in self.outcomes],
        }


class TaskRunner:
    """Sequential batch processor.

    Args:
        queue:         Queue repository to read from and write back to.
        ledger:        Reconciler for the ledger tab.
        renderer:      Object with ``async render(url)``.
        allowed_hosts: Hosts the renderer may visit.
        extractor:     Name extraction strategy.
        batch_limit:   Max tasks per batch.
        include_retry: Process ``retry`` rows as well as ``pending`` ones.
    """

    def __init__(
        self,
        queue: QueueRepository,
        ledger: LedgerReconciler,
        renderer,
        allowed_hosts: Sequence[str],
        extractor: Optional[TextExtractionStrategy] = None,
        batch_limit: int = 10,
        include_retry: bool = False,
    ):
        self.queue = queue
        self.ledger = ledger
        self.renderer = renderer
        self.allowed_hosts = tuple(allowed_hosts)
        self.extractor = extractor or NameExtractor()
        self.batch_limit = batch_limit
        self.include_retry = include_retry

    # ------------------------------------------------------------------
    # Core entry-point
    # ------------------------------------------------------------------

    def run_batch(self) -> BatchResult:
        """Process up to ``batch_limit`` eligible tasks in queue order."""
        result = BatchResult()
        tasks = self.queue.read_pending(self.batch_limit, self.include_retry)
        result.read = len(tasks)
        if not tasks:
            logger.info("No pending tasks")
            return result

        for task in tasks:
            outcome = self.run_task(task)
            result.outcomes.append(outcome)
            if outcome.skipped:
                result.skipped += 1
            elif outcome.status == STATUS_DONE:
                result.done += 1
            else:
                result.failed += 1
            if outcome.ledger_updated:
                result.ledger_updated += 1

        logger.info(
            "Batch complete: %d read, %d done, %d failed, %d skipped, %d ledger updates",
            result.read,
            result.done,
            result.failed,
            result.skipped,
            result.ledger_updated,
        )
        return result

    def run_task(self, task: QueueTask) -> TaskOutcome:
        """Resolve one task and write exactly one status back for it.

        Tasks on a host outside the allow-list are skipped and left as-is.
        """
        if not is_allowed_host(task.target_url, self.allowed_hosts):
            logger.warning(
                "Skipping row %d (%s): host not allowed: %s",
                task.row_number,
                task.record_id,
                task.target_url,
            )
            return TaskOutcome(
                task.row_number, task.record_id, task.status, skipped=SKIPPED_HOST
            )

        try:
            self._resolve(task)
            self.queue.write_status(task)
        except (ConfigurationError, AuthorizationError):
            raise
        except Exception:
            logger.exception("Task row %d (%s) failed", task.row_number, task.record_id)
            task.mark_error('exception')
            try:
                self.queue.write_status(task)
            except (ConfigurationError, AuthorizationError):
                raise
            except Exception:
                logger.exception("Could not record failure for row %d", task.row_number)
            return TaskOutcome(task.row_number, task.record_id, task.status)

        outcome = TaskOutcome(
            task.row_number, task.record_id, task.status, task.resolved_name
        )
        if task.status == STATUS_DONE:
            try:
                outcome.ledger_updated = self.ledger.fill_if_empty(
                    task.record_id, task.resolved_name
                )
            except (ConfigurationError, AuthorizationError):
                raise
            except Exception as exc:
                logger.exception("Ledger update failed for %s", task.record_id)
                outcome.ledger_error = str(exc)
        return outcome

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _resolve(self, task: QueueTask) -> None:
        """Render and extract, leaving the final status on *task*."""
        rendered = asyncio.run(self.renderer.render(task.target_url))

        if isinstance(rendered, RenderFailure):
            logger.warning(
                "Render failed for %s: %s %s",
                task.record_id,
                rendered.reason,
                rendered.detail[:120],
            )
            task.mark_error(rendered.reason)
            return

        if rendered.http_status is not None and rendered.http_status >= 400:
            logger.warning("HTTP %d for %s", rendered.http_status, task.target_url)
            task.mark_error(f"http_{rendered.http_status}")
            return

        name = self.extractor.extract(
            rendered.heading_texts, rendered.body_text, task.record_id
        )
        if not name:
            logger.warning(
                "No name for %s (headings=%d, body=%d chars)",
                task.record_id,
                len(rendered.heading_texts),
                len(rendered.body_text),
            )
            task.mark_error('no_corp')
            return

        logger.info("no: %s corp: %s", task.record_id, name)
        task.mark_done(name)
