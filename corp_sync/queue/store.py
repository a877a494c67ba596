"""
Sheet-Backed Queue Repository

Reads lookup tasks from the queue tab and writes each processed task back
to its own row.  Rows are never inserted or deleted here.
"""

import logging
from typing import List, Optional

from ..sheets_integration import TabularStore
from ..utils import local_timestamp
from .models import QueueTask

logger = logging.getLogger(__name__)

_FIRST_COLUMN = 'A'
_LAST_COLUMN = 'E'
# Columns this worker owns: resolved_name, last_attempt, status
_RESULT_FIRST_COLUMN = 'C'


class QueueRepository:
    """Read/write interface for :class:`QueueTask` rows.

    Args:
        store:           Tabular store holding the queue tab.
        sheet_name:      Name of the queue tab.
        first_row:       First data row (the header sits above it).
        tz_offset_hours: Offset used for the ``last_attempt`` column.
    """

    def __init__(
        self,
        store: TabularStore,
        sheet_name: str,
        first_row: int = 2,
        tz_offset_hours: int = 9,
    ) -> None:
        self._store = store
        self._sheet_name = sheet_name
        self._first_row = first_row
        self._tz_offset_hours = tz_offset_hours

    @classmethod
    def from_config(cls, store: TabularStore, config) -> "QueueRepository":
        return cls(
            store,
            config.queue_sheet,
            first_row=config.queue_first_row,
            tz_offset_hours=config.tz_offset_hours,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_tasks(self, status: Optional[str] = None) -> List[QueueTask]:
        """Return every queue row in sheet order, optionally filtered by *status*.

        Error statuses can be matched by their ``error`` prefix alone.
        """
        rows = self._store.get_values(
            self._sheet_name,
            f"{_FIRST_COLUMN}{self._first_row}:{_LAST_COLUMN}",
        )
        tasks = [
            QueueTask.from_row(self._first_row + i, row)
            for i, row in enumerate(rows)
        ]
        if status:
            status = status.lower()
            tasks = [
                t for t in tasks
                if t.status == status or t.status.startswith(status.rstrip(':') + ':')
            ]
        return tasks

    def read_pending(self, limit: int = 10, include_retry: bool = False) -> List[QueueTask]:
        """Return up to *limit* eligible tasks in row order."""
        pending = [t for t in self.list_tasks() if t.is_eligible(include_retry)]
        logger.info(
            "Queue %s: %d eligible row(s), taking %d",
            self._sheet_name,
            len(pending),
            min(len(pending), limit),
        )
        return pending[:limit]

    def write_status(self, task: QueueTask) -> None:
        """Stamp *task* with the current time and write its result columns.

        Only C:E are written; the id and URL cells stay as the upstream
        process left them.
        """
        task.last_attempt = local_timestamp(self._tz_offset_hours)
        row = task.row_number
        self._store.update_values(
            self._sheet_name,
            f"{_RESULT_FIRST_COLUMN}{row}:{_LAST_COLUMN}{row}",
            [task.result_cells()],
        )
        logger.info(
            "Row %d (%s) -> %s %s",
            row,
            task.record_id,
            task.status,
            task.resolved_name,
        )
