"""
Queue Task Model

Defines the QueueTask dataclass: one row of the queue tab, mapped from
positional cells to named fields.
"""

from dataclasses import dataclass
from typing import List, Sequence

from ..utils import truncate

# Queue tab layout, columns A..E
QUEUE_COLUMNS = ('record_id', 'target_url', 'resolved_name', 'last_attempt', 'status')

STATUS_PENDING = 'pending'
STATUS_DONE = 'done'
STATUS_RETRY = 'retry'
ERROR_PREFIX = 'error:'

# Longest reason kept after the ``error:`` prefix
MAX_REASON_LENGTH = 60


def error_status(reason: str) -> str:
    """Build an ``error:<reason>`` status with a short, single-line reason."""
    return ERROR_PREFIX + (truncate(reason, MAX_REASON_LENGTH) or 'unknown')


@dataclass
class QueueTask:
    """A single name-lookup job.

    Attributes:
        row_number:    Absolute sheet row; only used to write the row back.
        record_id:     Case number expected on the page and in the ledger.
        target_url:    Page to render.
        resolved_name: Extracted business name, empty until resolved.
        last_attempt:  Time of the last write, fixed-offset local time.
        status:        pending, done, retry or error:<reason>.
    """

    row_number: int
    record_id: str = ""
    target_url: str = ""
    resolved_name: str = ""
    last_attempt: str = ""
    status: str = STATUS_PENDING

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @classmethod
    def from_row(cls, row_number: int, cells: Sequence[object]) -> "QueueTask":
        """Map a ragged row of cells to a task; missing cells read as empty."""
        values = [str(c).strip() if c is not None else "" for c in cells]
        values = (values + [""] * len(QUEUE_COLUMNS))[:len(QUEUE_COLUMNS)]
        record_id, target_url, resolved_name, last_attempt, status = values
        return cls(
            row_number=row_number,
            record_id=record_id,
            target_url=target_url,
            resolved_name=resolved_name,
            last_attempt=last_attempt,
            # A blank status cell means the row was never picked up
            status=status.lower() if status else STATUS_PENDING,
        )

    def to_row(self) -> List[str]:
        """Return the five queue cells in column order."""
        return [
            self.record_id,
            self.target_url,
            self.resolved_name,
            self.last_attempt,
            self.status,
        ]

    def result_cells(self) -> List[str]:
        """Return the cells this worker writes back (columns C..E)."""
        return [self.resolved_name, self.last_attempt, self.status]

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def is_eligible(self, include_retry: bool = False) -> bool:
        """True if this row should be processed in the current batch."""
        statuses = (STATUS_PENDING, STATUS_RETRY) if include_retry else (STATUS_PENDING,)
        return self.status in statuses and bool(self.record_id) and bool(self.target_url)

    def mark_done(self, name: str) -> None:
        self.resolved_name = name
        self.status = STATUS_DONE

    def mark_error(self, reason: str) -> None:
        self.resolved_name = ""
        self.status = error_status(reason)
