"""
Ledger reconciliation.

Copies a resolved business name into the ledger tab, but only into a name
cell that is still empty.  The read-then-write is not atomic: two workers
racing on the same row may both see it empty and both write.
"""

import logging

from gspread.utils import a1_to_rowcol, rowcol_to_a1

from .sheets_integration import TabularStore

logger = logging.getLogger(__name__)


def _column_index(letter: str) -> int:
    return a1_to_rowcol(f"{letter}1")[1]


def _column_letter(index: int) -> str:
    return rowcol_to_a1(1, index)[:-1]


class LedgerReconciler:
    """Write-once-if-empty filler for the ledger name column."""

    def __init__(
        self,
        store: TabularStore,
        sheet_name: str,
        id_column: str = 'F',
        name_column: str = 'G',
        first_row: int = 2,
    ):
        self._store = store
        self._sheet_name = sheet_name
        self._id_col = _column_index(id_column)
        self._name_col = _column_index(name_column)
        self._name_column = name_column.upper()
        self._first_row = first_row

    @classmethod
    def from_config(cls, store: TabularStore, config) -> 'LedgerReconciler':
        return cls(
            store,
            config.ledger_sheet,
            id_column=config.ledger_id_column,
            name_column=config.ledger_name_column,
            first_row=config.ledger_first_row,
        )

    def _scan_range(self) -> str:
        left = min(self._id_col, self._name_col)
        right = max(self._id_col, self._name_col)
        return f"{_column_letter(left)}{self._first_row}:{_column_letter(right)}"

    def find_row(self, record_id: str):
        """Return ``(row_number, current_name)`` of the first match, or None."""
        record_id = str(record_id or '').strip()
        if not record_id:
            return None

        rows = self._store.get_values(self._sheet_name, self._scan_range())
        offset = min(self._id_col, self._name_col)
        id_idx = self._id_col - offset
        name_idx = self._name_col - offset

        for i, row in enumerate(rows):
            cell = row[id_idx] if len(row) > id_idx else ''
            if str(cell).strip() == record_id:
                name = row[name_idx] if len(row) > name_idx else ''
                return self._first_row + i, str(name).strip()
        return None

    def fill_if_empty(self, record_id: str, candidate_name: str) -> bool:
        """Write *candidate_name* for *record_id* if its name cell is empty.

        Returns True only when a cell was written.
        """
        candidate_name = (candidate_name or '').strip()
        if not candidate_name or not str(record_id or '').strip():
            return False

        match = self.find_row(record_id)
        if match is None:
            logger.warning("Ledger has no row for %s", record_id)
            return False

        row, current = match
        if current:
            logger.info("Ledger row %d already named %r, leaving it", row, current)
            return False

        self._store.update_values(
            self._sheet_name,
            f"{self._name_column}{row}",
            [[candidate_name]],
        )
        logger.info("Ledger row %d (%s) <- %s", row, record_id, candidate_name)
        return True
