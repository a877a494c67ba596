"""
In-memory stand-ins for the spreadsheet and the page renderer.

Nothing here talks to Google or launches a browser.
"""

import re
from typing import Dict, List

from gspread.utils import a1_to_rowcol

from corp_sync.browser_automation import RenderResult

QUEUE = '_Queue'
LEDGER = 'お届け案件管理'
ALLOWED_HOST = 'tool.example.cloud'


def _parse_range(a1_range):
    """Return (row1, col1, row2 or None, col2) for ``A2``, ``A2:E`` or ``A2:E9``."""
    start, _, end = a1_range.partition(':')
    r1, c1 = a1_to_rowcol(start)
    if not end:
        return r1, c1, r1, c1
    m = re.fullmatch(r'([A-Za-z]+)(\d*)', end)
    c2 = a1_to_rowcol(m.group(1) + '1')[1]
    r2 = int(m.group(2)) if m.group(2) else None
    return r1, c1, r2, c2


class FakeSheets:
    """Grid-per-tab stand-in for GoogleSheetsIntegration.

    ``tabs[name]`` is a list of rows starting at sheet row 1.  Reads trim
    trailing empty cells and rows the way the Sheets API does.
    """

    def __init__(self, tabs: Dict[str, List[List[str]]] = None):
        self.tabs = {k: [list(r) for r in v] for k, v in (tabs or {}).items()}
        self.updates = []
        self.fail_updates_on = set()

    def get_values(self, sheet_name, a1_range):
        grid = self.tabs.get(sheet_name, [])
        r1, c1, r2, c2 = _parse_range(a1_range)
        last = len(grid) if r2 is None else min(r2, len(grid))
        out = []
        for row in grid[r1 - 1:last]:
            cells = [str(c) for c in row[c1 - 1:c2]]
            while cells and cells[-1] == '':
                cells.pop()
            out.append(cells)
        while out and not out[-1]:
            out.pop()
        return out

    def update_values(self, sheet_name, a1_range, values):
        if sheet_name in self.fail_updates_on:
            raise IOError(f'write to {sheet_name} rejected')
        grid = self.tabs.setdefault(sheet_name, [])
        r1, c1, _, _ = _parse_range(a1_range)
        for i, row_values in enumerate(values):
            r = r1 - 1 + i
            while len(grid) <= r:
                grid.append([])
            row = grid[r]
            for j, value in enumerate(row_values):
                c = c1 - 1 + j
                while len(row) <= c:
                    row.append('')
                row[c] = value
        self.updates.append((sheet_name, a1_range, values))

    def cell(self, sheet_name, a1):
        r, c = a1_to_rowcol(a1)
        grid = self.tabs.get(sheet_name, [])
        if r > len(grid) or c > len(grid[r - 1]):
            return ''
        return grid[r - 1][c - 1]

    def row(self, sheet_name, row_number, width=5):
        grid = self.tabs.get(sheet_name, [])
        row = grid[row_number - 1] if row_number <= len(grid) else []
        return (list(row) + [''] * width)[:width]


class FakeRenderer:
    """Returns scripted outcomes per URL; an Exception value is raised."""

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.calls = []

    async def render(self, url):
        self.calls.append(url)
        outcome = self.pages.get(url, RenderResult(http_status=404))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def ledger_row(record_id, name=''):
    """Ledger row with the id in column F and the name in column G."""
    return ['', '', '', '', '', record_id, name]
