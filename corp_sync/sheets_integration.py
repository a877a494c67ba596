"""
Google Sheets Integration Module
Range reads/writes against the queue and ledger tabs
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

import gspread
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials

from .errors import AuthorizationError

logger = logging.getLogger(__name__)

# Google Sheets scope
SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
]


class TabularStore(Protocol):
    """The two range operations the worker needs from a spreadsheet."""

    def get_values(self, sheet_name: str, a1_range: str) -> List[List[str]]:
        ...

    def update_values(self, sheet_name: str, a1_range: str, values: List[List[Any]]) -> None:
        ...


class GoogleSheetsIntegration:
    """gspread-backed :class:`TabularStore` for a single spreadsheet"""

    def __init__(self, sheet_id: str, service_account_info: Optional[Dict] = None):
        self.sheet_id = sheet_id
        self.service_account_info = service_account_info
        self.client = None
        self.sheet = None
        self._worksheets: Dict[str, gspread.Worksheet] = {}

    def authenticate(self):
        """Authenticate with Google Sheets API and open the spreadsheet.

        Raises:
            AuthorizationError: credentials were rejected or the sheet
                could not be opened with them.
        """
        try:
            logger.info("Authenticating with Google Sheets...")
            creds = Credentials.from_service_account_info(
                self.service_account_info or {},
                scopes=SCOPES
            )
            self.client = gspread.authorize(creds)
            self.sheet = self.client.open_by_key(self.sheet_id)
            logger.info("Successfully authenticated with Google Sheets")
            return True

        except (GoogleAuthError, gspread.exceptions.APIError, ValueError) as e:
            logger.error(f"Authentication failed: {e}")
            raise AuthorizationError(f"Google Sheets authorization failed: {e}") from e

    def _worksheet(self, sheet_name: str) -> gspread.Worksheet:
        if not self.sheet:
            self.authenticate()
        worksheet = self._worksheets.get(sheet_name)
        if worksheet is None:
            worksheet = self.sheet.worksheet(sheet_name)
            self._worksheets[sheet_name] = worksheet
        return worksheet

    def get_values(self, sheet_name: str, a1_range: str) -> List[List[str]]:
        """Return the cells of *a1_range* as strings (ragged rows allowed)"""
        worksheet = self._worksheet(sheet_name)
        values = worksheet.get(a1_range)
        return [[str(cell) for cell in row] for row in (values or [])]

    def update_values(self, sheet_name: str, a1_range: str, values: List[List[Any]]) -> None:
        """Overwrite *a1_range* with *values*, parsed as if typed by a user"""
        worksheet = self._worksheet(sheet_name)
        worksheet.update(
            range_name=a1_range,
            values=values,
            value_input_option='USER_ENTERED'
        )
        logger.debug("Updated %s!%s", sheet_name, a1_range)

    def get_sheet_url(self) -> str:
        """Get URL for the Google Sheet"""
        return f"https://docs.google.com/spreadsheets/d/{self.sheet_id}/edit"
