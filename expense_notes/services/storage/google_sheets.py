"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets can act as the key-value backend because:
1. Users can look at their raw data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

The worksheet has two columns, key and value, one row per key.
The expense collection is a single JSON cell, so the sheet stays tiny.

TRADEOFFS:
- A cell holds at most 50,000 characters (fine for personal use)
- No transactions, but each set() touches exactly one cell
"""

from typing import Iterable, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from expense_notes.config import GoogleSheetsSettings, get_settings
from expense_notes.services.storage.interface import (
    KeyValueAdapter,
    StorageError,
    StorageUnavailable,
)


KV_COLUMNS = ["key", "value"]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise StorageUnavailable(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise StorageUnavailable(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise StorageUnavailable(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def get_kv_sheet(self) -> gspread.Worksheet:
        """Get or create the key/value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.kv_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.kv_sheet_name,
                rows=100,
                cols=len(KV_COLUMNS),
            )
            sheet.append_row(KV_COLUMNS)
        return sheet


class GoogleSheetsKeyValueAdapter(KeyValueAdapter):
    """
    Google Sheets implementation of the key-value adapter.

    Row 1 is the header; every following row is (key, value).
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _rows(self, sheet: gspread.Worksheet) -> list[list[str]]:
        # Skip header
        return sheet.get_all_values()[1:]

    async def get(self, key: str) -> Optional[str]:
        """Read a value by scanning the key column."""
        try:
            sheet = self._client.get_kv_sheet()
            for row in self._rows(sheet):
                if row and row[0] == key:
                    return row[1] if len(row) > 1 else ""
            return None
        except StorageError:
            raise
        except Exception as e:
            raise StorageUnavailable(f"Failed to read key {key!r}: {e}") from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def set(self, key: str, value: str) -> None:
        """Update the row for this key, or append one."""
        try:
            sheet = self._client.get_kv_sheet()
            for idx, row in enumerate(self._rows(sheet), start=2):  # Row 1 is header
                if row and row[0] == key:
                    sheet.update(
                        range_name=f"B{idx}", values=[[value]], value_input_option="RAW"
                    )
                    return
            sheet.append_row([key, value], value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write key {key!r}: {e}") from e

    async def remove_all(self, keys: Iterable[str]) -> None:
        """Delete every row whose key is in keys."""
        wanted = set(keys)
        try:
            sheet = self._client.get_kv_sheet()
            matches = [
                idx
                for idx, row in enumerate(self._rows(sheet), start=2)
                if row and row[0] in wanted
            ]
            # Bottom-up so earlier row numbers stay valid
            for idx in reversed(matches):
                sheet.delete_rows(idx)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to remove keys {sorted(wanted)}: {e}") from e
