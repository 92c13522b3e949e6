"""
Google Sheets Record Store

DESIGN DECISION: Google Sheets is the office's shared backend because:
1. Accountants can open a client's records directly in Sheets
2. There is no server to run
3. Google keeps the revision history

TRADEOFFS:
- Not suitable for high-volume data (one small office is fine)
- No transactions (every write is a single row operation)
- No query capabilities at all (components filter in Python)

Each collection lives in its own worksheet ("<prefix><collection>")
with two columns: the record id and the record serialized as JSON.
Row order is insertion order, and updates rewrite the row in place.
"""

import json
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from contabil.config import get_logger, get_settings
from contabil.config.settings import GoogleSheetsSettings
from contabil.services.storage.interface import (
    Collection,
    ConnectionError,
    DuplicateError,
    Record,
    RecordStore,
    StorageError,
    record_id,
)

logger = get_logger(__name__)

RECORD_COLUMNS = ["id", "data"]

# Audit log grows much faster than the other collections
_INITIAL_ROWS = {Collection.AUDIT_LOGS: 5000}

# Only transient backend failures are worth retrying
_retry_transient = retry(
    retry=retry_if_exception_type(ConnectionError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Owns the gspread session and the per-collection worksheets.

    Authentication happens on first use; worksheets are looked up (or
    created with an id/data header) once and cached.
    """

    SCOPES = (
        "https://www.googleapis.com/auth/spreadsheets",
        "https://www.googleapis.com/auth/drive",
    )

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._settings = settings or get_settings().google_sheets
        self._gc: Optional[gspread.Client] = None
        self._book: Optional[gspread.Spreadsheet] = None
        self._worksheets: dict[Collection, gspread.Worksheet] = {}

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """Authorize with the service account key (retried)."""
        if self._gc is not None:
            return self._gc

        key_path = self._settings.credentials_path
        try:
            credentials = Credentials.from_service_account_file(
                key_path,
                scopes=list(self.SCOPES),
            )
            self._gc = gspread.authorize(credentials)
        except FileNotFoundError:
            raise ConnectionError(f"Service account key not found: {key_path}")
        except Exception as e:
            raise ConnectionError(f"Google Sheets authorization failed: {e}")

        logger.info("google_sheets_connected", spreadsheet_id=self._settings.spreadsheet_id)
        return self._gc

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        if self._book is None:
            key = self._settings.spreadsheet_id
            try:
                self._book = self.connect().open_by_key(key)
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(f"No spreadsheet with key {key}")
        return self._book

    def worksheet_title(self, collection: Collection) -> str:
        return f"{self._settings.worksheet_prefix}{collection.value}"

    def get_worksheet(self, collection: Collection) -> gspread.Worksheet:
        """Worksheet backing a collection, created on first use."""
        sheet = self._worksheets.get(collection)
        if sheet is not None:
            return sheet

        book = self.get_spreadsheet()
        title = self.worksheet_title(collection)
        try:
            sheet = book.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = book.add_worksheet(
                title=title,
                rows=_INITIAL_ROWS.get(collection, 1000),
                cols=len(RECORD_COLUMNS),
            )
            sheet.append_row(RECORD_COLUMNS)
            logger.info("worksheet_created", title=title)

        self._worksheets[collection] = sheet
        return sheet


class GoogleSheetsRecordStore(RecordStore):
    """
    Google Sheets implementation of the record store.

    Records are stored one per row; the JSON column holds the whole
    record so schema changes never require sheet migrations.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _data_rows(self, collection: Collection) -> list[list[str]]:
        # Row 1 is the header
        return self._client.get_worksheet(collection).get_all_values()[1:]

    @staticmethod
    def _row_to_record(row: list[str]) -> Record:
        return json.loads(row[1])

    @staticmethod
    def _record_to_row(record: Record) -> list[str]:
        return [record_id(record), json.dumps(record, ensure_ascii=False)]

    @_retry_transient
    def get_all(self, collection: Collection) -> list[Record]:
        try:
            return [
                self._row_to_record(row)
                for row in self._data_rows(collection)
                if len(row) > 1 and row[0]
            ]
        except StorageError:
            raise
        except gspread.exceptions.APIError as e:
            raise ConnectionError(f"Google Sheets API error: {e}")
        except Exception as e:
            raise StorageError(f"Failed to list {collection.value}: {e}")

    def get(self, collection: Collection, record_id_: str) -> Optional[Record]:
        for record in self.get_all(collection):
            if record.get("id") == record_id_:
                return record
        return None

    @_retry_transient
    def save(self, collection: Collection, record: Record) -> None:
        row = self._record_to_row(record)
        try:
            sheet = self._client.get_worksheet(collection)
            all_rows = sheet.get_all_values()

            for idx, existing in enumerate(all_rows[1:], start=2):
                if existing and existing[0] == row[0]:
                    sheet.update(
                        range_name=f"A{idx}:B{idx}",
                        values=[row],
                        value_input_option="RAW",
                    )
                    return

            sheet.append_row(row, value_input_option="RAW")
        except StorageError:
            raise
        except gspread.exceptions.APIError as e:
            raise ConnectionError(f"Google Sheets API error: {e}")
        except Exception as e:
            raise StorageError(f"Failed to save {collection.value} record: {e}")

    @_retry_transient
    def append(self, collection: Collection, record: Record) -> None:
        row = self._record_to_row(record)
        try:
            sheet = self._client.get_worksheet(collection)
            if row[0] in sheet.col_values(1)[1:]:
                raise DuplicateError(f"{collection.value} already has a record {row[0]}")
            sheet.append_row(row, value_input_option="RAW")
        except StorageError:
            raise
        except gspread.exceptions.APIError as e:
            raise ConnectionError(f"Google Sheets API error: {e}")
        except Exception as e:
            raise StorageError(f"Failed to append {collection.value} record: {e}")
