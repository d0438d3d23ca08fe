"""
Google Sheets persistence.
SheetsClient is a thin wrapper over the Sheets v4 API; SheetAppender provisions a tab and
its header row on first use and appends log rows.
"""

import logging
from typing import Any, List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build

from settings import SheetsSettings
from storage.retry import RetryPolicy
from storage.tables import TableSpec

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def column_letter(index: int) -> str:
    """1 -> A, 26 -> Z, 27 -> AA."""
    if index < 1:
        raise ValueError(f"column index must be >= 1, got {index}")
    letters = ""
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def a1_range(sheet_name: str, cells: str) -> str:
    """'Merge Request', 'A1:U1' -> "'Merge Request'!A1:U1"."""
    quoted = sheet_name.replace("'", "''")
    return f"'{quoted}'!{cells}"


class SheetsClient:
    """Spreadsheet-scoped operations used by the loggers."""

    def __init__(self, spreadsheet_id: str, service):
        self.spreadsheet_id = spreadsheet_id
        self.service = service

    @classmethod
    def from_settings(cls, settings: SheetsSettings) -> "SheetsClient":
        info = {
            "type": "service_account",
            "client_email": settings.service_account_email,
            "private_key": settings.private_key,
            "token_uri": "https://oauth2.googleapis.com/token",
        }
        credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        return cls(settings.spreadsheet_id, service)

    def _spreadsheets(self):
        return self.service.spreadsheets()

    def spreadsheet_title(self) -> str:
        meta = self._spreadsheets().get(spreadsheetId=self.spreadsheet_id, fields="properties.title").execute()
        return (meta.get("properties") or {}).get("title", "")

    def sheet_titles(self) -> List[str]:
        meta = self._spreadsheets().get(spreadsheetId=self.spreadsheet_id, fields="sheets.properties.title").execute()
        return [(s.get("properties") or {}).get("title", "") for s in meta.get("sheets", [])]

    def add_sheet(self, title: str) -> None:
        body = {"requests": [{"addSheet": {"properties": {"title": title}}}]}
        self._spreadsheets().batchUpdate(spreadsheetId=self.spreadsheet_id, body=body).execute()

    def get_values(self, range_name: str) -> List[List[Any]]:
        resp = self._spreadsheets().values().get(spreadsheetId=self.spreadsheet_id, range=range_name).execute()
        return resp.get("values", [])

    def update_values(self, range_name: str, rows: List[List[Any]]) -> dict:
        return (
            self._spreadsheets()
            .values()
            .update(spreadsheetId=self.spreadsheet_id, range=range_name, valueInputOption="RAW", body={"values": rows})
            .execute()
        )

    def append_values(self, range_name: str, rows: List[List[Any]]) -> dict:
        return (
            self._spreadsheets()
            .values()
            .append(
                spreadsheetId=self.spreadsheet_id,
                range=range_name,
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": rows},
            )
            .execute()
        )


class SheetAppender:
    """Append rows to a tab, creating the tab and its header row when missing.

    Tab creation, header check and append are retried together as one unit. A retry after
    the append itself succeeded but its response was lost writes the row twice; rows are
    delivered at least once.
    """

    def __init__(self, client, retry: Optional[RetryPolicy] = None):
        self.client = client
        self.retry = retry or RetryPolicy()

    def ensure_sheet(self, spec: TableSpec) -> bool:
        """Create the tab if absent; returns True when it was created."""
        if spec.name in self.client.sheet_titles():
            return False
        logger.info('Creating sheet "%s"', spec.name)
        self.client.add_sheet(spec.name)
        return True

    def ensure_header(self, spec: TableSpec) -> bool:
        """Write the header row if row 1 is empty; returns True when it was written."""
        header_range = a1_range(spec.name, f"A1:{column_letter(len(spec.headers))}1")
        if self.client.get_values(header_range):
            return False
        self.client.update_values(header_range, [list(spec.headers)])
        logger.info('Header row written to "%s"', spec.name)
        return True

    def _append_once(self, spec: TableSpec, row: List[Any]) -> dict:
        self.ensure_sheet(spec)
        self.ensure_header(spec)
        resp = self.client.append_values(a1_range(spec.name, f"A:{column_letter(len(spec.headers))}"), [row])
        updated = ((resp or {}).get("updates") or {}).get("updatedRows", 0)
        logger.info('Added %s row(s) to "%s"', updated, spec.name)
        return resp

    def append_row(self, spec: TableSpec, entry: Any) -> dict:
        """Map `entry` through `spec` and append it."""
        row = spec.row(entry)
        logger.debug('Appending row to "%s": %s', spec.name, row)
        try:
            return self.retry.run(lambda: self._append_once(spec, row), label=f"append to {spec.name}")
        except Exception as exc:
            logger.error('Error appending to sheet "%s": %s', spec.name, exc)
            raise
