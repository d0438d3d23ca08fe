import sys
import os
from types import SimpleNamespace

import pytest

# Add project root to sys.path so tests can import top-level modules like 'storage', 'normalize', 'report', etc.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from storage.retry import RetryPolicy  # noqa: E402


class FakeSheetsClient:
    """In-memory stand-in for storage.sheets.SheetsClient that records every call in order."""

    def __init__(self, sheets=None, fail_appends=0):
        # sheet name -> list of rows
        self.sheets = {name: [list(r) for r in rows] for name, rows in (sheets or {}).items()}
        self.calls = []
        self.fail_appends = fail_appends

    @staticmethod
    def _sheet_of(range_name):
        name = range_name.split('!', 1)[0]
        if name.startswith("'") and name.endswith("'"):
            name = name[1:-1].replace("''", "'")
        return name

    def spreadsheet_title(self):
        self.calls.append(('title',))
        return 'Fake Spreadsheet'

    def sheet_titles(self):
        self.calls.append(('sheet_titles',))
        return list(self.sheets)

    def add_sheet(self, title):
        self.calls.append(('add_sheet', title))
        self.sheets.setdefault(title, [])

    def get_values(self, range_name):
        self.calls.append(('get_values', range_name))
        rows = self.sheets[self._sheet_of(range_name)]
        return [rows[0]] if rows else []

    def update_values(self, range_name, rows):
        self.calls.append(('update_values', range_name, rows))
        sheet = self.sheets[self._sheet_of(range_name)]
        if sheet:
            sheet[0] = list(rows[0])
        else:
            sheet.append(list(rows[0]))
        return {'updatedRows': 1}

    def append_values(self, range_name, rows):
        self.calls.append(('append_values', range_name, rows))
        self.sheets[self._sheet_of(range_name)].extend(list(r) for r in rows)
        if self.fail_appends:
            # the row lands but the response is lost
            self.fail_appends -= 1
            raise ConnectionError('response lost')
        return {'updates': {'updatedRows': len(rows)}}

    def call_names(self):
        return [c[0] for c in self.calls]


def completion(text):
    """Shape of an OpenAI chat completion response with a single choice."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


@pytest.fixture
def fake_sheets():
    return FakeSheetsClient()


@pytest.fixture
def no_sleep_policy():
    sleeps = []
    policy = RetryPolicy(max_attempts=3, base_delay=1.0, sleep=sleeps.append)
    policy.sleeps = sleeps
    return policy
