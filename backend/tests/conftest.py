import json
import re
from datetime import datetime, timedelta, timezone

import httplib2
import pytest
from fastapi.testclient import TestClient
from googleapiclient.errors import HttpError

from careers.config import settings
from careers.main import create_app
from careers.storage import MemoryStorage, SheetsStorage

SPREADSHEET_ID = "test-spreadsheet-id"

_A1 = re.compile(r"^(?P<c1>[A-Z]*)(?P<r1>\d*)(?::(?P<c2>[A-Z]*)(?P<r2>\d*))?$")


def _column_index(letters: str) -> int:
    index = 0
    for ch in letters:
        index = index * 26 + (ord(ch) - 64)
    return index - 1


def parse_a1(range_: str):
    """``Sheet!A2:L`` -> (sheet, first_row, last_row, first_col, last_col), 0-based, None = open."""
    sheet, _, cells = range_.partition("!")
    if not cells:
        return sheet, 0, None, 0, None
    m = _A1.match(cells)
    if not m:
        raise ValueError(f"Unable to parse range: {range_}")
    first_row = int(m["r1"]) - 1 if m["r1"] else 0
    first_col = _column_index(m["c1"]) if m["c1"] else 0
    if m["c2"] is None and m["r2"] is None:
        last_row = first_row if m["r1"] else None
        last_col = first_col if m["c1"] else None
    else:
        last_row = int(m["r2"]) - 1 if m["r2"] else None
        last_col = _column_index(m["c2"]) if m["c2"] else None
    return sheet, first_row, last_row, first_col, last_col


def make_http_error(status: int, message: str = "error") -> HttpError:
    resp = httplib2.Response({"status": status, "reason": message})
    content = json.dumps({"error": {"code": status, "message": message}}).encode("utf-8")
    return HttpError(resp, content, uri="https://sheets.googleapis.com/v4/spreadsheets")


class FakeRequest:
    def __init__(self, service, action):
        self._service = service
        self._action = action

    def execute(self):
        self._service.calls += 1
        if self._service.failures:
            raise self._service.failures.pop(0)
        if self._service.fail_always is not None:
            raise self._service.fail_always
        return self._action()


class FakeValues:
    def __init__(self, service):
        self._service = service

    def get(self, spreadsheetId, range):
        return FakeRequest(self._service, lambda: self._service.read(range))

    def update(self, spreadsheetId, range, valueInputOption, body):
        return FakeRequest(self._service, lambda: self._service.write(range, body["values"]))

    def append(self, spreadsheetId, range, valueInputOption, insertDataOption, body):
        return FakeRequest(self._service, lambda: self._service.append(range, body["values"]))


class FakeSpreadsheets:
    def __init__(self, service):
        self._service = service

    def get(self, spreadsheetId, fields=None):
        return FakeRequest(
            self._service,
            lambda: {"spreadsheetId": spreadsheetId, "properties": {"title": "Careers"}},
        )

    def values(self):
        return FakeValues(self._service)


class FakeSheetsService:
    """In-memory stand-in for the Sheets v4 values API.

    Reads trim trailing blank cells and rows the way the real API does, and
    omit ``values`` when the range is empty.
    """

    def __init__(self):
        self.sheets: dict[str, list[list]] = {}
        self.calls = 0
        self.failures: list[Exception] = []
        self.fail_always: Exception | None = None

    def spreadsheets(self):
        return FakeSpreadsheets(self)

    def grid(self, name: str) -> list[list]:
        return self.sheets.setdefault(name, [])

    def read(self, range_: str) -> dict:
        sheet, r1, r2, c1, c2 = parse_a1(range_)
        grid = self.grid(sheet)
        stop = len(grid) if r2 is None else min(r2 + 1, len(grid))
        values = []
        for row in grid[r1:stop]:
            cells = list(row[c1:] if c2 is None else row[c1:c2 + 1])
            while cells and cells[-1] in ("", None):
                cells.pop()
            values.append(cells)
        while values and not values[-1]:
            values.pop()
        return {"range": range_, "values": values} if values else {"range": range_}

    def write(self, range_: str, rows: list[list]) -> dict:
        sheet, r1, _, c1, _ = parse_a1(range_)
        grid = self.grid(sheet)
        for offset, values in enumerate(rows):
            while len(grid) <= r1 + offset:
                grid.append([])
            row = grid[r1 + offset]
            while len(row) < c1 + len(values):
                row.append("")
            row[c1:c1 + len(values)] = list(values)
        return {"updatedRange": range_, "updatedRows": len(rows)}

    def append(self, range_: str, rows: list[list]) -> dict:
        sheet = parse_a1(range_)[0]
        grid = self.grid(sheet)
        last = len(grid)
        while last > 0 and not any(grid[last - 1]):
            last -= 1
        return self.write(f"{sheet}!A{last + 1}", rows)

    def rows(self, name: str) -> list[list]:
        """Raw grid of a sheet for assertions."""
        return [list(row) for row in self.grid(name)]


class FixedClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def sheets_service():
    return FakeSheetsService()


@pytest.fixture
def memory_storage(clock):
    return MemoryStorage(clock=clock)


@pytest.fixture
def sheets_storage(sheets_service, clock):
    return SheetsStorage(SPREADSHEET_ID, service=sheets_service, clock=clock)


@pytest.fixture(params=["memory", "sheets"])
def storage(request, clock, sheets_service):
    if request.param == "memory":
        return MemoryStorage(clock=clock)
    return SheetsStorage(SPREADSHEET_ID, service=sheets_service, clock=clock)


@pytest.fixture
def uploads_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "uploads_dir", path)
    return path


@pytest.fixture
def client(storage, uploads_dir):
    return TestClient(create_app(storage=storage))
