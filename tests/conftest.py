# Common pytest fixtures for all test modules
from collections.abc import Sequence
from contextlib import asynccontextmanager
from io import BytesIO
from typing import Any

import pytest
from openpyxl import Workbook

from app.auth import Identity
from app.database import connect_database
from app.records.store import RecordStore


def build_workbook(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> bytes:
    """An in-memory .xlsx with one header row and the given data rows."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Dados"
    ws.append(list(headers))
    for row in rows:
        ws.append(list(row))
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook():
    return build_workbook


@pytest.fixture
def identity() -> Identity:
    return Identity(username="tester")


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "sgq-test.db")


@pytest.fixture
def open_store(db_path):
    """Async context manager factory yielding a RecordStore on a fresh file database.

    Must be entered inside the event loop that uses it.
    """

    @asynccontextmanager
    async def _open(path: str | None = None):
        db = await connect_database(path or db_path)
        try:
            yield RecordStore(db)
        finally:
            await db.close()

    return _open
