import asyncio
import sqlite3
import weakref
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import aiosqlite
import structlog

from app.auth import Identity
from app.database import TABLE_COLUMNS
from app.exceptions import StoreWriteError

logger = structlog.get_logger()

# A statement and its commit or rollback must not interleave with another
# coroutine's statement on the same connection.
_write_locks: "weakref.WeakKeyDictionary[aiosqlite.Connection, asyncio.Lock]" = (
    weakref.WeakKeyDictionary()
)


def _columns(table: str) -> frozenset[str]:
    try:
        return TABLE_COLUMNS[table]
    except KeyError:
        raise ValueError(f"Unknown table '{table}'") from None


class RecordStore:
    """Single-record primitives over the relational store.

    Every call takes the acting identity explicitly and commits on its own;
    no call ever spans more than one statement.
    """

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db
        self._lock = _write_locks.setdefault(db, asyncio.Lock())

    async def select_all_matching(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        *,
        identity: Identity,
        order_by: Sequence[str] = ("created_at", "id"),
        descending: bool = False,
    ) -> list[dict]:
        columns = _columns(table)
        filters = dict(filters or {})
        unknown = (set(filters) | set(order_by)) - columns
        if unknown:
            raise ValueError(f"Unknown columns for '{table}': {sorted(unknown)}")

        conditions = [f"{name} = ?" for name in filters]
        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        direction = "DESC" if descending else "ASC"
        order_clause = ", ".join(f"{name} {direction}" for name in order_by)

        cursor = await self._db.execute(
            f"SELECT * FROM {table} {where_clause} ORDER BY {order_clause}",
            list(filters.values()),
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def get_by_id(self, table: str, record_id: str, *, identity: Identity) -> dict | None:
        rows = await self.select_all_matching(table, {"id": record_id}, identity=identity)
        return rows[0] if rows else None

    async def insert_one(
        self, table: str, record: Mapping[str, Any], *, identity: Identity
    ) -> dict:
        columns = _columns(table)
        data = {key: value for key, value in record.items() if key != "id"}
        unknown = set(data) - columns
        if unknown:
            raise StoreWriteError(f"{table}: unknown columns {sorted(unknown)}")

        data["id"] = str(uuid4())
        data.setdefault("created_at", datetime.now(UTC).isoformat())

        names = ", ".join(data)
        placeholders = ", ".join("?" for _ in data)
        await self._write(
            table,
            f"INSERT INTO {table} ({names}) VALUES ({placeholders})",
            list(data.values()),
        )

        logger.debug("store_inserted", table=table, record_id=data["id"], actor=identity.username)
        return data

    async def update_one(
        self,
        table: str,
        record_id: str,
        changes: Mapping[str, Any],
        *,
        identity: Identity,
    ) -> None:
        columns = _columns(table)
        changes = {key: value for key, value in changes.items() if key != "id"}
        if not changes:
            return
        unknown = set(changes) - columns
        if unknown:
            raise StoreWriteError(f"{table}: unknown columns {sorted(unknown)}")

        assignments = ", ".join(f"{name} = ?" for name in changes)
        await self._write(
            table,
            f"UPDATE {table} SET {assignments} WHERE id = ?",
            [*changes.values(), record_id],
        )

        logger.debug("store_updated", table=table, record_id=record_id, actor=identity.username)

    async def delete_one(self, table: str, record_id: str, *, identity: Identity) -> None:
        _columns(table)
        await self._write(table, f"DELETE FROM {table} WHERE id = ?", [record_id])

        logger.debug("store_deleted", table=table, record_id=record_id, actor=identity.username)

    async def _write(self, table: str, sql: str, params: list) -> None:
        async with self._lock:
            try:
                await self._db.execute(sql, params)
                await self._db.commit()
            except sqlite3.Error as exc:
                await self._db.rollback()
                logger.warning("store_write_rejected", table=table, error=str(exc))
                raise StoreWriteError(f"{table}: {exc}") from exc
