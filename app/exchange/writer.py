import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import structlog

from app.auth import Identity
from app.exchange.entity import EntityDefinition
from app.exchange.mapper import SourceRow
from app.exchange.report import ImportOutcome, RowStatus
from app.records.store import RecordStore

logger = structlog.get_logger()

RowHandler = Callable[[int, SourceRow], Awaitable[ImportOutcome]]

# Workbook row 1 holds the labels.
FIRST_DATA_ROW = 2


class BatchWriter:
    """Best-effort persistence: one store call per record, no rollback.

    A failing row never stops the batch, and a later failure never undoes an
    earlier write. Rows run one at a time unless ``max_concurrency`` allows a
    few in flight; outcomes always come back in row order.
    """

    def __init__(
        self,
        store: RecordStore,
        identity: Identity,
        definition: EntityDefinition,
        max_concurrency: int = 1,
    ) -> None:
        self._store = store
        self._identity = identity
        self._definition = definition
        self._max_concurrency = max(1, max_concurrency)

    async def persist(self, record: dict[str, Any]) -> dict:
        """Insert one accepted record, then its line items one by one."""
        definition = self._definition
        items = {spec.name: record.pop(spec.name, None) or [] for spec in definition.line_items}

        if definition.prepare is not None:
            await definition.prepare(self._store, self._identity, record)

        inserted = await self._store.insert_one(definition.table, record, identity=self._identity)

        for spec in definition.line_items:
            for item in items[spec.name]:
                await self._store.insert_one(
                    spec.table,
                    {spec.parent_field: inserted["id"], **item},
                    identity=self._identity,
                )
        return inserted

    async def run(self, rows: Sequence[SourceRow], handle: RowHandler) -> list[ImportOutcome]:
        numbered = list(enumerate(rows, start=FIRST_DATA_ROW))

        if self._max_concurrency == 1:
            outcomes = []
            for number, row in numbered:
                outcomes.append(await self._handle_row(handle, number, row))
            return outcomes

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def bounded(number: int, row: SourceRow) -> ImportOutcome:
            async with semaphore:
                return await self._handle_row(handle, number, row)

        return list(await asyncio.gather(*(bounded(number, row) for number, row in numbered)))

    async def _handle_row(self, handle: RowHandler, number: int, row: SourceRow) -> ImportOutcome:
        try:
            return await handle(number, row)
        except Exception as exc:
            logger.warning(
                "import_row_crashed",
                entity=self._definition.name,
                row=number,
                error=str(exc),
                exc_info=True,
            )
            return ImportOutcome(row=number, status=RowStatus.failed, reason=str(exc))
