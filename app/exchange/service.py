import asyncio
from collections.abc import Mapping, Sequence
from typing import Any
from uuid import uuid4

import structlog

from app.auth import Identity
from app.config import settings
from app.exchange.entity import EntityDefinition
from app.exchange.export import TabularWriter
from app.exchange.pipeline import RowPipeline
from app.exchange.reader import read_rows
from app.exchange.report import ImportReport
from app.records.store import RecordStore

logger = structlog.get_logger()


class ImportService:
    def __init__(
        self,
        store: RecordStore,
        identity: Identity,
        max_concurrency: int | None = None,
        max_reasons: int | None = None,
    ) -> None:
        self._store = store
        self._identity = identity
        self._max_concurrency = max_concurrency or settings.import_max_concurrency
        self._max_reasons = settings.import_max_reasons if max_reasons is None else max_reasons

    async def import_workbook(
        self, definition: EntityDefinition, content: bytes, filename: str = ""
    ) -> ImportReport:
        """Import every data row of the workbook's first sheet into one entity.

        Unreadable or empty workbooks raise before any row is written; row
        problems only show up in the returned report.
        """
        batch_id = str(uuid4())
        with structlog.contextvars.bound_contextvars(batch_id=batch_id, entity=definition.name):
            rows = await asyncio.to_thread(read_rows, content)
            logger.info(
                "import_started",
                filename=filename,
                rows=len(rows),
                actor=self._identity.username,
            )

            pipeline = RowPipeline(definition, self._store, self._identity, self._max_concurrency)
            outcomes = await pipeline.run(rows)
            report = ImportReport.from_outcomes(definition.name, outcomes, self._max_reasons)

            logger.info(
                "import_completed",
                filename=filename,
                total_rows=report.total_rows,
                imported=report.imported,
                skipped=report.skipped,
                failed=report.failed,
            )
        return report


class ExportService:
    async def export_workbook(
        self, definition: EntityDefinition, records: Sequence[Mapping[str, Any]]
    ) -> bytes:
        return await self.export_workbooks([(definition, records)])

    async def export_workbooks(
        self, sheets: Sequence[tuple[EntityDefinition, Sequence[Mapping[str, Any]]]]
    ) -> bytes:
        """One worksheet per entity, in the given order."""
        return await asyncio.to_thread(self._render, sheets)

    @staticmethod
    def _render(sheets: Sequence[tuple[EntityDefinition, Sequence[Mapping[str, Any]]]]) -> bytes:
        writer = TabularWriter()
        for definition, records in sheets:
            writer.add_sheet(definition, records)
        content = writer.to_bytes()
        logger.info(
            "export_completed",
            entities=[definition.name for definition, _ in sheets],
            rows=sum(len(records) for _, records in sheets),
            size=len(content),
        )
        return content
