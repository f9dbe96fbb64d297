from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel

from app.auth import Identity
from app.exceptions import NotFoundError, ValidationError
from app.exchange.entity import EntityDefinition
from app.records.store import RecordStore

logger = structlog.get_logger()


class RecordService:
    """List, get, update and delete for one entity table.

    Derived fields are recomputed from the entity formulas whenever a record
    is read or updated; the stored copies are only caches.
    """

    definition: EntityDefinition
    resource: str
    response_model: type[BaseModel]

    def __init__(self, store: RecordStore, identity: Identity) -> None:
        self._store = store
        self._identity = identity

    @property
    def table(self) -> str:
        return self.definition.table

    async def load_records(self, filters: Mapping[str, Any] | None = None) -> list[dict]:
        """Stored records, newest first, joined and with derived fields filled in."""
        rows = await self._store.select_all_matching(
            self.table, filters, identity=self._identity, descending=True
        )
        return await self._hydrate(rows)

    async def list_records(self) -> list[BaseModel]:
        rows = await self.load_records()
        return [self._to_response(row) for row in rows]

    async def get_by_id(self, record_id: str) -> BaseModel:
        row = await self._load_one(record_id)
        return self._to_response(row)

    async def update(self, record_id: str, data: BaseModel) -> BaseModel:
        existing = await self._load_one(record_id)

        update_data = data.model_dump(mode="json", exclude_none=True)
        if not update_data:
            raise ValidationError("No fields to update")

        changes = await self._prepare_update(existing, update_data)
        merged = {**existing, **changes}
        changes.update(self.definition.derived_values(merged, await self._related(merged)))

        await self._store.update_one(self.table, record_id, changes, identity=self._identity)
        logger.info(f"{self.definition.name}_updated", record_id=record_id, fields=sorted(changes))
        return await self.get_by_id(record_id)

    async def delete(self, record_id: str) -> None:
        await self._load_one(record_id)
        await self._delete_dependents(record_id)
        await self._store.delete_one(self.table, record_id, identity=self._identity)
        logger.info(f"{self.definition.name}_deleted", record_id=record_id)

    async def _load_one(self, record_id: str) -> dict:
        row = await self._store.get_by_id(self.table, record_id, identity=self._identity)
        if row is None:
            raise NotFoundError(self.resource, record_id)
        rows = await self._hydrate([row])
        return rows[0]

    async def _hydrate(self, rows: list[dict]) -> list[dict]:
        for row in rows:
            row.update(self.definition.derived_values(row, await self._related(row)))
        return rows

    async def _related(self, row: Mapping[str, Any]) -> dict[str, dict]:
        return {}

    async def _prepare_update(self, existing: dict, update_data: dict) -> dict:
        return update_data

    async def _delete_dependents(self, record_id: str) -> None:
        return None

    def _to_response(self, row: Mapping[str, Any]) -> BaseModel:
        return self.response_model.model_validate(dict(row))
