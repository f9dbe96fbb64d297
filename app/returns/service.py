from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from app.records.service import RecordService
from app.returns.definition import RETURNS
from app.returns.schemas import ReturnResponse


def created_within(created_at: str, start_date: str | None, end_date: str | None) -> bool:
    """Inclusive day range on the ISO creation timestamp."""
    day = created_at[:10]
    if start_date and day < start_date:
        return False
    if end_date and day > end_date:
        return False
    return True


class ReturnService(RecordService):
    definition = RETURNS
    resource = "Return"
    response_model = ReturnResponse

    async def load_between(
        self, start_date: str | None = None, end_date: str | None = None
    ) -> list[dict]:
        rows = await self.load_records()
        return [row for row in rows if created_within(row["created_at"], start_date, end_date)]

    async def list_between(
        self, start_date: str | None = None, end_date: str | None = None
    ) -> list[BaseModel]:
        rows = await self.load_between(start_date, end_date)
        return [self._to_response(row) for row in rows]

    async def _hydrate(self, rows: list[dict]) -> list[dict]:
        toners = await self._index("toners")
        units = await self._index("units")
        for row in rows:
            row["toner"] = toners.get(row["toner_id"])
            row["unit"] = units.get(row["unit_id"])
        return await super()._hydrate(rows)

    async def _related(self, row: Mapping[str, Any]) -> dict[str, dict]:
        toner = row.get("toner")
        if toner is None or toner["id"] != row["toner_id"]:
            toner = await self._store.get_by_id("toners", row["toner_id"], identity=self._identity)
        return {"toner_id": toner} if toner else {}

    async def _index(self, table: str) -> dict[str, dict]:
        rows = await self._store.select_all_matching(table, identity=self._identity)
        return {row["id"]: row for row in rows}

    def _to_response(self, row: Mapping[str, Any]) -> BaseModel:
        toner = row.get("toner") or {}
        unit = row.get("unit") or {}
        return ReturnResponse.model_validate(
            {**row, "toner_model": toner.get("model"), "unit_name": unit.get("name")}
        )
