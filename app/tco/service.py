from collections import defaultdict

import structlog

from app.records.service import RecordService
from app.tco.definition import TCOS
from app.tco.schemas import TcoResponse

logger = structlog.get_logger()


class TcoService(RecordService):
    definition = TCOS
    resource = "TCO"
    response_model = TcoResponse

    async def _hydrate(self, rows: list[dict]) -> list[dict]:
        for spec in self.definition.line_items:
            items = await self._store.select_all_matching(spec.table, identity=self._identity)
            by_parent: dict[str, list[dict]] = defaultdict(list)
            for item in items:
                by_parent[item[spec.parent_field]].append(item)
            for row in rows:
                row[spec.name] = by_parent.get(row["id"], [])
        return await super()._hydrate(rows)

    async def _prepare_update(self, existing: dict, update_data: dict) -> dict:
        for spec in self.definition.line_items:
            items = update_data.pop(spec.name, None)
            if items is None:
                continue
            # Replace the whole collection.
            for item in existing.get(spec.name, []):
                await self._store.delete_one(spec.table, item["id"], identity=self._identity)
            for item in items:
                await self._store.insert_one(
                    spec.table,
                    {spec.parent_field: existing["id"], "title": item["title"], "value": item["value"]},
                    identity=self._identity,
                )
            logger.info("tco_costs_replaced", tco_id=existing["id"], collection=spec.name, count=len(items))
        return update_data
