import structlog

from app.records.service import RecordService
from app.units.definition import UNITS
from app.units.schemas import UnitResponse

logger = structlog.get_logger()


class UnitService(RecordService):
    definition = UNITS
    resource = "Unit"
    response_model = UnitResponse

    async def _delete_dependents(self, record_id: str) -> None:
        returns = await self._store.select_all_matching(
            "returns", {"unit_id": record_id}, identity=self._identity
        )
        for row in returns:
            await self._store.delete_one("returns", row["id"], identity=self._identity)
        if returns:
            logger.info("unit_returns_deleted", unit_id=record_id, count=len(returns))
