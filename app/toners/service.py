import structlog

from app.records.service import RecordService
from app.toners.definition import TONERS
from app.toners.schemas import TonerResponse

logger = structlog.get_logger()


class TonerService(RecordService):
    definition = TONERS
    resource = "Toner"
    response_model = TonerResponse

    async def _delete_dependents(self, record_id: str) -> None:
        returns = await self._store.select_all_matching(
            "returns", {"toner_id": record_id}, identity=self._identity
        )
        for row in returns:
            await self._store.delete_one("returns", row["id"], identity=self._identity)
        if returns:
            logger.info("toner_returns_deleted", toner_id=record_id, count=len(returns))
