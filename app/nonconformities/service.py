from datetime import UTC, datetime

from pydantic import BaseModel

from app.nonconformities.definition import NONCONFORMITIES
from app.nonconformities.models import NonconformityStatus
from app.nonconformities.schemas import NonconformityResponse, NonconformityUpdate, StatusChange
from app.records.service import RecordService


class NonconformityService(RecordService):
    definition = NONCONFORMITIES
    resource = "Nonconformity"
    response_model = NonconformityResponse

    async def change_status(self, record_id: str, data: StatusChange) -> BaseModel:
        evidence = data.conclusion if data.status is NonconformityStatus.concluded else None
        update = NonconformityUpdate(status=data.status, solution_evidence=evidence)
        return await self.update(record_id, update)

    async def _prepare_update(self, existing: dict, update_data: dict) -> dict:
        status = update_data.get("status")
        if status is None or status == existing["status"]:
            return update_data
        # Only a concluded record carries a closing date.
        if status == NonconformityStatus.concluded:
            update_data["closed_at"] = datetime.now(UTC).isoformat()
        else:
            update_data["closed_at"] = None
        return update_data
