from app.records.service import RecordService
from app.warranties.definition import WARRANTIES
from app.warranties.schemas import WarrantyResponse


class WarrantyService(RecordService):
    definition = WARRANTIES
    resource = "Warranty"
    response_model = WarrantyResponse
