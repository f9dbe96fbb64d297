from fastapi import APIRouter
from fastapi.responses import Response

from app.dependencies import CurrentIdentity, ExportServiceDep, RecordStoreDep
from app.exchange.responses import workbook_response
from app.nonconformities.service import NonconformityService
from app.records.service import RecordService
from app.returns.service import ReturnService
from app.tco.service import TcoService
from app.toners.service import TonerService
from app.units.service import UnitService
from app.warranties.service import WarrantyService

router = APIRouter()

FULL_EXPORT_FILENAME = "sgq.xlsx"

# Worksheet order of the full workbook.
SERVICES: tuple[type[RecordService], ...] = (
    UnitService,
    TonerService,
    ReturnService,
    WarrantyService,
    NonconformityService,
    TcoService,
)


@router.get("/export")
async def export_everything(
    store: RecordStoreDep,
    identity: CurrentIdentity,
    exporter: ExportServiceDep,
) -> Response:
    sheets = []
    for service_cls in SERVICES:
        service = service_cls(store, identity)
        sheets.append((service.definition, await service.load_records()))
    content = await exporter.export_workbooks(sheets)
    return workbook_response(content, FULL_EXPORT_FILENAME)
