from fastapi import APIRouter, UploadFile
from fastapi.responses import Response

from app.dependencies import ExportServiceDep, ImportServiceDep, TcoServiceDep
from app.exchange.report import ImportReport
from app.exchange.responses import workbook_response
from app.tco.definition import TCOS
from app.tco.schemas import TcoResponse, TcoUpdate

router = APIRouter()


@router.get("/", response_model=list[TcoResponse])
async def list_tcos(service: TcoServiceDep) -> list[TcoResponse]:
    return await service.list_records()


@router.post("/import", status_code=201, response_model=ImportReport)
async def import_tcos(file: UploadFile, service: ImportServiceDep) -> ImportReport:
    content = await file.read()
    return await service.import_workbook(TCOS, content, file.filename or TCOS.filename)


@router.get("/export")
async def export_tcos(service: TcoServiceDep, exporter: ExportServiceDep) -> Response:
    records = await service.load_records()
    content = await exporter.export_workbook(TCOS, records)
    return workbook_response(content, TCOS.filename)


@router.get("/{tco_id}", response_model=TcoResponse)
async def get_tco(tco_id: str, service: TcoServiceDep) -> TcoResponse:
    return await service.get_by_id(tco_id)


@router.put("/{tco_id}", response_model=TcoResponse)
async def update_tco(tco_id: str, data: TcoUpdate, service: TcoServiceDep) -> TcoResponse:
    return await service.update(tco_id, data)


@router.delete("/{tco_id}", status_code=204)
async def delete_tco(tco_id: str, service: TcoServiceDep) -> None:
    await service.delete(tco_id)
