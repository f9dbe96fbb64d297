from fastapi import APIRouter, UploadFile
from fastapi.responses import Response

from app.dependencies import ExportServiceDep, ImportServiceDep, TonerServiceDep
from app.exchange.report import ImportReport
from app.exchange.responses import workbook_response
from app.toners.definition import TONERS
from app.toners.schemas import TonerResponse, TonerUpdate

router = APIRouter()


@router.get("/", response_model=list[TonerResponse])
async def list_toners(service: TonerServiceDep) -> list[TonerResponse]:
    return await service.list_records()


@router.post("/import", status_code=201, response_model=ImportReport)
async def import_toners(file: UploadFile, service: ImportServiceDep) -> ImportReport:
    content = await file.read()
    return await service.import_workbook(TONERS, content, file.filename or TONERS.filename)


@router.get("/export")
async def export_toners(service: TonerServiceDep, exporter: ExportServiceDep) -> Response:
    records = await service.load_records()
    content = await exporter.export_workbook(TONERS, records)
    return workbook_response(content, TONERS.filename)


@router.get("/{toner_id}", response_model=TonerResponse)
async def get_toner(toner_id: str, service: TonerServiceDep) -> TonerResponse:
    return await service.get_by_id(toner_id)


@router.put("/{toner_id}", response_model=TonerResponse)
async def update_toner(toner_id: str, data: TonerUpdate, service: TonerServiceDep) -> TonerResponse:
    return await service.update(toner_id, data)


@router.delete("/{toner_id}", status_code=204)
async def delete_toner(toner_id: str, service: TonerServiceDep) -> None:
    await service.delete(toner_id)
