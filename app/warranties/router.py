from fastapi import APIRouter, UploadFile
from fastapi.responses import Response

from app.dependencies import ExportServiceDep, ImportServiceDep, WarrantyServiceDep
from app.exchange.report import ImportReport
from app.exchange.responses import workbook_response
from app.warranties.definition import WARRANTIES
from app.warranties.schemas import WarrantyResponse, WarrantyUpdate

router = APIRouter()


@router.get("/", response_model=list[WarrantyResponse])
async def list_warranties(service: WarrantyServiceDep) -> list[WarrantyResponse]:
    return await service.list_records()


@router.post("/import", status_code=201, response_model=ImportReport)
async def import_warranties(file: UploadFile, service: ImportServiceDep) -> ImportReport:
    content = await file.read()
    return await service.import_workbook(WARRANTIES, content, file.filename or WARRANTIES.filename)


@router.get("/export")
async def export_warranties(service: WarrantyServiceDep, exporter: ExportServiceDep) -> Response:
    records = await service.load_records()
    content = await exporter.export_workbook(WARRANTIES, records)
    return workbook_response(content, WARRANTIES.filename)


@router.get("/{warranty_id}", response_model=WarrantyResponse)
async def get_warranty(warranty_id: str, service: WarrantyServiceDep) -> WarrantyResponse:
    return await service.get_by_id(warranty_id)


@router.put("/{warranty_id}", response_model=WarrantyResponse)
async def update_warranty(
    warranty_id: str, data: WarrantyUpdate, service: WarrantyServiceDep
) -> WarrantyResponse:
    return await service.update(warranty_id, data)


@router.delete("/{warranty_id}", status_code=204)
async def delete_warranty(warranty_id: str, service: WarrantyServiceDep) -> None:
    await service.delete(warranty_id)
