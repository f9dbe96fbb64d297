from fastapi import APIRouter, UploadFile
from fastapi.responses import Response

from app.dependencies import ExportServiceDep, ImportServiceDep, NonconformityServiceDep
from app.exchange.report import ImportReport
from app.exchange.responses import workbook_response
from app.nonconformities.definition import NONCONFORMITIES
from app.nonconformities.schemas import NonconformityResponse, NonconformityUpdate, StatusChange

router = APIRouter()


@router.get("/", response_model=list[NonconformityResponse])
async def list_nonconformities(service: NonconformityServiceDep) -> list[NonconformityResponse]:
    return await service.list_records()


@router.post("/import", status_code=201, response_model=ImportReport)
async def import_nonconformities(file: UploadFile, service: ImportServiceDep) -> ImportReport:
    content = await file.read()
    return await service.import_workbook(
        NONCONFORMITIES, content, file.filename or NONCONFORMITIES.filename
    )


@router.get("/export")
async def export_nonconformities(
    service: NonconformityServiceDep, exporter: ExportServiceDep
) -> Response:
    records = await service.load_records()
    content = await exporter.export_workbook(NONCONFORMITIES, records)
    return workbook_response(content, NONCONFORMITIES.filename)


@router.get("/{nc_id}", response_model=NonconformityResponse)
async def get_nonconformity(nc_id: str, service: NonconformityServiceDep) -> NonconformityResponse:
    return await service.get_by_id(nc_id)


@router.put("/{nc_id}", response_model=NonconformityResponse)
async def update_nonconformity(
    nc_id: str, data: NonconformityUpdate, service: NonconformityServiceDep
) -> NonconformityResponse:
    return await service.update(nc_id, data)


@router.post("/{nc_id}/status", response_model=NonconformityResponse)
async def change_nonconformity_status(
    nc_id: str, data: StatusChange, service: NonconformityServiceDep
) -> NonconformityResponse:
    return await service.change_status(nc_id, data)


@router.delete("/{nc_id}", status_code=204)
async def delete_nonconformity(nc_id: str, service: NonconformityServiceDep) -> None:
    await service.delete(nc_id)
