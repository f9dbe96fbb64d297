from fastapi import APIRouter, UploadFile
from fastapi.responses import Response

from app.dependencies import ExportServiceDep, ImportServiceDep, UnitServiceDep
from app.exchange.report import ImportReport
from app.exchange.responses import workbook_response
from app.units.definition import UNITS
from app.units.schemas import UnitResponse, UnitUpdate

router = APIRouter()


@router.get("/", response_model=list[UnitResponse])
async def list_units(service: UnitServiceDep) -> list[UnitResponse]:
    return await service.list_records()


@router.post("/import", status_code=201, response_model=ImportReport)
async def import_units(file: UploadFile, service: ImportServiceDep) -> ImportReport:
    content = await file.read()
    return await service.import_workbook(UNITS, content, file.filename or UNITS.filename)


@router.get("/export")
async def export_units(service: UnitServiceDep, exporter: ExportServiceDep) -> Response:
    records = await service.load_records()
    content = await exporter.export_workbook(UNITS, records)
    return workbook_response(content, UNITS.filename)


@router.get("/{unit_id}", response_model=UnitResponse)
async def get_unit(unit_id: str, service: UnitServiceDep) -> UnitResponse:
    return await service.get_by_id(unit_id)


@router.put("/{unit_id}", response_model=UnitResponse)
async def update_unit(unit_id: str, data: UnitUpdate, service: UnitServiceDep) -> UnitResponse:
    return await service.update(unit_id, data)


@router.delete("/{unit_id}", status_code=204)
async def delete_unit(unit_id: str, service: UnitServiceDep) -> None:
    await service.delete(unit_id)
