from fastapi import APIRouter, Query, UploadFile
from fastapi.responses import Response

from app.dependencies import ExportServiceDep, ImportServiceDep, ReturnServiceDep
from app.exchange.report import ImportReport
from app.exchange.responses import workbook_response
from app.returns.definition import RETURNS, export_filename
from app.returns.schemas import ReturnResponse, ReturnUpdate

router = APIRouter()

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


@router.get("/", response_model=list[ReturnResponse])
async def list_returns(
    service: ReturnServiceDep,
    start_date: str | None = Query(default=None, pattern=DATE_PATTERN),
    end_date: str | None = Query(default=None, pattern=DATE_PATTERN),
) -> list[ReturnResponse]:
    return await service.list_between(start_date, end_date)


@router.post("/import", status_code=201, response_model=ImportReport)
async def import_returns(file: UploadFile, service: ImportServiceDep) -> ImportReport:
    content = await file.read()
    return await service.import_workbook(RETURNS, content, file.filename or RETURNS.filename)


@router.get("/export")
async def export_returns(
    service: ReturnServiceDep,
    exporter: ExportServiceDep,
    start_date: str | None = Query(default=None, pattern=DATE_PATTERN),
    end_date: str | None = Query(default=None, pattern=DATE_PATTERN),
) -> Response:
    records = await service.load_between(start_date, end_date)
    content = await exporter.export_workbook(RETURNS, records)
    return workbook_response(content, export_filename(start_date, end_date))


@router.get("/{return_id}", response_model=ReturnResponse)
async def get_return(return_id: str, service: ReturnServiceDep) -> ReturnResponse:
    return await service.get_by_id(return_id)


@router.put("/{return_id}", response_model=ReturnResponse)
async def update_return(
    return_id: str, data: ReturnUpdate, service: ReturnServiceDep
) -> ReturnResponse:
    return await service.update(return_id, data)


@router.delete("/{return_id}", status_code=204)
async def delete_return(return_id: str, service: ReturnServiceDep) -> None:
    await service.delete(return_id)
