from typing import Annotated

from fastapi import Depends

from app.auth import Identity, current_identity
from app.database import get_db
from app.exchange.service import ExportService, ImportService
from app.nonconformities.service import NonconformityService
from app.records.store import RecordStore
from app.returns.service import ReturnService
from app.tco.service import TcoService
from app.toners.service import TonerService
from app.units.service import UnitService
from app.warranties.service import WarrantyService

CurrentIdentity = Annotated[Identity, Depends(current_identity)]


def get_record_store() -> RecordStore:
    return RecordStore(get_db())


RecordStoreDep = Annotated[RecordStore, Depends(get_record_store)]


def get_import_service(store: RecordStoreDep, identity: CurrentIdentity) -> ImportService:
    return ImportService(store, identity)


def get_export_service() -> ExportService:
    return ExportService()


ImportServiceDep = Annotated[ImportService, Depends(get_import_service)]
ExportServiceDep = Annotated[ExportService, Depends(get_export_service)]


def get_unit_service(store: RecordStoreDep, identity: CurrentIdentity) -> UnitService:
    return UnitService(store, identity)


def get_toner_service(store: RecordStoreDep, identity: CurrentIdentity) -> TonerService:
    return TonerService(store, identity)


def get_return_service(store: RecordStoreDep, identity: CurrentIdentity) -> ReturnService:
    return ReturnService(store, identity)


def get_warranty_service(store: RecordStoreDep, identity: CurrentIdentity) -> WarrantyService:
    return WarrantyService(store, identity)


def get_nonconformity_service(
    store: RecordStoreDep, identity: CurrentIdentity
) -> NonconformityService:
    return NonconformityService(store, identity)


def get_tco_service(store: RecordStoreDep, identity: CurrentIdentity) -> TcoService:
    return TcoService(store, identity)


UnitServiceDep = Annotated[UnitService, Depends(get_unit_service)]
TonerServiceDep = Annotated[TonerService, Depends(get_toner_service)]
ReturnServiceDep = Annotated[ReturnService, Depends(get_return_service)]
WarrantyServiceDep = Annotated[WarrantyService, Depends(get_warranty_service)]
NonconformityServiceDep = Annotated[NonconformityService, Depends(get_nonconformity_service)]
TcoServiceDep = Annotated[TcoService, Depends(get_tco_service)]
