from app.exchange.entity import CellFormat, EntityDefinition, ExportColumn
from app.exchange.export import TabularWriter
from app.exchange.fields import Coercion, FieldSpec, ForeignKeyRef
from app.exchange.guard import DuplicateGuard, DuplicatePolicy
from app.exchange.line_items import LineItemSpec
from app.exchange.mapper import RowMapper
from app.exchange.pipeline import RowPipeline, RowState
from app.exchange.reader import read_rows
from app.exchange.report import ImportOutcome, ImportReport, RowStatus
from app.exchange.resolver import ForeignKeyResolver
from app.exchange.service import ExportService, ImportService
from app.exchange.writer import BatchWriter

__all__ = [
    "BatchWriter",
    "CellFormat",
    "Coercion",
    "DuplicateGuard",
    "DuplicatePolicy",
    "EntityDefinition",
    "ExportColumn",
    "ExportService",
    "FieldSpec",
    "ForeignKeyRef",
    "ForeignKeyResolver",
    "ImportOutcome",
    "ImportReport",
    "ImportService",
    "LineItemSpec",
    "RowMapper",
    "RowPipeline",
    "RowState",
    "RowStatus",
    "TabularWriter",
    "read_rows",
]
