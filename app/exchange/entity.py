from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from app.auth import Identity
from app.exchange.derived import DerivedComputer
from app.exchange.fields import FieldSpec, ForeignKeyRef
from app.exchange.guard import DuplicatePolicy
from app.exchange.line_items import LineItemSpec
from app.records.store import RecordStore

# Fills store-generated fields (e.g. a sequential number) right before insert.
PrepareHook = Callable[[RecordStore, Identity, dict[str, Any]], Awaitable[None]]


class CellFormat(StrEnum):
    plain = "plain"
    currency = "currency"
    percent = "percent"
    timestamp = "timestamp"


@dataclass(frozen=True)
class ExportColumn:
    """One exported column. ``path`` may reach into joined records: ``toner.model``."""

    label: str
    path: str
    format: CellFormat = CellFormat.plain


@dataclass(frozen=True)
class EntityDefinition:
    """Static exchange configuration of one entity."""

    name: str
    table: str
    sheet_title: str
    fields: tuple[FieldSpec, ...]
    columns: tuple[ExportColumn, ...]
    references: tuple[ForeignKeyRef, ...] = ()
    derive: DerivedComputer | None = None
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.always_insert
    natural_key: str | None = None
    line_items: tuple[LineItemSpec, ...] = ()
    prepare: PrepareHook | None = None
    file_stem: str | None = None

    @property
    def filename(self) -> str:
        return f"{self.file_stem or self.name}.xlsx"

    def derived_values(
        self, record: dict[str, Any], related: dict[str, dict] | None = None
    ) -> dict[str, float]:
        if self.derive is None:
            return {}
        return self.derive(record, related or {})
