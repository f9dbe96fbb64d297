from collections.abc import Mapping, Sequence
from datetime import datetime
from io import BytesIO
from typing import Any

import structlog
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

from app.config import settings
from app.exchange.entity import CellFormat, EntityDefinition, ExportColumn

logger = structlog.get_logger()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="D9E1F2", end_color="D9E1F2", fill_type="solid")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center")
PERCENT_FORMAT = "0%"
MAX_COLUMN_WIDTH = 50


def resolve_path(record: Mapping[str, Any], path: str) -> Any:
    """Follow a dotted path through joined records, ``None`` if any hop is missing."""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def format_timestamp(value: Any, date_format: str) -> Any:
    if not isinstance(value, str) or not value:
        return value
    try:
        return datetime.fromisoformat(value).strftime(date_format)
    except ValueError:
        return value


def _style_header(ws, num_cols: int) -> None:
    for col in range(1, num_cols + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
    ws.freeze_panes = "A2"


def _auto_width(ws) -> None:
    for column_cells in ws.columns:
        max_length = max((len(str(cell.value)) for cell in column_cells if cell.value is not None), default=0)
        ws.column_dimensions[column_cells[0].column_letter].width = min(max_length + 2, MAX_COLUMN_WIDTH)


class TabularWriter:
    """Builds an .xlsx workbook with one worksheet per entity.

    Values are written as stored; currency and percent columns only get a
    number format, so the numbers read back unchanged. Creation timestamps
    are the one column rendered as text.
    """

    def __init__(
        self,
        currency_format: str | None = None,
        date_format: str | None = None,
        max_line_items: int | None = None,
    ) -> None:
        self._currency_format = currency_format or settings.currency_format
        self._date_format = date_format or settings.date_format
        self._max_line_items = max_line_items or settings.export_max_line_items
        self._workbook = Workbook()
        self._sheet_count = 0

    def add_sheet(self, definition: EntityDefinition, records: Sequence[Mapping[str, Any]]) -> int:
        """Append one worksheet; returns the number of data rows written."""
        if self._sheet_count == 0:
            ws = self._workbook.active
            ws.title = definition.sheet_title
        else:
            ws = self._workbook.create_sheet(definition.sheet_title)
        self._sheet_count += 1

        slots = {
            spec.name: min(
                max((len(record.get(spec.name) or []) for record in records), default=0),
                spec.max_items,
                self._max_line_items,
            )
            for spec in definition.line_items
        }

        headers = [column.label for column in definition.columns]
        for spec in definition.line_items:
            headers.extend(spec.header(slots[spec.name]))
        ws.append(headers)
        _style_header(ws, len(headers))

        for row_idx, record in enumerate(records, start=2):
            values = [self._cell_value(column, record) for column in definition.columns]
            for spec in definition.line_items:
                flat = spec.flatten(record.get(spec.name) or [], slots[spec.name])
                values.extend(flat.values())
            ws.append(values)
            self._apply_formats(ws, row_idx, definition.columns)

        _auto_width(ws)
        logger.debug(
            "worksheet_written",
            entity=definition.name,
            rows=len(records),
            columns=len(headers),
        )
        return len(records)

    def to_bytes(self) -> bytes:
        buffer = BytesIO()
        self._workbook.save(buffer)
        return buffer.getvalue()

    def _cell_value(self, column: ExportColumn, record: Mapping[str, Any]) -> Any:
        value = resolve_path(record, column.path)
        if column.format is CellFormat.timestamp:
            return format_timestamp(value, self._date_format)
        return value

    def _apply_formats(self, ws, row_idx: int, columns: Sequence[ExportColumn]) -> None:
        for col_idx, column in enumerate(columns, start=1):
            match column.format:
                case CellFormat.currency:
                    ws.cell(row=row_idx, column=col_idx).number_format = self._currency_format
                case CellFormat.percent:
                    ws.cell(row=row_idx, column=col_idx).number_format = PERCENT_FORMAT
                case _:
                    pass


def write_workbook(definition: EntityDefinition, records: Sequence[Mapping[str, Any]]) -> bytes:
    writer = TabularWriter()
    writer.add_sheet(definition, records)
    return writer.to_bytes()
