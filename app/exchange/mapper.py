from collections.abc import Mapping, Sequence
from typing import Any

from app.exceptions import FieldMissingError
from app.exchange.fields import FieldSpec, is_blank
from app.exchange.line_items import LineItemSpec

SourceRow = Mapping[str, Any]


class RowMapper:
    """Turns one workbook row into a typed candidate record."""

    def __init__(
        self,
        fields: Sequence[FieldSpec],
        line_items: Sequence[LineItemSpec] = (),
    ) -> None:
        self._fields = tuple(fields)
        self._line_items = tuple(line_items)

    def map_row(self, row: SourceRow) -> dict[str, Any]:
        record: dict[str, Any] = {}
        for spec in self._fields:
            raw = row.get(spec.label)
            if is_blank(raw):
                if spec.required:
                    raise FieldMissingError(spec.label)
                record[spec.name] = spec.default
                continue
            record[spec.name] = spec.coerce(raw)

        for items in self._line_items:
            record[items.name] = items.read(row)

        return record
