"""
Field specifications and cell coercion for workbook rows.

A FieldSpec ties one stored field to one workbook column label and says how
the raw cell value is turned into a stored value. Coercion is lenient by
contract: unparseable numbers become 0 and empty enums fall back to the
entity default, so only a missing *required* column rejects a row.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import StrEnum
from typing import Any

# Same prefix rule as a spreadsheet's parseFloat: "12.5kg" -> 12.5
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_LEADING_INTEGER = re.compile(r"^\s*[+-]?\d+")


class Coercion(StrEnum):
    string = "string"
    number = "number"
    integer = "integer"
    date = "date"
    enum = "enum"
    percent = "percent"


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def to_text(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime | date | time):
        return to_date_text(value)
    return str(value)


def to_number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int | float):
        return float(value) if value == value else 0.0
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match:
            return float(match.group())
    return 0.0


def to_integer(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and abs(value) != float("inf") else 0
    if isinstance(value, str):
        match = _LEADING_INTEGER.match(value)
        if match:
            return int(match.group())
    return 0


def to_date_text(value: Any) -> str:
    """Keep dates as text. Workbook date cells are rendered back to ISO."""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date | time):
        return value.isoformat()
    return to_text(value)


def to_fraction(value: Any) -> float | None:
    """Numeric cells are already fractions; text is always a percentage."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        fraction = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value.strip().removesuffix("%"))
        if not match:
            return None
        fraction = float(match.group()) / 100
    else:
        return None
    # An area cannot be negative.
    return fraction if fraction >= 0 else None


@dataclass(frozen=True)
class FieldSpec:
    """Maps one workbook column onto one record field."""

    name: str
    label: str
    coercion: Coercion = Coercion.string
    required: bool = False
    default: Any = None

    def coerce(self, raw: Any) -> Any:
        match self.coercion:
            case Coercion.number:
                return to_number(raw)
            case Coercion.integer:
                return to_integer(raw)
            case Coercion.date:
                return to_date_text(raw)
            case Coercion.enum:
                text = to_text(raw)
                return text if text else self.default
            case Coercion.percent:
                fraction = to_fraction(raw)
                return fraction if fraction else self.default
            case _:
                return to_text(raw)


@dataclass(frozen=True)
class ForeignKeyRef:
    """A reference resolved by exact match on the target's natural key.

    ``source`` is the candidate field holding the natural-key value read from
    the workbook; once resolved it is replaced by ``field`` holding the id.
    """

    field: str
    source: str
    table: str
    natural_key: str
