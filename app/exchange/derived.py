"""
Derived values. Pure functions shared by the import, update and read paths,
so a stored derived value is always a cache of the formula, never an input.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

# Nominal yield used to value a returned cartridge put back into stock.
NOMINAL_UNIT_COUNT = 10_000
STOCK_DESTINATION = "Estoque"

DerivedComputer = Callable[[Mapping[str, Any], Mapping[str, Mapping[str, Any]]], dict[str, float]]


def weight_delta(full_weight: float, empty_weight: float) -> float:
    return full_weight - empty_weight


def per_unit_price(price: float, unit_capacity: float) -> float:
    # Zero capacity has no per-unit price; 0.0 is the sentinel.
    if not unit_capacity:
        return 0.0
    return round(price / unit_capacity, 3)


def acquisition_total(base_price: float, fees: Iterable[float], accessories: float) -> float:
    return base_price + sum(fees) + accessories


def recovered_value(unit_price: float, destination: str | None) -> float:
    if destination != STOCK_DESTINATION:
        return 0.0
    return unit_price * NOMINAL_UNIT_COUNT


def _number(record: Mapping[str, Any], name: str) -> float:
    value = record.get(name)
    return float(value) if value is not None else 0.0


def toner_values(record: Mapping[str, Any], related: Mapping[str, Mapping[str, Any]]) -> dict[str, float]:
    return {
        "weight_delta": weight_delta(_number(record, "full_weight"), _number(record, "empty_weight")),
        "price_per_sheet": per_unit_price(_number(record, "price"), _number(record, "sheet_capacity")),
    }


def tco_values(record: Mapping[str, Any], related: Mapping[str, Mapping[str, Any]]) -> dict[str, float]:
    fees = (_number(record, name) for name in ("pis", "ipi", "icms", "cofins"))
    return {
        "acquisition_total": acquisition_total(
            _number(record, "printer_price"), fees, _number(record, "accessories")
        ),
    }


def return_values(record: Mapping[str, Any], related: Mapping[str, Mapping[str, Any]]) -> dict[str, float]:
    toner = related.get("toner_id") or {}
    # Per-sheet price from the toner formula, not its stored cache.
    unit_price = toner_values(toner, {})["price_per_sheet"] if toner else 0.0
    return {"recovered_value": recovered_value(unit_price, record.get("destination"))}
