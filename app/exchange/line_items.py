"""
Nested one-to-many collections flattened into numbered column pairs.

A TCO with two operating costs exports as::

    Custo Operacional 1 - Título | Custo Operacional 1 - Valor |
    Custo Operacional 2 - Título | Custo Operacional 2 - Valor

and reads back slot by slot until a slot's title column is absent.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from app.exchange.fields import is_blank, to_number, to_text


@dataclass(frozen=True)
class LineItemSpec:
    name: str
    table: str
    parent_field: str
    title_label: str
    value_label: str
    max_items: int = 10

    def labels(self, index: int) -> tuple[str, str]:
        return self.title_label.format(index=index), self.value_label.format(index=index)

    def header(self, slots: int) -> list[str]:
        labels: list[str] = []
        for index in range(1, slots + 1):
            labels.extend(self.labels(index))
        return labels

    def read(self, row: Mapping[str, Any]) -> list[dict]:
        items: list[dict] = []
        for index in range(1, self.max_items + 1):
            title_label, value_label = self.labels(index)
            title = row.get(title_label)
            if is_blank(title):
                break
            items.append({"title": to_text(title), "value": to_number(row.get(value_label))})
        return items

    def flatten(self, items: Sequence[Mapping[str, Any]], slots: int) -> dict[str, Any]:
        cells: dict[str, Any] = {}
        for index in range(1, slots + 1):
            title_label, value_label = self.labels(index)
            if index <= len(items):
                cells[title_label] = items[index - 1].get("title")
                cells[value_label] = items[index - 1].get("value")
            else:
                cells[title_label] = None
                cells[value_label] = None
        return cells
