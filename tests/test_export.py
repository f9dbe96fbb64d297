"""Export formatting and export/import round trips."""

import asyncio
from io import BytesIO

import pytest
from openpyxl import load_workbook

from app.config import settings
from app.exchange.export import TabularWriter, format_timestamp, resolve_path, write_workbook
from app.exchange.reader import read_rows
from app.exchange.service import ExportService, ImportService
from app.returns.definition import RETURNS, export_filename
from app.returns.service import ReturnService
from app.tco.definition import TCOS
from app.tco.service import TcoService
from app.toners.definition import TONERS
from app.toners.service import TonerService
from app.units.definition import UNITS
from app.units.service import UnitService
from app.warranties.definition import WARRANTIES
from app.warranties.service import WarrantyService

TONER_FIELDS = (
    "model", "full_weight", "empty_weight", "compatible_printers", "color",
    "iso_area", "sheet_capacity", "kind", "price", "weight_delta", "price_per_sheet",
)
TCO_FIELDS = (
    "model", "manufacturer", "kind", "printer_price", "pis", "ipi", "icms",
    "cofins", "accessories", "acquisition_total", "notes",
)


def _project(rows, fields):
    return sorted((tuple(row[name] for name in fields) for row in rows), key=repr)


def _costs(rows, name):
    return sorted(
        (row["model"], tuple(sorted((item["title"], item["value"]) for item in row[name]))) for row in rows
    )


def test_resolve_path_follows_joins() -> None:
    record = {"toner": {"model": "CE285A"}, "unit": None}

    assert resolve_path(record, "toner.model") == "CE285A"
    assert resolve_path(record, "unit.name") is None
    assert resolve_path(record, "missing") is None


def test_format_timestamp() -> None:
    assert format_timestamp("2024-05-01T13:45:00+00:00", "%d/%m/%Y") == "01/05/2024"
    assert format_timestamp("not a date", "%d/%m/%Y") == "not a date"
    assert format_timestamp(None, "%d/%m/%Y") is None


def test_header_order_and_formats() -> None:
    record = {
        "model": "CE285A",
        "full_weight": 820.0,
        "empty_weight": 700.0,
        "compatible_printers": "P1102",
        "color": "Black",
        "iso_area": 0.05,
        "sheet_capacity": 1600,
        "kind": "Original",
        "price": 89.9,
        "weight_delta": 120.0,
        "price_per_sheet": 0.056,
        "created_at": "2024-05-01T13:45:00+00:00",
    }

    ws = load_workbook(BytesIO(write_workbook(TONERS, [record]))).active

    assert ws.title == "Toners"
    assert [cell.value for cell in ws[1]] == [column.label for column in TONERS.columns]
    assert ws[1][0].font.bold
    assert ws.freeze_panes == "A2"
    values = {ws.cell(1, col).value: ws.cell(2, col) for col in range(1, ws.max_column + 1)}
    assert values["Área ISO"].value == 0.05
    assert values["Área ISO"].number_format == "0%"
    assert values["Preço"].value == 89.9
    assert values["Preço"].number_format == settings.currency_format
    assert values["Gramatura"].value == 120.0


def test_timestamp_column_is_rendered_as_day() -> None:
    record = {"name": "Matriz", "created_at": "2024-05-01T13:45:00+00:00"}

    rows = read_rows(write_workbook(UNITS, [record]))

    assert rows == [{"Unidade": "Matriz", "Data de Cadastro": "01/05/2024"}]


def test_line_items_flatten_to_largest_collection() -> None:
    records = [
        {"model": "A", "operating_costs": [{"title": "Papel", "value": 10.0}], "indirect_costs": []},
        {
            "model": "B",
            "operating_costs": [{"title": "Papel", "value": 12.0}, {"title": "Peças", "value": 40.0}],
            "indirect_costs": [],
        },
    ]

    ws = load_workbook(BytesIO(write_workbook(TCOS, records))).active
    headers = [cell.value for cell in ws[1]]

    assert headers[len(TCOS.columns):] == [
        "Custo Operacional 1 - Título",
        "Custo Operacional 1 - Valor",
        "Custo Operacional 2 - Título",
        "Custo Operacional 2 - Valor",
    ]
    rows = read_rows(write_workbook(TCOS, records))
    assert "Custo Operacional 2 - Título" not in rows[0]
    assert rows[1]["Custo Operacional 2 - Valor"] == 40.0


def test_line_item_slots_are_capped() -> None:
    items = [{"title": f"Item {index}", "value": float(index)} for index in range(1, 15)]

    writer = TabularWriter(max_line_items=3)
    writer.add_sheet(TCOS, [{"model": "X", "operating_costs": items, "indirect_costs": []}])
    ws = load_workbook(BytesIO(writer.to_bytes())).active
    headers = [cell.value for cell in ws[1]]

    assert "Custo Operacional 3 - Título" in headers
    assert "Custo Operacional 4 - Título" not in headers


def test_multi_sheet_workbook() -> None:
    content = asyncio.run(
        ExportService().export_workbooks([(UNITS, [{"name": "Matriz"}]), (TONERS, [])])
    )

    wb = load_workbook(BytesIO(content))

    assert wb.sheetnames == ["Unidades", "Toners"]
    assert wb["Toners"].max_row == 1


def test_returns_export_filename_carries_range() -> None:
    assert export_filename("2024-01-01", "2024-01-31") == "retornados_2024-01-01_a_2024-01-31.xlsx"
    assert export_filename(None, "2024-01-31") == "retornados.xlsx"


# -- round trips --------------------------------------------------------------------


def test_toner_export_reimports_to_the_same_records(open_store, identity, make_workbook, tmp_path) -> None:
    content = make_workbook(
        ["Modelo", "Peso Cheio (g)", "Peso Vazio (g)", "Impressoras Compatíveis", "Cor", "Área ISO", "Capacidade", "Tipo", "Preço"],
        [
            ["CE285A", 820, 700, "P1102, M1132", "Black", "5%", 1600, "Original", 89.9],
            ["CF410A", 610.5, 500, "M452", "Cyan", 0.1, 2300, None, 120],
            ["SEMCAP", 100, 90, None, None, None, 0, "Compatível", 35],
        ],
    )
    copy_path = str(tmp_path / "copy.db")

    async def scenario():
        async with open_store() as store:
            await ImportService(store, identity).import_workbook(TONERS, content)
            first = await TonerService(store, identity).load_records()
        exported = await ExportService().export_workbook(TONERS, first)
        async with open_store(copy_path) as store:
            report = await ImportService(store, identity).import_workbook(TONERS, exported)
            second = await TonerService(store, identity).load_records()
        return first, report, second

    first, report, second = asyncio.run(scenario())

    assert report.imported == 3
    assert _project(second, TONER_FIELDS) == _project(first, TONER_FIELDS)


def test_returns_export_reimports_with_joins(open_store, identity, make_workbook) -> None:
    toners = make_workbook(["Modelo", "Capacidade", "Preço"], [["CE285A", 1000, 100]])
    units = make_workbook(["Unidade"], [["Matriz"], ["Filial"]])
    returns = make_workbook(
        ["ID Cliente", "Modelo", "Peso Retornado", "Unidade", "Destino"],
        [[101, "CE285A", 300, "Matriz", "Estoque"], [102, "CE285A", 120.5, "Filial", "Descarte"]],
    )
    fields = ("client_id", "toner_id", "returned_weight", "unit_id", "destination", "recovered_value")

    async def scenario():
        async with open_store() as store:
            service = ImportService(store, identity)
            await service.import_workbook(TONERS, toners)
            await service.import_workbook(UNITS, units)
            await service.import_workbook(RETURNS, returns)
            before = await ReturnService(store, identity).load_records()
            exported = await ExportService().export_workbook(RETURNS, before)
            await service.import_workbook(RETURNS, exported)
            after = await ReturnService(store, identity).load_records()
        return before, exported, after

    before, exported, after = asyncio.run(scenario())
    rows = read_rows(exported)

    assert {row["Modelo"] for row in rows} == {"CE285A"}
    assert {row["Unidade"] for row in rows} == {"Matriz", "Filial"}
    assert len(after) == 4
    assert sorted(_project(after, fields)) == sorted(_project(before, fields) * 2)
    assert sorted(row["recovered_value"] for row in before) == pytest.approx([0.0, 1000.0])


def test_tco_export_reimports_line_items(open_store, identity, make_workbook, tmp_path) -> None:
    content = make_workbook(
        [
            "Modelo", "Fabricante", "Preço Impressora", "PIS", "IPI", "ICMS", "COFINS", "Acessórios",
            "Custo Operacional 1 - Título", "Custo Operacional 1 - Valor",
            "Custo Operacional 2 - Título", "Custo Operacional 2 - Valor",
            "Custo Indireto 1 - Título", "Custo Indireto 1 - Valor",
        ],
        [
            ["M404", "Samsung", 2000, 33, 100, 360, 152, 55, "Papel", 30, "Toner", 80, "Frete", 25],
            ["M3655", "Samsung", 3000, 0, 0, 0, 0, 0, "Papel", 45, None, None, None, None],
        ],
    )
    copy_path = str(tmp_path / "copy.db")

    async def scenario():
        async with open_store() as store:
            await ImportService(store, identity).import_workbook(TCOS, content)
            first = await TcoService(store, identity).load_records()
        exported = await ExportService().export_workbook(TCOS, first)
        async with open_store(copy_path) as store:
            await ImportService(store, identity).import_workbook(TCOS, exported)
            second = await TcoService(store, identity).load_records()
        return first, second

    first, second = asyncio.run(scenario())

    assert _project(second, TCO_FIELDS) == _project(first, TCO_FIELDS)
    assert _costs(second, "operating_costs") == _costs(first, "operating_costs")
    assert _costs(second, "indirect_costs") == _costs(first, "indirect_costs")
    totals = {row["model"]: row["acquisition_total"] for row in first}
    assert totals == {"M404": 2700.0, "M3655": 3000.0}


def test_warranty_export_reimports_text_fields(open_store, identity, make_workbook, tmp_path) -> None:
    content = make_workbook(
        ["Solicitante", "Data Solicitação", "NF Compra", "Chave NF Compra", "Status", "Quantidade", "Valor Total"],
        [["Ana", "2024-03-02", 45871, "3524 0101", None, 2, 199.8]],
    )
    fields = (
        "requester", "request_date", "purchase_invoice", "purchase_invoice_key",
        "status", "quantity", "total_value", "kind", "warranty_date",
    )
    copy_path = str(tmp_path / "copy.db")

    async def scenario():
        async with open_store() as store:
            await ImportService(store, identity).import_workbook(WARRANTIES, content)
            first = await WarrantyService(store, identity).load_records()
        exported = await ExportService().export_workbook(WARRANTIES, first)
        async with open_store(copy_path) as store:
            await ImportService(store, identity).import_workbook(WARRANTIES, exported)
            second = await WarrantyService(store, identity).load_records()
        return first, second

    first, second = asyncio.run(scenario())

    assert first[0]["purchase_invoice"] == "45871"
    assert first[0]["status"] == "Aberta"
    assert _project(second, fields) == _project(first, fields)


def test_unit_export_reimport_is_fully_skipped(open_store, identity, make_workbook) -> None:
    content = make_workbook(["Unidade"], [["Matriz"], ["Filial"]])

    async def scenario():
        async with open_store() as store:
            service = ImportService(store, identity)
            await service.import_workbook(UNITS, content)
            records = await UnitService(store, identity).load_records()
            exported = await ExportService().export_workbook(UNITS, records)
            return await service.import_workbook(UNITS, exported)

    report = asyncio.run(scenario())

    assert (report.imported, report.skipped) == (0, 2)
