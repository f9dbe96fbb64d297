"""Import behaviour: row state machine, policies and best-effort writes."""

import asyncio
from datetime import UTC, datetime
from io import BytesIO

import pytest
from openpyxl import load_workbook

from app.database import connect_database
from app.exceptions import FormatError, StoreWriteError
from app.exchange.export import write_workbook
from app.exchange.pipeline import TRANSITIONS, InvalidTransition, RowPipeline, RowState, advance
from app.exchange.reader import read_rows
from app.exchange.report import RowStatus
from app.exchange.service import ImportService
from app.nonconformities.definition import NONCONFORMITIES, next_number
from app.records.store import RecordStore
from app.returns.definition import RETURNS
from app.tco.definition import TCOS
from app.toners.definition import TONERS
from app.units.definition import UNITS

TONER_HEADERS = ["Modelo", "Peso Cheio (g)", "Peso Vazio (g)", "Capacidade", "Preço"]
RETURN_HEADERS = ["ID Cliente", "Modelo", "Peso Retornado", "Unidade", "Destino"]


class FlakyStore(RecordStore):
    """Rejects inserts whose ``reject_field`` equals ``reject_value``."""

    def __init__(self, db, table: str, reject_field: str, reject_value) -> None:
        super().__init__(db)
        self.reject = (table, reject_field, reject_value)

    async def insert_one(self, table, record, *, identity):
        reject_table, field, value = self.reject
        if table == reject_table and record.get(field) == value:
            raise StoreWriteError(f"{table}: rejected {value}")
        return await super().insert_one(table, record, identity=identity)


async def _seed_toners_and_units(store: RecordStore, identity) -> None:
    await store.insert_one(
        "toners",
        {"model": "CE285A", "price": 100.0, "sheet_capacity": 1000},
        identity=identity,
    )
    await store.insert_one(
        "toners",
        {"model": "ZERO", "price": 100.0, "sheet_capacity": 0},
        identity=identity,
    )
    await store.insert_one("units", {"name": "Matriz"}, identity=identity)


# -- state machine -----------------------------------------------------------


def test_terminal_states_have_no_exits() -> None:
    for state in (RowState.failed, RowState.skipped, RowState.imported):
        assert TRANSITIONS[state] == frozenset()


def test_every_state_has_transition_entry() -> None:
    assert set(TRANSITIONS) == set(RowState)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (RowState.parsed, RowState.writing),
        (RowState.valid, RowState.imported),
        (RowState.unresolved, RowState.failed),
        (RowState.duplicate, RowState.writing),
        (RowState.imported, RowState.parsed),
    ],
)
def test_invalid_transitions_are_rejected(current, target) -> None:
    with pytest.raises(InvalidTransition):
        advance(current, target)


def test_happy_path_is_allowed() -> None:
    path = [
        RowState.parsed,
        RowState.valid,
        RowState.resolving,
        RowState.resolved,
        RowState.duplicate_check,
        RowState.writing,
        RowState.write_ok,
        RowState.imported,
    ]
    state = path[0]
    for target in path[1:]:
        state = advance(state, target)
    assert state is RowState.imported


# -- duplicate policy ----------------------------------------------------------


def test_reimporting_units_skips_every_row(open_store, identity, make_workbook) -> None:
    content = make_workbook(["Unidade"], [["Matriz"], ["Filial Norte"], ["Filial Sul"]])

    async def scenario():
        async with open_store() as store:
            service = ImportService(store, identity)
            first = await service.import_workbook(UNITS, content)
            second = await service.import_workbook(UNITS, content)
            stored = await store.select_all_matching("units", identity=identity)
            return first, second, stored

    first, second, stored = asyncio.run(scenario())

    assert first.imported == 3
    assert second.imported == 0
    assert second.skipped == first.imported
    assert len(stored) == 3
    assert second.reasons[0] == "Row 2: duplicate natural key: Matriz"


def test_duplicate_within_one_batch_is_skipped(open_store, identity, make_workbook) -> None:
    content = make_workbook(["Unidade"], [["Matriz"], ["Matriz"]])

    async def scenario():
        async with open_store() as store:
            return await ImportService(store, identity).import_workbook(UNITS, content)

    report = asyncio.run(scenario())

    assert (report.imported, report.skipped) == (1, 1)


def test_always_insert_entities_accept_repeats(open_store, identity, make_workbook) -> None:
    content = make_workbook(TONER_HEADERS, [["CE285A", 820, 700, 1600, 89.9]])

    async def scenario():
        async with open_store() as store:
            service = ImportService(store, identity)
            await service.import_workbook(TONERS, content)
            await service.import_workbook(TONERS, content)
            return await store.select_all_matching("toners", identity=identity)

    assert len(asyncio.run(scenario())) == 2


# -- required fields and references -----------------------------------------------


def test_missing_required_field_fails_row(open_store, identity, make_workbook) -> None:
    content = make_workbook(
        RETURN_HEADERS,
        [[None, "CE285A", 300, "Matriz", "Estoque"], [77, "CE285A", 300, "Matriz", "Estoque"]],
    )

    async def scenario():
        async with open_store() as store:
            await _seed_toners_and_units(store, identity)
            return await ImportService(store, identity).import_workbook(RETURNS, content)

    report = asyncio.run(scenario())

    assert (report.imported, report.failed) == (1, 1)
    assert report.reasons == ["Row 2: missing field ID Cliente"]


def test_unresolved_reference_skips_only_that_row(open_store, identity, make_workbook) -> None:
    content = make_workbook(
        RETURN_HEADERS,
        [
            [10, "CE285A", 300, "Matriz", "Estoque"],
            [11, "NAO-EXISTE", 300, "Matriz", "Estoque"],
            [12, "CE285A", 250, "Desconhecida", "Descarte"],
            [13, "CE285A", 280, "Matriz", "Descarte"],
        ],
    )

    async def scenario():
        async with open_store() as store:
            await _seed_toners_and_units(store, identity)
            report = await ImportService(store, identity).import_workbook(RETURNS, content)
            stored = await store.select_all_matching("returns", identity=identity)
            return report, stored

    report, stored = asyncio.run(scenario())

    assert (report.imported, report.skipped, report.failed) == (2, 2, 0)
    assert report.reasons == [
        "Row 3: referenced entity not found: NAO-EXISTE",
        "Row 4: referenced entity not found: Desconhecida",
    ]
    assert sorted(row["client_id"] for row in stored) == [10, 13]


def test_mixed_batch_counts_each_outcome_once(open_store, identity, make_workbook) -> None:
    content = make_workbook(
        RETURN_HEADERS,
        [
            [20, "CE285A", 300, "Matriz", "Estoque"],
            [None, "CE285A", 300, "Matriz", "Estoque"],
            [22, "NAO-EXISTE", 300, "Matriz", "Estoque"],
        ],
    )

    async def scenario():
        async with open_store() as store:
            await _seed_toners_and_units(store, identity)
            report = await ImportService(store, identity).import_workbook(RETURNS, content)
            stored = await store.select_all_matching("returns", identity=identity)
            return report, stored

    report, stored = asyncio.run(scenario())

    assert (report.imported, report.failed, report.skipped) == (1, 1, 1)
    assert report.total_rows == 3
    assert report.reasons == [
        "Row 3: missing field ID Cliente",
        "Row 4: referenced entity not found: NAO-EXISTE",
    ]
    assert [row["client_id"] for row in stored] == [20]


def test_ambiguous_natural_key_resolves_to_oldest(open_store, identity, make_workbook) -> None:
    content = make_workbook(RETURN_HEADERS, [[5, "DUP", 100, "Matriz", "Estoque"]])

    async def scenario():
        async with open_store() as store:
            older = await store.insert_one(
                "toners",
                {"model": "DUP", "price": 10.0, "sheet_capacity": 100, "created_at": "2024-01-01T00:00:00+00:00"},
                identity=identity,
            )
            await store.insert_one(
                "toners",
                {"model": "DUP", "price": 50.0, "sheet_capacity": 100, "created_at": "2024-06-01T00:00:00+00:00"},
                identity=identity,
            )
            await store.insert_one("units", {"name": "Matriz"}, identity=identity)
            await ImportService(store, identity).import_workbook(RETURNS, content)
            stored = await store.select_all_matching("returns", identity=identity)
            return older, stored

    older, stored = asyncio.run(scenario())

    assert stored[0]["toner_id"] == older["id"]
    assert stored[0]["recovered_value"] == pytest.approx(1000.0)


# -- derived values ---------------------------------------------------------------


def test_derived_values_are_written_on_import(open_store, identity, make_workbook) -> None:
    toners = make_workbook(TONER_HEADERS, [["CE285A", 820, 700, 1000, 100]])
    returns = make_workbook(
        RETURN_HEADERS,
        [[1, "CE285A", 300, "Matriz", "Estoque"], [2, "ZERO", 300, "Matriz", "Estoque"]],
    )

    async def scenario():
        async with open_store() as store:
            service = ImportService(store, identity)
            await store.insert_one("units", {"name": "Matriz"}, identity=identity)
            await store.insert_one(
                "toners", {"model": "ZERO", "price": 100.0, "sheet_capacity": 0}, identity=identity
            )
            await service.import_workbook(TONERS, toners)
            await service.import_workbook(RETURNS, returns)
            toner = (await store.select_all_matching("toners", {"model": "CE285A"}, identity=identity))[0]
            stored = await store.select_all_matching("returns", identity=identity)
            return toner, {row["client_id"]: row for row in stored}

    toner, stored = asyncio.run(scenario())

    assert toner["weight_delta"] == 120.0
    assert toner["price_per_sheet"] == pytest.approx(0.1)
    assert stored[1]["recovered_value"] == pytest.approx(1000.0)
    assert stored[2]["recovered_value"] == 0.0


def test_negative_weight_delta_is_stored_and_exported(open_store, identity, make_workbook) -> None:
    content = make_workbook(TONER_HEADERS, [["LEVE", 100, 250, 1000, 100]])

    async def scenario():
        async with open_store() as store:
            await ImportService(store, identity).import_workbook(TONERS, content)
            return await store.select_all_matching("toners", identity=identity)

    stored = asyncio.run(scenario())
    ws = load_workbook(BytesIO(write_workbook(TONERS, stored))).active
    exported = {ws.cell(1, col).value: ws.cell(2, col).value for col in range(1, ws.max_column + 1)}

    assert stored[0]["weight_delta"] == -150.0
    assert exported["Gramatura"] == -150.0


# -- best-effort writes -----------------------------------------------------------


def test_write_failure_does_not_stop_the_batch(db_path, identity, make_workbook) -> None:

    content = make_workbook(
        TONER_HEADERS,
        [["A1", 1, 1, 1, 1], ["BAD", 1, 1, 1, 1], ["A3", 1, 1, 1, 1]],
    )

    async def scenario():
        db = await connect_database(db_path)
        try:
            store = FlakyStore(db, "toners", "model", "BAD")
            report = await ImportService(store, identity).import_workbook(TONERS, content)
            stored = await store.select_all_matching("toners", identity=identity)
            return report, stored
        finally:
            await db.close()

    report, stored = asyncio.run(scenario())

    assert (report.imported, report.failed) == (2, 1)
    assert report.reasons == ["Row 3: toners: rejected BAD"]
    assert sorted(row["model"] for row in stored) == ["A1", "A3"]


def test_failed_line_item_keeps_parent(db_path, identity, make_workbook) -> None:

    content = make_workbook(
        [
            "Modelo",
            "Preço Impressora",
            "Custo Operacional 1 - Título",
            "Custo Operacional 1 - Valor",
            "Custo Indireto 1 - Título",
            "Custo Indireto 1 - Valor",
        ],
        [["M404", 2000, "Papel", 30, "Frete", 99]],
    )

    async def scenario():
        db = await connect_database(db_path)
        try:
            store = FlakyStore(db, "tco_indirect_costs", "title", "Frete")
            report = await ImportService(store, identity).import_workbook(TCOS, content)
            parents = await store.select_all_matching("tcos", identity=identity)
            operating = await store.select_all_matching("tco_operating_costs", identity=identity)
            return report, parents, operating
        finally:
            await db.close()

    report, parents, operating = asyncio.run(scenario())

    assert report.failed == 1
    assert len(parents) == 1
    assert [item["title"] for item in operating] == ["Papel"]


def test_concurrent_import_writes_every_row(open_store, identity, make_workbook) -> None:
    rows = [[f"M{index}", 1, 1, 100, 10] for index in range(12)]
    content = make_workbook(TONER_HEADERS, rows)

    async def scenario():
        async with open_store() as store:
            service = ImportService(store, identity, max_concurrency=4)
            report = await service.import_workbook(TONERS, content)
            stored = await store.select_all_matching("toners", identity=identity)
            return report, stored

    report, stored = asyncio.run(scenario())

    assert report.imported == 12
    assert len(stored) == 12


def test_row_outcomes_are_in_row_order(open_store, identity, make_workbook) -> None:

    content = make_workbook(["Unidade"], [[name] for name in "ABCDE"])

    async def scenario():
        async with open_store() as store:
            pipeline = RowPipeline(UNITS, store, identity, max_concurrency=3)
            return await pipeline.run(read_rows(content))

    outcomes = asyncio.run(scenario())

    assert [outcome.row for outcome in outcomes] == [2, 3, 4, 5, 6]
    assert {outcome.status for outcome in outcomes} == {RowStatus.imported}


def test_unreadable_file_aborts_before_any_write(open_store, identity) -> None:
    async def scenario():
        async with open_store() as store:
            with pytest.raises(FormatError):
                await ImportService(store, identity).import_workbook(UNITS, b"garbage")
            return await store.select_all_matching("units", identity=identity)

    assert asyncio.run(scenario()) == []


# -- generated fields ---------------------------------------------------------------


def test_nonconformity_numbers_are_sequential(open_store, identity, make_workbook) -> None:
    headers = ["Responsável", "Descrição", "Tipo", "Gravidade", "Departamento"]
    content = make_workbook(
        headers,
        [
            ["Ana", "Etiqueta errada", "Produto", "Alta", "Expedição"],
            ["Rui", "Atraso", "Processo", "Baixa", "Logística"],
        ],
    )

    async def scenario():
        async with open_store() as store:
            report = await ImportService(store, identity).import_workbook(NONCONFORMITIES, content)
            stored = await store.select_all_matching("nonconformities", identity=identity)
            return report, stored

    report, stored = asyncio.run(scenario())
    year = datetime.now(UTC).year

    assert report.imported == 2
    assert sorted(row["number"] for row in stored) == [f"NC-{year}-0001", f"NC-{year}-0002"]
    assert {row["status"] for row in stored} == {"Aberta"}


def test_concluded_nonconformity_import_is_closed(open_store, identity, make_workbook) -> None:
    headers = ["Responsável", "Descrição", "Tipo", "Gravidade", "Departamento", "Status"]
    content = make_workbook(
        headers,
        [
            ["Ana", "Etiqueta errada", "Produto", "Alta", "Expedição", "Concluída"],
            ["Rui", "Atraso", "Processo", "Baixa", "Logística", "Em andamento"],
        ],
    )

    async def scenario():
        async with open_store() as store:
            await ImportService(store, identity).import_workbook(NONCONFORMITIES, content)
            return await store.select_all_matching("nonconformities", identity=identity)

    stored = {row["opened_by"]: row for row in asyncio.run(scenario())}

    assert stored["Ana"]["closed_at"] is not None
    assert stored["Rui"]["closed_at"] is None


def test_next_number_ignores_other_years() -> None:
    existing = ["NC-2023-0007", "NC-2024-0002", "NC-2024-0010", "legacy"]

    assert next_number(existing, 2024) == "NC-2024-0011"
    assert next_number(existing, 2025) == "NC-2025-0001"
