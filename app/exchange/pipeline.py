from enum import StrEnum
from typing import Any

import structlog

from app.auth import Identity
from app.exceptions import DuplicateSkip, FieldMissingError, ResolutionError, StoreWriteError
from app.exchange.entity import EntityDefinition
from app.exchange.guard import DuplicateGuard
from app.exchange.mapper import RowMapper, SourceRow
from app.exchange.report import ImportOutcome, RowStatus
from app.exchange.resolver import ForeignKeyResolver
from app.exchange.writer import BatchWriter
from app.records.store import RecordStore

logger = structlog.get_logger()


class RowState(StrEnum):
    parsed = "parsed"
    missing_required_field = "missing_required_field"
    valid = "valid"
    resolving = "resolving"
    unresolved = "unresolved"
    resolved = "resolved"
    duplicate_check = "duplicate_check"
    duplicate = "duplicate"
    writing = "writing"
    write_error = "write_error"
    write_ok = "write_ok"
    failed = "failed"
    skipped = "skipped"
    imported = "imported"


TRANSITIONS: dict[RowState, frozenset[RowState]] = {
    RowState.parsed: frozenset({RowState.valid, RowState.missing_required_field}),
    RowState.missing_required_field: frozenset({RowState.failed}),
    RowState.valid: frozenset({RowState.resolving}),
    RowState.resolving: frozenset({RowState.resolved, RowState.unresolved}),
    RowState.unresolved: frozenset({RowState.skipped}),
    RowState.resolved: frozenset({RowState.duplicate_check}),
    RowState.duplicate_check: frozenset({RowState.writing, RowState.duplicate}),
    RowState.duplicate: frozenset({RowState.skipped}),
    RowState.writing: frozenset({RowState.write_ok, RowState.write_error}),
    RowState.write_error: frozenset({RowState.failed}),
    RowState.write_ok: frozenset({RowState.imported}),
    RowState.failed: frozenset(),
    RowState.skipped: frozenset(),
    RowState.imported: frozenset(),
}

TERMINAL_STATUS = {
    RowState.failed: RowStatus.failed,
    RowState.skipped: RowStatus.skipped,
    RowState.imported: RowStatus.imported,
}


class InvalidTransition(Exception):
    def __init__(self, current: RowState, target: RowState):
        super().__init__(f"invalid row transition {current} -> {target}")
        self.current = current
        self.target = target


def advance(current: RowState, target: RowState) -> RowState:
    if target not in TRANSITIONS[current]:
        raise InvalidTransition(current, target)
    return target


class RowTrace:
    """State history of one row, checked against ``TRANSITIONS``."""

    def __init__(self, row: int) -> None:
        self.row = row
        self.states = [RowState.parsed]

    @property
    def state(self) -> RowState:
        return self.states[-1]

    def to(self, *targets: RowState) -> None:
        for target in targets:
            self.states.append(advance(self.state, target))

    def outcome(self, reason: str = "") -> ImportOutcome:
        return ImportOutcome(row=self.row, status=TERMINAL_STATUS[self.state], reason=reason)


class RowPipeline:
    """Drives rows of one batch through map, resolve, derive, guard and write.

    Resolver lookups are memoised for the lifetime of the pipeline, so a
    pipeline must not outlive its batch.
    """

    def __init__(
        self,
        definition: EntityDefinition,
        store: RecordStore,
        identity: Identity,
        max_concurrency: int = 1,
    ) -> None:
        self.definition = definition
        self._mapper = RowMapper(definition.fields, definition.line_items)
        self._resolver = ForeignKeyResolver(store, identity)
        self._guard = DuplicateGuard(
            store, identity, definition.table, definition.duplicate_policy, definition.natural_key
        )
        self.writer = BatchWriter(store, identity, definition, max_concurrency)

    async def run(self, rows: list[SourceRow]) -> list[ImportOutcome]:
        return await self.writer.run(rows, self.process)

    async def process(self, row_number: int, row: SourceRow) -> ImportOutcome:
        trace = RowTrace(row_number)

        try:
            record: dict[str, Any] = self._mapper.map_row(row)
        except FieldMissingError as exc:
            trace.to(RowState.missing_required_field, RowState.failed)
            return self._finish(trace, exc.message)
        trace.to(RowState.valid, RowState.resolving)

        try:
            related = await self._resolver.resolve(record, self.definition.references)
        except ResolutionError as exc:
            trace.to(RowState.unresolved, RowState.skipped)
            return self._finish(trace, exc.message)
        trace.to(RowState.resolved)

        record.update(self.definition.derived_values(record, related))

        trace.to(RowState.duplicate_check)
        try:
            await self._guard.check(record)
        except DuplicateSkip as exc:
            trace.to(RowState.duplicate, RowState.skipped)
            return self._finish(trace, exc.message)
        trace.to(RowState.writing)

        try:
            await self.writer.persist(record)
        except StoreWriteError as exc:
            trace.to(RowState.write_error, RowState.failed)
            return self._finish(trace, exc.message)
        trace.to(RowState.write_ok, RowState.imported)

        return self._finish(trace)

    def _finish(self, trace: RowTrace, reason: str = "") -> ImportOutcome:
        outcome = trace.outcome(reason)
        log = logger.debug if outcome.status is RowStatus.imported else logger.warning
        log(
            "import_row_finished",
            row=trace.row,
            status=outcome.status.value,
            path=[state.value for state in trace.states],
            reason=reason or None,
        )
        return outcome
