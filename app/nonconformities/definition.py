from datetime import UTC, datetime
from typing import Any

from app.auth import Identity
from app.exchange.entity import CellFormat, EntityDefinition, ExportColumn
from app.exchange.fields import Coercion, FieldSpec
from app.nonconformities.models import NonconformityStatus
from app.records.store import RecordStore

NUMBER_PREFIX = "NC"


def number_prefix(year: int) -> str:
    return f"{NUMBER_PREFIX}-{year}-"


def next_number(existing: list[str], year: int) -> str:
    """Next ``NC-YYYY-NNNN`` after the highest sequence issued this year."""
    prefix = number_prefix(year)
    sequences = [
        int(number[len(prefix):])
        for number in existing
        if number.startswith(prefix) and number[len(prefix):].isdigit()
    ]
    return f"{prefix}{max(sequences, default=0) + 1:04d}"


async def assign_number(store: RecordStore, identity: Identity, record: dict[str, Any]) -> None:
    now = datetime.now(UTC)
    rows = await store.select_all_matching("nonconformities", identity=identity)
    record["number"] = next_number([row["number"] for row in rows], now.year)
    record.setdefault("opened_at", now.isoformat())
    if record.get("status") == NonconformityStatus.concluded:
        record.setdefault("closed_at", now.isoformat())


NONCONFORMITIES = EntityDefinition(
    name="nonconformities",
    table="nonconformities",
    sheet_title="Não Conformidades",
    file_stem="nao-conformidades",
    fields=(
        FieldSpec("opened_by", "Responsável", required=True),
        FieldSpec("description", "Descrição", required=True),
        FieldSpec("kind", "Tipo", required=True),
        FieldSpec("severity", "Gravidade", required=True),
        FieldSpec("department", "Departamento", required=True),
        FieldSpec("root_cause", "Causa Raiz"),
        FieldSpec("immediate_action", "Ação Imediata"),
        FieldSpec("action_owner", "Responsável Ação"),
        FieldSpec("due_date", "Prazo", Coercion.date),
        FieldSpec("status", "Status", Coercion.enum, default=NonconformityStatus.open.value),
        FieldSpec("solution_evidence", "Evidência da Solução"),
    ),
    columns=(
        ExportColumn("Número", "number"),
        ExportColumn("Data de Abertura", "opened_at", CellFormat.timestamp),
        ExportColumn("Responsável", "opened_by"),
        ExportColumn("Departamento", "department"),
        ExportColumn("Tipo", "kind"),
        ExportColumn("Gravidade", "severity"),
        ExportColumn("Status", "status"),
        ExportColumn("Descrição", "description"),
        ExportColumn("Causa Raiz", "root_cause"),
        ExportColumn("Ação Imediata", "immediate_action"),
        ExportColumn("Responsável Ação", "action_owner"),
        ExportColumn("Prazo", "due_date"),
        ExportColumn("Data Encerramento", "closed_at", CellFormat.timestamp),
        ExportColumn("Evidência da Solução", "solution_evidence"),
    ),
    prepare=assign_number,
)
