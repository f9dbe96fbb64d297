from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel


class RowStatus(StrEnum):
    imported = "imported"
    skipped = "skipped"
    failed = "failed"


@dataclass(frozen=True)
class ImportOutcome:
    row: int
    status: RowStatus
    reason: str = ""


class ImportReport(BaseModel):
    entity: str
    total_rows: int
    imported: int
    skipped: int
    failed: int
    reasons: list[str]
    summary: str

    @classmethod
    def from_outcomes(
        cls, entity: str, outcomes: Sequence[ImportOutcome], max_reasons: int = 20
    ) -> "ImportReport":
        counts = {status: 0 for status in RowStatus}
        reasons: list[str] = []
        for outcome in outcomes:
            counts[outcome.status] += 1
            if outcome.reason and len(reasons) < max_reasons:
                reasons.append(f"Row {outcome.row}: {outcome.reason}")

        imported = counts[RowStatus.imported]
        skipped = counts[RowStatus.skipped]
        failed = counts[RowStatus.failed]
        summary = (
            f"Import finished: {imported} imported, {skipped} skipped, "
            f"{failed} failed ({len(outcomes)} rows)."
        )
        return cls(
            entity=entity,
            total_rows=len(outcomes),
            imported=imported,
            skipped=skipped,
            failed=failed,
            reasons=reasons,
            summary=summary,
        )
