from collections.abc import Sequence
from typing import Any

import structlog

from app.auth import Identity
from app.exceptions import ResolutionError
from app.exchange.fields import ForeignKeyRef
from app.records.store import RecordStore

logger = structlog.get_logger()


class ForeignKeyResolver:
    """Resolves references by exact natural-key match.

    Lookups are memoised for the lifetime of the resolver, which is one
    batch. When a natural key matches several records the oldest one wins
    (ascending ``created_at``, then ``id``).
    """

    def __init__(self, store: RecordStore, identity: Identity) -> None:
        self._store = store
        self._identity = identity
        self._cache: dict[tuple[str, str, Any], dict | None] = {}

    async def resolve(
        self, record: dict[str, Any], references: Sequence[ForeignKeyRef]
    ) -> dict[str, dict]:
        """Replace each natural-key value in ``record`` by the referenced id.

        Returns the referenced records keyed by reference field, for use by
        derived-value formulas.
        """
        related: dict[str, dict] = {}
        for ref in references:
            value = record.pop(ref.source, None)
            match = await self.lookup(ref, value)
            if match is None:
                raise ResolutionError(value)
            record[ref.field] = match["id"]
            related[ref.field] = match
        return related

    async def lookup(self, ref: ForeignKeyRef, value: Any) -> dict | None:
        key = (ref.table, ref.natural_key, value)
        if key in self._cache:
            return self._cache[key]

        matches = []
        if value is not None:
            matches = await self._store.select_all_matching(
                ref.table,
                {ref.natural_key: value},
                identity=self._identity,
                order_by=("created_at", "id"),
            )
        if len(matches) > 1:
            logger.warning(
                "natural_key_ambiguous",
                table=ref.table,
                natural_key=ref.natural_key,
                value=value,
                matches=len(matches),
                chosen=matches[0]["id"],
            )

        match = matches[0] if matches else None
        self._cache[key] = match
        return match
