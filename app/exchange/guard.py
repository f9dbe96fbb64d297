from enum import StrEnum
from typing import Any

from app.auth import Identity
from app.exceptions import DuplicateSkip
from app.records.store import RecordStore


class DuplicatePolicy(StrEnum):
    reject_natural_key = "reject_natural_key"
    always_insert = "always_insert"


class DuplicateGuard:
    """Applies an entity's static duplicate policy before a write."""

    def __init__(
        self,
        store: RecordStore,
        identity: Identity,
        table: str,
        policy: DuplicatePolicy,
        natural_key: str | None = None,
    ) -> None:
        if policy is DuplicatePolicy.reject_natural_key and natural_key is None:
            raise ValueError(f"{table}: reject_natural_key policy needs a natural key")
        self._store = store
        self._identity = identity
        self._table = table
        self._policy = policy
        self._natural_key = natural_key

    async def check(self, record: dict[str, Any]) -> None:
        if self._policy is DuplicatePolicy.always_insert:
            return

        value = record.get(self._natural_key)
        existing = await self._store.select_all_matching(
            self._table, {self._natural_key: value}, identity=self._identity
        )
        if existing:
            raise DuplicateSkip(value)
