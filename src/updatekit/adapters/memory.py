"""In-memory reference implementation of the ledger port."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from updatekit.domain.errors import (
    AlreadyInitializedError,
    DuplicateUnitError,
    StoreUnavailableError,
)
from updatekit.domain.model import LedgerEntry

if TYPE_CHECKING:
    from datetime import datetime

log = logging.getLogger(__name__)

DEFAULT_STORE_KEY = "default"


@dataclass(slots=True)
class _LedgerState:
    entries: dict[str, LedgerEntry] = field(default_factory=dict)


class InMemoryLedger:
    """Ledger keeping one independent table per target store.

    Useful in tests and for dry wiring. A store listed in ``unavailable`` behaves
    like an unreachable connection.
    """

    def __init__(self, *, provisioned: bool = True) -> None:
        self._tables: dict[str, _LedgerState] = {}
        self._target: str = DEFAULT_STORE_KEY
        self.unavailable: set[str] = set()
        if provisioned:
            self._tables[self._target] = _LedgerState()

    def set_target_store(self, name: str | None) -> None:
        self._target = name or DEFAULT_STORE_KEY

    @property
    def target_store(self) -> str:
        return self._target

    def exists(self) -> bool:
        self._ensure_reachable()
        return self._target in self._tables

    def initialize(self) -> None:
        if self.exists():
            raise AlreadyInitializedError(f"Ledger already exists on store {self._target!r}")
        self._tables[self._target] = _LedgerState()

    def list_applied(self) -> set[str]:
        return set(self._state().entries)

    def next_batch_number(self) -> int:
        batches = [entry.batch for entry in self._state().entries.values()]
        return max(batches, default=0) + 1

    def record(self, identifier: str, batch: int, applied_at: datetime) -> None:
        state = self._state()
        if identifier in state.entries:
            raise DuplicateUnitError(identifier)
        state.entries[identifier] = LedgerEntry(
            identifier=identifier, batch=batch, applied_at=applied_at
        )
        log.info("The unit %s was executed in batch %d", identifier, batch)

    def entries(self) -> list[LedgerEntry]:
        return sorted(self._state().entries.values(), key=lambda e: (e.batch, e.identifier))

    def last_batch(self) -> list[LedgerEntry]:
        entries = list(self._state().entries.values())
        if not entries:
            return []
        last = max(entry.batch for entry in entries)
        return sorted(
            (entry for entry in entries if entry.batch == last),
            key=lambda e: e.identifier,
            reverse=True,
        )

    def delete(self, identifier: str) -> None:
        self._state().entries.pop(identifier, None)

    def _state(self) -> _LedgerState:
        self._ensure_reachable()
        state = self._tables.get(self._target)
        if state is None:
            raise StoreUnavailableError(self._target, "ledger has not been initialised")
        return state

    def _ensure_reachable(self) -> None:
        if self._target in self.unavailable:
            raise StoreUnavailableError(self._target)
