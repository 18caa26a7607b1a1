"""Port for the durable record of applied updates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from updatekit.domain.model import LedgerEntry


@runtime_checkable
class Ledger(Protocol):
    """Append-only record of which units were applied and in which batch.

    Implementations raise ``StoreUnavailableError`` when the backing store cannot
    be reached. ``record`` must reject an identifier that is already present with
    ``DuplicateUnitError`` instead of overwriting it.
    """

    def list_applied(self) -> set[str]: ...

    def next_batch_number(self) -> int: ...

    def record(self, identifier: str, batch: int, applied_at: datetime) -> None: ...

    def exists(self) -> bool: ...

    def initialize(self) -> None: ...

    def set_target_store(self, name: str | None) -> None: ...

    def entries(self) -> list[LedgerEntry]: ...

    def last_batch(self) -> list[LedgerEntry]: ...

    def delete(self, identifier: str) -> None: ...
