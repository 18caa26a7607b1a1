"""Core value objects for change units and the ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

    from updatekit.domain.ports.store import Schema


class ChangeUnit(ABC):
    """Base class for updates.

    Subclasses live in files named ``<ordering-prefix>_<descriptor>.py`` and are
    named after the descriptor in StudlyCase, e.g. ``CreateUsersTable`` for
    ``2024_01_01_000000_create_users_table.py``. Instances are built at run time
    and never persisted; only the identifier and batch reach the ledger.

    Example::

        class CreateUsersTable(ChangeUnit):
            def apply(self, schema: Schema) -> None:
                if not schema.has_table("users"):
                    schema.create_table("users", Column("id", Integer, primary_key=True))
    """

    target_store: ClassVar[str | None] = None
    """Store this unit applies to; ``None`` uses the engine default."""

    transactional: ClassVar[bool] = True
    """Whether the unit may run inside a transaction when the store supports it."""

    @abstractmethod
    def apply(self, schema: Schema) -> None: ...


@dataclass(frozen=True, slots=True)
class UnitReference:
    """A discovered unit source: its identifier and where it lives."""

    identifier: str
    path: Path


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """Persisted fact that a unit was applied in a batch at a point in time."""

    identifier: str
    batch: int
    applied_at: datetime

    def __post_init__(self) -> None:
        if not self.identifier:
            raise ValueError("Ledger entry identifier must not be empty")
        if self.batch < 1:
            raise ValueError(f"Ledger batch must be >= 1, got {self.batch}")


@dataclass(frozen=True, slots=True)
class RunOptions:
    pretend: bool = False
    step: bool = False


@dataclass(frozen=True, slots=True)
class CapturedStatement:
    """A statement recorded by a capturing schema instead of being executed."""

    sql: str
    store: str
