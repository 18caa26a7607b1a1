"""Ports for the stores updates are applied to.

A ``Store`` hands out ``Schema`` handles in two interchangeable modes: one that
executes operations against the store and one that only captures them. Units are
written against ``Schema`` alone and never learn which mode they run in.

Capture-mode existence policy: ``has_table`` and ``has_column`` always answer
``False`` on a capturing schema, so previews follow the "not there yet" branch of
guarded units.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from contextlib import AbstractContextManager

    from updatekit.domain.model import CapturedStatement


@runtime_checkable
class Schema(Protocol):
    """Operations a unit may perform against its target store."""

    @property
    def capturing(self) -> bool: ...

    @property
    def operations(self) -> Any: ...  # backend-specific escape hatch

    def execute(self, statement: str, parameters: Mapping[str, Any] | None = None) -> None: ...

    def create_table(self, name: str, *columns: Any, **kwargs: Any) -> None: ...

    def drop_table(self, name: str) -> None: ...

    def rename_table(self, old_name: str, new_name: str) -> None: ...

    def add_column(self, table: str, column: Any) -> None: ...

    def drop_column(self, table: str, column: str) -> None: ...

    def create_index(
        self, name: str, table: str, columns: Sequence[str], *, unique: bool = False
    ) -> None: ...

    def drop_index(self, name: str, table: str | None = None) -> None: ...

    def has_table(self, name: str) -> bool: ...

    def has_column(self, table: str, column: str) -> bool: ...


@runtime_checkable
class CapturingSchema(Schema, Protocol):
    @property
    def statements(self) -> list[CapturedStatement]: ...


@runtime_checkable
class Store(Protocol):
    """A named physical store."""

    @property
    def name(self) -> str: ...

    @property
    def supports_transactional_ddl(self) -> bool: ...

    def open(self, *, transactional: bool) -> AbstractContextManager[Schema]:
        """Yield an executing schema.

        With ``transactional=True`` everything done through the schema commits when
        the block exits cleanly and rolls back when it raises. Otherwise each
        operation takes effect immediately.
        """
        ...

    def capture(self) -> AbstractContextManager[CapturingSchema]:
        """Yield a capturing schema; nothing reaches the store."""
        ...


@runtime_checkable
class StoreProvider(Protocol):
    """Resolves store names, ``None`` meaning the current default."""

    @property
    def default_name(self) -> str: ...

    def resolve(self, name: str | None = None) -> Store: ...

    def set_default(self, name: str) -> None: ...
