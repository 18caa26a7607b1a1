"""Ledger persisted in a table of the target store."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    String,
    Table,
    delete,
    func,
    insert,
    inspect,
    select,
)
from sqlalchemy.exc import (
    IntegrityError,
    OperationalError,
    ProgrammingError,
    SQLAlchemyError,
)

from updatekit.adapters.sqlalchemy.types import UTCDateTime
from updatekit.domain.errors import (
    AlreadyInitializedError,
    DuplicateUnitError,
    ProvisioningFailedError,
    StoreUnavailableError,
)
from updatekit.domain.model import LedgerEntry

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime

    from sqlalchemy import Connection, RowMapping

    from updatekit.adapters.sqlalchemy.store import SqlAlchemyStoreRegistry

log = logging.getLogger(__name__)

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "pk": "pk_%(table_name)s",
}


def build_ledger_table(name: str, metadata: MetaData | None = None) -> Table:
    """Return the ledger table definition: one row per applied update."""

    return Table(
        name,
        metadata or MetaData(naming_convention=NAMING_CONVENTION),
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("identifier", String(255), nullable=False, unique=True),
        Column("batch", Integer, nullable=False),
        Column("applied_at", UTCDateTime(), nullable=False),
    )


class SqlAlchemyLedger:
    """Ledger stored in ``table_name`` on the selected store."""

    def __init__(self, stores: SqlAlchemyStoreRegistry, *, table_name: str = "updates") -> None:
        self._stores = stores
        self._target: str | None = None
        self.table = build_ledger_table(table_name)

    def set_target_store(self, name: str | None) -> None:
        self._target = name

    def exists(self) -> bool:
        with self._connection() as connection:
            return inspect(connection).has_table(self.table.name)

    def initialize(self) -> None:
        if self.exists():
            raise AlreadyInitializedError(f"The {self.table.name} table already exists")
        store = self._stores.resolve(self._target)
        try:
            with store.engine.begin() as connection:
                self.table.create(connection)
        except SQLAlchemyError as exc:
            raise ProvisioningFailedError(
                f"Could not create the {self.table.name} table: {exc}"
            ) from exc
        log.info("Created ledger table %s", self.table.name)

    def list_applied(self) -> set[str]:
        with self._connection() as connection:
            rows = connection.execute(select(self.table.c.identifier)).scalars()
            return set(rows)

    def next_batch_number(self) -> int:
        with self._connection() as connection:
            last = connection.execute(select(func.max(self.table.c.batch))).scalar_one_or_none()
        return (last or 0) + 1

    def record(self, identifier: str, batch: int, applied_at: datetime) -> None:
        entry = LedgerEntry(identifier=identifier, batch=batch, applied_at=applied_at)
        # the unique constraint on identifier is the duplicate check
        with self._connection(write=True) as connection:
            try:
                connection.execute(
                    insert(self.table).values(
                        identifier=entry.identifier,
                        batch=entry.batch,
                        applied_at=entry.applied_at,
                    )
                )
            except IntegrityError as exc:
                raise DuplicateUnitError(identifier) from exc
        log.info("The unit %s was executed in batch %d", identifier, batch)

    def entries(self) -> list[LedgerEntry]:
        stmt = select(self.table).order_by(self.table.c.batch, self.table.c.identifier)
        with self._connection() as connection:
            return [self._to_entry(row) for row in connection.execute(stmt).mappings()]

    def last_batch(self) -> list[LedgerEntry]:
        last = select(func.max(self.table.c.batch)).scalar_subquery()
        stmt = (
            select(self.table)
            .where(self.table.c.batch == last)
            .order_by(self.table.c.identifier.desc())
        )
        with self._connection() as connection:
            return [self._to_entry(row) for row in connection.execute(stmt).mappings()]

    def delete(self, identifier: str) -> None:
        with self._connection(write=True) as connection:
            connection.execute(delete(self.table).where(self.table.c.identifier == identifier))

    @staticmethod
    def _to_entry(row: RowMapping) -> LedgerEntry:
        return LedgerEntry(
            identifier=row["identifier"],
            batch=row["batch"],
            applied_at=row["applied_at"],
        )

    @contextmanager
    def _connection(self, *, write: bool = False) -> Iterator[Connection]:
        store = self._stores.resolve(self._target)
        try:
            if write:
                with store.engine.begin() as connection:
                    yield connection
            else:
                with store.engine.connect() as connection:
                    yield connection
        except (OperationalError, ProgrammingError) as exc:
            # missing ledger table: OperationalError on SQLite, ProgrammingError on PostgreSQL
            raise StoreUnavailableError(store.name, str(exc.orig)) from exc
