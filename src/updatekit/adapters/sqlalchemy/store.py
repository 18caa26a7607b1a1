"""SQLAlchemy stores exposing alembic operations to updates.

Both schema flavours drive the same ``alembic.operations.Operations`` facade:

* ``ExecutingSchema`` binds it to a live connection, so operations run.
* ``CaptureSchema`` binds it to an offline (``as_sql``) migration context whose
  output buffer collects each compiled statement instead of sending it.

Capture mode answers every existence check with ``False``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from alembic.ddl.impl import DefaultImpl
from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import OperationalError

from updatekit.domain.errors import StoreUnavailableError
from updatekit.domain.model import CapturedStatement

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    from sqlalchemy import Connection, Dialect
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class _AlembicSchema:
    capturing: bool = False

    def __init__(self, context: MigrationContext, *, store: str) -> None:
        self._operations = Operations(context)
        self.store = store

    @property
    def operations(self) -> Operations:
        return self._operations

    def execute(self, statement: str, parameters: Mapping[str, Any] | None = None) -> None:
        clause = text(statement)
        if parameters:
            clause = clause.bindparams(**parameters)
        self._operations.execute(clause)

    def create_table(self, name: str, *columns: Any, **kwargs: Any) -> None:
        self._operations.create_table(name, *columns, **kwargs)

    def drop_table(self, name: str) -> None:
        self._operations.drop_table(name)

    def rename_table(self, old_name: str, new_name: str) -> None:
        self._operations.rename_table(old_name, new_name)

    def add_column(self, table: str, column: Any) -> None:
        self._operations.add_column(table, column)

    def drop_column(self, table: str, column: str) -> None:
        self._operations.drop_column(table, column)

    def create_index(
        self, name: str, table: str, columns: Sequence[str], *, unique: bool = False
    ) -> None:
        self._operations.create_index(name, table, list(columns), unique=unique)

    def drop_index(self, name: str, table: str | None = None) -> None:
        self._operations.drop_index(name, table_name=table)


class ExecutingSchema(_AlembicSchema):
    def __init__(self, connection: Connection, *, store: str) -> None:
        super().__init__(MigrationContext.configure(connection=connection), store=store)
        self._connection = connection

    def has_table(self, name: str) -> bool:
        return inspect(self._connection).has_table(name)

    def has_column(self, table: str, column: str) -> bool:
        inspector = inspect(self._connection)
        if not inspector.has_table(table):
            return False
        return any(info["name"] == column for info in inspector.get_columns(table))


class _StatementBuffer:
    """Output buffer for alembic's offline mode; alembic writes one statement per call."""

    def __init__(self, store: str) -> None:
        self.store = store
        self.statements: list[CapturedStatement] = []

    def write(self, chunk: str) -> None:
        sql = chunk.strip()
        if sql:
            self.statements.append(CapturedStatement(sql=sql, store=self.store))

    def flush(self) -> None:
        return None


class CaptureSchema(_AlembicSchema):
    capturing = True

    def __init__(self, dialect: Dialect, *, store: str) -> None:
        self._buffer = _StatementBuffer(store)
        context = MigrationContext.configure(
            dialect=dialect,
            opts={"as_sql": True, "output_buffer": self._buffer, "literal_binds": True},
        )
        super().__init__(context, store=store)

    @property
    def statements(self) -> list[CapturedStatement]:
        return list(self._buffer.statements)

    def has_table(self, name: str) -> bool:
        _ = name
        return False

    def has_column(self, table: str, column: str) -> bool:
        _ = (table, column)
        return False


class SqlAlchemyStore:
    """A named store backed by a SQLAlchemy engine."""

    def __init__(self, name: str, engine: Engine) -> None:
        self._name = name
        self._engine = engine

    @property
    def name(self) -> str:
        return self._name

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def supports_transactional_ddl(self) -> bool:
        try:
            impl = DefaultImpl.get_by_dialect(self._engine.dialect)
        except KeyError:
            return False
        return bool(impl.transactional_ddl)

    def connect(self) -> Connection:
        try:
            return self._engine.connect()
        except OperationalError as exc:
            raise StoreUnavailableError(self._name, str(exc.orig)) from exc

    @contextmanager
    def open(self, *, transactional: bool) -> Iterator[ExecutingSchema]:
        connection = self.connect()
        try:
            if transactional:
                with connection.begin():
                    yield ExecutingSchema(connection, store=self._name)
            else:
                connection.execution_options(isolation_level="AUTOCOMMIT")
                yield ExecutingSchema(connection, store=self._name)
        finally:
            connection.close()

    @contextmanager
    def capture(self) -> Iterator[CaptureSchema]:
        yield CaptureSchema(self._engine.dialect, store=self._name)

    def dispose(self) -> None:
        self._engine.dispose()


class SqlAlchemyStoreRegistry:
    """Store provider holding one engine per configured store name."""

    def __init__(self, stores: Mapping[str, SqlAlchemyStore], *, default: str) -> None:
        self._stores = dict(stores)
        if default not in self._stores:
            raise self._unknown(default)
        self._default = default

    @classmethod
    def from_uris(cls, uris: Mapping[str, str], *, default: str) -> SqlAlchemyStoreRegistry:
        stores = {
            name: SqlAlchemyStore(name, create_engine(uri, future=True))
            for name, uri in uris.items()
        }
        log.debug("Configured stores: %s", ", ".join(sorted(stores)))
        return cls(stores, default=default)

    @property
    def default_name(self) -> str:
        return self._default

    def names(self) -> list[str]:
        return sorted(self._stores)

    def resolve(self, name: str | None = None) -> SqlAlchemyStore:
        key = name or self._default
        store = self._stores.get(key)
        if store is None:
            raise self._unknown(key)
        return store

    def set_default(self, name: str) -> None:
        self.resolve(name)
        self._default = name

    def dispose(self) -> None:
        for store in self._stores.values():
            store.dispose()

    def _unknown(self, name: str) -> StoreUnavailableError:
        known = ", ".join(self.names()) or "none"
        return StoreUnavailableError(name, f"no such store is configured (known: {known})")
