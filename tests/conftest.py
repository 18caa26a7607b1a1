from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from updatekit.adapters.memory import InMemoryLedger
from updatekit.adapters.sqlalchemy import (
    SqlAlchemyLedger,
    SqlAlchemyStore,
    SqlAlchemyStoreRegistry,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine


@pytest.fixture
def sqlite_engine(tmp_path: Path) -> Iterator[Engine]:
    # File-backed so that every connection sees the same database.
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'store.db'}", future=True)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_store(sqlite_engine: Engine) -> SqlAlchemyStore:
    return SqlAlchemyStore("default", sqlite_engine)


@pytest.fixture
def sqlite_stores(
    sqlite_store: SqlAlchemyStore, tmp_path: Path
) -> Iterator[SqlAlchemyStoreRegistry]:
    other_engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'other.db'}", future=True)
    registry = SqlAlchemyStoreRegistry(
        {"default": sqlite_store, "other": SqlAlchemyStore("other", other_engine)},
        default="default",
    )
    try:
        yield registry
    finally:
        registry.dispose()


@pytest.fixture
def sqlite_ledger(sqlite_stores: SqlAlchemyStoreRegistry) -> SqlAlchemyLedger:
    ledger = SqlAlchemyLedger(sqlite_stores)
    ledger.initialize()
    return ledger


@pytest.fixture
def memory_ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def updates_dir(tmp_path: Path) -> Path:
    path = tmp_path / "updates"
    path.mkdir()
    return path
