from __future__ import annotations

from textwrap import dedent
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect, text

from updatekit.adapters.python_source import load_unit_factory
from updatekit.domain.errors import UnitExecutionError
from updatekit.domain.events import CollectingNoteSink
from updatekit.domain.model import RunOptions
from updatekit.domain.orchestrator import Updater
from updatekit.domain.registry import UnitRegistry

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from updatekit.adapters.sqlalchemy import SqlAlchemyLedger, SqlAlchemyStoreRegistry

CREATE_WIDGETS = "2024_01_01_000000_create_widgets"
SEED_WIDGETS = "2024_01_02_000000_seed_widgets"
BROKEN = "2024_01_03_000000_broken_update"

UNIT_SOURCES = {
    CREATE_WIDGETS: """
        from sqlalchemy import Column, Integer, String

        from updatekit.domain.model import ChangeUnit


        class CreateWidgets(ChangeUnit):
            def apply(self, schema):
                if not schema.has_table("widgets"):
                    schema.create_table(
                        "widgets",
                        Column("id", Integer, primary_key=True),
                        Column("name", String(50), nullable=False),
                    )
        """,
    SEED_WIDGETS: """
        from updatekit.domain.model import ChangeUnit


        class SeedWidgets(ChangeUnit):
            def apply(self, schema):
                schema.execute(
                    "INSERT INTO widgets (name) VALUES (:name)", {"name": "sprocket"}
                )
        """,
    BROKEN: """
        from updatekit.domain.model import ChangeUnit


        class BrokenUpdate(ChangeUnit):
            def apply(self, schema):
                schema.execute("INSERT INTO missing_table VALUES (1)")
        """,
}


def _write_units(directory: Path, *identifiers: str) -> None:
    for identifier in identifiers:
        (directory / f"{identifier}.py").write_text(
            dedent(UNIT_SOURCES[identifier]), encoding="utf-8"
        )


@pytest.fixture
def notes() -> CollectingNoteSink:
    return CollectingNoteSink()


@pytest.fixture
def updater(
    sqlite_ledger: SqlAlchemyLedger,
    sqlite_stores: SqlAlchemyStoreRegistry,
    notes: CollectingNoteSink,
) -> Updater:
    return Updater(
        ledger=sqlite_ledger,
        stores=sqlite_stores,
        resolver=UnitRegistry(loader=load_unit_factory),
        notes=notes,
    )


def _widget_names(engine: Engine) -> list[str]:
    with engine.connect() as connection:
        return list(connection.execute(text("SELECT name FROM widgets ORDER BY id")).scalars())


def test_run_applies_units_from_files_and_records_them(
    updater: Updater, updates_dir: Path, sqlite_engine: Engine
) -> None:
    _write_units(updates_dir, CREATE_WIDGETS, SEED_WIDGETS)

    applied = updater.run([updates_dir])

    assert applied == [CREATE_WIDGETS, SEED_WIDGETS]
    assert _widget_names(sqlite_engine) == ["sprocket"]
    assert [(entry.identifier, entry.batch) for entry in updater.ledger.entries()] == [
        (CREATE_WIDGETS, 1),
        (SEED_WIDGETS, 1),
    ]


def test_rerun_applies_nothing(
    updater: Updater, updates_dir: Path, sqlite_engine: Engine, notes: CollectingNoteSink
) -> None:
    _write_units(updates_dir, CREATE_WIDGETS, SEED_WIDGETS)
    updater.run([updates_dir])

    assert updater.run([updates_dir]) == []
    assert notes.messages[-1] == "Nothing to update."
    assert _widget_names(sqlite_engine) == ["sprocket"]


def test_new_unit_lands_in_next_batch(updater: Updater, updates_dir: Path) -> None:
    _write_units(updates_dir, CREATE_WIDGETS)
    updater.run([updates_dir])
    _write_units(updates_dir, SEED_WIDGETS)

    updater.run([updates_dir], RunOptions(step=True))

    assert [(entry.identifier, entry.batch) for entry in updater.ledger.entries()] == [
        (CREATE_WIDGETS, 1),
        (SEED_WIDGETS, 2),
    ]


def test_pretend_notes_statements_and_leaves_store_untouched(
    updater: Updater, updates_dir: Path, sqlite_engine: Engine, notes: CollectingNoteSink
) -> None:
    _write_units(updates_dir, CREATE_WIDGETS, SEED_WIDGETS)

    processed = updater.run([updates_dir], RunOptions(pretend=True))

    assert processed == [CREATE_WIDGETS, SEED_WIDGETS]
    assert inspect(sqlite_engine).has_table("widgets") is False
    assert updater.ledger.list_applied() == set()
    assert any(
        message.startswith("CreateWidgets: CREATE TABLE widgets") for message in notes.messages
    )
    assert any(
        message.startswith("SeedWidgets: INSERT INTO widgets") and "sprocket" in message
        for message in notes.messages
    )


def test_failing_unit_keeps_earlier_units_recorded(updater: Updater, updates_dir: Path) -> None:
    _write_units(updates_dir, CREATE_WIDGETS, BROKEN)

    with pytest.raises(UnitExecutionError) as excinfo:
        updater.run([updates_dir])

    assert excinfo.value.identifier == BROKEN
    assert updater.ledger.list_applied() == {CREATE_WIDGETS}
