"""Application entry points wiring the update engine to its adapters."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from updatekit.adapters.python_source import load_unit_factory
from updatekit.adapters.sqlalchemy import SqlAlchemyLedger, SqlAlchemyStoreRegistry
from updatekit.config import get_store_uris, get_updater_config
from updatekit.domain.discovery import default_locations
from updatekit.domain.model import RunOptions
from updatekit.domain.orchestrator import Updater
from updatekit.domain.registry import UnitRegistry
from updatekit.scaffold import UnitCreator

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path

    from updatekit.config import UpdaterConfig
    from updatekit.domain.events import NoteSink, NotificationSink
    from updatekit.domain.model import LedgerEntry, UnitReference


log = getLogger(__name__)


@dataclass(slots=True)
class LedgerStatus:
    applied: list[LedgerEntry]
    pending: list[UnitReference]


def build_stores(config: UpdaterConfig | None = None) -> SqlAlchemyStoreRegistry:
    """Create one engine per configured store; callers own and dispose them."""

    effective_config = config or get_updater_config()
    return SqlAlchemyStoreRegistry.from_uris(
        get_store_uris(effective_config.default_store),
        default=effective_config.default_store,
    )


def build_updater(
    *,
    config: UpdaterConfig | None = None,
    stores: SqlAlchemyStoreRegistry | None = None,
    notes: NoteSink | None = None,
    notifications: NotificationSink | None = None,
) -> Updater:
    """Create an ``Updater`` backed by SQLAlchemy stores and file-based units."""

    effective_config = config or get_updater_config()
    effective_stores = stores or build_stores(effective_config)
    updater = Updater(
        ledger=SqlAlchemyLedger(effective_stores, table_name=effective_config.ledger_table),
        stores=effective_stores,
        resolver=UnitRegistry(loader=load_unit_factory),
        notifications=notifications,
        notes=notes,
    )
    for location in default_locations(effective_config.updates_path):
        updater.add_path(location)
    return updater


@contextmanager
def _updater_scope(
    updater: Updater | None, *, notes: NoteSink | None = None
) -> Iterator[Updater]:
    if updater is not None:
        yield updater
        return

    config = get_updater_config()
    stores = build_stores(config)
    try:
        yield build_updater(config=config, stores=stores, notes=notes)
    finally:
        stores.dispose()


def run_updates(
    *,
    updater: Updater | None = None,
    locations: Sequence[Path | str] | None = None,
    store: str | None = None,
    pretend: bool = False,
    step: bool = False,
    notes: NoteSink | None = None,
) -> list[str]:
    """Prepare the ledger on ``store`` and apply pending updates.

    A pretend run leaves the store untouched, including a missing ledger.
    """

    with _updater_scope(updater, notes=notes) as effective_updater:
        effective_updater.set_target_store(store)
        if not pretend and effective_updater.create_ledger_if_missing():
            log.info("Ledger table created")

        log.info(
            "Starting update run: store=%s, locations=%s, pretend=%s, step=%s",
            store or effective_updater.stores.default_name,
            list(locations) if locations is not None else effective_updater.paths,
            pretend,
            step,
        )
        processed = effective_updater.run(locations, RunOptions(pretend=pretend, step=step))
        log.info(f"Finished update run: processed={len(processed)}")
        return processed


def create_ledger_if_missing(*, updater: Updater | None = None, store: str | None = None) -> bool:
    with _updater_scope(updater) as effective_updater:
        effective_updater.set_target_store(store)
        return effective_updater.create_ledger_if_missing()


def install_ledger(*, updater: Updater | None = None, store: str | None = None) -> None:
    """Provision the ledger, failing if it already exists."""

    with _updater_scope(updater) as effective_updater:
        effective_updater.set_target_store(store)
        effective_updater.ledger.initialize()


def ledger_status(
    *,
    updater: Updater | None = None,
    locations: Sequence[Path | str] | None = None,
    store: str | None = None,
) -> LedgerStatus:
    with _updater_scope(updater) as effective_updater:
        effective_updater.set_target_store(store)
        if not effective_updater.ledger_exists():
            return LedgerStatus(applied=[], pending=effective_updater.discover(locations))
        return LedgerStatus(
            applied=effective_updater.ledger.entries(),
            pending=effective_updater.pending(locations),
        )


def make_unit(name: str, *, path: Path | None = None) -> Path:
    """Scaffold a new update in ``path`` (the configured updates path by default)."""

    target_dir = path or get_updater_config().updates_path
    return UnitCreator().create(name, target_dir)
