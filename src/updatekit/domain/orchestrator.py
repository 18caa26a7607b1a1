"""Apply pending updates in order and record them in the ledger.

Run outline::

    discover(locations) -> references (ordered by identifier)
    pending = references - ledger.list_applied()
              (every reference when pretending against an unprovisioned ledger)
    resolve every pending reference           (any failure aborts before execution)
    batch = ledger.next_batch_number()         (1 for that unprovisioned preview)
    RunStarted
    for each pending unit:
        pretend -> capture statements, note them, record nothing
        else    -> UnitStarted, apply (in a transaction when possible),
                   UnitEnded, ledger.record(identifier, batch, now)
        step    -> batch += 1
    RunEnded

A unit is recorded right after it applied, one at a time, so a crash leaves at
most the unit in flight unrecorded. The engine does no cross-process locking:
two concurrent runs against one ledger may both try the same unit, callers that
need this must lock externally.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from updatekit.domain.discovery import discover
from updatekit.domain.errors import UnitExecutionError, UpdaterError
from updatekit.domain.events import (
    NullNoteSink,
    NullNotificationSink,
    RunEnded,
    RunStarted,
    UnitEnded,
    UnitStarted,
)
from updatekit.domain.model import RunOptions

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from updatekit.domain.discovery import Location
    from updatekit.domain.events import NoteSink, NotificationSink, RunEvent
    from updatekit.domain.model import CapturedStatement, ChangeUnit, UnitReference
    from updatekit.domain.ports.ledger import Ledger
    from updatekit.domain.ports.store import StoreProvider
    from updatekit.domain.registry import UnitResolver

type Discovery = Callable[[Iterable[Location]], list[UnitReference]]

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class _ResolvedUnit:
    reference: UnitReference
    unit: ChangeUnit


class Updater:
    """Orchestrates discovery, execution and recording of updates."""

    def __init__(
        self,
        *,
        ledger: Ledger,
        stores: StoreProvider,
        resolver: UnitResolver,
        notifications: NotificationSink | None = None,
        notes: NoteSink | None = None,
        clock: Callable[[], datetime] = _utcnow,
        discovery: Discovery = discover,
    ) -> None:
        self.ledger = ledger
        self.stores = stores
        self.resolver = resolver
        self.notifications = notifications or NullNotificationSink()
        self.notes = notes or NullNoteSink()
        self._clock = clock
        self._discovery = discovery
        self._paths: list[Path | str] = []
        self._store_name: str | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(
        self,
        locations: Sequence[Location] | None = None,
        options: RunOptions | None = None,
    ) -> list[str]:
        """Apply every pending update found in ``locations``.

        Returns the identifiers processed, whether applied or only pretended.
        Failures propagate; units recorded before the failure stay recorded.
        """

        active_options = options or RunOptions()
        # a preview must not provision the ledger, so a missing one means nothing applied yet
        provisioned = not active_options.pretend or self.ledger.exists()
        pending = self.pending(locations) if provisioned else self.discover(locations)
        if not pending:
            self.notes.note("Nothing to update.")
            return []

        resolved = [
            _ResolvedUnit(reference=reference, unit=self.resolver.resolve(reference))
            for reference in pending
        ]
        batch = self.ledger.next_batch_number() if provisioned else 1
        self._run_pending(resolved, active_options, batch)
        return [reference.identifier for reference in pending]

    def discover(self, locations: Sequence[Location] | None = None) -> list[UnitReference]:
        """Return every unit reference in ``locations`` (registered paths when ``None``)."""

        return self._discovery(self._paths if locations is None else locations)

    def pending(self, locations: Sequence[Location] | None = None) -> list[UnitReference]:
        """Return discovered references not yet present in the ledger, in order."""

        references = self.discover(locations)
        applied = self.ledger.list_applied()
        return [reference for reference in references if reference.identifier not in applied]

    def preview(self, unit: ChangeUnit, method: str = "apply") -> list[CapturedStatement]:
        """Return the statements ``unit.<method>`` would run, without running them."""

        handler = getattr(unit, method, None)
        if handler is None:
            return []
        store = self.stores.resolve(unit.target_store or self._store_name)
        with store.capture() as schema:
            handler(schema)
            return list(schema.statements)

    def add_path(self, path: Path | str) -> None:
        if path not in self._paths:
            self._paths.append(path)

    @property
    def paths(self) -> list[Path | str]:
        return list(self._paths)

    def set_target_store(self, name: str | None) -> None:
        """Select the default store for units and the ledger (``None`` keeps the provider's)."""

        if name is not None:
            self.stores.set_default(name)
        self.ledger.set_target_store(name)
        self._store_name = name

    def ledger_exists(self) -> bool:
        return self.ledger.exists()

    def create_ledger_if_missing(self) -> bool:
        """Provision the ledger unless it exists; return whether it was created."""

        if self.ledger.exists():
            return False
        self.ledger.initialize()
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run_pending(
        self, resolved: list[_ResolvedUnit], options: RunOptions, batch: int
    ) -> None:
        log.info(
            "Running %d update(s) from batch %d (pretend=%s, step=%s)",
            len(resolved),
            batch,
            options.pretend,
            options.step,
        )

        self._dispatch(RunStarted())
        for item in resolved:
            if options.pretend:
                self._pretend_to_run(item)
            else:
                self._run_up(item, batch)
            if options.step:
                batch += 1
        self._dispatch(RunEnded())

        log.info("Finished %d update(s)", len(resolved))

    def _run_up(self, item: _ResolvedUnit, batch: int) -> None:
        identifier = item.reference.identifier
        unit = item.unit
        self.notes.note(f"Updating: {identifier}")
        started = time.perf_counter()

        self._dispatch(UnitStarted(identifier=identifier, unit=unit))
        store = self.stores.resolve(unit.target_store or self._store_name)
        transactional = store.supports_transactional_ddl and unit.transactional
        try:
            with store.open(transactional=transactional) as schema:
                unit.apply(schema)
        except UpdaterError:
            raise
        except Exception as exc:
            raise UnitExecutionError(identifier, exc) from exc
        self._dispatch(UnitEnded(identifier=identifier, unit=unit))

        self.ledger.record(identifier, batch, self._clock())

        elapsed = round(time.perf_counter() - started, 2)
        self.notes.note(f"Updated:  {identifier} ({elapsed} seconds)")

    def _pretend_to_run(self, item: _ResolvedUnit) -> None:
        name = type(item.unit).__name__
        for statement in self.preview(item.unit):
            self.notes.note(f"{name}: {statement.sql}")

    def _dispatch(self, event: RunEvent) -> None:
        self.notifications.dispatch(event)
