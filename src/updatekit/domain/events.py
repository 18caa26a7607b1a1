"""Lifecycle notifications and note output for update runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from updatekit.domain.model import ChangeUnit


@dataclass(frozen=True, slots=True)
class RunStarted:
    """Dispatched once before the first pending unit is processed."""


@dataclass(frozen=True, slots=True)
class RunEnded:
    """Dispatched once after the last pending unit was processed."""


@dataclass(frozen=True, slots=True)
class UnitStarted:
    identifier: str
    unit: ChangeUnit | None = field(default=None, compare=False)
    method: str = "apply"


@dataclass(frozen=True, slots=True)
class UnitEnded:
    identifier: str
    unit: ChangeUnit | None = field(default=None, compare=False)
    method: str = "apply"


type RunEvent = RunStarted | RunEnded | UnitStarted | UnitEnded


@runtime_checkable
class NotificationSink(Protocol):
    """Receives lifecycle events synchronously."""

    def dispatch(self, event: RunEvent) -> None: ...


@runtime_checkable
class NoteSink(Protocol):
    """Receives human-readable progress notes."""

    def note(self, message: str) -> None: ...


class NullNotificationSink:
    def dispatch(self, event: RunEvent) -> None:
        _ = event


class NullNoteSink:
    def note(self, message: str) -> None:
        _ = message


@dataclass(slots=True)
class CollectingNoteSink:
    """Keeps notes in memory, e.g. to render them after a run."""

    messages: list[str] = field(default_factory=list)

    def note(self, message: str) -> None:
        self.messages.append(message)
