"""Explicit mapping from unit identifiers to factories."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from updatekit.domain.errors import UnitResolutionError
from updatekit.domain.model import ChangeUnit

if TYPE_CHECKING:
    from updatekit.domain.model import UnitReference

log = logging.getLogger(__name__)

type UnitFactory = Callable[[], ChangeUnit]
type UnitLoader = Callable[[UnitReference], UnitFactory]


@runtime_checkable
class UnitResolver(Protocol):
    def resolve(self, reference: UnitReference) -> ChangeUnit: ...


class UnitRegistry:
    """Resolve identifiers to ``ChangeUnit`` instances by lookup.

    Factories are either registered up front or produced by ``loader`` the first
    time an unknown reference is resolved; in both cases later resolutions of the
    same identifier hit the registry.
    """

    def __init__(self, loader: UnitLoader | None = None) -> None:
        self._factories: dict[str, UnitFactory] = {}
        self._loader = loader

    def register(self, identifier: str, factory: UnitFactory) -> None:
        existing = self._factories.get(identifier)
        if existing is not None and existing is not factory:
            raise ValueError(f"A factory is already registered for update {identifier}")
        self._factories[identifier] = factory

    def resolve(self, reference: UnitReference) -> ChangeUnit:
        factory = self._factories.get(reference.identifier)
        if factory is None:
            factory = self._load(reference)
            self._factories[reference.identifier] = factory

        try:
            unit = factory()
        except Exception as exc:
            raise UnitResolutionError(reference.identifier, f"factory failed: {exc}") from exc
        if not isinstance(unit, ChangeUnit):
            raise UnitResolutionError(
                reference.identifier,
                f"factory returned {type(unit).__name__}, not a ChangeUnit",
            )
        return unit

    def _load(self, reference: UnitReference) -> UnitFactory:
        if self._loader is None:
            raise UnitResolutionError(reference.identifier, "no factory registered")
        log.debug("Loading update %s from %s", reference.identifier, reference.path)
        return self._loader(reference)
