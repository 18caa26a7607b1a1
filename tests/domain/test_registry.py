from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers.units import CREATE_X, CREATE_Y, ScriptedUnit
from updatekit.domain.errors import UnitResolutionError
from updatekit.domain.model import ChangeUnit, UnitReference
from updatekit.domain.registry import UnitFactory, UnitRegistry


def _reference(identifier: str) -> UnitReference:
    return UnitReference(identifier=identifier, path=Path(f"{identifier}.py"))


def _factory(identifier: str) -> UnitFactory:
    return lambda: ScriptedUnit(identifier, [])


def test_resolve_builds_a_fresh_unit_from_registered_factory() -> None:
    registry = UnitRegistry()
    registry.register(CREATE_X, _factory(CREATE_X))

    first = registry.resolve(_reference(CREATE_X))
    second = registry.resolve(_reference(CREATE_X))

    assert isinstance(first, ScriptedUnit)
    assert first is not second


def test_register_rejects_a_second_factory_for_the_same_identifier() -> None:
    registry = UnitRegistry()
    factory = _factory(CREATE_X)
    registry.register(CREATE_X, factory)
    registry.register(CREATE_X, factory)

    with pytest.raises(ValueError, match=CREATE_X):
        registry.register(CREATE_X, _factory(CREATE_X))


def test_unknown_identifier_without_loader_fails_resolution() -> None:
    registry = UnitRegistry()

    with pytest.raises(UnitResolutionError) as excinfo:
        registry.resolve(_reference(CREATE_X))

    assert excinfo.value.identifier == CREATE_X
    assert "no factory registered" in str(excinfo.value)


def test_loader_is_consulted_once_per_identifier() -> None:
    calls: list[str] = []

    def loader(reference: UnitReference) -> UnitFactory:
        calls.append(reference.identifier)
        return _factory(reference.identifier)

    registry = UnitRegistry(loader=loader)
    registry.resolve(_reference(CREATE_X))
    registry.resolve(_reference(CREATE_Y))
    registry.resolve(_reference(CREATE_X))

    assert calls == [CREATE_X, CREATE_Y]


def test_failing_factory_is_reported_as_resolution_error() -> None:
    def broken() -> ChangeUnit:
        raise KeyError("missing dependency")

    registry = UnitRegistry()
    registry.register(CREATE_X, broken)

    with pytest.raises(UnitResolutionError) as excinfo:
        registry.resolve(_reference(CREATE_X))

    assert isinstance(excinfo.value.__cause__, KeyError)


def test_factory_returning_non_unit_is_rejected() -> None:
    registry = UnitRegistry()
    registry.register(CREATE_X, lambda: object())  # type: ignore[arg-type, return-value]

    with pytest.raises(UnitResolutionError, match="not a ChangeUnit"):
        registry.resolve(_reference(CREATE_X))
