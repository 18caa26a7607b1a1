from __future__ import annotations

from typing import TYPE_CHECKING

from tests.helpers.units import CREATE_X, CREATE_Y, CREATE_Z, touch_units
from updatekit.domain.discovery import (
    default_locations,
    discover,
    unit_class_name,
    unit_descriptor,
)

if TYPE_CHECKING:
    from pathlib import Path


def test_discover_orders_by_identifier_regardless_of_location_order(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    touch_units(first, CREATE_Z)
    touch_units(second, CREATE_Y, CREATE_X)

    references = discover([first, second])

    assert [reference.identifier for reference in references] == [CREATE_X, CREATE_Y, CREATE_Z]
    assert references[0].path == second / f"{CREATE_X}.py"


def test_discover_keeps_last_reference_for_duplicate_identifiers(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    touch_units(first, CREATE_X)
    touch_units(second, CREATE_X)

    references = discover([first, second])

    assert len(references) == 1
    assert references[0].path == second / f"{CREATE_X}.py"


def test_discover_accepts_single_unit_files(tmp_path: Path) -> None:
    (path,) = touch_units(tmp_path, "custom")

    references = discover([path])

    assert [reference.identifier for reference in references] == ["custom"]


def test_discover_skips_files_outside_the_naming_convention(tmp_path: Path) -> None:
    touch_units(tmp_path, CREATE_X, "__init__", "helpers_module", "notes_1")
    (tmp_path / "2024_01_04_000000_readme.txt").write_text("", encoding="utf-8")
    (tmp_path / "2024_01_05_000000_nested").mkdir()

    references = discover([tmp_path])

    assert [reference.identifier for reference in references] == [CREATE_X]


def test_discover_does_not_descend_into_subdirectories(tmp_path: Path) -> None:
    touch_units(tmp_path / "nested", CREATE_X)

    assert discover([tmp_path]) == []


def test_discover_ignores_missing_locations(tmp_path: Path) -> None:
    assert discover([tmp_path / "missing"]) == []
    assert discover([]) == []


def test_discover_honours_custom_suffix(tmp_path: Path) -> None:
    (tmp_path / f"{CREATE_X}.sql").write_text("", encoding="utf-8")
    touch_units(tmp_path, CREATE_Y)

    references = discover([tmp_path], suffix=".sql")

    assert [reference.identifier for reference in references] == [CREATE_X]


def test_unit_descriptor_and_class_name() -> None:
    assert unit_descriptor("2024_01_01_000000_create_users_table") == "create_users_table"
    assert unit_class_name("2024_01_01_000000_create_users_table") == "CreateUsersTable"
    assert unit_class_name("custom") == "Custom"


def test_default_locations_lists_base_then_sorted_subdirectories(tmp_path: Path) -> None:
    for name in ("beta", "alpha", "_private", ".hidden"):
        (tmp_path / name).mkdir()
    (tmp_path / "file.py").write_text("", encoding="utf-8")

    assert default_locations(tmp_path) == [tmp_path, tmp_path / "alpha", tmp_path / "beta"]


def test_default_locations_of_missing_base_is_base_only(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    assert default_locations(missing) == [missing]
