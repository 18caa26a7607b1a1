from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from updatekit.adapters.python_source import load_unit_factory
from updatekit.domain.discovery import discover
from updatekit.domain.errors import UnitAlreadyExistsError
from updatekit.scaffold import UnitCreator, snake_case

if TYPE_CHECKING:
    from pathlib import Path


def _creator() -> UnitCreator:
    return UnitCreator(clock=lambda: datetime(2025, 2, 3, 4, 5, 6, tzinfo=UTC))


def test_create_writes_dated_stub(tmp_path: Path) -> None:
    created = _creator().create("create_users_table", tmp_path / "updates")

    assert created.name == "2025_02_03_040506_create_users_table.py"
    source = created.read_text(encoding="utf-8")
    assert "class CreateUsersTable(ChangeUnit):" in source
    assert '"""Create users table."""' in source


def test_created_stub_is_discoverable_and_loadable(tmp_path: Path) -> None:
    created = _creator().create("AddEmailToUsers", tmp_path)

    (reference,) = discover([tmp_path])
    factory = load_unit_factory(reference)

    assert reference.path == created
    assert factory().__class__.__name__ == "AddEmailToUsers"


def test_create_rejects_existing_descriptor(tmp_path: Path) -> None:
    (tmp_path / "2024_01_01_000000_create_users_table.py").write_text("", encoding="utf-8")

    with pytest.raises(UnitAlreadyExistsError, match="CreateUsersTable"):
        _creator().create("create users table", tmp_path)


@pytest.mark.parametrize("name", ["", "  ", "1st_update", "---"])
def test_create_rejects_invalid_names(tmp_path: Path, name: str) -> None:
    with pytest.raises(ValueError, match="Invalid update name"):
        _creator().create(name, tmp_path)


def test_after_create_callbacks_receive_path(tmp_path: Path) -> None:
    seen: list[Path] = []
    creator = _creator()
    creator.after_create(seen.append)

    created = creator.create("seed_roles", tmp_path)

    assert seen == [created]


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("AddEmailToUsers", "add_email_to_users"),
        ("add email-to users", "add_email_to_users"),
        ("already_snake", "already_snake"),
    ],
)
def test_snake_case(value: str, expected: str) -> None:
    assert snake_case(value) == expected
