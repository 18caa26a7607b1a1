"""Locate update sources on disk and order them."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Final

from updatekit.domain.model import UnitReference

if TYPE_CHECKING:
    from collections.abc import Iterable

log = logging.getLogger(__name__)

DEFAULT_SUFFIX: Final[str] = ".py"

# <ordering-prefix>_<descriptor>, e.g. 2024_01_01_000000_create_users_table
UNIT_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<prefix>\d[\d_]*?)_(?P<descriptor>[a-z][a-z0-9_]*)$"
)

type Location = str | Path


def discover(
    locations: Iterable[Location], *, suffix: str = DEFAULT_SUFFIX
) -> list[UnitReference]:
    """Return unit references for ``locations`` ordered by identifier.

    A location ending in ``suffix`` names a single unit file. Any other location is
    treated as a directory and expanded (non-recursively) to the files following the
    unit naming convention. Identifiers seen more than once keep the last reference.
    """

    by_identifier: dict[str, Path] = {}
    for location in locations:
        for path in _expand(Path(location), suffix):
            by_identifier[unit_identifier(path, suffix)] = path
    return [
        UnitReference(identifier=identifier, path=by_identifier[identifier])
        for identifier in sorted(by_identifier)
    ]


def _expand(location: Path, suffix: str) -> list[Path]:
    if location.name.endswith(suffix):
        return [location]
    if not location.is_dir():
        log.debug("Skipping missing update location %s", location)
        return []

    found: list[Path] = []
    for path in sorted(location.glob(f"*_*{suffix}")):
        if not path.is_file():
            continue
        if UNIT_NAME_PATTERN.match(unit_identifier(path, suffix)) is None:
            log.debug("Skipping file not following the update naming convention: %s", path)
            continue
        found.append(path)
    return found


def unit_identifier(path: Path, suffix: str = DEFAULT_SUFFIX) -> str:
    name = path.name
    return name[: -len(suffix)] if suffix and name.endswith(suffix) else name


def unit_descriptor(identifier: str) -> str:
    """Return the descriptor part of ``identifier`` (the whole string if unprefixed)."""

    match = UNIT_NAME_PATTERN.match(identifier)
    return match.group("descriptor") if match else identifier


def studly(value: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[_\-\s]+", value) if part)


def unit_class_name(identifier: str) -> str:
    """Class name expected in a unit file, e.g. ``CreateUsersTable``."""

    return studly(unit_descriptor(identifier))


def default_locations(base: Path) -> list[Path]:
    """Return ``base`` followed by its immediate sub-directories."""

    if not base.is_dir():
        return [base]
    subdirectories = sorted(
        path for path in base.iterdir() if path.is_dir() and not path.name.startswith((".", "_"))
    )
    return [base, *subdirectories]
