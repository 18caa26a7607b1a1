"""Create new update source files from a stub."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from string import Template
from typing import Final

from updatekit.domain.discovery import DEFAULT_SUFFIX, discover, studly, unit_descriptor
from updatekit.domain.errors import UnitAlreadyExistsError

log = logging.getLogger(__name__)

DATE_PREFIX_FORMAT: Final[str] = "%Y_%m_%d_%H%M%S"

UNIT_STUB: Final[Template] = Template('''\
"""$description"""

from __future__ import annotations

from typing import TYPE_CHECKING

from updatekit.domain.model import ChangeUnit

if TYPE_CHECKING:
    from updatekit.domain.ports.store import Schema


class $class_name(ChangeUnit):
    def apply(self, schema: Schema) -> None:
        raise NotImplementedError
''')


def snake_case(value: str) -> str:
    """``AddEmailToUsers`` / ``add email-to users`` -> ``add_email_to_users``."""

    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", value.strip())
    return re.sub(r"[^a-z0-9]+", "_", spaced.lower()).strip("_")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UnitCreator:
    """Write ``<date-prefix>_<name>.py`` stubs into an updates directory."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._post_create: list[Callable[[Path], None]] = []

    def after_create(self, callback: Callable[[Path], None]) -> None:
        self._post_create.append(callback)

    def create(self, name: str, path: Path) -> Path:
        descriptor = snake_case(name)
        if not descriptor or not descriptor[0].isalpha():
            raise ValueError(f"Invalid update name: {name!r}")
        self._ensure_unit_does_not_exist(descriptor, path)

        target = path / f"{self._clock().strftime(DATE_PREFIX_FORMAT)}_{descriptor}{DEFAULT_SUFFIX}"
        target.write_text(self._populate_stub(descriptor), encoding="utf-8")
        log.info("Created update %s", target)

        for callback in self._post_create:
            callback(target)
        return target

    def _ensure_unit_does_not_exist(self, descriptor: str, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)
        for reference in discover([path]):
            if unit_descriptor(reference.identifier) == descriptor:
                raise UnitAlreadyExistsError(
                    f"A {studly(descriptor)} update already exists: {reference.path.name}"
                )

    @staticmethod
    def _populate_stub(descriptor: str) -> str:
        return UNIT_STUB.substitute(
            class_name=studly(descriptor),
            description=descriptor.replace("_", " ").capitalize() + ".",
        )
