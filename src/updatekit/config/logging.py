"""Shared logging helpers for updatekit."""

from __future__ import annotations

import logging
from typing import Final

# alembic announces its context impl at INFO for every schema handle we open
NOISY_LOGGERS: Final[tuple[str, ...]] = ("alembic", "sqlalchemy.engine")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger for CLI use.

    Wraps ``logging.basicConfig`` with a terse format. Library loggers listed in
    ``NOISY_LOGGERS`` are held at WARNING unless ``level`` asks for DEBUG output.
    Pass ``force=True`` to reconfigure during tests.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
