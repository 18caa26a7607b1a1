"""Update engine defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .errors import ConfigurationError

DEFAULT_UPDATES_PATH: Final[str] = "updates"
DEFAULT_STORE_NAME: Final[str] = "default"
DEFAULT_LEDGER_TABLE: Final[str] = "updates"


@dataclass(frozen=True, slots=True)
class UpdaterConfig:
    updates_path: Path = Path(DEFAULT_UPDATES_PATH)
    default_store: str = DEFAULT_STORE_NAME
    ledger_table: str = DEFAULT_LEDGER_TABLE

    def __post_init__(self) -> None:
        if not self.default_store.strip():
            raise ConfigurationError("Default store name must not be blank")
        if not self.ledger_table.strip():
            raise ConfigurationError("Ledger table name must not be blank")


def get_updater_config() -> UpdaterConfig:
    return UpdaterConfig(
        updates_path=Path(os.getenv("UPDATEKIT_PATH") or DEFAULT_UPDATES_PATH),
        default_store=os.getenv("UPDATEKIT_STORE") or DEFAULT_STORE_NAME,
        ledger_table=os.getenv("UPDATEKIT_LEDGER_TABLE") or DEFAULT_LEDGER_TABLE,
    )
