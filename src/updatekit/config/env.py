"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


def env_with_prefix(prefix: str, *, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return non-blank variables starting with ``prefix``, keyed by the lower-cased rest."""

    source = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for key, value in source.items():
        if not key.startswith(prefix) or not value.strip():
            continue
        suffix = key[len(prefix) :].lower()
        if suffix:
            values[suffix] = value
    return values
