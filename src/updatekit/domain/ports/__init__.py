"""Domain port definitions for adapters."""

from __future__ import annotations

from .ledger import Ledger
from .store import CapturingSchema, Schema, Store, StoreProvider

__all__ = [
    "CapturingSchema",
    "Ledger",
    "Schema",
    "Store",
    "StoreProvider",
]
