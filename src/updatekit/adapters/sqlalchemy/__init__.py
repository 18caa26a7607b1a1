"""SQLAlchemy adapter package for updatekit."""

from __future__ import annotations

from .ledger import SqlAlchemyLedger, build_ledger_table
from .store import (
    CaptureSchema,
    ExecutingSchema,
    SqlAlchemyStore,
    SqlAlchemyStoreRegistry,
)
from .types import UTCDateTime

__all__ = [
    "CaptureSchema",
    "ExecutingSchema",
    "SqlAlchemyLedger",
    "SqlAlchemyStore",
    "SqlAlchemyStoreRegistry",
    "UTCDateTime",
    "build_ledger_table",
]
