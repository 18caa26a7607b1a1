"""Errors raised while loading updatekit settings from the environment."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when an updatekit setting (store name, ledger table, ...) is unusable."""
