"""Errors raised by the update engine and its ports."""

from __future__ import annotations


class UpdaterError(RuntimeError):
    """Base class for update engine failures."""


class StoreUnavailableError(UpdaterError):
    """Raised when a ledger or target store connection cannot be reached."""

    def __init__(self, store: str | None, reason: str | None = None) -> None:
        self.store = store
        label = store or "<default>"
        message = f"Store {label!r} is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AlreadyInitializedError(UpdaterError):
    """Raised when provisioning a ledger that already exists."""


class ProvisioningFailedError(UpdaterError):
    """Raised when the ledger's backing structure could not be created."""


class UnitResolutionError(UpdaterError):
    """Raised when a pending identifier cannot be mapped to an executable unit."""

    def __init__(self, identifier: str, reason: str) -> None:
        self.identifier = identifier
        super().__init__(f"Cannot resolve update {identifier}: {reason}")


class UnitExecutionError(UpdaterError):
    """Raised when a unit's ``apply`` failed; the original error is the ``__cause__``."""

    def __init__(self, identifier: str, cause: BaseException) -> None:
        self.identifier = identifier
        super().__init__(f"Update {identifier} failed: {cause}")


class DuplicateUnitError(UpdaterError):
    """Raised when the ledger already holds an entry for an identifier."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Update {identifier} is already recorded in the ledger")


class UnitAlreadyExistsError(UpdaterError):
    """Raised when scaffolding a unit whose descriptor is already taken."""
