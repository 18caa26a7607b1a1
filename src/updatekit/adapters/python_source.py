"""Load update classes from Python source files."""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import sys
from typing import TYPE_CHECKING

from updatekit.domain.discovery import unit_class_name
from updatekit.domain.errors import UnitResolutionError
from updatekit.domain.model import ChangeUnit

if TYPE_CHECKING:
    from pathlib import Path
    from types import ModuleType

    from updatekit.domain.model import UnitReference
    from updatekit.domain.registry import UnitFactory

log = logging.getLogger(__name__)

MODULE_NAMESPACE = "updatekit_units"


def load_unit_factory(reference: UnitReference) -> UnitFactory:
    """Import ``reference.path`` and return its ``ChangeUnit`` subclass.

    The class is looked up by the StudlyCase descriptor of the identifier, so
    ``2024_01_01_000000_create_users_table.py`` must define ``CreateUsersTable``.
    """

    module = _import_source(reference)
    class_name = unit_class_name(reference.identifier)
    candidate = getattr(module, class_name, None)
    if candidate is None:
        raise UnitResolutionError(
            reference.identifier, f"{reference.path} does not define {class_name}"
        )
    if not isinstance(candidate, type) or not issubclass(candidate, ChangeUnit):
        raise UnitResolutionError(
            reference.identifier, f"{class_name} in {reference.path} is not a ChangeUnit"
        )
    if getattr(candidate, "__abstractmethods__", None):
        raise UnitResolutionError(
            reference.identifier, f"{class_name} does not implement apply()"
        )
    return candidate


def _module_name(path: Path) -> str:
    # same identifier may live in several directories; key modules by location
    digest = hashlib.sha1(str(path.resolve()).encode("utf-8"), usedforsecurity=False)
    return f"{MODULE_NAMESPACE}.u{digest.hexdigest()[:12]}_{path.stem}"


def _import_source(reference: UnitReference) -> ModuleType:
    path = reference.path
    name = _module_name(path)
    cached = sys.modules.get(name)
    if cached is not None:
        return cached

    if not path.is_file():
        raise UnitResolutionError(reference.identifier, f"source file {path} not found")
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise UnitResolutionError(reference.identifier, f"cannot load module from {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        del sys.modules[name]
        raise UnitResolutionError(reference.identifier, f"error importing {path}: {exc}") from exc

    log.debug("Imported update source %s as %s", path, name)
    return module
