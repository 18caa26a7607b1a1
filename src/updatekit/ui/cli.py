# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from updatekit.app import install_ledger, ledger_status, make_unit, run_updates
from updatekit.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


class PrintNoteSink:
    """Print run notes to stdout."""

    def note(self, message: str) -> None:
        print(message)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply pending data and schema updates")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Apply pending updates")
    run.add_argument(
        "--path",
        dest="paths",
        action="append",
        type=Path,
        help="Update file or directory to run (repeatable; defaults to config)",
    )
    run.add_argument(
        "--store",
        type=str,
        help="Store to apply updates to (defaults to config)",
    )
    run.add_argument(
        "--pretend",
        action="store_true",
        help="Print the statements that would run without applying them",
    )
    run.add_argument(
        "--step",
        action="store_true",
        help="Record every update in its own batch",
    )

    install = subparsers.add_parser("install", help="Create the ledger table")
    install.add_argument(
        "--store",
        type=str,
        help="Store to create the ledger on (defaults to config)",
    )

    make = subparsers.add_parser("make", help="Create a new update file")
    make.add_argument("name", type=str, help="Name of the update, e.g. create_users_table")
    make.add_argument(
        "--path",
        type=Path,
        help="Directory to write the update to (defaults to config)",
    )

    status = subparsers.add_parser("status", help="List applied and pending updates")
    status.add_argument(
        "--path",
        dest="paths",
        action="append",
        type=Path,
        help="Update file or directory to inspect (repeatable; defaults to config)",
    )
    status.add_argument(
        "--store",
        type=str,
        help="Store whose ledger to read (defaults to config)",
    )

    return parser.parse_args(list(argv))


def _validate_make_name(name: str) -> str:
    stripped = name.strip()
    if not stripped:
        raise ValueError("Update name must not be blank")
    return stripped


def _print_status(*, paths: list[Path] | None, store: str | None) -> None:
    status = ledger_status(locations=paths, store=store)
    for entry in status.applied:
        print(f"Applied  [{entry.batch}] {entry.identifier}")
    for reference in status.pending:
        print(f"Pending      {reference.identifier}")
    if not status.applied and not status.pending:
        print("No updates found.")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "make":
            parsed_args.name = _validate_make_name(parsed_args.name)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "run":
            run_updates(
                locations=parsed_args.paths,
                store=parsed_args.store,
                pretend=parsed_args.pretend,
                step=parsed_args.step,
                notes=PrintNoteSink(),
            )
        elif parsed_args.command == "install":
            install_ledger(store=parsed_args.store)
            print("Ledger table created successfully.")
        elif parsed_args.command == "make":
            created = make_unit(parsed_args.name, path=parsed_args.path)
            print(f"Created Update: {created.stem}")
        elif parsed_args.command == "status":
            _print_status(paths=parsed_args.paths, store=parsed_args.store)
    except Exception:  # noqa: BLE001
        log.exception("Command %s failed", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
