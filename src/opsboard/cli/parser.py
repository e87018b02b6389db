"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("opsboard")
    except PackageNotFoundError:
        return "0.0.0"


def _add_common(parser: argparse.ArgumentParser, *, email: bool = False) -> None:
    parser.add_argument("--config", default="./opsboard.json", help="Path to opsboard.json")
    if email:
        parser.add_argument("--email", required=True, help="Operator e-mail used to filter owned records")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="opsboard")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    matrix_parser = subparsers.add_parser("matrix", help="Daily checklist matrix")
    matrix_subparsers = matrix_parser.add_subparsers(dest="matrix_command", required=True)
    ensure_parser = matrix_subparsers.add_parser("ensure", help="Create the status cells missing for a date")
    _add_common(ensure_parser, email=True)
    ensure_parser.add_argument("--date", default=None, help="Reference date YYYY-MM-DD (default: today)")
    show_parser = matrix_subparsers.add_parser("show", help="Show the task x operation status grid")
    _add_common(show_parser, email=True)
    show_parser.add_argument("--date", default=None, help="Reference date YYYY-MM-DD (default: today)")

    status_parser = subparsers.add_parser("status", help="Show the status cells of a date")
    _add_common(status_parser)
    status_parser.add_argument("--date", required=True, help="Reference date YYYY-MM-DD")

    departures_parser = subparsers.add_parser("departures", help="Route departure log")
    departures_subparsers = departures_parser.add_subparsers(dest="departures_command", required=True)

    list_parser = departures_subparsers.add_parser("list", help="Show the departure board")
    _add_common(list_parser, email=True)

    import_parser = departures_subparsers.add_parser("import", help="Import departures from pasted text")
    _add_common(import_parser, email=True)
    import_parser.add_argument("--file", "-f", required=True, help="Text file with pasted rows ('-' for stdin)")
    import_parser.add_argument("--llm", action="store_true", help="Use the assisted parser instead of the manual one")
    mode = import_parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--dry-run", action="store_true", help="Parse and preview only")
    mode.add_argument("--apply", action="store_true", help="Create the parsed departures")

    archive_parser = departures_subparsers.add_parser("history", help="Query archived departures")
    _add_common(archive_parser)
    archive_parser.add_argument("--start", required=True, help="First day YYYY-MM-DD")
    archive_parser.add_argument("--end", required=True, help="Last day YYYY-MM-DD")
    archive_parser.add_argument("--operation", default=None, help="Operation code filter")

    lists_parser = subparsers.add_parser("lists", help="Remote list diagnostics")
    lists_subparsers = lists_parser.add_subparsers(dest="lists_command", required=True)
    inspect_parser = lists_subparsers.add_parser("inspect", help="Show metadata and columns of every list")
    _add_common(inspect_parser)

    return parser


__all__ = ["build_parser"]
