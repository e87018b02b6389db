"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Coroutine
from typing import Any

from opsboard.contracts.exceptions import AuthenticationError, ConfigError, OpsBoardError, ProviderError


def _dispatch(args: argparse.Namespace) -> Coroutine[Any, Any, object]:
    import opsboard.cli as cli

    command = getattr(args, "command", None)
    if command == "matrix":
        if getattr(args, "matrix_command", None) == "show":
            return cli._run_matrix_show(args)
        return cli._run_matrix_ensure(args)
    if command == "status":
        return cli._run_status(args)
    if command == "departures":
        sub = getattr(args, "departures_command", None)
        if sub == "list":
            return cli._run_departures_list(args)
        if sub == "import":
            return cli._run_departures_import(args)
        return cli._run_departures_history(args)
    return cli._run_lists_inspect(args)


def main(argv: list[str] | None = None) -> int:
    import opsboard.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        cli.asyncio.run(_dispatch(args))
        return 0
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except (AuthenticationError, ProviderError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except OpsBoardError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
