"""Shared CLI helpers."""

from __future__ import annotations

import argparse
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from rich.console import Console

from opsboard.engine.progress import OpsProgress
from opsboard.sdk import OpsBoard


def stdout_console() -> Console:
    return Console(highlight=False, soft_wrap=True)


@asynccontextmanager
async def open_board(args: argparse.Namespace, *, progress: OpsProgress | None = None) -> AsyncIterator[OpsBoard]:
    import opsboard.cli as cli

    config = cli.load_config(args.config)
    board = await cli.OpsBoard.from_config(config, progress=progress)
    async with board:
        yield board


def format_count(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def print_warnings(console: Console, errors: list[str]) -> None:
    for error in errors:
        console.print(f"[yellow]warning:[/yellow] {error}")
