"""List inspection command."""

from __future__ import annotations

import argparse

from rich.table import Table

from opsboard.cli.common import open_board, stdout_console
from opsboard.contracts.results import ListInspection


def render_inspection(inspection: ListInspection) -> Table:
    title = f"{inspection.display_name or inspection.name} ({inspection.list_id})"
    table = Table(title=title, caption=inspection.web_url)
    for column in ("Identifier", "Display name", "Read-only"):
        table.add_column(column)
    for column_info in inspection.columns:
        table.add_row(column_info.identifier, column_info.display_name, "yes" if column_info.read_only else "")
    return table


async def run_lists_inspect(args: argparse.Namespace) -> list[ListInspection]:
    console = stdout_console()
    async with open_board(args) as board:
        inspections = await board.inspect_lists()
    for inspection in inspections:
        if inspection.error is not None:
            console.print(f"[red]✗[/red] {inspection.name}: {inspection.error}")
            continue
        console.print(render_inspection(inspection))
    return inspections


__all__ = ["render_inspection", "run_lists_inspect"]
