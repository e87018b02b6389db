"""Matrix and status commands."""

from __future__ import annotations

import argparse
from datetime import date

from rich.table import Table

from opsboard.cli.common import format_count, open_board, stdout_console
from opsboard.cli.progress.rich import RichOpsProgress
from opsboard.contracts.exceptions import OpsBoardError
from opsboard.contracts.records import ChecklistTask, Operation, StatusCell
from opsboard.contracts.results import MatrixResult, ReadResult, TaskStatusRow
from opsboard.engine.progress import OpsProgress
from opsboard.sdk import OpsBoard


def format_matrix_summary(result: MatrixResult) -> str:
    lines = [
        "",
        f"opsboard - matrix ensured for {result.reference_date}",
        "",
        f"  Required:  {format_count(result.required, 'cell')}",
        f"  Existing:  {result.existing}",
        f"  Created:   {result.created}",
    ]
    if result.failed:
        lines.append(f"  Failed:    {result.failed} (run again to retry the missing cells)")
    if result.created == 0 and result.failed == 0:
        lines.append("  Status:    matrix already complete")
    lines.append("")
    return "\n".join(lines)


async def _read_checklist(board: OpsBoard, email: str) -> tuple[list[ChecklistTask], list[Operation]]:
    tasks = await board.get_tasks()
    operations = await board.get_operations(email)
    for what, read in (("tasks", tasks), ("operations", operations)):
        if not read.ok:
            raise OpsBoardError(f"cannot read {what}: {read.error}")
    return tasks.items, operations.items


async def _ensure(args: argparse.Namespace, progress: OpsProgress | None) -> MatrixResult:
    async with open_board(args, progress=progress) as board:
        tasks, operations = await _read_checklist(board, args.email)
        return await board.ensure_matrix(tasks, operations, args.date)


async def run_matrix_ensure(args: argparse.Namespace) -> MatrixResult:
    import opsboard.cli as cli

    if not args.verbose:
        with RichOpsProgress() as progress:
            result = await _ensure(args, progress)
    else:
        result = await _ensure(args, None)

    print(cli._format_matrix_summary(result))
    return result


def render_grid(rows: list[TaskStatusRow], operation_codes: list[str], *, title: str) -> Table:
    table = Table(title=title)
    table.add_column("Task")
    for code in operation_codes:
        table.add_column(code)
    for row in rows:
        table.add_row(row.title, *(row.operations[code].value for code in operation_codes))
    return table


async def run_matrix_show(args: argparse.Namespace) -> ReadResult[TaskStatusRow]:
    console = stdout_console()
    reference_date = args.date or date.today().isoformat()
    async with open_board(args) as board:
        tasks, operations = await _read_checklist(board, args.email)
        result = await board.get_matrix(reference_date, tasks, operations)
    if not result.ok:
        console.print(f"[yellow]warning:[/yellow] {result.error}")
    codes = [operation.code for operation in operations]
    console.print(render_grid(result.items, codes, title=f"Matrix {reference_date}"))
    return result


def render_status_table(cells: list[StatusCell]) -> Table:
    table = Table(title="Status cells")
    for column in ("Key", "Task", "Op", "Status", "User"):
        table.add_column(column)
    for cell in sorted(cells, key=lambda item: item.key):
        table.add_row(cell.key, cell.task_id, cell.operation_code, cell.status.value, cell.user)
    return table


async def run_status(args: argparse.Namespace) -> ReadResult[StatusCell]:
    console = stdout_console()
    async with open_board(args) as board:
        result = await board.get_status_by_date(args.date)
    if not result.ok:
        console.print(f"[yellow]warning:[/yellow] {result.error}")
    console.print(render_status_table(result.items))
    return result


__all__ = [
    "format_matrix_summary",
    "render_grid",
    "render_status_table",
    "run_matrix_ensure",
    "run_matrix_show",
    "run_status",
]
