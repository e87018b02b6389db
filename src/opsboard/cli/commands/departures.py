"""Route departure commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.table import Table

from opsboard.cli.common import format_count, open_board, print_warnings, stdout_console
from opsboard.cli.progress.rich import RichOpsProgress
from opsboard.contracts.exceptions import ConfigError, OpsBoardError
from opsboard.contracts.records import ParsedDeparture, RouteConfig, RouteDeparture
from opsboard.contracts.results import BulkResult, DepartureBoard, ReadResult
from opsboard.engine.departures import RowAlert, row_alert
from opsboard.engine.progress import OpsProgress
from opsboard.parsing import LlmDepartureParser, parse_departures

_ALERT_STYLES: dict[RowAlert, str | None] = {
    RowAlert.LATE: "bold white on dark_orange",
    RowAlert.PENDING_LATE: "bold black on yellow",
    RowAlert.NORMAL: None,
}


def render_departures(departures: list[RouteDeparture], configs: list[RouteConfig], *, title: str) -> Table:
    table = Table(title=title)
    for column in ("Rota", "Data", "Inicio", "Motorista", "Placa", "Saida", "Operacao", "Status", "Tempo"):
        table.add_column(column)
    for departure in departures:
        table.add_row(
            departure.rota,
            departure.data,
            departure.inicio,
            departure.motorista,
            departure.placa,
            departure.saida,
            departure.operacao or "-",
            departure.status_op,
            departure.tempo,
            style=_ALERT_STYLES[row_alert(departure, configs)],
        )
    return table


def render_parsed(records: list[ParsedDeparture]) -> Table:
    table = Table(title="Parsed rows")
    for column in ("Rota", "Data", "Inicio", "Motorista", "Placa", "Saida", "Observacao"):
        table.add_column(column)
    for record in records:
        table.add_row(
            record.rota,
            record.data,
            record.inicio,
            record.motorista,
            record.placa,
            record.saida,
            record.observacao,
        )
    return table


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed reading import file: {source}") from exc


def format_import_summary(result: BulkResult) -> str:
    lines = [
        "",
        "opsboard - departures import complete",
        "",
        f"  Created:   {format_count(len(result.created_ids), 'departure')}",
    ]
    if result.failed_routes:
        lines.append(f"  Failed:    {', '.join(result.failed_routes)}")
    lines.append("")
    return "\n".join(lines)


async def run_departures_list(args: argparse.Namespace) -> DepartureBoard:
    console = stdout_console()
    async with open_board(args) as board:
        result = await board.load_departure_board(args.email)
    print_warnings(console, result.errors)
    console.print(render_departures(result.departures, result.configs, title="Departures"))
    return result


async def _parse_locally(args: argparse.Namespace, text: str) -> list[ParsedDeparture]:
    import opsboard.cli as cli

    if not args.llm:
        return parse_departures(text)
    config = cli.load_config(args.config)
    async with LlmDepartureParser(config.llm) as parser:
        return await parser.parse(text)


async def _import(args: argparse.Namespace, text: str, progress: OpsProgress | None) -> BulkResult:
    async with open_board(args, progress=progress) as board:
        configs = await board.get_route_configs(args.email)
        if not configs.ok:
            raise OpsBoardError(f"cannot read route configs: {configs.error}")
        records = await board.parse_departures_from_text(text, use_llm=args.llm)
        if not records:
            raise OpsBoardError("no valid rows found; check that the ROTA and DATA columns were copied")
        return await board.import_departures(records, configs.items)


async def run_departures_import(args: argparse.Namespace) -> BulkResult | list[ParsedDeparture]:
    import opsboard.cli as cli

    text = _read_text(args.file)
    if args.dry_run:
        records = await _parse_locally(args, text)
        stdout_console().print(render_parsed(records))
        print(f"\n  [dry-run] {format_count(len(records), 'row')} parsed, nothing was created\n")
        return records

    if not args.verbose:
        with RichOpsProgress() as progress:
            result = await _import(args, text, progress)
    else:
        result = await _import(args, text, None)

    print(cli._format_import_summary(result))
    return result


async def run_departures_history(args: argparse.Namespace) -> ReadResult[RouteDeparture]:
    console = stdout_console()
    async with open_board(args) as board:
        result = await board.get_archived_departures(args.operation, args.start, args.end)
    if not result.ok:
        print_warnings(console, [result.error or "archive query failed"])
    console.print(render_departures(result.items, [], title=f"Archive {args.start} .. {args.end}"))
    return result


__all__ = [
    "format_import_summary",
    "render_departures",
    "render_parsed",
    "run_departures_history",
    "run_departures_import",
    "run_departures_list",
]
