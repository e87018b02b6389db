"""SDK composition root for opsboard."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Sequence
from datetime import date
from pathlib import Path
from types import TracebackType
from typing import Any, TypeVar

from pydantic import ValidationError

from opsboard.auth import create_token_resolver
from opsboard.contracts.config import ListNames, OpsBoardConfig
from opsboard.contracts.exceptions import ConfigError, OpsBoardError
from opsboard.contracts.records import (
    ChecklistTask,
    DailyWarning,
    HistorySnapshot,
    Operation,
    ParsedDeparture,
    RouteConfig,
    RouteDeparture,
    RouteOperationMapping,
    StatusCell,
    TeamMember,
)
from opsboard.contracts.results import (
    ArchiveResult,
    BulkResult,
    DepartureBoard,
    ListInspection,
    MatrixResult,
    ReadResult,
    TaskStatusRow,
)
from opsboard.contracts.store import ListStore
from opsboard.engine.departures import (
    apply_edit,
    build_from_parsed,
    is_persisted_id,
    link_unlinked,
    prepare_new_departure,
)
from opsboard.engine.matrix import MatrixEngine, build_grid, composite_key, latest_cells
from opsboard.engine.progress import NullOpsProgress, OpsProgress
from opsboard.parsing import LlmDepartureParser, parse_departures
from opsboard.projection import LAYOUTS, BoundList
from opsboard.schema import SchemaContext, SchemaResolver
from opsboard.stores import create_store

_LOG = logging.getLogger(__name__)

T = TypeVar("T")

IMPORT_PHASE = "Import"
ARCHIVE_PHASE = "Archive"


def load_config(path: str | Path) -> OpsBoardConfig:
    """Load and validate an ``opsboard.json`` config file."""
    config_path = Path(path).expanduser().resolve()
    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        return OpsBoardConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc


def _same_email(left: str, right: str) -> bool:
    return left.strip().lower() == right.strip().lower()


class OpsBoard:
    """opsboard SDK public API.

    Reads degrade to a failed :class:`ReadResult` (empty items plus the
    reason); writes raise :class:`OpsBoardError` subclasses.

    Use as an async context manager so the underlying store session is
    opened and closed::

        async with await OpsBoard.from_config(config) as board:
            tasks = await board.get_tasks()
    """

    def __init__(
        self,
        *,
        store: ListStore,
        config: OpsBoardConfig,
        context: SchemaContext | None = None,
        progress: OpsProgress | None = None,
    ) -> None:
        self._store = store
        self._config = config
        self._progress = progress or NullOpsProgress()
        self._resolver = SchemaResolver(store, context=context, overrides=config.field_overrides)

    @classmethod
    async def from_config(cls, config: OpsBoardConfig, *, progress: OpsProgress | None = None) -> OpsBoard:
        token = await create_token_resolver(config).resolve()
        store = create_store(config.store, site_path=config.site_path, token=token, base_url=config.base_url)
        return cls(store=store, config=config, progress=progress)

    @property
    def config(self) -> OpsBoardConfig:
        return self._config

    @property
    def context(self) -> SchemaContext:
        return self._resolver.context

    async def __aenter__(self) -> OpsBoard:
        await self._store.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self._store.__aexit__(exc_type, exc_val, exc_tb)

    async def _bind(self, kind: str) -> BoundList[Any]:
        container_id = await self._resolver.container_id()
        info = await self._resolver.resolve_list(container_id, self._config.lists.get(kind))
        mapping = await self._resolver.resolve_schema(container_id, info.id)
        return BoundList(
            store=self._store,
            resolver=self._resolver,
            container_id=container_id,
            info=info,
            mapping=mapping,
            layout=LAYOUTS[kind],
        )

    @staticmethod
    async def _degrade(what: str, fetch: Awaitable[list[T]]) -> ReadResult[T]:
        try:
            return ReadResult.success(await fetch)
        except OpsBoardError as exc:
            _LOG.warning("Reading %s failed: %s", what, exc)
            return ReadResult.failure(str(exc))

    # -- checklist ---------------------------------------------------------

    async def get_tasks(self) -> ReadResult[ChecklistTask]:
        async def fetch() -> list[ChecklistTask]:
            tasks = await (await self._bind("tasks")).query()
            return sorted(tasks, key=lambda task: task.order)

        return await self._degrade("tasks", fetch())

    async def get_operations(self, user_email: str) -> ReadResult[Operation]:
        async def fetch() -> list[Operation]:
            operations = await (await self._bind("operations")).query()
            owned = [operation for operation in operations if _same_email(operation.email, user_email)]
            if not owned:
                _LOG.warning("No operations linked to %s", user_email)
            return sorted(owned, key=lambda operation: operation.order)

        return await self._degrade("operations", fetch())

    async def get_status_by_date(self, reference_date: str) -> ReadResult[StatusCell]:
        """Status cells of one day, one per composite key."""

        async def fetch() -> list[StatusCell]:
            status = await self._bind("status")
            cells = await status.query(status.filter_days("reference_date", reference_date))
            return list(latest_cells(cells).values())

        return await self._degrade("status cells", fetch())

    async def get_matrix(
        self,
        reference_date: str,
        tasks: Sequence[ChecklistTask],
        operations: Sequence[Operation],
    ) -> ReadResult[TaskStatusRow]:
        """Active tasks in order, each with one status per operation code.

        Pairs with no stored cell read as ``PR``; a failed status read degrades
        the whole grid.
        """
        cells = await self.get_status_by_date(reference_date)
        if not cells.ok:
            return ReadResult.failure(cells.error or "status cells unavailable")
        grid = build_grid(tasks, [operation.code for operation in operations], cells.items)
        return ReadResult.success(
            [
                TaskStatusRow(task_id=task.id, title=task.title, category=task.category, operations=grid[task.id])
                for task in sorted(tasks, key=lambda task: task.order)
                if task.id in grid
            ]
        )

    async def update_status_cell(self, cell: StatusCell) -> str:
        if not cell.key:
            cell = cell.model_copy(
                update={"key": composite_key(cell.reference_date, cell.task_id, cell.operation_code)}
            )
        engine = MatrixEngine(await self._bind("status"), system_user=self._config.system_user)
        return await engine.update_cell(cell)

    async def ensure_matrix(
        self,
        tasks: Sequence[ChecklistTask],
        operations: Sequence[Operation],
        reference_date: str | None = None,
    ) -> MatrixResult:
        engine = MatrixEngine(
            await self._bind("status"),
            system_user=self._config.system_user,
            max_concurrent=self._config.max_concurrent,
            progress=self._progress,
        )
        return await engine.ensure(tasks, operations, reference_date or date.today().isoformat())

    async def get_history(self, user_email: str) -> ReadResult[HistorySnapshot]:
        async def fetch() -> list[HistorySnapshot]:
            history = await self._bind("history")
            snapshots = await history.query(history.filter_eq("email", user_email))
            return sorted(snapshots, key=lambda snapshot: snapshot.timestamp, reverse=True)

        return await self._degrade("history", fetch())

    async def save_history(self, record: HistorySnapshot) -> str:
        return await (await self._bind("history")).create(record)

    async def get_team_members(self) -> ReadResult[str]:
        """Team roster names; the configured default roster stands in on failure."""
        try:
            members: list[TeamMember] = await (await self._bind("team")).query()
        except OpsBoardError as exc:
            _LOG.warning("Reading team members failed: %s", exc)
            return ReadResult.failure(str(exc), fallback=list(self._config.default_team))
        return ReadResult.success(sorted(member.name for member in members if member.name))

    # -- route departures --------------------------------------------------

    async def get_departures(self) -> ReadResult[RouteDeparture]:
        async def fetch() -> list[RouteDeparture]:
            return await (await self._bind("departures")).query()

        return await self._degrade("departures", fetch())

    async def get_route_configs(self, user_email: str) -> ReadResult[RouteConfig]:
        async def fetch() -> list[RouteConfig]:
            configs = await (await self._bind("route_configs")).query()
            return [
                config.model_copy(update={"email": config.email.strip().lower()})
                for config in configs
                if _same_email(config.email, user_email)
            ]

        return await self._degrade("route configs", fetch())

    async def get_route_operation_mappings(self) -> ReadResult[RouteOperationMapping]:
        async def fetch() -> list[RouteOperationMapping]:
            return await (await self._bind("route_mappings")).query()

        return await self._degrade("route mappings", fetch())

    async def add_route_operation_mapping(self, route: str, operation: str) -> str:
        mapping = RouteOperationMapping(rota=route.strip(), operacao=operation.strip().upper())
        return await (await self._bind("route_mappings")).create(mapping)

    async def load_departure_board(self, user_email: str) -> DepartureBoard:
        configs, mappings, departures = await asyncio.gather(
            self.get_route_configs(user_email),
            self.get_route_operation_mappings(),
            self.get_departures(),
        )
        errors = [result.error for result in (configs, mappings, departures) if result.error is not None]
        return DepartureBoard(
            departures=link_unlinked(departures.items, mappings.items, configs.items),
            configs=configs.items,
            mappings=mappings.items,
            errors=errors,
        )

    async def update_departure(self, departure: RouteDeparture) -> str:
        """Patch a stored departure or create a new one; returns its id."""
        departures = await self._bind("departures")
        if is_persisted_id(departure.id):
            await departures.patch(departure.id, departure)
            return departure.id
        return await departures.create(departure)

    async def create_departure(self, departure: RouteDeparture, configs: Sequence[RouteConfig]) -> RouteDeparture:
        prepared = prepare_new_departure(departure, configs)
        new_id = await self.update_departure(prepared)
        return prepared.model_copy(update={"id": new_id})

    async def edit_departure(
        self,
        departure: RouteDeparture,
        field: str,
        value: str,
        configs: Sequence[RouteConfig],
    ) -> RouteDeparture:
        updated = apply_edit(departure, field, value, configs)
        new_id = await self.update_departure(updated)
        return updated.model_copy(update={"id": new_id})

    async def delete_departure(self, item_id: str) -> None:
        await (await self._bind("departures")).delete(item_id)

    async def parse_departures_from_text(self, text: str, *, use_llm: bool = False) -> list[ParsedDeparture]:
        if not use_llm:
            return parse_departures(text)
        async with LlmDepartureParser(self._config.llm) as parser:
            return await parser.parse(text)

    async def import_departures(
        self,
        records: Sequence[ParsedDeparture],
        configs: Sequence[RouteConfig],
    ) -> BulkResult:
        """Complete parsed records and create them, collecting per-route failures."""
        departures = await self._bind("departures")
        semaphore = asyncio.Semaphore(self._config.max_concurrent)
        created: list[str] = []
        failed: list[str] = []

        async def _create(departure: RouteDeparture) -> None:
            async with semaphore:
                try:
                    created.append(await departures.create(departure))
                except OpsBoardError as exc:
                    _LOG.warning("Import of route %s failed: %s", departure.rota, exc)
                    failed.append(departure.rota)
                self._progress.item_done(IMPORT_PHASE)

        self._progress.phase_start(IMPORT_PHASE, total=len(records))
        try:
            async with asyncio.TaskGroup() as group:
                for record in records:
                    group.create_task(_create(build_from_parsed(record, configs)))
        except BaseException as exc:
            self._progress.phase_error(IMPORT_PHASE, exc)
            raise
        self._progress.phase_done(IMPORT_PHASE)
        return BulkResult(created_ids=created, failed_routes=failed)

    async def move_departures_to_history(self, items: Sequence[RouteDeparture]) -> ArchiveResult:
        """Copy each departure to the archive list, deleting the source only once archived."""
        source = await self._bind("departures")
        archive = await self._bind("departures_archive")
        success = 0
        failed = 0
        last_error: str | None = None

        self._progress.phase_start(ARCHIVE_PHASE, total=len(items))
        for item in items:
            try:
                archived_id = await archive.create(item)
                if not archived_id:
                    raise OpsBoardError(f"archive returned no id for route {item.rota}")
                await source.delete(item.id)
                success += 1
            except OpsBoardError as exc:
                _LOG.warning("Archiving route %s (id %s) failed: %s", item.rota, item.id, exc)
                failed += 1
                last_error = str(exc)
            self._progress.item_done(ARCHIVE_PHASE)
        self._progress.phase_done(ARCHIVE_PHASE)
        return ArchiveResult(success=success, failed=failed, last_error=last_error)

    async def get_archived_departures(
        self,
        operation: str | None,
        start_date: str,
        end_date: str,
    ) -> ReadResult[RouteDeparture]:
        async def fetch() -> list[RouteDeparture]:
            archive = await self._bind("departures_archive")
            query = archive.filter_days("data", start_date, end_date)
            if operation:
                query = query.where(archive.field_name("operacao"), "eq", operation)
            return await archive.query(query)

        return await self._degrade("archived departures", fetch())

    # -- daily warnings ----------------------------------------------------

    async def add_daily_warning(self, warning: DailyWarning) -> str:
        unread = warning.model_copy(update={"visualizado": False, "operacao": warning.operacao or "SEM OPERACAO"})
        return await (await self._bind("warnings")).create(unread)

    async def get_daily_warnings(self, user_email: str) -> ReadResult[DailyWarning]:
        """Unread warnings addressed to *user_email*, whatever their date."""

        async def fetch() -> list[DailyWarning]:
            warnings = await self._bind("warnings")
            query = warnings.filter_eq("celula", user_email.strip()).where(
                warnings.field_name("visualizado"), "eq", "false"
            )
            return await warnings.query(query)

        return await self._degrade("daily warnings", fetch())

    async def mark_warning_viewed(self, item_id: str) -> None:
        warnings = await self._bind("warnings")
        await warnings.patch(item_id, DailyWarning(visualizado=True), attrs=("visualizado",))

    # -- diagnostics -------------------------------------------------------

    async def inspect_lists(self) -> list[ListInspection]:
        """Metadata and columns of every configured list, or the error per list."""

        async def inspect(kind: str) -> ListInspection:
            name = self._config.lists.get(kind)
            try:
                container_id = await self._resolver.container_id()
                info = await self._resolver.resolve_list(container_id, name)
                columns = await self._store.fetch_columns(container_id, info.id)
            except OpsBoardError as exc:
                _LOG.warning("Inspecting list %s failed: %s", name, exc)
                return ListInspection(name=name, list_id=name, display_name=name, error=str(exc))
            return ListInspection(
                name=name,
                list_id=info.id,
                display_name=info.display_name,
                web_url=info.web_url or "#",
                columns=columns,
            )

        return list(await asyncio.gather(*(inspect(kind) for kind in ListNames.model_fields)))
