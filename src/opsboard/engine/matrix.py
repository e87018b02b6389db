"""Status matrix reconciliation.

For one reference date the matrix holds one status cell per
(active task, operation) pair. ``ensure`` creates exactly the cells missing
from the store, so repeated runs converge instead of duplicating.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from opsboard.contracts.exceptions import OpsBoardError
from opsboard.contracts.records import ChecklistTask, Operation, OperationStatus, StatusCell
from opsboard.contracts.results import MatrixResult
from opsboard.engine.progress import NullOpsProgress, OpsProgress
from opsboard.projection.bound import BoundList

_LOG = logging.getLogger(__name__)

ENSURE_PHASE = "Matrix"

# Fields an existing cell may change; identity fields stay untouched.
MUTABLE_CELL_FIELDS = ("status", "user")


def composite_key(reference_date: str, task_id: str, operation_code: str) -> str:
    """``YYYYMMDD_<task id>_<operation code>``."""
    return f"{reference_date.replace('-', '')}_{task_id}_{operation_code}"


def required_cells(
    tasks: Iterable[ChecklistTask],
    operations: Sequence[Operation],
    reference_date: str,
    *,
    system_user: str,
) -> dict[str, StatusCell]:
    cells: dict[str, StatusCell] = {}
    for task in tasks:
        if not task.active:
            continue
        for operation in operations:
            key = composite_key(reference_date, task.id, operation.code)
            cells[key] = StatusCell(
                key=key,
                reference_date=reference_date,
                task_id=task.id,
                operation_code=operation.code,
                status=OperationStatus.PENDING_REVIEW,
                user=system_user,
            )
    return cells


def plan_missing_cells(required: dict[str, StatusCell], existing: Iterable[StatusCell]) -> list[StatusCell]:
    present = {cell.key for cell in existing}
    return [cell for key, cell in required.items() if key not in present]


def _numeric_id(cell: StatusCell) -> int:
    try:
        return int(cell.id)
    except ValueError:
        return -1


def pick_patch_target(candidates: Iterable[StatusCell]) -> StatusCell | None:
    """Duplicate keys are an invariant violation; writes go to the highest remote id."""
    return max(candidates, key=_numeric_id, default=None)


def _recency(cell: StatusCell) -> tuple[str, int]:
    return cell.modified, _numeric_id(cell)


def latest_cells(cells: Iterable[StatusCell]) -> dict[str, StatusCell]:
    """Collapse duplicates per key for display: latest ``modified`` wins, then highest id."""
    merged: dict[str, StatusCell] = {}
    for cell in cells:
        current = merged.get(cell.key)
        if current is None or _recency(cell) > _recency(current):
            merged[cell.key] = cell
    return merged


def build_grid(
    tasks: Iterable[ChecklistTask],
    operation_codes: Sequence[str],
    cells: Iterable[StatusCell],
) -> dict[str, dict[str, OperationStatus]]:
    """Status of every operation code per active task, from one day's cells.

    A pair without a stored cell reads as ``PR``. Duplicates resolve the same
    way as :func:`latest_cells`.
    """
    by_pair: dict[tuple[str, str], StatusCell] = {}
    for cell in latest_cells(cells).values():
        pair = (cell.task_id, cell.operation_code)
        current = by_pair.get(pair)
        if current is None or _recency(cell) > _recency(current):
            by_pair[pair] = cell

    grid: dict[str, dict[str, OperationStatus]] = {}
    for task in tasks:
        if not task.active:
            continue
        row: dict[str, OperationStatus] = {}
        for code in operation_codes:
            cell = by_pair.get((task.id, code))
            row[code] = cell.status if cell is not None else OperationStatus.PENDING_REVIEW
        grid[task.id] = row
    return grid


class MatrixEngine:
    def __init__(
        self,
        status_list: BoundList[StatusCell],
        *,
        system_user: str = "Sistema",
        max_concurrent: int = 4,
        progress: OpsProgress | None = None,
    ) -> None:
        self._status = status_list
        self._system_user = system_user
        self._max_concurrent = max_concurrent
        self._progress = progress or NullOpsProgress()

    async def existing_cells(self, reference_date: str) -> list[StatusCell]:
        return await self._status.query(self._status.filter_days("reference_date", reference_date))

    async def ensure(
        self,
        tasks: Iterable[ChecklistTask],
        operations: Sequence[Operation],
        reference_date: str,
    ) -> MatrixResult:
        required = required_cells(tasks, operations, reference_date, system_user=self._system_user)
        existing = await self.existing_cells(reference_date)
        missing = plan_missing_cells(required, existing)
        result = MatrixResult(
            reference_date=reference_date,
            required=len(required),
            existing=len(required) - len(missing),
        )
        if not missing:
            _LOG.debug("Matrix for %s already complete (%d cells)", reference_date, len(required))
            return result

        semaphore = asyncio.Semaphore(self._max_concurrent)
        created: list[str] = []
        failed: list[str] = []

        async def _create(cell: StatusCell) -> None:
            async with semaphore:
                try:
                    await self._status.create(cell)
                except OpsBoardError as exc:
                    _LOG.warning("Could not create status cell %s: %s", cell.key, exc)
                    failed.append(cell.key)
                else:
                    created.append(cell.key)
                self._progress.item_done(ENSURE_PHASE)

        self._progress.phase_start(ENSURE_PHASE, total=len(missing))
        try:
            async with asyncio.TaskGroup() as group:
                for cell in missing:
                    group.create_task(_create(cell))
        except BaseException as exc:
            self._progress.phase_error(ENSURE_PHASE, exc)
            raise
        self._progress.phase_done(ENSURE_PHASE)

        return result.model_copy(update={"created": len(created), "failed": len(failed)})

    async def update_cell(self, cell: StatusCell) -> str:
        """Patch the cell stored under ``cell.key`` or create it; returns the remote id."""
        matches = await self._status.query(self._status.filter_eq("key", cell.key))
        target = pick_patch_target(matches)
        if target is None:
            return await self._status.create(cell)
        if len(matches) > 1:
            _LOG.warning("Found %d status cells for key %s; patching id %s", len(matches), cell.key, target.id)
        await self._status.patch(target.id, cell, attrs=MUTABLE_CELL_FIELDS)
        return target.id
