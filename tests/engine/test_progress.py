"""Tests for batch progress observers."""

from __future__ import annotations

import io

from rich.console import Console

from opsboard.cli.progress.rich import RichOpsProgress
from opsboard.engine.progress import NullOpsProgress


def _console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, width=100)


def test_null_progress_accepts_every_event() -> None:
    progress = NullOpsProgress()

    progress.phase_start("Matrix", total=2)
    progress.item_done("Matrix")
    progress.phase_error("Matrix", RuntimeError("boom"))
    progress.phase_done("Matrix")


def test_rich_progress_tracks_items_per_phase() -> None:
    progress = RichOpsProgress(console=_console())

    with progress:
        progress.phase_start("Import", total=3)
        progress.item_done("Import")
        progress.item_done("Import")
        task = progress._progress.tasks[0]
        assert task.completed == 2
        progress.phase_done("Import")

    assert task.completed == 3
    assert "Import" in task.description


def test_rich_progress_completes_indeterminate_phase() -> None:
    progress = RichOpsProgress(console=_console())

    with progress:
        progress.phase_start("Archive")
        progress.phase_done("Archive")

    task = progress._progress.tasks[0]
    assert (task.total, task.completed) == (1, 1)


def test_rich_progress_marks_errors_and_ignores_unknown_phases() -> None:
    progress = RichOpsProgress(console=_console())

    with progress:
        progress.item_done("Matrix")
        progress.phase_done("Matrix")
        progress.phase_start("Matrix", total=4)
        progress.phase_error("Matrix", RuntimeError("boom"))

    task = progress._progress.tasks[0]
    assert task.description.startswith("[red]")
