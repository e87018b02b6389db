"""Pure domain rules and batch engines."""

from opsboard.engine.departures import (
    RowAlert,
    apply_edit,
    build_from_parsed,
    find_config,
    is_persisted_id,
    link_unlinked,
    prepare_new_departure,
    row_alert,
    week_label,
)
from opsboard.engine.matrix import MatrixEngine, build_grid, composite_key, latest_cells, pick_patch_target
from opsboard.engine.progress import NullOpsProgress, OpsProgress
from opsboard.engine.timegap import (
    GapResult,
    GapStatus,
    compute_gap,
    format_time_input,
    seconds_to_time,
    time_to_seconds,
)

__all__ = [
    "GapResult",
    "GapStatus",
    "MatrixEngine",
    "NullOpsProgress",
    "OpsProgress",
    "RowAlert",
    "apply_edit",
    "build_grid",
    "build_from_parsed",
    "composite_key",
    "compute_gap",
    "find_config",
    "format_time_input",
    "is_persisted_id",
    "latest_cells",
    "link_unlinked",
    "pick_patch_target",
    "prepare_new_departure",
    "row_alert",
    "seconds_to_time",
    "time_to_seconds",
    "week_label",
]
