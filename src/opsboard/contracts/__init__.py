"""Public contracts for opsboard."""

from opsboard.contracts.config import ListNames, LlmConfig, OpsBoardConfig
from opsboard.contracts.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    ConfigError,
    InvalidRecordError,
    NotFoundError,
    OpsBoardError,
    ParseError,
    ProviderError,
)
from opsboard.contracts.records import (
    ZERO_TIME,
    ChecklistTask,
    DailyWarning,
    HistorySnapshot,
    Operation,
    OperationStatus,
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
from opsboard.contracts.store import ColumnInfo, FilterClause, ItemFilter, ListInfo, ListStore, RemoteItem

__all__ = [
    "ZERO_TIME",
    "AccessDeniedError",
    "ArchiveResult",
    "AuthenticationError",
    "BulkResult",
    "ChecklistTask",
    "ColumnInfo",
    "ConfigError",
    "DailyWarning",
    "DepartureBoard",
    "FilterClause",
    "HistorySnapshot",
    "InvalidRecordError",
    "ItemFilter",
    "ListInfo",
    "ListInspection",
    "ListNames",
    "ListStore",
    "LlmConfig",
    "MatrixResult",
    "NotFoundError",
    "Operation",
    "OperationStatus",
    "OpsBoardConfig",
    "OpsBoardError",
    "ParseError",
    "ParsedDeparture",
    "ProviderError",
    "ReadResult",
    "RemoteItem",
    "RouteConfig",
    "RouteDeparture",
    "RouteOperationMapping",
    "StatusCell",
    "TaskStatusRow",
    "TeamMember",
]
