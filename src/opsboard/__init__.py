"""Public API surface for opsboard."""

__version__ = "0.1.0"

from opsboard.auth import TokenResolver, create_token_resolver
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
from opsboard.contracts.results import ArchiveResult, BulkResult, DepartureBoard, ListInspection, MatrixResult, ReadResult
from opsboard.contracts.store import ListStore
from opsboard.engine import GapStatus, OpsProgress, compute_gap, seconds_to_time, time_to_seconds
from opsboard.parsing import parse_departures
from opsboard.schema import normalize
from opsboard.sdk import OpsBoard, load_config
from opsboard.stores import create_store

__all__ = [
    "AccessDeniedError",
    "ArchiveResult",
    "AuthenticationError",
    "BulkResult",
    "ChecklistTask",
    "ConfigError",
    "DailyWarning",
    "DepartureBoard",
    "GapStatus",
    "HistorySnapshot",
    "InvalidRecordError",
    "ListInspection",
    "ListNames",
    "ListStore",
    "LlmConfig",
    "MatrixResult",
    "NotFoundError",
    "Operation",
    "OperationStatus",
    "OpsBoard",
    "OpsBoardConfig",
    "OpsBoardError",
    "OpsProgress",
    "ParseError",
    "ParsedDeparture",
    "ProviderError",
    "ReadResult",
    "RouteConfig",
    "RouteDeparture",
    "RouteOperationMapping",
    "StatusCell",
    "TeamMember",
    "TokenResolver",
    "compute_gap",
    "create_store",
    "create_token_resolver",
    "load_config",
    "normalize",
    "parse_departures",
    "seconds_to_time",
    "time_to_seconds",
]
