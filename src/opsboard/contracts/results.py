"""Operation result contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from opsboard.contracts.records import OperationStatus, RouteConfig, RouteDeparture, RouteOperationMapping
from opsboard.contracts.store import ColumnInfo

T = TypeVar("T")


@dataclass(frozen=True)
class ReadResult(Generic[T]):
    """Outcome of a read that degrades to an empty collection on failure.

    ``items`` is always renderable; ``error`` tells a genuinely empty result
    apart from a failed fetch.
    """

    items: list[T] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, items: list[T]) -> ReadResult[T]:
        return cls(items=list(items))

    @classmethod
    def failure(cls, reason: str, fallback: list[T] | None = None) -> ReadResult[T]:
        return cls(items=list(fallback or []), error=reason)


class MatrixResult(BaseModel):
    reference_date: str
    required: int = 0
    existing: int = 0
    created: int = 0
    failed: int = 0


class TaskStatusRow(BaseModel):
    """One active task of the daily matrix with its status per operation code."""

    task_id: str
    title: str = ""
    category: str = ""
    operations: dict[str, OperationStatus] = Field(default_factory=dict)


class BulkResult(BaseModel):
    created_ids: list[str] = Field(default_factory=list)
    failed_routes: list[str] = Field(default_factory=list)


class ArchiveResult(BaseModel):
    success: int = 0
    failed: int = 0
    last_error: str | None = None


class ListInspection(BaseModel):
    name: str
    list_id: str
    display_name: str = ""
    web_url: str = "#"
    columns: list[ColumnInfo] = Field(default_factory=list)
    error: str | None = None


class DepartureBoard(BaseModel):
    """Departures with the user's route configs and the route mapping table.

    ``errors`` lists the reads that degraded to empty collections.
    """

    departures: list[RouteDeparture] = Field(default_factory=list)
    configs: list[RouteConfig] = Field(default_factory=list)
    mappings: list[RouteOperationMapping] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
