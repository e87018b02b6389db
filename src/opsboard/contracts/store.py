"""List store adapter contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any, Literal

from pydantic import BaseModel, Field


class ColumnInfo(BaseModel):
    identifier: str
    display_name: str = ""
    read_only: bool = False


class ListInfo(BaseModel):
    id: str
    name: str = ""
    display_name: str = ""
    web_url: str = ""


class RemoteItem(BaseModel):
    id: str
    fields: dict[str, Any] = Field(default_factory=dict)


class FilterClause(BaseModel):
    field: str
    op: Literal["eq", "ge", "le"] = "eq"
    value: str


class ItemFilter(BaseModel):
    """Conjunction of field comparisons."""

    clauses: list[FilterClause] = Field(default_factory=list)

    def where(self, field: str, op: Literal["eq", "ge", "le"], value: str) -> ItemFilter:
        return ItemFilter(clauses=[*self.clauses, FilterClause(field=field, op=op, value=value)])


class ListStore(ABC):
    """Generic key-value list store reached over HTTP.

    Containers hold lists; lists hold items whose ``fields`` map string
    identifiers to values.
    """

    @abstractmethod
    async def __aenter__(self) -> ListStore: ...

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...

    @abstractmethod
    async def resolve_container(self) -> str: ...

    @abstractmethod
    async def find_list(self, container_id: str, name: str) -> ListInfo: ...

    @abstractmethod
    async def list_lists(self, container_id: str) -> list[ListInfo]: ...

    @abstractmethod
    async def fetch_columns(self, container_id: str, list_id: str) -> list[ColumnInfo]: ...

    @abstractmethod
    async def query_items(
        self, container_id: str, list_id: str, filter: ItemFilter | None = None
    ) -> list[RemoteItem]: ...

    @abstractmethod
    async def create_item(self, container_id: str, list_id: str, fields: dict[str, Any]) -> str: ...

    @abstractmethod
    async def patch_item(self, container_id: str, list_id: str, item_id: str, fields: dict[str, Any]) -> None: ...

    @abstractmethod
    async def delete_item(self, container_id: str, list_id: str, item_id: str) -> None: ...
