"""A remote list bound to its resolved schema and record layout."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Generic

from opsboard.contracts.store import ItemFilter, ListInfo, ListStore, RemoteItem
from opsboard.projection.codec import from_remote, to_remote
from opsboard.projection.layouts import M, RecordLayout
from opsboard.schema.resolver import ColumnMapping, SchemaResolver


def day_window(start_date: str, end_date: str | None = None) -> tuple[str, str]:
    """Inclusive date-time bounds covering whole days from *start_date* to *end_date*."""
    return f"{start_date}T00:00:00Z", f"{end_date or start_date}T23:59:59Z"


class BoundList(Generic[M]):
    def __init__(
        self,
        *,
        store: ListStore,
        resolver: SchemaResolver,
        container_id: str,
        info: ListInfo,
        mapping: ColumnMapping,
        layout: RecordLayout[M],
    ) -> None:
        self._store = store
        self._resolver = resolver
        self.container_id = container_id
        self.info = info
        self.mapping = mapping
        self.layout = layout

    @property
    def list_id(self) -> str:
        return self.info.id

    def field_name(self, attr: str) -> str:
        spec = self.layout.spec_for(attr)
        return self._resolver.resolve_field_name(self.mapping, spec.logical, self.layout.list_kind)

    def decode(self, item: RemoteItem) -> M:
        return from_remote(self.layout, item, self.mapping, self._resolver)

    def encode(self, record: M, *, attrs: Iterable[str] | None = None) -> dict[str, object]:
        return to_remote(self.layout, record, self.mapping, self._resolver, attrs=attrs)

    def filter_eq(self, attr: str, value: str) -> ItemFilter:
        return ItemFilter().where(self.field_name(attr), "eq", value)

    def filter_days(self, attr: str, start_date: str, end_date: str | None = None) -> ItemFilter:
        start, end = day_window(start_date, end_date)
        column = self.field_name(attr)
        return ItemFilter().where(column, "ge", start).where(column, "le", end)

    async def query(self, filter: ItemFilter | None = None) -> list[M]:
        items = await self._store.query_items(self.container_id, self.list_id, filter)
        return [self.decode(item) for item in items]

    async def create(self, record: M) -> str:
        return await self._store.create_item(self.container_id, self.list_id, self.encode(record))

    async def patch(self, item_id: str, record: M, *, attrs: Iterable[str] | None = None) -> None:
        await self._store.patch_item(self.container_id, self.list_id, item_id, self.encode(record, attrs=attrs))

    async def delete(self, item_id: str) -> None:
        await self._store.delete_item(self.container_id, self.list_id, item_id)
