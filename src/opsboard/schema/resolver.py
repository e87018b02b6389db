"""Column mapping resolution and per-list caching.

Remote lists are renamed and re-cased by their owners, so logical field names
are matched against both the internal identifier and the display name of each
column, after normalization.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from opsboard.contracts.exceptions import ProviderError
from opsboard.contracts.store import ColumnInfo, ListInfo, ListStore
from opsboard.schema.normalize import normalize

_LOG = logging.getLogger(__name__)

TITLE_FIELD = "Title"
RESERVED_PREFIX = "_"
SYSTEM_FIELDS = frozenset({"ID", "Author", "Created", "Editor", "Modified"})

# Platform convention: these logical names always address the record title.
_TITLE_ALIASES = frozenset({"titulo", "rota"})


@dataclass(frozen=True)
class ColumnMapping:
    normalized_to_field: Mapping[str, str]
    read_only_fields: frozenset[str]
    known_fields: frozenset[str]
    title_field: str = TITLE_FIELD

    def lookup(self, normalized_name: str) -> str | None:
        return self.normalized_to_field.get(normalized_name)

    def is_writable(self, field_name: str) -> bool:
        if field_name not in self.known_fields:
            return False
        return field_name not in self.read_only_fields or field_name == self.title_field


def _is_read_only(column: ColumnInfo, title_field: str) -> bool:
    if column.identifier == title_field:
        return False
    return (
        column.read_only
        or column.identifier.startswith(RESERVED_PREFIX)
        or column.identifier in SYSTEM_FIELDS
    )


def build_column_mapping(columns: Iterable[ColumnInfo], *, title_field: str = TITLE_FIELD) -> ColumnMapping:
    """Build the lookup tables for one list's column metadata.

    Internal identifiers take precedence over display names when both
    normalize to the same key.
    """
    columns = list(columns)
    by_display: dict[str, str] = {}
    by_identifier: dict[str, str] = {}
    read_only: set[str] = set()
    known: set[str] = set()
    for column in columns:
        known.add(column.identifier)
        identifier_key = normalize(column.identifier)
        if identifier_key:
            by_identifier[identifier_key] = column.identifier
        display_key = normalize(column.display_name)
        if display_key:
            by_display[display_key] = column.identifier
        if _is_read_only(column, title_field):
            read_only.add(column.identifier)
    return ColumnMapping(
        normalized_to_field={**by_display, **by_identifier},
        read_only_fields=frozenset(read_only),
        known_fields=frozenset(known),
        title_field=title_field,
    )


@dataclass
class SchemaContext:
    """Session-scoped state shared by every resolver of one store.

    Holds the append-only column mapping cache keyed by
    ``containerId_listId``, the write-once container id and a memo of
    resolved lists.
    """

    mappings: dict[str, ColumnMapping] = field(default_factory=dict)
    lists: dict[str, ListInfo] = field(default_factory=dict)
    container_id: str | None = None

    @staticmethod
    def cache_key(container_id: str, list_id: str) -> str:
        return f"{container_id}_{list_id}"

    def remember_container(self, container_id: str) -> str:
        if self.container_id is None:
            self.container_id = container_id
        return self.container_id

    def clear(self) -> None:
        self.mappings.clear()
        self.lists.clear()
        self.container_id = None


class SchemaResolver:
    """Resolves logical field names to the actual identifiers of a remote list."""

    def __init__(
        self,
        store: ListStore,
        *,
        context: SchemaContext | None = None,
        overrides: Mapping[str, Mapping[str, str]] | None = None,
        title_field: str = TITLE_FIELD,
    ) -> None:
        self._store = store
        self.context = context or SchemaContext()
        self._title_field = title_field
        self._overrides: dict[str, dict[str, str]] = {
            list_context: {normalize(logical): actual for logical, actual in fields.items()}
            for list_context, fields in (overrides or {}).items()
        }

    async def container_id(self) -> str:
        if self.context.container_id is not None:
            return self.context.container_id
        resolved = await self._store.resolve_container()
        return self.context.remember_container(resolved)

    async def resolve_list(self, container_id: str, name: str) -> ListInfo:
        key = self.context.cache_key(container_id, name)
        cached = self.context.lists.get(key)
        if cached is not None:
            return cached
        info = await self._store.find_list(container_id, name)
        self.context.lists[key] = info
        return info

    async def resolve_schema(self, container_id: str, list_id: str) -> ColumnMapping:
        key = self.context.cache_key(container_id, list_id)
        cached = self.context.mappings.get(key)
        if cached is not None:
            return cached
        try:
            columns = await self._store.fetch_columns(container_id, list_id)
        except ProviderError:
            _LOG.error("Column metadata fetch failed for list %s", list_id)
            raise
        mapping = build_column_mapping(columns, title_field=self._title_field)
        _LOG.debug("Cached %d columns for list %s", len(mapping.known_fields), list_id)
        self.context.mappings[key] = mapping
        return mapping

    def resolve_field_name(self, mapping: ColumnMapping, logical_name: str, list_context: str | None = None) -> str:
        normalized = normalize(logical_name)
        if list_context is not None:
            override = self._overrides.get(list_context, {}).get(normalized)
            if override is not None:
                return override
        if normalized in _TITLE_ALIASES:
            return mapping.title_field
        return mapping.lookup(normalized) or logical_name
