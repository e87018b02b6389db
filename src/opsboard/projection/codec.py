"""Conversion between remote field payloads and logical records."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from opsboard.contracts.records import OperationStatus
from opsboard.contracts.store import RemoteItem
from opsboard.projection.layouts import FieldKind, FieldSpec, M, RecordLayout
from opsboard.schema.resolver import ColumnMapping, SchemaResolver

_LOG = logging.getLogger(__name__)

# Bare dates are stored as midday UTC date-times.
_DATE_STORAGE_SUFFIX = "T12:00:00Z"


def _default(layout: RecordLayout[Any], spec: FieldSpec) -> Any:
    return layout.model.model_fields[spec.attr].get_default(call_default_factory=True)


def decode_value(kind: FieldKind, raw: Any, default: Any) -> Any:
    """Decode one raw remote value, falling back to *default* when absent or invalid."""
    if kind is FieldKind.FLAG:
        if raw is False or (isinstance(raw, str) and raw.strip().lower() == "false"):
            return False
        return True
    if kind is FieldKind.TEXT_FLAG:
        if raw is True:
            return True
        return isinstance(raw, str) and raw.strip().lower() == "true"
    if raw is None or raw == "":
        return default
    if kind is FieldKind.ORDER:
        if isinstance(raw, bool):
            return default
        try:
            return int(float(raw))
        except (TypeError, ValueError):
            return default
    if kind is FieldKind.STATUS:
        try:
            return OperationStatus(str(raw).strip().upper())
        except ValueError:
            return default
    if kind is FieldKind.JSON:
        if isinstance(raw, list):
            return raw
        if not isinstance(raw, str):
            return default
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            _LOG.warning("Discarding undecodable JSON field value")
            return default
        return parsed if isinstance(parsed, list) else default
    if isinstance(raw, (dict, list)):
        return default
    text = str(raw)
    if kind is FieldKind.DATE:
        return text.split("T", 1)[0]
    return text


def encode_value(kind: FieldKind, value: Any) -> Any:
    if kind is FieldKind.DATE:
        return f"{value}{_DATE_STORAGE_SUFFIX}" if value else None
    if kind is FieldKind.DATETIME:
        return value or None
    if kind is FieldKind.JSON:
        return json.dumps(value, ensure_ascii=False)
    if kind is FieldKind.TEXT_FLAG:
        return "true" if value else "false"
    if kind is FieldKind.STATUS:
        return OperationStatus(value).value
    return value


def from_remote(
    layout: RecordLayout[M],
    item: RemoteItem,
    mapping: ColumnMapping,
    resolver: SchemaResolver,
) -> M:
    values: dict[str, Any] = {"id": str(item.fields.get("id") or item.id)}
    for spec in layout.fields:
        if not spec.readable:
            continue
        actual = resolver.resolve_field_name(mapping, spec.logical, layout.list_kind)
        raw = item.fields.get(actual)
        values[spec.attr] = decode_value(spec.kind, raw, _default(layout, spec))
    return layout.model.model_validate(values)


def to_remote(
    layout: RecordLayout[Any],
    record: BaseModel,
    mapping: ColumnMapping,
    resolver: SchemaResolver,
    *,
    attrs: Iterable[str] | None = None,
) -> dict[str, Any]:
    """Build a write payload, keeping only known, writable (or title) fields.

    Logical fields that resolve outside the list's columns are dropped so
    lists missing optional columns still accept the write.
    """
    selected = set(attrs) if attrs is not None else None
    payload: dict[str, Any] = {}
    for spec in layout.fields:
        if not spec.writable:
            continue
        if selected is not None and spec.attr not in selected:
            continue
        actual = resolver.resolve_field_name(mapping, spec.logical, layout.list_kind)
        if not mapping.is_writable(actual):
            _LOG.debug("Dropping field %s -> %s for list %s", spec.logical, actual, layout.list_kind)
            continue
        payload[actual] = encode_value(spec.kind, getattr(record, spec.attr))
    return payload
