"""OData ``$filter`` rendering for list item queries."""

from __future__ import annotations

from opsboard.contracts.store import ItemFilter


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def render_filter(filter: ItemFilter | None) -> str | None:
    if filter is None or not filter.clauses:
        return None
    return " and ".join(f"fields/{clause.field} {clause.op} {_quote(clause.value)}" for clause in filter.clauses)
