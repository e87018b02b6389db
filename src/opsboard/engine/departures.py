"""Route departure rules: derived fields, import completion and linking."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from enum import StrEnum

from opsboard.contracts.exceptions import InvalidRecordError
from opsboard.contracts.records import ZERO_TIME, ParsedDeparture, RouteConfig, RouteDeparture, RouteOperationMapping
from opsboard.engine.timegap import GapStatus, clock_time, compute_gap, format_time_input, is_unset, time_to_seconds

_LOG = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = ("JAN", "FEV", "MAR", "ABR", "MAI", "JUN", "JUL", "AGO", "SET", "OUT", "NOV", "DEZ")

TIME_FIELDS = frozenset({"inicio", "saida"})
_GAP_TRIGGERS = frozenset({"inicio", "saida", "operacao"})


class RowAlert(StrEnum):
    LATE = "late"
    PENDING_LATE = "pending-late"
    NORMAL = "normal"


def operation_key(code: str | None) -> str:
    return (code or "").strip().upper()


def is_persisted_id(item_id: str | None) -> bool:
    """Only numeric, non-zero ids refer to stored items."""
    value = (item_id or "").strip()
    return value.isdigit() and value.strip("0") != ""


def week_label(day: str | None) -> str:
    """``"<MON> S<n>"`` where *n* is the 7-day block of the month; ``""`` for invalid dates."""
    if not day:
        return ""
    try:
        parsed = date.fromisoformat(day.split("T", 1)[0])
    except ValueError:
        return ""
    return f"{MONTH_ABBREVIATIONS[parsed.month - 1]} S{(parsed.day + 6) // 7}"


def find_config(configs: Iterable[RouteConfig], operation: str | None) -> RouteConfig | None:
    wanted = operation_key(operation)
    if not wanted:
        return None
    return next((config for config in configs if operation_key(config.operacao) == wanted), None)


def tolerance_for(configs: Iterable[RouteConfig], operation: str | None) -> str:
    config = find_config(configs, operation)
    return config.tolerancia if config is not None else ZERO_TIME


def apply_edit(
    departure: RouteDeparture,
    field: str,
    value: str,
    configs: Sequence[RouteConfig],
) -> RouteDeparture:
    """Apply one inline edit and recompute the derived fields.

    ``status_op`` is always recomputed; delay notes are cleared once the row is
    no longer late; ``tempo`` follows changes to the times or the operation and
    ``semana`` follows the date.
    """
    if field not in RouteDeparture.model_fields or field == "id":
        raise InvalidRecordError(f"Unknown departure field: {field}")
    final = format_time_input(value) if field in TIME_FIELDS else value
    updated = departure.model_copy(update={field: final})

    tolerance = tolerance_for(configs, updated.operacao)
    result = compute_gap(updated.inicio, updated.saida, tolerance)
    changes: dict[str, str] = {"status_op": result.status.value}
    if result.status is not GapStatus.LATE:
        changes["motivo"] = ""
        changes["observacao"] = ""
    if field in _GAP_TRIGGERS:
        changes["tempo"] = result.gap
    if field == "data":
        changes["semana"] = week_label(updated.data)
    return updated.model_copy(update=changes)


def prepare_new_departure(
    departure: RouteDeparture,
    configs: Sequence[RouteConfig],
    *,
    created_at: str | None = None,
) -> RouteDeparture:
    """Fill derived fields of a manually entered departure.

    A departure outside its operation's tolerance needs both a delay reason and
    an observation.
    """
    result = compute_gap(departure.inicio, departure.saida, tolerance_for(configs, departure.operacao))
    if result.out_of_tolerance and (not departure.motivo.strip() or not departure.observacao.strip()):
        raise InvalidRecordError("Motivo and observacao are required for departures outside the tolerance")
    return departure.model_copy(
        update={
            "id": "",
            "semana": week_label(departure.data),
            "tempo": result.gap,
            "status_op": result.status.value,
            "created_at": created_at or datetime.now().astimezone().isoformat(),
        }
    )


def build_from_parsed(
    parsed: ParsedDeparture,
    configs: Sequence[RouteConfig],
    *,
    created_at: str | None = None,
) -> RouteDeparture:
    operation = operation_key(parsed.operacao)
    if not operation and configs:
        operation = operation_key(configs[0].operacao)
    result = compute_gap(parsed.inicio or ZERO_TIME, parsed.saida or ZERO_TIME, tolerance_for(configs, operation))
    return RouteDeparture(
        rota=parsed.rota,
        data=parsed.data,
        inicio=parsed.inicio or ZERO_TIME,
        motorista=parsed.motorista,
        placa=parsed.placa,
        saida=parsed.saida or ZERO_TIME,
        motivo=parsed.motivo,
        observacao=parsed.observacao,
        operacao=operation,
        semana=week_label(parsed.data),
        status_geral="OK",
        aviso="NÃO",
        status_op=result.status.value,
        tempo=result.gap,
        created_at=created_at or datetime.now().astimezone().isoformat(),
    )


def link_unlinked(
    departures: Iterable[RouteDeparture],
    mappings: Iterable[RouteOperationMapping],
    configs: Iterable[RouteConfig],
) -> list[RouteDeparture]:
    """Fill a blank ``operacao`` from the route mapping table.

    The mapped operation is only applied when it belongs to the user's
    configured operations; other departures pass through unchanged.
    """
    allowed = {operation_key(config.operacao) for config in configs}
    by_route: dict[str, str] = {}
    for mapping in mappings:
        by_route.setdefault(mapping.rota, operation_key(mapping.operacao))

    linked: list[RouteDeparture] = []
    for departure in departures:
        if departure.is_unlinked:
            operation = by_route.get(departure.rota)
            if operation and operation in allowed:
                _LOG.debug("Linked route %s to operation %s", departure.rota, operation)
                departure = departure.model_copy(update={"operacao": operation})
        linked.append(departure)
    return linked


def row_alert(departure: RouteDeparture, configs: Iterable[RouteConfig], *, now: datetime | None = None) -> RowAlert:
    tolerance = tolerance_for(configs, departure.operacao)
    if not is_unset(departure.saida):
        result = compute_gap(departure.inicio, departure.saida, tolerance)
        return RowAlert.LATE if result.out_of_tolerance else RowAlert.NORMAL
    if is_unset(departure.inicio):
        return RowAlert.NORMAL
    current = time_to_seconds(clock_time(now or datetime.now()))
    if current > time_to_seconds(departure.inicio) + time_to_seconds(tolerance):
        return RowAlert.PENDING_LATE
    return RowAlert.NORMAL
