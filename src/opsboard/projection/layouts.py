"""Declarative per-list record layouts.

Each layout lists, for one logical record type, which model attribute is
stored under which logical remote field, how its value is decoded/encoded and
whether it may be written.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel

from opsboard.contracts.records import (
    ChecklistTask,
    DailyWarning,
    HistorySnapshot,
    Operation,
    RouteConfig,
    RouteDeparture,
    RouteOperationMapping,
    StatusCell,
    TeamMember,
)

M = TypeVar("M", bound=BaseModel)


class FieldKind(StrEnum):
    TEXT = "text"
    TIME = "time"
    ORDER = "order"
    FLAG = "flag"
    TEXT_FLAG = "text-flag"
    DATE = "date"
    DATETIME = "datetime"
    STATUS = "status"
    JSON = "json"


@dataclass(frozen=True)
class FieldSpec:
    attr: str
    logical: str
    kind: FieldKind = FieldKind.TEXT
    readable: bool = True
    writable: bool = True


@dataclass(frozen=True)
class RecordLayout(Generic[M]):
    list_kind: str
    model: type[M]
    fields: tuple[FieldSpec, ...]

    def spec_for(self, attr: str) -> FieldSpec:
        for spec in self.fields:
            if spec.attr == attr and spec.readable:
                return spec
        raise KeyError(f"{self.model.__name__} has no field '{attr}'")


F = FieldSpec
K = FieldKind

TASKS = RecordLayout(
    "tasks",
    ChecklistTask,
    (
        F("title", "Titulo"),
        F("description", "Descricao"),
        F("category", "Categoria"),
        F("time_range", "Horario"),
        F("active", "Ativa", K.FLAG),
        F("order", "Ordem", K.ORDER),
    ),
)

OPERATIONS = RecordLayout(
    "operations",
    Operation,
    (
        F("code", "Titulo"),
        F("order", "Ordem", K.ORDER),
        F("email", "Responsavel"),
    ),
)

STATUS = RecordLayout(
    "status",
    StatusCell,
    (
        F("key", "Titulo"),
        F("key", "ChaveUnica", readable=False),
        F("reference_date", "DataReferencia", K.DATE),
        F("task_id", "TarefaID"),
        F("operation_code", "OperacaoSigla"),
        F("status", "Status", K.STATUS),
        F("user", "Usuario"),
        F("modified", "Modified", K.DATETIME, writable=False),
    ),
)

HISTORY = RecordLayout(
    "history",
    HistorySnapshot,
    (
        F("reset_by", "Titulo"),
        F("timestamp", "Data", K.DATETIME),
        F("tasks", "DadosJSON", K.JSON),
        F("email", "celula"),
    ),
)

_DEPARTURE_FIELDS = (
    F("rota", "Rota"),
    F("semana", "Semana"),
    F("data", "DataOperacao", K.DATE),
    F("inicio", "HorarioInicio", K.TIME),
    F("motorista", "Motorista"),
    F("placa", "Placa"),
    F("saida", "HorarioSaida", K.TIME),
    F("motivo", "MotivoAtraso"),
    F("observacao", "Observacao"),
    F("status_geral", "StatusGeral"),
    F("aviso", "Aviso"),
    F("operacao", "Operacao"),
    F("status_op", "StatusOp"),
    F("tempo", "TempoGap"),
    F("created_at", "Created", K.DATETIME, writable=False),
)

DEPARTURES = RecordLayout("departures", RouteDeparture, _DEPARTURE_FIELDS)

DEPARTURES_ARCHIVE = RecordLayout("departures_archive", RouteDeparture, _DEPARTURE_FIELDS)

ROUTE_MAPPINGS = RecordLayout(
    "route_mappings",
    RouteOperationMapping,
    (
        F("rota", "Rota"),
        F("operacao", "OPERACAO"),
    ),
)

ROUTE_CONFIGS = RecordLayout(
    "route_configs",
    RouteConfig,
    (
        F("operacao", "OPERACAO"),
        F("email", "EMAIL"),
        F("tolerancia", "TOLERANCIA", K.TIME),
    ),
)

WARNINGS = RecordLayout(
    "warnings",
    DailyWarning,
    (
        F("operacao", "Titulo"),
        F("celula", "celula"),
        F("rota", "rota"),
        F("descricao", "descricao"),
        F("data_ocorrencia", "data_referencia", K.DATE),
        F("visualizado", "visualizado", K.TEXT_FLAG),
    ),
)

TEAM = RecordLayout("team", TeamMember, (F("name", "Titulo"),))

LAYOUTS: dict[str, RecordLayout] = {
    layout.list_kind: layout
    for layout in (
        TASKS,
        OPERATIONS,
        STATUS,
        HISTORY,
        DEPARTURES,
        DEPARTURES_ARCHIVE,
        ROUTE_MAPPINGS,
        ROUTE_CONFIGS,
        WARNINGS,
        TEAM,
    )
}
