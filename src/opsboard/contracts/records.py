"""Logical record contracts.

These shapes are fixed regardless of how the remote lists name their columns.
Remote payloads are converted into them at the projection boundary.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator

ZERO_TIME = "00:00:00"


class OperationStatus(StrEnum):
    PENDING_REVIEW = "PR"
    OK = "OK"
    EA = "EA"
    AR = "AR"
    ATT = "ATT"
    AT = "AT"


class ChecklistTask(BaseModel):
    id: str = ""
    title: str = "Sem Título"
    description: str = ""
    category: str = "Geral"
    time_range: str = "--:--"
    active: bool = True
    order: int = 999


class Operation(BaseModel):
    id: str = ""
    code: str = "OP"
    order: int = 999
    email: str = ""


class StatusCell(BaseModel):
    """One (task, operation, date) checklist status."""

    id: str = ""
    key: str = ""
    reference_date: str = ""
    task_id: str = ""
    operation_code: str = ""
    status: OperationStatus = OperationStatus.PENDING_REVIEW
    user: str = ""
    modified: str = ""


class HistorySnapshot(BaseModel):
    id: str = ""
    timestamp: str = ""
    reset_by: str = "Reset"
    email: str = ""
    tasks: list[Any] = Field(default_factory=list)


class RouteDeparture(BaseModel):
    id: str = ""
    semana: str = ""
    rota: str = ""
    data: str = ""
    inicio: str = ZERO_TIME
    motorista: str = ""
    placa: str = ""
    saida: str = ZERO_TIME
    motivo: str = ""
    observacao: str = ""
    status_geral: str = "OK"
    aviso: str = "NÃO"
    operacao: str = ""
    status_op: str = "OK"
    tempo: str = "OK"
    created_at: str = ""

    @property
    def is_unlinked(self) -> bool:
        return not self.operacao.strip()


class ParsedDeparture(BaseModel):
    """Partial departure recovered from pasted text; validated before persisting."""

    rota: str = ""
    data: str = ""
    inicio: str = ZERO_TIME
    motorista: str = ""
    placa: str = ""
    saida: str = ZERO_TIME
    motivo: str = ""
    observacao: str = ""
    operacao: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class RouteOperationMapping(BaseModel):
    id: str = ""
    rota: str = ""
    operacao: str = ""


class RouteConfig(BaseModel):
    id: str = ""
    operacao: str = ""
    email: str = ""
    tolerancia: str = ZERO_TIME


class DailyWarning(BaseModel):
    id: str = ""
    operacao: str = "SEM OPERACAO"
    celula: str = ""
    rota: str = ""
    descricao: str = ""
    data_ocorrencia: str = ""
    visualizado: bool = False


class TeamMember(BaseModel):
    id: str = ""
    name: str = ""
