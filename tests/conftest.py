"""Shared test fixtures for opsboard tests."""

from __future__ import annotations

import pytest

from opsboard.contracts.config import OpsBoardConfig
from opsboard.contracts.records import ChecklistTask, Operation, RouteConfig
from opsboard.sdk import OpsBoard
from tests.fakes.store import FakeListStore, standard_store


@pytest.fixture
def store() -> FakeListStore:
    return standard_store()


@pytest.fixture
def config() -> OpsBoardConfig:
    return OpsBoardConfig(site_path="contoso.sharepoint.com:/sites/CCO")


@pytest.fixture
def board(store: FakeListStore, config: OpsBoardConfig) -> OpsBoard:
    return OpsBoard(store=store, config=config)


@pytest.fixture
def sample_tasks() -> list[ChecklistTask]:
    return [
        ChecklistTask(id="1", title="Conferir escala", order=1),
        ChecklistTask(id="2", title="Validar rotas", order=2),
        ChecklistTask(id="3", title="Tarefa desativada", active=False, order=3),
    ]


@pytest.fixture
def sample_operations() -> list[Operation]:
    return [
        Operation(id="10", code="LAT-UNA", order=1, email="cco@example.com"),
        Operation(id="11", code="POA", order=2, email="cco@example.com"),
    ]


@pytest.fixture
def route_configs() -> list[RouteConfig]:
    return [
        RouteConfig(operacao="LAT-UNA", email="cco@example.com", tolerancia="00:05:00"),
        RouteConfig(operacao="POA", email="cco@example.com", tolerancia="00:10:00"),
    ]
