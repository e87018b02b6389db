"""In-memory list store fake with spy tracking."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

from opsboard.contracts.exceptions import NotFoundError, ProviderError
from opsboard.contracts.store import ColumnInfo, ItemFilter, ListInfo, ListStore, RemoteItem

ARCHIVE_LIST_ID = "856bf9d5-6081-4360-bcad-e771cbabfda8"

SYSTEM_COLUMNS = (
    ColumnInfo(identifier="ID", display_name="ID", read_only=True),
    ColumnInfo(identifier="Author", display_name="Criado por", read_only=True),
    ColumnInfo(identifier="Created", display_name="Criado", read_only=True),
    ColumnInfo(identifier="Modified", display_name="Modificado", read_only=True),
    ColumnInfo(identifier="_UIVersionString", display_name="Versão", read_only=False),
)


def matches(filter: ItemFilter, fields: dict[str, Any]) -> bool:
    """Evaluate a filter locally, the way the remote list applies it."""
    for clause in filter.clauses:
        raw = fields.get(clause.field)
        if raw is None:
            return False
        actual = str(raw)
        if clause.op == "eq" and actual != clause.value:
            return False
        if clause.op == "ge" and actual < clause.value:
            return False
        if clause.op == "le" and actual > clause.value:
            return False
    return True


def _columns(*pairs: tuple[str, str]) -> list[ColumnInfo]:
    title = ColumnInfo(identifier="Title", display_name="Título", read_only=True)
    return [title, *(ColumnInfo(identifier=name, display_name=display) for name, display in pairs), *SYSTEM_COLUMNS]


@dataclass
class FakeList:
    info: ListInfo
    columns: list[ColumnInfo]
    items: dict[str, dict[str, Any]] = field(default_factory=dict)


class FakeListStore(ListStore):
    """Deterministic ids, ``ItemFilter`` evaluation and per-call spies."""

    def __init__(self, *, container_id: str = "site-1") -> None:
        self.container_id = container_id
        self.lists: dict[str, FakeList] = {}
        self.calls: list[tuple[str, str]] = []
        self.column_fetches = 0
        self.entered = False
        self.exited = False
        self.failures: dict[str, Exception] = {}
        self.create_failure: Callable[[dict[str, Any]], bool] | None = None
        self._next_id = 0
        self._clock = 0

    async def __aenter__(self) -> FakeListStore:
        self.entered = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.exited = True

    def add_list(self, name: str, columns: list[ColumnInfo], *, list_id: str | None = None) -> FakeList:
        info = ListInfo(id=list_id or f"list-{name}", name=name, display_name=name, web_url=f"https://lists/{name}")
        fake = FakeList(info=info, columns=columns)
        self.lists[info.id] = fake
        return fake

    def list_named(self, name: str) -> FakeList:
        for fake in self.lists.values():
            if fake.info.name == name or fake.info.id == name:
                return fake
        raise KeyError(name)

    def seed(self, name: str, fields: dict[str, Any]) -> str:
        return self._insert(self.list_named(name), fields)

    def _insert(self, fake: FakeList, fields: dict[str, Any]) -> str:
        self._next_id += 1
        self._clock += 1
        item_id = str(self._next_id)
        stored = {"Modified": f"2024-01-01T00:00:{self._clock:02d}Z", **fields, "id": item_id}
        fake.items[item_id] = stored
        return item_id

    def _check(self, method: str, target: str) -> None:
        self.calls.append((method, target))
        failure = self.failures.get(method)
        if failure is not None:
            raise failure

    async def resolve_container(self) -> str:
        self._check("resolve_container", "")
        return self.container_id

    async def find_list(self, container_id: str, name: str) -> ListInfo:
        self._check("find_list", name)
        wanted = name.lower()
        for fake in self.lists.values():
            if wanted in {fake.info.id.lower(), fake.info.name.lower(), fake.info.display_name.lower()}:
                return fake.info
        raise NotFoundError(f"List '{name}' was not found on the site.", status_code=404)

    async def list_lists(self, container_id: str) -> list[ListInfo]:
        self._check("list_lists", "")
        return [fake.info for fake in self.lists.values()]

    async def fetch_columns(self, container_id: str, list_id: str) -> list[ColumnInfo]:
        self._check("fetch_columns", list_id)
        self.column_fetches += 1
        return list(self.lists[list_id].columns)

    async def query_items(
        self, container_id: str, list_id: str, filter: ItemFilter | None = None
    ) -> list[RemoteItem]:
        self._check("query_items", list_id)
        return [
            RemoteItem(id=item_id, fields=dict(fields))
            for item_id, fields in self.lists[list_id].items.items()
            if filter is None or matches(filter, fields)
        ]

    async def create_item(self, container_id: str, list_id: str, fields: dict[str, Any]) -> str:
        self._check("create_item", list_id)
        if self.create_failure is not None and self.create_failure(fields):
            raise ProviderError("List store API error [500]: create rejected", status_code=500)
        return self._insert(self.lists[list_id], fields)

    async def patch_item(self, container_id: str, list_id: str, item_id: str, fields: dict[str, Any]) -> None:
        self._check("patch_item", list_id)
        items = self.lists[list_id].items
        if item_id not in items:
            raise NotFoundError(f"item {item_id} not found", status_code=404)
        self._clock += 1
        items[item_id].update(fields)
        items[item_id]["Modified"] = f"2024-01-01T00:00:{self._clock:02d}Z"

    async def delete_item(self, container_id: str, list_id: str, item_id: str) -> None:
        self._check("delete_item", list_id)
        if self.lists[list_id].items.pop(item_id, None) is None:
            raise NotFoundError(f"item {item_id} not found", status_code=404)

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)


def standard_store() -> FakeListStore:
    """A store carrying every list of the default configuration."""
    store = FakeListStore()
    store.add_list("Tarefas_Checklist", _columns(("Descricao", "Descrição"), ("Categoria", "Categoria"), ("Horario", "Horário"), ("Ativa", "Ativa"), ("Ordem", "Ordem")))
    store.add_list("Operacoes_Checklist", _columns(("Ordem", "Ordem"), ("Responsavel", "Responsável")))
    store.add_list(
        "Status_Checklist",
        _columns(
            ("ChaveUnica", "Chave Única"),
            ("DataReferencia", "Data Referência"),
            ("TarefaID", "Tarefa ID"),
            ("OperacaoSigla", "Operação Sigla"),
            ("Status", "Status"),
            ("Usuario", "Usuário"),
        ),
    )
    store.add_list("Historico_checklist_web", _columns(("Data", "Data"), ("DadosJSON", "Dados JSON"), ("Celula", "Célula")))
    store.add_list("Usuarios_cco", _columns())
    store.add_list("CONFIG_SAIDA_DE_ROTAS", _columns(("OPERACAO", "OPERAÇÃO"), ("EMAIL", "E-mail"), ("TOLERANCIA", "Tolerância")))
    departure_columns = _columns(
        ("Semana", "Semana"),
        ("DataOperacao", "Data Operação"),
        ("HorarioInicio", "Horário Início"),
        ("Motorista", "Motorista"),
        ("Placa", "Placa"),
        ("HorarioSaida", "Horário Saída"),
        ("MotivoAtraso", "Motivo Atraso"),
        ("Observacao", "Observação"),
        ("StatusGeral", "Status Geral"),
        ("Aviso", "Aviso"),
        ("Operacao", "Operação"),
        ("StatusOp", "Status Op"),
        ("TempoGap", "Tempo Gap"),
    )
    store.add_list("Dados_Saida_de_rotas", departure_columns)
    store.add_list("Historico_Saida_de_rotas", list(departure_columns), list_id=ARCHIVE_LIST_ID)
    store.add_list("Rotas_Operacao_Checklist", _columns(("OPERACAO", "OPERAÇÃO")))
    store.add_list(
        "avisos_diarios_checklist",
        _columns(
            ("celula", "celula"),
            ("rota", "rota"),
            ("descricao", "descrição"),
            ("data_referencia", "data_referencia"),
            ("visualizado", "visualizado"),
        ),
    )
    return store
