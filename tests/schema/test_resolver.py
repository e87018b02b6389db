"""Tests for SchemaResolver and ColumnMapping construction."""

from __future__ import annotations

import pytest

from opsboard.contracts.exceptions import ProviderError
from opsboard.contracts.store import ColumnInfo
from opsboard.schema.resolver import SchemaContext, SchemaResolver, build_column_mapping
from tests.fakes.store import FakeListStore, standard_store


def _mapping():
    return build_column_mapping(
        [
            ColumnInfo(identifier="Title", display_name="Título", read_only=True),
            ColumnInfo(identifier="HorarioInicio", display_name="Horário Início"),
            ColumnInfo(identifier="field_3", display_name="Motorista"),
            ColumnInfo(identifier="Locked", display_name="Bloqueado", read_only=True),
            ColumnInfo(identifier="_ModerationStatus", display_name="Aprovação"),
            ColumnInfo(identifier="Author", display_name="Criado por"),
        ]
    )


class TestBuildColumnMapping:
    def test_registers_identifier_and_display_name(self) -> None:
        mapping = _mapping()
        assert mapping.lookup("horarioinicio") == "HorarioInicio"
        assert mapping.lookup("motorista") == "field_3"
        assert mapping.lookup("field3") == "field_3"

    def test_read_only_detection(self) -> None:
        mapping = _mapping()
        assert mapping.read_only_fields == {"Locked", "_ModerationStatus", "Author"}

    def test_title_stays_writable_even_when_flagged_read_only(self) -> None:
        mapping = _mapping()
        assert "Title" not in mapping.read_only_fields
        assert mapping.is_writable("Title")

    def test_unknown_fields_are_not_writable(self) -> None:
        assert not _mapping().is_writable("DoesNotExist")

    def test_identifier_wins_over_display_name_collision(self) -> None:
        mapping = build_column_mapping(
            [
                ColumnInfo(identifier="Status", display_name="Situação"),
                ColumnInfo(identifier="StatusOld", display_name="Status"),
            ]
        )
        assert mapping.lookup("status") == "Status"


class TestSchemaResolver:
    @pytest.mark.asyncio
    async def test_resolve_schema_fetches_once_per_list(self) -> None:
        store = standard_store()
        resolver = SchemaResolver(store)

        first = await resolver.resolve_schema("site-1", "list-Status_Checklist")
        second = await resolver.resolve_schema("site-1", "list-Status_Checklist")

        assert first is second
        assert store.column_fetches == 1
        assert "site-1_list-Status_Checklist" in resolver.context.mappings

    @pytest.mark.asyncio
    async def test_clear_forces_refetch(self) -> None:
        store = standard_store()
        resolver = SchemaResolver(store)
        await resolver.resolve_schema("site-1", "list-Status_Checklist")

        resolver.context.clear()
        await resolver.resolve_schema("site-1", "list-Status_Checklist")

        assert store.column_fetches == 2

    @pytest.mark.asyncio
    async def test_shared_context_is_shared_cache(self) -> None:
        store = standard_store()
        context = SchemaContext()
        await SchemaResolver(store, context=context).resolve_schema("site-1", "list-Usuarios_cco")
        await SchemaResolver(store, context=context).resolve_schema("site-1", "list-Usuarios_cco")

        assert store.column_fetches == 1

    @pytest.mark.asyncio
    async def test_metadata_failure_propagates_and_is_not_cached(self) -> None:
        store = standard_store()
        store.failures["fetch_columns"] = ProviderError("List store API error [500]: boom", status_code=500)
        resolver = SchemaResolver(store)

        with pytest.raises(ProviderError, match="boom"):
            await resolver.resolve_schema("site-1", "list-Status_Checklist")
        assert resolver.context.mappings == {}

    @pytest.mark.asyncio
    async def test_container_id_is_memoized(self) -> None:
        store = FakeListStore(container_id="site-xyz")
        resolver = SchemaResolver(store)

        assert await resolver.container_id() == "site-xyz"
        assert await resolver.container_id() == "site-xyz"
        assert store.count("resolve_container") == 1

    @pytest.mark.asyncio
    async def test_resolve_list_memoizes_lookup(self) -> None:
        store = standard_store()
        resolver = SchemaResolver(store)

        info = await resolver.resolve_list("site-1", "Status_Checklist")
        again = await resolver.resolve_list("site-1", "Status_Checklist")

        assert info.id == again.id == "list-Status_Checklist"
        assert store.count("find_list") == 1


class TestResolveFieldName:
    def test_uses_mapping_for_renamed_columns(self) -> None:
        resolver = SchemaResolver(FakeListStore())
        assert resolver.resolve_field_name(_mapping(), "Motorista") == "field_3"

    @pytest.mark.parametrize("logical", ["Titulo", "Título", "rota", "ROTA"])
    def test_title_aliases_resolve_to_title_field(self, logical: str) -> None:
        resolver = SchemaResolver(FakeListStore())
        assert resolver.resolve_field_name(_mapping(), logical) == "Title"

    def test_unknown_logical_name_is_returned_unchanged(self) -> None:
        resolver = SchemaResolver(FakeListStore())
        assert resolver.resolve_field_name(_mapping(), "CampoInexistente") == "CampoInexistente"

    def test_list_overrides_apply_before_title_alias(self) -> None:
        resolver = SchemaResolver(FakeListStore(), overrides={"warnings": {"Rota": "rota"}})
        mapping = _mapping()

        assert resolver.resolve_field_name(mapping, "rota", "warnings") == "rota"
        assert resolver.resolve_field_name(mapping, "rota", "departures") == "Title"
        assert resolver.resolve_field_name(mapping, "rota") == "Title"
