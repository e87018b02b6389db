"""Tests for the language-model assisted departure parser."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from opsboard.contracts.config import LlmConfig
from opsboard.contracts.exceptions import ConfigError, ParseError
from opsboard.parsing import LlmDepartureParser


def _candidate(payload: Any) -> dict[str, Any]:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _transport(body: Any, *, status_code: int = 200, seen: list[httpx.Request] | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=body)

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_parse_returns_finalized_records() -> None:
    seen: list[httpx.Request] = []
    records = [
        {"rota": "24133D", "data": "15/03/2024", "inicio": "8:00", "motorista": "JOAO", "placa": "ABC1234"},
        {"rota": "", "data": "2024-03-15"},
    ]
    parser = LlmDepartureParser(api_key="secret", transport=_transport(_candidate(records), seen=seen))

    async with parser:
        result = await parser.parse("24133D 15/03/2024 08:00 JOAO ABC1234")

    assert len(result) == 1
    assert result[0].data == "2024-03-15"
    assert result[0].inicio == "08:00:00"
    assert result[0].saida == "00:00:00"
    request = seen[0]
    assert request.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
    assert request.headers["x-goog-api-key"] == "secret"
    body = json.loads(request.content)
    assert "24133D" in body["contents"][0]["parts"][0]["text"]
    assert body["generationConfig"]["responseMimeType"] == "application/json"


@pytest.mark.asyncio
async def test_null_fields_fall_back_to_defaults() -> None:
    records = [{"rota": "24133D", "data": "2024-03-15", "inicio": "08:00", "motivo": None, "saida": None}]
    parser = LlmDepartureParser(api_key="secret", transport=_transport(_candidate(records)))

    async with parser:
        result = await parser.parse("x")

    assert len(result) == 1
    assert result[0].rota == "24133D"
    assert result[0].motivo == ""
    assert result[0].saida == "00:00:00"


@pytest.mark.asyncio
async def test_api_key_is_read_from_configured_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CUSTOM_LLM_KEY", "from-env")
    seen: list[httpx.Request] = []
    parser = LlmDepartureParser(LlmConfig(api_key_env="CUSTOM_LLM_KEY"), transport=_transport(_candidate([]), seen=seen))

    async with parser:
        assert await parser.parse("nada") == []

    assert seen[0].headers["x-goog-api-key"] == "from-env"


@pytest.mark.asyncio
async def test_missing_api_key_is_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(ConfigError, match="GEMINI_API_KEY"):
        async with LlmDepartureParser(transport=_transport(_candidate([]))):
            pass


@pytest.mark.asyncio
async def test_parse_requires_context_manager() -> None:
    with pytest.raises(ParseError, match="not initialized"):
        await LlmDepartureParser(api_key="secret").parse("x")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "message"),
    [
        (_candidate("not json"), "invalid JSON"),
        ({"candidates": []}, "no candidate text"),
        (_candidate([{"rota": 123}]), "unexpected records"),
    ],
)
async def test_bad_responses_raise_parse_error(body: Any, message: str) -> None:
    async with LlmDepartureParser(api_key="secret", transport=_transport(body)) as parser:
        with pytest.raises(ParseError, match=message):
            await parser.parse("x")


@pytest.mark.asyncio
async def test_http_failure_raises_parse_error() -> None:
    async with LlmDepartureParser(api_key="secret", transport=_transport({"error": "boom"}, status_code=500)) as parser:
        with pytest.raises(ParseError, match="request failed"):
            await parser.parse("x")
