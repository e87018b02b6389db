"""Language-model assisted departure import.

A convenience alternative to :func:`opsboard.parsing.departures.parse_departures`.
Its output goes through the same :func:`finalize` step, so callers get the same
field set and defaulting rules whichever parser produced the records.
"""

from __future__ import annotations

import json
import logging
import os
from types import TracebackType
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from opsboard.contracts.config import LlmConfig
from opsboard.contracts.exceptions import ConfigError, ParseError
from opsboard.contracts.records import ParsedDeparture
from opsboard.parsing.departures import TABULATED_COLUMNS, finalize
from opsboard.stores._retrying_transport import RetryingTransport

_LOG = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[ParsedDeparture])

_PROMPT = (
    'Extraia dados logísticos de: """{text}""". '
    "Formato: ROTA, DATA(YYYY-MM-DD), INICIO, MOTORISTA, PLACA, SAIDA, MOTIVO, OBSERVAÇÃO, OPERAÇÃO."
)


def _response_schema() -> dict[str, Any]:
    return {
        "type": "ARRAY",
        "items": {
            "type": "OBJECT",
            "properties": {column: {"type": "STRING"} for column in TABULATED_COLUMNS},
            "required": ["rota", "data"],
        },
    }


class LlmDepartureParser:
    """Best-effort parser backed by the Gemini ``generateContent`` endpoint."""

    def __init__(
        self,
        config: LlmConfig | None = None,
        *,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or LlmConfig()
        self._api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> LlmDepartureParser:
        api_key = (self._api_key or os.getenv(self._config.api_key_env) or "").strip()
        if not api_key:
            raise ConfigError(f"{self._config.api_key_env} is not set; use the direct (manual) import instead")
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            transport=self._transport or RetryingTransport(),
            headers={"x-goog-api-key": api_key},
            timeout=httpx.Timeout(self._config.timeout),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def parse(self, text: str) -> list[ParsedDeparture]:
        if self._client is None:
            raise ParseError("Parser is not initialized. Use 'async with'.")
        body = {
            "contents": [{"parts": [{"text": _PROMPT.format(text=text)}]}],
            "generationConfig": {"responseMimeType": "application/json", "responseSchema": _response_schema()},
        }
        try:
            response = await self._client.post(f"/models/{self._config.model}:generateContent", json=body)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            _LOG.error("Assisted parse request failed: %s", exc)
            raise ParseError(f"assisted parse request failed: {exc}") from exc
        return finalize(self._decode(response.json()))

    @staticmethod
    def _decode(payload: Any) -> list[ParsedDeparture]:
        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
            raw = json.loads(text)
            return _RECORDS.validate_python(raw)
        except (KeyError, IndexError, TypeError) as exc:
            raise ParseError("assisted parse response has no candidate text") from exc
        except json.JSONDecodeError as exc:
            raise ParseError("assisted parse returned invalid JSON") from exc
        except ValidationError as exc:
            raise ParseError(f"assisted parse returned unexpected records: {exc}") from exc
