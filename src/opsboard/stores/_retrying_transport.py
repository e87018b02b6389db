"""httpx async transport wrapper with retry, backoff, and throttling pauses."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Iterable

import httpx

_LOG = logging.getLogger(__name__)

DEFAULT_RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})


class RetryingTransport(httpx.AsyncBaseTransport):
    """Retries transient failures of an inner async transport.

    - exponential backoff with jitter, up to *max_retries* extra attempts
    - on 429 every in-flight request waits out ``Retry-After`` via a shared event
    - 502 / 503 / 504 and transport-level errors are retried
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 3,
        retryable_status_codes: Iterable[int] = DEFAULT_RETRYABLE_STATUS_CODES,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries
        self._retryable = frozenset(retryable_status_codes)

        self._throttle_lock = asyncio.Lock()
        self._throttle_clear = asyncio.Event()
        self._throttle_clear.set()
        self._throttle_until = 0.0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        for attempt in range(self._max_retries + 1):
            await self._throttle_clear.wait()
            last_attempt = attempt >= self._max_retries

            try:
                response = await self._transport.handle_async_request(request)
            except httpx.TransportError:
                if last_attempt:
                    raise
                await self._sleep_backoff(attempt, request)
                continue

            if response.status_code not in self._retryable or last_attempt:
                return response

            await response.aclose()
            retry_after = self._parse_retry_after(response)
            if response.status_code == 429:
                await self._pause_all(retry_after)
            elif retry_after > 0:
                await asyncio.sleep(retry_after)
            await self._sleep_backoff(attempt, request)

        raise httpx.TransportError("Request failed after retries")  # pragma: no cover

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def _pause_all(self, retry_after: float) -> None:
        now = time.monotonic()
        async with self._throttle_lock:
            until = now + max(0.0, retry_after)
            if until <= self._throttle_until:
                return
            self._throttle_until = until
            self._throttle_clear.clear()

        await asyncio.sleep(max(0.0, self._throttle_until - time.monotonic()))

        async with self._throttle_lock:
            if time.monotonic() >= self._throttle_until:
                self._throttle_clear.set()

    @staticmethod
    def _parse_retry_after(response: httpx.Response) -> float:
        raw = response.headers.get("Retry-After")
        if raw is None:
            return 1.0
        try:
            return max(0.0, float(raw))
        except ValueError:
            return 1.0

    @staticmethod
    async def _sleep_backoff(attempt: int, request: httpx.Request) -> None:
        seconds = min(4.0, float(2**attempt)) + random.uniform(0.0, 0.25)
        _LOG.warning("Retrying %s %s (attempt %d)", request.method, request.url.path, attempt + 1)
        await asyncio.sleep(seconds)
