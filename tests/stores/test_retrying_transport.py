"""Tests for RetryingTransport - retry, backoff, and throttling handling."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from opsboard.stores._retrying_transport import RetryingTransport

_MODULE = "opsboard.stores._retrying_transport.RetryingTransport"


def _make_response(status_code: int = 200, headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(status_code=status_code, headers=headers or {})


def _make_request() -> httpx.Request:
    return httpx.Request("GET", "https://graph.microsoft.com/v1.0/sites/site-1/lists")


class TestConstruction:
    def test_defaults(self) -> None:
        transport = RetryingTransport()
        assert transport._max_retries == 3
        assert transport._retryable == frozenset({429, 502, 503, 504})

    def test_custom_inner_transport(self) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        transport = RetryingTransport(transport=inner, max_retries=5, retryable_status_codes=[500])
        assert transport._transport is inner
        assert transport._max_retries == 5
        assert transport._retryable == frozenset({500})


class TestSuccessfulRequests:
    @pytest.mark.asyncio
    async def test_returns_successful_response(self) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.return_value = _make_response(200)

        transport = RetryingTransport(transport=inner)
        response = await transport.handle_async_request(_make_request())

        assert response.status_code == 200
        assert inner.handle_async_request.call_count == 1

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.return_value = _make_response(403)

        transport = RetryingTransport(transport=inner)
        response = await transport.handle_async_request(_make_request())

        assert response.status_code == 403
        assert inner.handle_async_request.call_count == 1


class TestTransportErrors:
    @pytest.mark.asyncio
    @patch(f"{_MODULE}._sleep_backoff", new_callable=AsyncMock)
    async def test_retries_on_transport_error_then_succeeds(self, mock_backoff: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = [
            httpx.TransportError("connection reset"),
            _make_response(200),
        ]
        request = _make_request()

        transport = RetryingTransport(transport=inner, max_retries=2)
        response = await transport.handle_async_request(request)

        assert response.status_code == 200
        assert inner.handle_async_request.call_count == 2
        mock_backoff.assert_awaited_once_with(0, request)

    @pytest.mark.asyncio
    @patch(f"{_MODULE}._sleep_backoff", new_callable=AsyncMock)
    async def test_raises_after_max_retries_exhausted(self, mock_backoff: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = httpx.TransportError("fail")

        transport = RetryingTransport(transport=inner, max_retries=2)
        with pytest.raises(httpx.TransportError, match="fail"):
            await transport.handle_async_request(_make_request())

        assert inner.handle_async_request.call_count == 3
        assert mock_backoff.await_count == 2


class TestThrottling:
    @pytest.mark.asyncio
    @patch(f"{_MODULE}._sleep_backoff", new_callable=AsyncMock)
    @patch(f"{_MODULE}._pause_all", new_callable=AsyncMock)
    async def test_429_pauses_with_retry_after(self, mock_pause: AsyncMock, mock_backoff: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = [
            _make_response(429, {"Retry-After": "2"}),
            _make_response(200),
        ]

        transport = RetryingTransport(transport=inner, max_retries=2)
        response = await transport.handle_async_request(_make_request())

        assert response.status_code == 200
        mock_pause.assert_awaited_once_with(2.0)
        assert mock_backoff.await_count == 1

    @pytest.mark.asyncio
    @patch(f"{_MODULE}._sleep_backoff", new_callable=AsyncMock)
    @patch(f"{_MODULE}._pause_all", new_callable=AsyncMock)
    async def test_429_returns_response_when_retries_exhausted(
        self, mock_pause: AsyncMock, mock_backoff: AsyncMock
    ) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.return_value = _make_response(429)

        transport = RetryingTransport(transport=inner, max_retries=1)
        response = await transport.handle_async_request(_make_request())

        assert response.status_code == 429
        assert inner.handle_async_request.call_count == 2

    @pytest.mark.asyncio
    @patch("asyncio.sleep", new_callable=AsyncMock)
    async def test_pause_all_sets_and_clears_event(self, mock_sleep: AsyncMock) -> None:
        transport = RetryingTransport(max_retries=1)

        assert transport._throttle_clear.is_set()
        await transport._pause_all(0.0)
        assert transport._throttle_clear.is_set()

    @pytest.mark.asyncio
    @patch("asyncio.sleep", new_callable=AsyncMock)
    async def test_pause_all_skips_when_existing_pause_is_later(self, mock_sleep: AsyncMock) -> None:
        transport = RetryingTransport(max_retries=1)
        transport._throttle_until = 1e15

        await transport._pause_all(1.0)

        assert transport._throttle_until == 1e15
        mock_sleep.assert_not_awaited()


class TestServerErrors:
    @pytest.mark.asyncio
    @patch(f"{_MODULE}._sleep_backoff", new_callable=AsyncMock)
    async def test_503_retries_then_succeeds(self, mock_backoff: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = [_make_response(503), _make_response(200)]

        transport = RetryingTransport(transport=inner, max_retries=2)
        response = await transport.handle_async_request(_make_request())

        assert response.status_code == 200
        assert inner.handle_async_request.call_count == 2

    @pytest.mark.asyncio
    @patch("asyncio.sleep", new_callable=AsyncMock)
    @patch(f"{_MODULE}._sleep_backoff", new_callable=AsyncMock)
    async def test_server_error_respects_retry_after_header(
        self, mock_backoff: AsyncMock, mock_sleep: AsyncMock
    ) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = [
            _make_response(504, {"Retry-After": "3"}),
            _make_response(200),
        ]

        transport = RetryingTransport(transport=inner, max_retries=2)
        response = await transport.handle_async_request(_make_request())

        assert response.status_code == 200
        mock_sleep.assert_awaited_once_with(3.0)


class TestParseRetryAfter:
    @pytest.mark.parametrize(
        ("headers", "expected"),
        [({"Retry-After": "5"}, 5.0), ({}, 1.0), ({"Retry-After": "soon"}, 1.0), ({"Retry-After": "-5"}, 0.0)],
    )
    def test_parse(self, headers: dict[str, str], expected: float) -> None:
        assert RetryingTransport._parse_retry_after(_make_response(429, headers)) == expected


class TestSleepBackoff:
    @pytest.mark.asyncio
    @patch("asyncio.sleep", new_callable=AsyncMock)
    @patch("random.uniform", return_value=0.1)
    async def test_backoff_grows_and_caps(self, mock_uniform: AsyncMock, mock_sleep: AsyncMock) -> None:
        request = _make_request()

        await RetryingTransport._sleep_backoff(0, request)
        mock_sleep.assert_awaited_with(1.1)

        await RetryingTransport._sleep_backoff(1, request)
        mock_sleep.assert_awaited_with(2.1)

        await RetryingTransport._sleep_backoff(10, request)
        mock_sleep.assert_awaited_with(4.1)


class TestAclose:
    @pytest.mark.asyncio
    async def test_delegates_to_inner_transport(self) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        transport = RetryingTransport(transport=inner)

        await transport.aclose()
        inner.aclose.assert_awaited_once()
