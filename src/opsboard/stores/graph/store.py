"""List store backed by the Microsoft Graph sites/lists REST API."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx

from opsboard.contracts.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    NotFoundError,
    ProviderError,
)
from opsboard.contracts.store import ColumnInfo, ItemFilter, ListInfo, ListStore, RemoteItem
from opsboard.stores._retrying_transport import RetryingTransport
from opsboard.stores.graph.filters import render_filter

_LOG = logging.getLogger(__name__)

_PAGE_SIZE = 999
_MAX_PAGES = 100

ACCESS_DENIED_MESSAGE = "ACCESS DENIED: your account does not have permission to read or edit this list."


class GraphListStore(ListStore):
    def __init__(
        self,
        *,
        site_path: str,
        token: str,
        base_url: str = "https://graph.microsoft.com/v1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._site_path = site_path
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GraphListStore:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            transport=RetryingTransport(transport=self._transport),
            headers={
                "Authorization": f"Bearer {self._token}",
                "Prefer": "HonorNonIndexedQueriesWarningMayFailOverLargeLists",
            },
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            timeout=httpx.Timeout(30.0),
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

    async def resolve_container(self) -> str:
        data = await self._request("GET", f"/sites/{self._site_path}")
        return self._require_str(data, "id")

    async def find_list(self, container_id: str, name: str) -> ListInfo:
        try:
            data = await self._request("GET", f"/sites/{container_id}/lists/{quote(name, safe='')}")
            return self._list_info(data)
        except (AccessDeniedError, AuthenticationError):
            raise
        except ProviderError:
            _LOG.debug("Direct lookup of list %r failed; scanning all lists", name)
        wanted = name.lower()
        for info in await self.list_lists(container_id):
            if info.name.lower() == wanted or info.display_name.lower() == wanted:
                return info
        raise NotFoundError(f"List '{name}' was not found on the site.", status_code=404)

    async def list_lists(self, container_id: str) -> list[ListInfo]:
        return [self._list_info(entry) for entry in await self._collect(f"/sites/{container_id}/lists")]

    async def fetch_columns(self, container_id: str, list_id: str) -> list[ColumnInfo]:
        entries = await self._collect(f"/sites/{container_id}/lists/{list_id}/columns")
        return [
            ColumnInfo(
                identifier=str(entry.get("name", "")),
                display_name=str(entry.get("displayName") or ""),
                read_only=bool(entry.get("readOnly")),
            )
            for entry in entries
            if entry.get("name")
        ]

    async def query_items(
        self, container_id: str, list_id: str, filter: ItemFilter | None = None
    ) -> list[RemoteItem]:
        params: dict[str, str] = {"expand": "fields", "$top": str(_PAGE_SIZE)}
        rendered = render_filter(filter)
        if rendered:
            params["$filter"] = rendered
        entries = await self._collect(f"/sites/{container_id}/lists/{list_id}/items", params=params)
        return [RemoteItem(id=str(entry.get("id", "")), fields=entry.get("fields") or {}) for entry in entries]

    async def create_item(self, container_id: str, list_id: str, fields: dict[str, Any]) -> str:
        data = await self._request("POST", f"/sites/{container_id}/lists/{list_id}/items", json={"fields": fields})
        return str(self._require_str(data, "id"))

    async def patch_item(self, container_id: str, list_id: str, item_id: str, fields: dict[str, Any]) -> None:
        await self._request("PATCH", f"/sites/{container_id}/lists/{list_id}/items/{item_id}/fields", json=fields)

    async def delete_item(self, container_id: str, list_id: str, item_id: str) -> None:
        await self._request("DELETE", f"/sites/{container_id}/lists/{list_id}/items/{item_id}")

    async def _collect(self, path: str, *, params: dict[str, str] | None = None) -> list[dict[str, Any]]:
        entries: list[dict[str, Any]] = []
        url: str | None = path
        pages = 0
        while url is not None:
            pages += 1
            if pages > _MAX_PAGES:
                raise ProviderError("Pagination exceeded safety budget.")
            data = await self._request("GET", url, params=params if pages == 1 else None)
            value = data.get("value") if isinstance(data, dict) else None
            if not isinstance(value, list):
                raise ProviderError(f"Missing/invalid list at key 'value' for {path}")
            entries.extend(entry for entry in value if isinstance(entry, dict))
            next_link = data.get("@odata.nextLink")
            url = next_link if isinstance(next_link, str) and next_link else None
        return entries

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        if self._client is None:
            raise ProviderError("Store is not initialized. Use 'async with'.")
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            _LOG.error("List store transport failure: %s %s: %s", method, url, exc)
            raise ProviderError(f"List store request failed: {exc}") from exc

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            return response.json()

        detail = self._error_detail(response)
        status = response.status_code
        _LOG.error("List store API failure: %s %s status=%d detail=%s", method, url, status, detail)
        if status == 401:
            raise AuthenticationError(f"Authentication rejected by the list store: {detail}", status_code=status)
        if status == 403:
            raise AccessDeniedError(f"{ACCESS_DENIED_MESSAGE} ({detail})", status_code=status)
        if status == 404:
            raise NotFoundError(f"Not found: {url}: {detail}", status_code=status)
        raise ProviderError(f"List store API error [{status}]: {detail}", status_code=status)

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return response.text

    @staticmethod
    def _list_info(data: Any) -> ListInfo:
        if not isinstance(data, dict) or not data.get("id"):
            raise ProviderError("List metadata is missing an id")
        return ListInfo(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            display_name=str(data.get("displayName") or ""),
            web_url=str(data.get("webUrl") or ""),
        )

    @staticmethod
    def _require_str(data: Any, key: str) -> str:
        value = data.get(key) if isinstance(data, dict) else None
        if value is None or value == "":
            raise ProviderError(f"Missing/invalid string at key '{key}'")
        return str(value)
