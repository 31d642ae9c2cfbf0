"""
Remote persistence client.

``RemoteStore`` is the contract the sync layer and the services depend on.
``SupabaseRestStore`` implements it over a PostgREST endpoint
(``<url>/rest/v1/<table>``) with aiohttp.

Behaviour:
- timeout per request, retry with exponential backoff + jitter on 5xx and
  network errors (never on 4xx)
- a missing table, 403 or 404 while fetching is logged and yields ``[]``
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Protocol, runtime_checkable

import aiohttp

from backoffice.core.config import RemoteConfig
from backoffice.core.constants import (
    REMOTE_BACKOFF_JITTER_SECONDS,
    REMOTE_MAX_BACKOFF_SECONDS,
)
from backoffice.core.exceptions import (
    NetworkException,
    RemoteNotConfiguredException,
    RemoteServerException,
    RemoteStoreException,
)
from backoffice.core.metrics import track_remote_call
from backoffice.core.retry import async_retry, is_connection_error
from logging_config import logger

MISSING_TABLE_CODE = "42P01"


@runtime_checkable
class RemoteStore(Protocol):
    """Remote persistence operations, per entity type (table)."""

    @property
    def configured(self) -> bool: ...

    async def fetch_all(self, table: str, filters: dict[str, Any] | None = None) -> list[dict]: ...

    async def fetch_one(self, table: str, entity_id: str) -> dict | None: ...

    async def insert(self, table: str, row: dict) -> dict: ...

    async def update(self, table: str, entity_id: str, partial: dict) -> None: ...

    async def delete(self, table: str, entity_id: str) -> None: ...


def is_missing_table_error(status: int, body: Any) -> bool:
    if isinstance(body, dict):
        if body.get("code") == MISSING_TABLE_CODE:
            return True
        message = str(body.get("message") or "")
    else:
        message = str(body or "")
    return "does not exist" in message.lower()


class SupabaseRestStore:
    """
    PostgREST client for the shared remote store.

    Example:
    ```python
    store = SupabaseRestStore(settings.remote)
    orders = await store.fetch_all("orders")
    await store.update("orders", order_id, {"status": "shipped"})
    await store.close()
    ```
    """

    def __init__(self, config: RemoteConfig):
        self.config = config
        self._session: aiohttp.ClientSession | None = None

    @property
    def configured(self) -> bool:
        return self.config.configured

    @property
    def base_url(self) -> str:
        return f"{self.config.url.rstrip('/')}/rest/v1"

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.config.anon_key,
            "Authorization": f"Bearer {self.config.anon_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        if not self.configured:
            raise RemoteNotConfiguredException()

        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self._session = aiohttp.ClientSession(headers=self._headers(), timeout=timeout)

        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> tuple[int, Any]:
        """Send one request with retries; returns (status, parsed body).

        Raises:
            RemoteNotConfiguredException: URL or key missing
            NetworkException: Unreachable after all attempts
            RemoteServerException: 5xx after all attempts
        """
        session = await self._get_session()
        url = f"{self.base_url}/{table}"
        max_attempts = max(1, self.config.max_retries)

        @async_retry(
            max_attempts=max_attempts,
            initial_delay=self.config.backoff,
            max_delay=REMOTE_MAX_BACKOFF_SECONDS,
            jitter=REMOTE_BACKOFF_JITTER_SECONDS,
            exceptions=(NetworkException, RemoteServerException),
        )
        async def send() -> tuple[int, Any]:
            try:
                async with session.request(method, url, params=params, json=json_body) as response:
                    text = await response.text()
                    body = _parse_body(text)
                    if response.status >= 500:
                        raise RemoteServerException(
                            f"{method} {table} failed with {response.status}: {text[:200]}",
                            status=response.status,
                        )
                    return response.status, body
            except asyncio.TimeoutError as e:
                raise NetworkException(f"{method} {table} timed out", is_timeout=True) from e
            except aiohttp.ClientConnectionError as e:
                raise NetworkException(f"{method} {table} unreachable: {e}", is_offline=True) from e
            except aiohttp.ClientError as e:
                if is_connection_error(e):
                    raise NetworkException(f"{method} {table} unreachable: {e}", is_offline=True) from e
                raise RemoteStoreException(f"{method} {table} failed: {e}") from e

        try:
            return await send()
        except NetworkException as e:
            e.attempts = max_attempts
            raise

    @staticmethod
    def _raise_for_status(method: str, table: str, status: int, body: Any) -> None:
        if 200 <= status < 300:
            return
        message = body.get("message") if isinstance(body, dict) else body
        raise RemoteStoreException(f"{method} {table} failed with {status}: {message}", status=status)

    @track_remote_call("fetch_all")
    async def fetch_all(self, table: str, filters: dict[str, Any] | None = None) -> list[dict]:
        params = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"

        status, body = await self._request("GET", table, params=params)
        if status in (403, 404) or (status >= 400 and is_missing_table_error(status, body)):
            logger.warning(f"Remote table {table} unavailable ({status}), treating as empty")
            return []
        self._raise_for_status("GET", table, status, body)
        return body if isinstance(body, list) else []

    @track_remote_call("fetch_one")
    async def fetch_one(self, table: str, entity_id: str) -> dict | None:
        status, body = await self._request(
            "GET", table, params={"select": "*", "id": f"eq.{entity_id}", "limit": "1"}
        )
        if status == 404:
            return None
        self._raise_for_status("GET", table, status, body)
        if isinstance(body, list) and body:
            return body[0]
        return None

    @track_remote_call("insert")
    async def insert(self, table: str, row: dict) -> dict:
        status, body = await self._request("POST", table, json_body=row)
        self._raise_for_status("POST", table, status, body)
        if isinstance(body, list) and body:
            return body[0]
        return row

    @track_remote_call("update")
    async def update(self, table: str, entity_id: str, partial: dict) -> None:
        status, body = await self._request(
            "PATCH", table, params={"id": f"eq.{entity_id}"}, json_body=partial
        )
        self._raise_for_status("PATCH", table, status, body)

    @track_remote_call("delete")
    async def delete(self, table: str, entity_id: str) -> None:
        status, body = await self._request("DELETE", table, params={"id": f"eq.{entity_id}"})
        self._raise_for_status("DELETE", table, status, body)


def _parse_body(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


async def upsert_remote(store: RemoteStore, table: str, row: dict) -> str:
    """Update the row when it exists remotely, insert it otherwise.

    Returns the operation that was applied.
    """
    entity_id = str(row["id"])
    existing = await store.fetch_one(table, entity_id)
    if existing is not None:
        partial = {key: value for key, value in row.items() if key != "id"}
        await store.update(table, entity_id, partial)
        return "update"
    await store.insert(table, row)
    return "insert"
