import asyncio
import os
from typing import Any

import httpx

from household_ledger.core import settings
from household_ledger.errors import NetworkError, QueryError
from household_ledger.logger import get_logger

logger = get_logger(__name__)

REST_PREFIX = "/rest/v1"

_ERROR_MESSAGE_KEYS = ("message", "error_description", "error", "msg", "hint")


def eq(value: str) -> str:
    return f"eq.{value}"


def _extract_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in _ERROR_MESSAGE_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
    text = response.text.strip()
    if text:
        return text
    return f"Store request failed with status {response.status_code}"


class SupabaseClient:
    """Thin async client for the PostgREST endpoint of a Supabase project."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self._client = client
        self._client_lock = asyncio.Lock()
        self.base_url: str | None = None
        self.api_key: str | None = None
        self.timeout: float | None = None
        self.headers: dict[str, str] = {}
        self.refresh(base_url=base_url, api_key=api_key, timeout=timeout)

    def refresh(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        base_value = base_url if base_url is not None else os.getenv("SUPABASE_URL")
        key_value = api_key if api_key is not None else os.getenv("SUPABASE_ANON_KEY")
        self.base_url = (base_value or "").rstrip("/") or None
        self.api_key = key_value or None
        self.timeout = timeout if timeout is not None else settings.get_env_optional_float("SUPABASE_TIMEOUT")
        self.headers = {
            "apikey": self.api_key or "",
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get_client(self) -> httpx.AsyncClient:
        client = self._client
        if client is not None and not client.is_closed:
            return client

        async with self._client_lock:
            client = self._client
            if client is None or client.is_closed:
                client = httpx.AsyncClient()
                self._client = client
            return client

    def _table_url(self, table: str) -> str:
        return f"{self.base_url}{REST_PREFIX}/{table}"

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        extra_headers: dict[str, str] | None = None,
    ) -> Any:
        if not self.is_configured:
            logger.error("[STORE] Supabase credentials missing.")
            raise NetworkError("Supabase is not configured")

        headers = dict(self.headers)
        if extra_headers:
            headers.update(extra_headers)

        client = await self._get_client()
        try:
            response = await client.request(
                method,
                self._table_url(table),
                headers=headers,
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except httpx.RequestError as exc:
            logger.error("[STORE] %s %s failed: %s", method, table, exc)
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            message = _extract_error_message(response)
            logger.warning(
                "[STORE] %s %s rejected with status %s: %s",
                method,
                table,
                response.status_code,
                message,
            )
            raise QueryError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise QueryError("Store returned an invalid response", status_code=response.status_code) from exc

    async def select_rows(
        self,
        table: str,
        *,
        filters: dict[str, str] | None = None,
        order: str | None = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        params = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = eq(value)
        if order:
            params["order"] = order
        rows = await self._request("GET", table, params=params)
        return rows or []

    async def insert_rows(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        result = await self._request(
            "POST",
            table,
            json=rows,
            extra_headers={"Prefer": "return=representation"},
        )
        return result or []

    async def delete_rows(self, table: str, *, filters: dict[str, str]) -> None:
        if not filters:
            # PostgREST refuses unfiltered deletes, fail before the round trip.
            raise QueryError("DELETE requires a filter")
        params = {column: eq(value) for column, value in filters.items()}
        await self._request("DELETE", table, params=params)
