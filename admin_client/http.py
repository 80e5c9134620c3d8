"""
HTTP client for the store backend.

One pooled httpx.AsyncClient per ApiClient, created lazily on first use and
guarded by an asyncio.Lock so concurrent first requests do not race to
create it. Transport errors and non-2xx statuses leave this module as
FetchFailure subclasses.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.exceptions import (
    BackendResponseError,
    FetchFailure,
    MalformedResponseError,
)

logger = get_logger(__name__)


def _error_message(response: httpx.Response) -> str | None:
    """Extract the backend's `message` (or `mensaje`) from an error body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("mensaje")
        if isinstance(message, list):
            return "; ".join(str(m) for m in message)
        return str(message) if message else None
    return None


class ApiClient:
    """
    HTTP client for the backend REST API.

    Usage:
        async with ApiClient() as client:
            body = await client.request("GET", "/pedidos", entity="pedidos")
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = settings.api_token if token is None else token
        self.timeout = timeout or settings.api_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock: asyncio.Lock | None = None

    def _get_lock(self) -> asyncio.Lock:
        if self._client_lock is None:
            self._client_lock = asyncio.Lock()
        return self._client_lock

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """
        Get or create the shared HTTP client.
        Lazy initialization for proper async context.
        """
        # Fast path: client already initialized
        if self._client is not None and not self._client.is_closed:
            return self._client

        # Slow path: acquire lock and initialize
        async with self._get_lock():
            # Double-check after acquiring lock
            if self._client is None or self._client.is_closed:
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    headers=self._headers(),
                    timeout=self.timeout,
                    limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                    transport=self._transport,
                )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client. Safe to call more than once."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        entity: str,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body (None when empty).

        Raises:
            FetchFailure: Transport error (connection refused, timeout...)
            BackendResponseError: Non-2xx status
            MalformedResponseError: Body is not JSON
        """
        client = await self._get_client()
        try:
            response = await client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            raise FetchFailure(entity, str(exc) or type(exc).__name__, method=method, path=path) from exc

        logger.debug(
            "Backend request",
            entity=entity,
            method=method,
            path=path,
            status=response.status_code,
            params=params,
        )
        if response.is_error:
            raise BackendResponseError(
                entity,
                response.status_code,
                _error_message(response),
                method=method,
                path=path,
            )

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(entity, "JSON inválido", path=path) from exc
