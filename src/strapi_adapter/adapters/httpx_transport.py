"""Async httpx implementation of the ``Transport`` protocol.

Provides ``HttpxTransport``, which issues JSON and multipart requests with
an ``httpx.AsyncClient`` and returns ``TransportResponse`` objects.  The
client is created lazily on first use with an ``asyncio.Lock`` to ensure it
is created exactly once under concurrent fan-out.

Authentication is delegated to an injected ``CredentialProvider``; the
transport holds no session state of its own.

Usage:
    from strapi_adapter.adapters.httpx_transport import HttpxTransport

    async with HttpxTransport(token="eyJ...") as transport:
        response = await transport.request("http://localhost:1337/api/posts/1")
        print(response.body)
"""

import asyncio
import logging
from typing import Any, Protocol

import httpx

from strapi_adapter.adapters.base import TransportResponse
from strapi_adapter.errors import TransportError

logger = logging.getLogger(__name__)


class CredentialProvider(Protocol):
    """Supplies the bearer token for each request (``None`` = anonymous)."""

    async def get_token(self) -> str | None:
        ...


class StaticTokenProvider:
    """``CredentialProvider`` returning a fixed API token."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    async def get_token(self) -> str | None:
        return self._token


def _error_detail(response: httpx.Response) -> str:
    """Pull a readable message out of an error response body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return payload.get("message") or error
        if payload.get("message"):
            return str(payload["message"])
    return str(payload)


class HttpxTransport:
    """HTTP transport backed by ``httpx.AsyncClient``.

    Args:
        token: Static API token; ignored when *credentials* is given.
        credentials: Injected credential provider.
        headers: Extra headers sent with every request.
        timeout: Request timeout in seconds.
        client: Pre-built client (tests pass one with ``httpx.MockTransport``).

    Example:
        transport = HttpxTransport(token="eyJhbGciOiJIUzI1NiIs...")
        response = await transport.request(url, method="PUT", json={"data": {}})
        await transport.close()
    """

    def __init__(
        self,
        token: str | None = None,
        credentials: CredentialProvider | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._credentials: CredentialProvider = credentials or StaticTokenProvider(token)
        self._headers: dict[str, str] = {"Accept": "application/json", **(headers or {})}
        self._timeout: float = timeout
        self._client: httpx.AsyncClient | None = client
        # A caller-supplied client stays open; the caller closes it
        self._owns_client: bool = client is None
        self._lock: asyncio.Lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared ``AsyncClient``."""
        if self._client is None:
            async with self._lock:
                # Double-check after acquiring lock
                if self._client is None:
                    self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def _request_headers(self) -> dict[str, str]:
        headers = dict(self._headers)
        token = await self._credentials.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        url: str,
        method: str = "GET",
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: list[tuple[str, tuple[str, Any, str]]] | None = None,
    ) -> TransportResponse:
        """Send one request and decode its JSON body.

        Raises:
            TransportError: For responses with status >= 400.
            httpx.HTTPError: For connection-level failures.
        """
        client = await self._get_client()
        headers = await self._request_headers()

        kwargs: dict[str, Any] = {"headers": headers}
        if files:
            # httpx sets the multipart boundary header itself
            kwargs["files"] = files
            kwargs["data"] = data or {}
        elif data is not None:
            kwargs["data"] = data
        elif json is not None:
            kwargs["json"] = json

        response = await client.request(method, url, **kwargs)
        logger.debug(f"{method} {url} -> {response.status_code}")

        if response.status_code >= 400:
            raise TransportError(response.status_code, _error_detail(response), url)

        body = response.json() if response.content else None
        return TransportResponse.from_headers(response.headers, body, response.status_code)

    async def close(self) -> None:
        """Close the client this transport created.

        A no-op when no client was created, or when the client was passed in
        by the caller.
        """
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
