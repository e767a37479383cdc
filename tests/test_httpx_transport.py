"""Tests for HttpxTransport using httpx.MockTransport."""

import json

import httpx
import pytest

from strapi_adapter.adapters.httpx_transport import HttpxTransport, StaticTokenProvider
from strapi_adapter.errors import TransportError


def _transport(handler, **kwargs) -> HttpxTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(client=client, **kwargs)


class TestRequest:
    """Verify request shaping and response decoding."""

    async def test_bearer_token_and_headers(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": []}, headers={"Content-Range": "posts 0-0/0"})

        transport = _transport(handler, token="abc", headers={"X-Tenant": "acme"})
        response = await transport.request("http://h/api/posts?pagination[start]=0")

        assert seen[0].headers["Authorization"] == "Bearer abc"
        assert seen[0].headers["X-Tenant"] == "acme"
        assert seen[0].url.params["pagination[start]"] == "0"
        assert response.body == {"data": []}
        assert response.header("content-range") == "posts 0-0/0"
        await transport.close()

    async def test_anonymous(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert "Authorization" not in request.headers
            return httpx.Response(200, json={})

        transport = _transport(handler)
        await transport.request("http://h/api/posts")

    async def test_credential_provider_wins(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"auth": request.headers["Authorization"]})

        transport = _transport(handler, token="ignored", credentials=StaticTokenProvider("jwt"))
        response = await transport.request("http://h/api/me")
        assert response.body == {"auth": "Bearer jwt"}

    async def test_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"echo": json.loads(request.content), "method": request.method})

        transport = _transport(handler)
        response = await transport.request("http://h/api/posts", method="POST", json={"data": {"a": 1}})
        assert response.body == {"echo": {"data": {"a": 1}}, "method": "POST"}

    async def test_multipart(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = request.content
            assert request.headers["Content-Type"].startswith("multipart/form-data")
            assert b'name="files.cover"; filename="a.png"' in body
            assert b'name="data"' in body
            return httpx.Response(200, json={"ok": True})

        transport = _transport(handler)
        response = await transport.request(
            "http://h/api/posts",
            method="POST",
            data={"data": '{"title": "x"}'},
            files=[("files.cover", ("a.png", b"\x89PNG", "image/png"))],
        )
        assert response.body == {"ok": True}

    async def test_empty_body(self) -> None:
        transport = _transport(lambda request: httpx.Response(204))
        response = await transport.request("http://h/api/posts/1", method="DELETE")
        assert response.body is None
        assert response.status_code == 204


class TestErrors:
    """Verify failed responses raise TransportError."""

    async def test_strapi_error_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400, json={"data": None, "error": {"status": 400, "message": "title must be unique"}}
            )

        transport = _transport(handler)
        with pytest.raises(TransportError) as exc_info:
            await transport.request("http://h/api/posts", method="POST", json={})
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "title must be unique"
        assert exc_info.value.url == "http://h/api/posts"

    async def test_plain_text_error(self) -> None:
        transport = _transport(lambda request: httpx.Response(502, text="Bad Gateway"))
        with pytest.raises(TransportError, match="HTTP 502: Bad Gateway"):
            await transport.request("http://h/api/posts")


class TestLifecycle:
    """Verify lazy client creation and close."""

    async def test_close_without_client(self) -> None:
        transport = HttpxTransport()
        await transport.close()

    async def test_context_manager_closes_own_client(self) -> None:
        """A client the transport created is closed on exit."""
        async with HttpxTransport() as transport:
            client = await transport._get_client()
        assert client.is_closed
        assert transport._client is None

    async def test_supplied_client_left_open(self) -> None:
        """A caller-supplied client is not closed by the transport."""
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={}))
        )
        async with HttpxTransport(client=client) as transport:
            await transport.request("http://h/api/posts")
        assert not client.is_closed
        response = await transport.request("http://h/api/posts")
        assert response.body == {}
        await client.aclose()

    async def test_lazy_client_created_once(self) -> None:
        transport = HttpxTransport(timeout=5.0)
        first = await transport._get_client()
        second = await transport._get_client()
        assert first is second
        await transport.close()
