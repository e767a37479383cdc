"""Shared fixtures: a recording fake transport and provider builders."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from strapi_adapter.adapters.base import TransportResponse
from strapi_adapter.provider import StrapiDataProvider
from strapi_adapter.translation.dialects import LEGACY, MODERN

API_URL = "http://h/api"


def make_transport(responder: Any = None) -> AsyncMock:
    """Create an AsyncMock transport.

    Args:
        responder: Callable ``(url, method, json, data, files) -> TransportResponse``
            or a fixed ``TransportResponse``.  Defaults to an empty 200 body.
    """
    transport = AsyncMock()

    async def _request(url, method="GET", json=None, data=None, files=None):
        if callable(responder):
            return responder(url, method, json, data, files)
        return responder or TransportResponse(body=None)

    transport.request = AsyncMock(side_effect=_request)
    transport.close = AsyncMock()
    return transport


@pytest.fixture
def modern_provider_factory():
    def _build(responder: Any = None) -> tuple[StrapiDataProvider, AsyncMock]:
        transport = make_transport(responder)
        return StrapiDataProvider(API_URL, transport, MODERN), transport

    return _build


@pytest.fixture
def legacy_provider_factory():
    def _build(responder: Any = None, dialect=LEGACY) -> tuple[StrapiDataProvider, AsyncMock]:
        transport = make_transport(responder)
        return StrapiDataProvider("http://h", transport, dialect), transport

    return _build
