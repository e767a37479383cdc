"""Transport adapters package.

Provides the ``Transport`` and ``DataProvider`` Protocols and the async
``HttpxTransport`` implementation.

Usage:
    from strapi_adapter.adapters import HttpxTransport, Transport, TransportResponse
"""

from strapi_adapter.adapters.base import DataProvider, Transport, TransportResponse
from strapi_adapter.adapters.httpx_transport import (
    CredentialProvider,
    HttpxTransport,
    StaticTokenProvider,
)

__all__ = [
    "DataProvider",
    "Transport",
    "TransportResponse",
    "CredentialProvider",
    "HttpxTransport",
    "StaticTokenProvider",
]
