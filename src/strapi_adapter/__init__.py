"""strapi-adapter: Async CRUD data provider over Strapi REST dialects.

Translates the abstract list/get/create/update/delete protocol into the
legacy (offset-limit) or modern (bracket notation) Strapi REST encoding and
normalizes responses back into ``{data, total?}`` envelopes.  Includes
batch fallback for bulk operations and multipart file uploads.

Usage:
    from strapi_adapter import StrapiDataProvider, HttpxTransport, MODERN, LEGACY
    from strapi_adapter import get_provider, load_provider_config
    from strapi_adapter import NewFile, SINGLE_TYPE, ResponseEnvelope
"""

__version__ = "0.1.0"

# Adapters
from strapi_adapter.adapters.base import DataProvider, Transport, TransportResponse
from strapi_adapter.adapters.httpx_transport import (
    CredentialProvider,
    HttpxTransport,
    StaticTokenProvider,
)

# Config
from strapi_adapter.config.loader import load_provider_config
from strapi_adapter.config.models import ProviderConfig, ProviderProfile

# Errors
from strapi_adapter.errors import (
    DataProviderError,
    MalformedPayloadError,
    MissingCountError,
    TransportError,
    UnsupportedOperationError,
)

# Factory
from strapi_adapter.factory import ProfileNotFoundError, get_provider

# Provider
from strapi_adapter.provider import StrapiDataProvider

# Translation
from strapi_adapter.translation.dialects import LEGACY, MODERN, Dialect, dialect_for
from strapi_adapter.translation.models import (
    SINGLE_TYPE,
    ExistingFile,
    NewFile,
    Operation,
    ResponseEnvelope,
)

__all__ = [
    # Adapters
    "DataProvider",
    "Transport",
    "TransportResponse",
    "CredentialProvider",
    "HttpxTransport",
    "StaticTokenProvider",
    # Config
    "load_provider_config",
    "ProviderConfig",
    "ProviderProfile",
    # Errors
    "DataProviderError",
    "UnsupportedOperationError",
    "MissingCountError",
    "MalformedPayloadError",
    "TransportError",
    # Factory
    "get_provider",
    "ProfileNotFoundError",
    # Provider
    "StrapiDataProvider",
    # Translation
    "Dialect",
    "LEGACY",
    "MODERN",
    "dialect_for",
    "Operation",
    "ResponseEnvelope",
    "NewFile",
    "ExistingFile",
    "SINGLE_TYPE",
]
