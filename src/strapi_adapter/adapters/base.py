"""Transport and data provider protocol definitions.

Defines the ``Transport`` Protocol the translation engine consumes and the
``DataProvider`` Protocol it exposes.  All methods are ``async def`` -- the
library is async-first.

Usage:
    from strapi_adapter.adapters.base import DataProvider, Transport

    async def first_page(provider: DataProvider) -> list[dict]:
        result = await provider.get_list("posts", {
            "pagination": {"page": 1, "perPage": 25},
            "sort": {"field": "title", "order": "ASC"},
            "filter": {},
        })
        return result.data
"""

from typing import Any, Protocol

from strapi_adapter.translation.models import ResponseEnvelope, TransportResponse


class Transport(Protocol):
    """HTTP capability injected into the provider.

    The engine never opens connections itself; it only calls ``request``.
    Implementations raise on failure -- the engine propagates whatever they
    raise unchanged.
    """

    async def request(
        self,
        url: str,
        method: str = "GET",
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: list[tuple[str, tuple[str, Any, str]]] | None = None,
    ) -> TransportResponse:
        """Issue one HTTP request.

        Args:
            url: Absolute request URL including the query string.
            method: HTTP verb.
            json: JSON-serializable body (mutually exclusive with *files*).
            data: Multipart form fields sent alongside *files*.
            files: Multipart file parts as ``(part_name, (filename, content,
                content_type))`` tuples.

        Returns:
            ``TransportResponse`` with headers and the decoded JSON body.
        """
        ...

    async def close(self) -> None:
        """Release any pooled connections."""
        ...


class DataProvider(Protocol):
    """Abstract CRUD protocol exposed to callers.

    Each operation takes a resource name and an operation-specific params
    model (or an equivalent dict) and returns a ``ResponseEnvelope``.
    """

    async def get_list(self, resource: str, params: Any) -> ResponseEnvelope:
        ...

    async def get_one(self, resource: str, params: Any) -> ResponseEnvelope:
        ...

    async def get_many(self, resource: str, params: Any) -> ResponseEnvelope:
        ...

    async def get_many_reference(self, resource: str, params: Any) -> ResponseEnvelope:
        ...

    async def create(self, resource: str, params: Any) -> ResponseEnvelope:
        ...

    async def update(self, resource: str, params: Any) -> ResponseEnvelope:
        ...

    async def update_many(self, resource: str, params: Any) -> ResponseEnvelope:
        ...

    async def delete(self, resource: str, params: Any) -> ResponseEnvelope:
        ...

    async def delete_many(self, resource: str, params: Any) -> ResponseEnvelope:
        ...
