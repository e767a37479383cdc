"""Operation router: the data provider entry point.

``StrapiDataProvider`` receives abstract operations and routes each one, in
priority order, to:

1. the upload pipeline, when the payload holds unsaved binaries;
2. the batch fallback, for bulk operations the dialect lacks;
3. the dialect-specific single-request path (query encoder + record
   sanitizer -> transport -> response normalizer).

The provider holds no per-call state; concurrent calls are independent.

Usage:
    from strapi_adapter import HttpxTransport, StrapiDataProvider, MODERN

    async with HttpxTransport(token="...") as transport:
        provider = StrapiDataProvider("http://localhost:1337/api", transport, MODERN)
        page = await provider.get_list("posts", {
            "pagination": {"page": 1, "perPage": 25},
            "sort": {"field": "title", "order": "ASC"},
            "filter": {"q": "hello"},
        })
        print(page.total, page.data)
"""

import asyncio
import logging
from typing import Any

from pydantic import BaseModel

from strapi_adapter.adapters.base import Transport, TransportResponse
from strapi_adapter.errors import UnsupportedOperationError
from strapi_adapter.translation.batch import BatchDispatcher, filter_references
from strapi_adapter.translation.dialects import MODERN, Dialect
from strapi_adapter.translation.encoder import (
    encode_filter_query,
    encode_ids_query,
    encode_list_query,
)
from strapi_adapter.translation.models import (
    PARAMS_MODELS,
    SINGLE_TYPE,
    CreateParams,
    DeleteManyParams,
    DeleteParams,
    GetManyParams,
    GetOneParams,
    ListParams,
    Operation,
    ResponseEnvelope,
    UpdateManyParams,
    UpdateParams,
)
from strapi_adapter.translation.normalizer import ResponseNormalizer
from strapi_adapter.translation.sanitizer import sanitize_record
from strapi_adapter.translation.uploads import UploadPipeline, get_upload_field_names

logger = logging.getLogger(__name__)

# Operations whose payload may carry files
_UPLOAD_OPERATIONS = frozenset({Operation.CREATE, Operation.UPDATE, Operation.UPDATE_MANY})


def coerce_operation(operation: Any) -> Operation:
    """Accept an ``Operation`` or its name (``"GET_LIST"``, ``"get_list"``).

    Raises:
        UnsupportedOperationError: If *operation* names no known operation.
    """
    if isinstance(operation, Operation):
        return operation
    if isinstance(operation, str):
        try:
            return Operation(operation.upper())
        except ValueError:
            pass
    raise UnsupportedOperationError(operation)


class StrapiDataProvider:
    """CRUD data provider over a Strapi-family REST API.

    Args:
        api_url: Base API URL, e.g. ``"http://localhost:1337/api"``.
        transport: Injected HTTP transport (see ``Transport``).
        dialect: Wire dialect, chosen once per instance.  Defaults to
            ``MODERN``.

    Example:
        provider = StrapiDataProvider(api_url, transport, LEGACY)
        result = await provider.get_one("posts", {"id": 123})
    """

    def __init__(
        self,
        api_url: str,
        transport: Transport,
        dialect: Dialect = MODERN,
    ) -> None:
        self._api_url: str = api_url.rstrip("/")
        self._transport: Transport = transport
        self._dialect: Dialect = dialect
        self._normalizer = ResponseNormalizer(dialect, api_url)
        self._uploads = UploadPipeline(api_url, transport, self._normalizer, dialect.populate)
        self._batch = BatchDispatcher()
        self._handlers = {
            Operation.GET_LIST: self._get_list,
            Operation.GET_ONE: self._get_one,
            Operation.GET_MANY: self._get_many,
            Operation.GET_MANY_REFERENCE: self._get_many_reference,
            Operation.CREATE: self._create,
            Operation.UPDATE: self._update,
            Operation.UPDATE_MANY: self._update_many,
            Operation.DELETE: self._delete,
            Operation.DELETE_MANY: self._delete_many,
        }

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def api_url(self) -> str:
        return self._api_url

    @property
    def transport(self) -> Transport:
        return self._transport

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    async def dispatch(self, operation: Any, resource: str, params: Any = None) -> ResponseEnvelope:
        """Route one abstract operation.

        Args:
            operation: ``Operation`` member or its name.
            resource: Resource name, e.g. ``"posts"``.
            params: Operation params model or an equivalent dict.

        Returns:
            ``ResponseEnvelope`` with ``data`` (and ``total`` for lists).

        Raises:
            UnsupportedOperationError: For unknown operation types.
            pydantic.ValidationError: If *params* do not fit the operation.
        """
        op = coerce_operation(operation)
        model = PARAMS_MODELS[op]
        validated = params if isinstance(params, model) else model.model_validate(params or {})

        if op in _UPLOAD_OPERATIONS:
            field_names = get_upload_field_names(validated.data)
            if field_names:
                return await self._upload(op, resource, validated, field_names)

        return await self._handlers[op](resource, validated)

    async def get_list(self, resource: str, params: Any) -> ResponseEnvelope:
        return await self.dispatch(Operation.GET_LIST, resource, params)

    async def get_one(self, resource: str, params: Any) -> ResponseEnvelope:
        return await self.dispatch(Operation.GET_ONE, resource, params)

    async def get_many(self, resource: str, params: Any) -> ResponseEnvelope:
        return await self.dispatch(Operation.GET_MANY, resource, params)

    async def get_many_reference(self, resource: str, params: Any) -> ResponseEnvelope:
        return await self.dispatch(Operation.GET_MANY_REFERENCE, resource, params)

    async def create(self, resource: str, params: Any) -> ResponseEnvelope:
        return await self.dispatch(Operation.CREATE, resource, params)

    async def update(self, resource: str, params: Any) -> ResponseEnvelope:
        return await self.dispatch(Operation.UPDATE, resource, params)

    async def update_many(self, resource: str, params: Any) -> ResponseEnvelope:
        return await self.dispatch(Operation.UPDATE_MANY, resource, params)

    async def delete(self, resource: str, params: Any) -> ResponseEnvelope:
        return await self.dispatch(Operation.DELETE, resource, params)

    async def delete_many(self, resource: str, params: Any) -> ResponseEnvelope:
        return await self.dispatch(Operation.DELETE_MANY, resource, params)

    # ------------------------------------------------------------------
    # Request Helpers
    # ------------------------------------------------------------------

    def _url(self, resource: str, record_id: Any = None, query: str = "") -> str:
        """Build ``<api>/<resource>[/<id>][?query]`` plus the dialect's populate."""
        url = f"{self._api_url}/{resource}"
        if record_id is not None and record_id != SINGLE_TYPE:
            url = f"{url}/{record_id}"
        if query:
            url = f"{url}?{query}"
        if self._dialect.populate:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}populate={self._dialect.populate}"
        return url

    def _body(self, data: dict[str, Any]) -> dict[str, Any]:
        """Sanitize a mutation payload and wrap it as the dialect expects."""
        clean = sanitize_record(data)
        return {"data": clean} if self._dialect.wrap_body else clean

    async def _send(self, url: str, method: str = "GET", json: Any = None) -> TransportResponse:
        logger.debug(f"{method} {url}")
        raw = await self._transport.request(url, method=method, json=json)
        return TransportResponse.coerce(raw)

    def _records(self, response: TransportResponse) -> Any:
        return self._normalizer.format(self._normalizer.extract_payload(response.body))

    # ------------------------------------------------------------------
    # Upload Path
    # ------------------------------------------------------------------

    async def _upload(
        self,
        op: Operation,
        resource: str,
        params: BaseModel,
        field_names: list[str],
    ) -> ResponseEnvelope:
        if op is Operation.UPDATE_MANY:
            if not params.ids:
                return ResponseEnvelope(data=[])
            # Uploads are not batched: only the first id is updated
            first, *skipped = params.ids
            if skipped:
                logger.warning(
                    f"update_many on '{resource}' carries files in {field_names}; "
                    f"only id {first} is updated, ids {skipped} are left untouched"
                )
            params = UpdateParams(id=first, data=params.data)
            op = Operation.UPDATE
        return await self._uploads.submit(op, resource, params, field_names)

    # ------------------------------------------------------------------
    # Operation Handlers
    # ------------------------------------------------------------------

    async def _list(self, op: Operation, resource: str, params: ListParams) -> ResponseEnvelope:
        url = self._url(resource, query=encode_list_query(params, self._dialect))

        if "count" not in self._dialect.total_sources:
            response = await self._send(url)
            return self._normalizer.normalize(response, op, resource, params)

        count_query = encode_filter_query(params.filter, self._dialect, params.target, params.id)
        count_url = self._url(f"{resource}/{self._dialect.count_path}", query=count_query)
        response, count_response = await asyncio.gather(
            self._send(url),
            self._send(count_url),
        )
        return self._normalizer.normalize(
            response, op, resource, params, count_response=count_response
        )

    async def _get_list(self, resource: str, params: ListParams) -> ResponseEnvelope:
        return await self._list(Operation.GET_LIST, resource, params)

    async def _get_many_reference(self, resource: str, params: ListParams) -> ResponseEnvelope:
        return await self._list(Operation.GET_MANY_REFERENCE, resource, params)

    async def _get_one(self, resource: str, params: GetOneParams) -> ResponseEnvelope:
        response = await self._send(self._url(resource, params.id))
        return self._normalizer.normalize(response, Operation.GET_ONE, resource, params)

    async def _get_many(self, resource: str, params: GetManyParams) -> ResponseEnvelope:
        ids = filter_references(params.ids)
        if not ids:
            return ResponseEnvelope(data=[])

        if self._dialect.native_get_many:
            response = await self._send(
                self._url(resource, query=encode_ids_query(ids, self._dialect))
            )
            return ResponseEnvelope(data=self._records(response) or [])

        async def fetch(record_id: Any) -> Any:
            return self._records(await self._send(self._url(resource, record_id)))

        return ResponseEnvelope(data=await self._batch.fan_out(ids, fetch))

    async def _create(self, resource: str, params: CreateParams) -> ResponseEnvelope:
        response = await self._send(self._url(resource), "POST", self._body(params.data))
        return self._normalizer.normalize(response, Operation.CREATE, resource, params)

    async def _update(self, resource: str, params: UpdateParams) -> ResponseEnvelope:
        response = await self._send(self._url(resource, params.id), "PUT", self._body(params.data))
        return self._normalizer.normalize(response, Operation.UPDATE, resource, params)

    async def _update_many(self, resource: str, params: UpdateManyParams) -> ResponseEnvelope:
        body = self._body(params.data)

        async def put(record_id: Any) -> Any:
            return self._records(await self._send(self._url(resource, record_id), "PUT", body))

        return ResponseEnvelope(data=await self._batch.fan_out(params.ids, put))

    async def _delete(self, resource: str, params: DeleteParams) -> ResponseEnvelope:
        response = await self._send(self._url(resource, params.id), "DELETE")
        return self._normalizer.normalize(response, Operation.DELETE, resource, params)

    async def _delete_many(self, resource: str, params: DeleteManyParams) -> ResponseEnvelope:
        async def remove(record_id: Any) -> Any:
            return self._records(await self._send(self._url(resource, record_id), "DELETE"))

        return ResponseEnvelope(data=await self._batch.fan_out(params.ids, remove))
