"""Response normalization into the abstract ``{data, total?}`` envelope.

Converts raw transport responses into ``ResponseEnvelope`` instances:

- Modern records ``{id, attributes: {...}}`` are flattened to
  ``{id, ...attributes}``.
- Relation envelopes ``{data: X}`` are replaced by ``X`` processed the same
  way; plain relations collapse to their id, media relations stay records
  with an absolute ``url``.
- List operations must resolve a total from the dialect's sources (header,
  meta block, companion count response) or raise ``MissingCountError``.

Usage:
    from strapi_adapter.translation.dialects import MODERN
    from strapi_adapter.translation.normalizer import ResponseNormalizer

    normalizer = ResponseNormalizer(MODERN, "http://localhost:1337/api")
    envelope = normalizer.normalize(response, Operation.GET_ONE, "posts", params)
"""

import logging
from typing import Any

from pydantic import BaseModel

from strapi_adapter.errors import MalformedPayloadError, MissingCountError
from strapi_adapter.translation.dialects import Dialect
from strapi_adapter.translation.models import Operation, ResponseEnvelope, TransportResponse

logger = logging.getLogger(__name__)

_ENVELOPE_KEYS = frozenset({"data", "meta"})


def parse_content_range(value: str | None) -> int | None:
    """Extract TOTAL from a ``<unit> <start>-<end>/<TOTAL>`` header value.

    Returns ``None`` when the header is absent or the total is unknown
    (``*``) or not an integer.
    """
    if not value or "/" not in value:
        return None
    try:
        return int(value.rsplit("/", 1)[1].strip())
    except ValueError:
        return None


def _is_relation_envelope(value: Any) -> bool:
    return isinstance(value, dict) and "data" in value and value.keys() <= _ENVELOPE_KEYS


class ResponseNormalizer:
    """Dialect-aware converter from transport responses to envelopes.

    Args:
        dialect: Wire conventions of the backend.
        api_url: Base API URL; the dialect's ``api_path_suffix`` is stripped
            from it to build absolute media URLs.
    """

    def __init__(self, dialect: Dialect, api_url: str) -> None:
        self._dialect = dialect
        base = api_url.rstrip("/")
        suffix = dialect.api_path_suffix
        if suffix and base.endswith(suffix):
            base = base[: -len(suffix)]
        self._media_base = base

    # ------------------------------------------------------------------
    # Record Formatting
    # ------------------------------------------------------------------

    def media_url(self, url: str | None) -> str | None:
        """Resolve a relative media URL against the server root."""
        if not url or url.startswith(("http://", "https://", "//")):
            return url
        return f"{self._media_base}{url}"

    def extract_payload(self, body: Any) -> Any:
        """Return the record payload from a raw response body."""
        if self._dialect.attributes_envelope and isinstance(body, dict):
            return body.get("data")
        return body

    def format(self, payload: Any) -> Any:
        """Format a single record or a list of records."""
        if not payload:
            return payload
        if isinstance(payload, list):
            return [self.format_record(item) for item in payload]
        return self.format_record(payload)

    def format_record(self, item: Any) -> Any:
        """Flatten one record and unwrap its relation envelopes.

        Legacy payloads are already flat and are returned unchanged.
        """
        if not self._dialect.attributes_envelope or not isinstance(item, dict):
            return item

        if "attributes" in item:
            record = {"id": item.get("id"), **(item["attributes"] or {})}
        else:
            record = dict(item)

        for key, value in record.items():
            record[key] = self._unwrap(value)
        return record

    def _unwrap(self, value: Any) -> Any:
        """Replace relation envelopes inside *value*, recursing into components."""
        if _is_relation_envelope(value):
            data = value["data"]
            if data is None:
                return None
            if isinstance(data, list):
                return [self._relation(entry) for entry in data]
            return self._relation(data)
        if isinstance(value, dict):
            return {k: self._unwrap(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._unwrap(v) for v in value]
        return value

    def _relation(self, entry: Any) -> Any:
        """Reduce a resolved relation to its id, or keep it if it is media."""
        if not isinstance(entry, dict):
            raise MalformedPayloadError(
                f"Relation entry must be an object, got {type(entry).__name__}: {entry!r}"
            )
        relation_id = entry.get("id", entry.get("_id"))
        if relation_id is None:
            raise MalformedPayloadError(f"Relation entry has no id: {entry!r}")

        attributes = entry.get("attributes") or {}
        if self._dialect.media_marker not in attributes:
            return relation_id

        media = {"id": relation_id}
        for key, value in attributes.items():
            media[key] = self._unwrap(value)
        if "url" in media:
            media["url"] = self.media_url(media["url"])
        return media

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def resolve_total(
        self,
        response: TransportResponse,
        operation: Operation,
        resource: str,
        count_response: TransportResponse | None = None,
    ) -> int:
        """Find the total count in the dialect's sources, in priority order.

        Raises:
            MissingCountError: If no source yields a total.
        """
        for source in self._dialect.total_sources:
            total = None
            if source == "header":
                total = parse_content_range(response.header("content-range"))
            elif source == "meta":
                total = _meta_total(response.body)
            elif source == "count" and count_response is not None:
                total = _count_total(count_response.body)
            if total is not None:
                logger.debug(f"Total for {resource} resolved from {source}: {total}")
                return total

        raise MissingCountError(operation.value, resource)

    # ------------------------------------------------------------------
    # Envelope
    # ------------------------------------------------------------------

    def normalize(
        self,
        response: TransportResponse,
        operation: Operation,
        resource: str,
        params: BaseModel | None = None,
        count_response: TransportResponse | None = None,
    ) -> ResponseEnvelope:
        """Convert *response* into the envelope for *operation*.

        Args:
            response: Raw transport response.
            operation: Operation that produced the response.
            resource: Resource name (used in error messages).
            params: Validated operation params; ``CREATE`` reads ``data``.
            count_response: Companion count response, when one was issued.

        Returns:
            ``ResponseEnvelope`` following the per-operation rules.
        """
        payload = self.extract_payload(response.body)

        if operation.is_list:
            total = self.resolve_total(response, operation, resource, count_response)
            return ResponseEnvelope(data=self.format(payload), total=total)

        if operation is Operation.CREATE:
            record = self.format(payload)
            server_id = record.get("id") if isinstance(record, dict) else None
            if server_id is None:
                raise MalformedPayloadError(
                    f"Create response for '{resource}' carried no id: {response.body!r}"
                )
            submitted = getattr(params, "data", None) or {}
            return ResponseEnvelope(data={**submitted, "id": server_id})

        if operation is Operation.DELETE:
            return ResponseEnvelope(data={"id": None})

        return ResponseEnvelope(data=self.format(payload))


def _meta_total(body: Any) -> int | None:
    if not isinstance(body, dict):
        return None
    pagination = (body.get("meta") or {}).get("pagination") or {}
    total = pagination.get("total")
    return total if isinstance(total, int) and not isinstance(total, bool) else None


def _count_total(body: Any) -> int | None:
    if isinstance(body, bool):
        return None
    if isinstance(body, int):
        return body
    if isinstance(body, str) and body.strip().isdigit():
        return int(body)
    if isinstance(body, dict) and isinstance(body.get("count"), int):
        return body["count"]
    return None
