"""Upload field detection and the multipart upload pipeline.

A record may mix regular fields with file fields.  File values are either
unsaved binaries (``NewFile``, or the admin-UI shape ``{"rawFile": ...}``)
or existing references (``ExistingFile``, or any mapping with ``id``/``_id``).
Detection is structural: a field needs upload when an unsaved binary occurs
anywhere inside its value, however deeply nested.

The pipeline sends each new binary as a ``files.<path>`` part, where the path
names its position in the record (``files.cover``, ``files.hero.image``,
``files.blocks.0.image``).  In the JSON ``data`` part, file lists keep only
the ids of their existing entries and a single new file is left out, while
the surrounding components keep their structure.  Ids of the new files are
not known yet; they come back in the server response, never fabricated
client-side.

Usage:
    from strapi_adapter.translation.uploads import (
        build_upload_request,
        get_upload_field_names,
    )

    record = {"title": "x", "cover": [NewFile(raw_file=b"..."), {"id": 3}]}
    fields = get_upload_field_names(record)        # ["cover"]
    data, files = build_upload_request(record, fields)
    # data == {"title": "x", "cover": [3]}
    # files == [("files.cover", ("upload", b"...", "application/octet-stream"))]

    record = {"hero": {"id": 5, "image": NewFile(raw_file=b"...")}}
    data, files = build_upload_request(record, ["hero"])
    # data == {"hero": {"id": 5}}
    # files == [("files.hero.image", ("upload", b"...", "application/octet-stream"))]
"""

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from strapi_adapter.errors import MalformedPayloadError
from strapi_adapter.translation.models import (
    SINGLE_TYPE,
    ExistingFile,
    NewFile,
    Operation,
    ResponseEnvelope,
    TransportResponse,
)
from strapi_adapter.translation.sanitizer import sanitize_record

if TYPE_CHECKING:
    from strapi_adapter.adapters.base import Transport
    from strapi_adapter.translation.normalizer import ResponseNormalizer

logger = logging.getLogger(__name__)

# Key the admin UI uses to carry a not-yet-uploaded binary
RAW_FILE_KEY = "rawFile"

FilePart = tuple[str, tuple[str, Any, str]]


# ============================================================================
# Detection
# ============================================================================


def is_new_file(value: Any) -> bool:
    """True if *value* itself is an unsaved-binary marker."""
    return isinstance(value, NewFile) or (
        isinstance(value, Mapping) and RAW_FILE_KEY in value
    )


def has_unsaved_binary(value: Any) -> bool:
    """True if an unsaved-binary marker occurs anywhere inside *value*."""
    if is_new_file(value):
        return True
    if isinstance(value, Mapping):
        return any(has_unsaved_binary(v) for v in value.values())
    if isinstance(value, list | tuple):
        return any(has_unsaved_binary(v) for v in value)
    return False


def get_upload_field_names(record: Mapping[str, Any] | None) -> list[str]:
    """Return the top-level fields of *record* that need a multipart upload."""
    if not isinstance(record, Mapping):
        return []
    return [key for key, value in record.items() if has_unsaved_binary(value)]


# ============================================================================
# Request Building
# ============================================================================


def as_new_file(value: Any) -> NewFile:
    """Coerce an unsaved-binary marker into a ``NewFile``."""
    if isinstance(value, NewFile):
        return value
    raw = value[RAW_FILE_KEY]
    return NewFile(
        raw_file=raw,
        filename=value.get("title") or getattr(raw, "name", None) or "upload",
        content_type=value.get("type") or "application/octet-stream",
        metadata={k: v for k, v in value.items() if k != RAW_FILE_KEY},
    )


def existing_file_id(path: str, value: Any) -> Any:
    """Return the id of an already persisted file reference.

    Raises:
        MalformedPayloadError: If *value* carries neither ``id`` nor ``_id``.
    """
    if isinstance(value, ExistingFile):
        return value.id
    if isinstance(value, Mapping):
        file_id = value.get("id", value.get("_id"))
        if file_id is not None:
            return file_id
    elif isinstance(value, str | int) and not isinstance(value, bool):
        return value
    raise MalformedPayloadError(
        f"File list '{path}' holds a reference without an id: {value!r}"
    )


def _strip_files(value: Any, path: str, files: list[FilePart]) -> Any:
    """Move the new binaries under *value* into *files*, returning the JSON rest.

    A list holding a new file is a file list: its new entries become
    ``files.<path>`` parts and the rest are reduced to their ids.  A new file
    held directly by a component key becomes a ``files.<path>.<key>`` part and
    the key is left out.  Components and other lists keep their structure,
    with list positions added to the path.
    """
    if isinstance(value, ExistingFile):
        return value.id
    if isinstance(value, list | tuple):
        if any(is_new_file(entry) for entry in value):
            existing_ids: list[Any] = []
            for entry in value:
                if is_new_file(entry):
                    files.append((f"files.{path}", as_new_file(entry).as_part()))
                else:
                    existing_ids.append(existing_file_id(path, entry))
            return existing_ids
        return [_strip_files(entry, f"{path}.{index}", files) for index, entry in enumerate(value)]
    if isinstance(value, Mapping):
        stripped: dict[str, Any] = {}
        for key, child in value.items():
            if is_new_file(child):
                files.append((f"files.{path}.{key}", as_new_file(child).as_part()))
            else:
                stripped[key] = _strip_files(child, f"{path}.{key}", files)
        return stripped
    return value


def build_upload_request(
    record: Mapping[str, Any],
    field_names: list[str],
) -> tuple[dict[str, Any], list[FilePart]]:
    """Split *record* into the JSON ``data`` dict and the binary file parts.

    Args:
        record: The submitted record (not modified).
        field_names: Fields that need upload, from ``get_upload_field_names``.

    Returns:
        ``(data, files)`` where ``data`` is the sanitized record with every
        new binary taken out (see ``_strip_files``), and ``files`` lists one
        ``("files.<path>", (filename, content, content_type))`` per new file.
        A field that is itself a single new file is sent as ``[]``.

    Raises:
        MalformedPayloadError: If a file list holds a reference without an id.
    """
    data = sanitize_record(dict(record))
    files: list[FilePart] = []

    for field_name in field_names:
        value = record[field_name]
        if is_new_file(value):
            files.append((f"files.{field_name}", as_new_file(value).as_part()))
            data[field_name] = []
        else:
            data[field_name] = _strip_files(value, field_name, files)

    return data, files


# ============================================================================
# Pipeline
# ============================================================================


class UploadPipeline:
    """Sends records with new files as multipart requests.

    Args:
        api_url: Base API URL.
        transport: Injected HTTP transport.
        normalizer: Normalizer applied to the upload response.
        populate: Optional ``populate`` value appended to the URL.
    """

    def __init__(
        self,
        api_url: str,
        transport: "Transport",
        normalizer: "ResponseNormalizer",
        populate: str | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._transport = transport
        self._normalizer = normalizer
        self._populate = populate

    def url_for(self, operation: Operation, resource: str, record_id: Any = None) -> str:
        """Upload target: ``<api>/<resource>[/<id>]``, no id for singletons."""
        url = f"{self._api_url}/{resource}"
        if operation is Operation.UPDATE and record_id != SINGLE_TYPE:
            url = f"{url}/{record_id}"
        if self._populate:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}populate={self._populate}"
        return url

    async def submit(
        self,
        operation: Operation,
        resource: str,
        params: BaseModel,
        field_names: list[str],
    ) -> ResponseEnvelope:
        """POST (create) or PUT (update) the record as multipart form data."""
        record_id = getattr(params, "id", None)
        url = self.url_for(operation, resource, record_id)
        method = "PUT" if operation is Operation.UPDATE else "POST"

        data, files = build_upload_request(params.data, field_names)
        logger.debug(
            f"{method} {url} (multipart: {len(files)} file part(s) in {field_names})"
        )
        raw = await self._transport.request(
            url,
            method=method,
            data={"data": json.dumps(data, default=str)},
            files=files,
        )
        return self._normalizer.normalize(
            TransportResponse.coerce(raw), operation, resource, params
        )
