"""Pydantic models for operation parameters, file values, and envelopes.

Callers may pass either these models or plain dicts shaped like the
admin-UI protocol (``{"pagination": {"page": 1, "perPage": 25}, ...}``);
the provider validates dicts into models at the boundary.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Sentinel id addressing a singleton resource (no id path segment)
SINGLE_TYPE = "SingleType"


# ============================================================================
# Operations
# ============================================================================


class Operation(str, Enum):
    """Abstract CRUD operation types."""

    GET_LIST = "GET_LIST"
    GET_ONE = "GET_ONE"
    GET_MANY = "GET_MANY"
    GET_MANY_REFERENCE = "GET_MANY_REFERENCE"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    UPDATE_MANY = "UPDATE_MANY"
    DELETE = "DELETE"
    DELETE_MANY = "DELETE_MANY"

    @property
    def is_list(self) -> bool:
        """True for operations whose response must carry a total."""
        return self in (Operation.GET_LIST, Operation.GET_MANY_REFERENCE)


# ============================================================================
# Query Parameters
# ============================================================================


class Pagination(BaseModel):
    """Page window; ``per_page`` is the page size, not a hard cap."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=10, gt=0, alias="perPage")


class Sort(BaseModel):
    """Sort field and order. An empty ``field`` selects the dialect's default sort."""

    field: str = ""
    order: str = "ASC"


class ListParams(BaseModel):
    """Parameters for get-list and get-many-by-reference.

    ``target`` and ``id`` are only populated for get-many-by-reference and
    name the foreign-key field and the value to scope by.
    """

    pagination: Pagination = Field(default_factory=Pagination)
    sort: Sort = Field(default_factory=Sort)
    filter: dict[str, Any] = Field(default_factory=dict)
    target: str | None = None
    id: Any = None


class GetOneParams(BaseModel):
    id: str | int


class GetManyParams(BaseModel):
    ids: list[Any] = Field(default_factory=list)


class CreateParams(BaseModel):
    data: dict[str, Any]


class UpdateParams(BaseModel):
    id: str | int
    data: dict[str, Any]
    previous_data: dict[str, Any] | None = Field(default=None, alias="previousData")

    model_config = ConfigDict(populate_by_name=True)


class UpdateManyParams(BaseModel):
    ids: list[str | int]
    data: dict[str, Any]


class DeleteParams(BaseModel):
    id: str | int
    previous_data: dict[str, Any] | None = Field(default=None, alias="previousData")

    model_config = ConfigDict(populate_by_name=True)


class DeleteManyParams(BaseModel):
    ids: list[str | int]


PARAMS_MODELS: dict[Operation, type[BaseModel]] = {
    Operation.GET_LIST: ListParams,
    Operation.GET_ONE: GetOneParams,
    Operation.GET_MANY: GetManyParams,
    Operation.GET_MANY_REFERENCE: ListParams,
    Operation.CREATE: CreateParams,
    Operation.UPDATE: UpdateParams,
    Operation.UPDATE_MANY: UpdateManyParams,
    Operation.DELETE: DeleteParams,
    Operation.DELETE_MANY: DeleteManyParams,
}


# ============================================================================
# File Field Values
# ============================================================================


class NewFile(BaseModel):
    """An unsaved binary that must be uploaded as a multipart part."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    raw_file: Any                       # bytes or a binary file object
    filename: str = "upload"
    content_type: str = "application/octet-stream"
    metadata: dict[str, Any] = Field(default_factory=dict)

    def as_part(self) -> tuple[str, Any, str]:
        """Return the ``(filename, content, content_type)`` multipart tuple."""
        return (self.filename, self.raw_file, self.content_type)


class ExistingFile(BaseModel):
    """An already persisted file; only its id round-trips."""

    id: str | int


# ============================================================================
# Response Envelope
# ============================================================================


class ResponseEnvelope(BaseModel):
    """Normalized result of every operation.

    ``total`` is set for list operations only and is never defaulted.
    """

    data: Any = None
    total: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form, omitting ``total`` when it does not apply."""
        if self.total is None:
            return {"data": self.data}
        return {"data": self.data, "total": self.total}


# ============================================================================
# Transport Response
# ============================================================================


class TransportResponse(BaseModel):
    """Raw response handed back by a transport: headers plus decoded JSON."""

    model_config = ConfigDict(populate_by_name=True)

    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = Field(default=None, alias="json")
    status_code: int = 200

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        body: Any,
        status_code: int = 200,
    ) -> "TransportResponse":
        """Build a response from any header mapping (e.g. ``httpx.Headers``)."""
        return cls(headers=dict(headers.items()), body=body, status_code=status_code)

    @classmethod
    def coerce(cls, raw: Any) -> "TransportResponse":
        """Accept a ``TransportResponse`` or a mapping in the same shape.

        Raises:
            TypeError: If *raw* is neither.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, Mapping):
            return cls.model_validate(raw)
        raise TypeError(f"Transport returned {type(raw).__name__}, expected TransportResponse")
