"""Query/response translation engine.

Provides dialect configuration, the list-query encoder, the record
sanitizer, the response normalizer, upload detection and the multipart
upload pipeline, and the batch fallback dispatcher.

Usage:
    from strapi_adapter.translation import LEGACY, MODERN, encode_list_query
    from strapi_adapter.translation import ResponseNormalizer, sanitize_record
    from strapi_adapter.translation import get_upload_field_names, build_upload_request
"""

from strapi_adapter.translation.batch import (
    BatchDispatcher,
    filter_references,
    reference_key,
)
from strapi_adapter.translation.dialects import LEGACY, MODERN, Dialect, dialect_for
from strapi_adapter.translation.encoder import (
    encode_filter_query,
    encode_ids_query,
    encode_list_query,
)
from strapi_adapter.translation.models import (
    SINGLE_TYPE,
    CreateParams,
    DeleteManyParams,
    DeleteParams,
    ExistingFile,
    GetManyParams,
    GetOneParams,
    ListParams,
    NewFile,
    Operation,
    Pagination,
    ResponseEnvelope,
    Sort,
    TransportResponse,
    UpdateManyParams,
    UpdateParams,
)
from strapi_adapter.translation.normalizer import ResponseNormalizer, parse_content_range
from strapi_adapter.translation.sanitizer import SERVER_MANAGED_FIELDS, sanitize_record
from strapi_adapter.translation.uploads import (
    UploadPipeline,
    build_upload_request,
    get_upload_field_names,
    has_unsaved_binary,
)

__all__ = [
    "Dialect",
    "LEGACY",
    "MODERN",
    "dialect_for",
    "encode_list_query",
    "encode_filter_query",
    "encode_ids_query",
    "ResponseNormalizer",
    "parse_content_range",
    "sanitize_record",
    "SERVER_MANAGED_FIELDS",
    "UploadPipeline",
    "build_upload_request",
    "get_upload_field_names",
    "has_unsaved_binary",
    "BatchDispatcher",
    "filter_references",
    "reference_key",
    "SINGLE_TYPE",
    "Operation",
    "Pagination",
    "Sort",
    "ListParams",
    "GetOneParams",
    "GetManyParams",
    "CreateParams",
    "UpdateParams",
    "UpdateManyParams",
    "DeleteParams",
    "DeleteManyParams",
    "NewFile",
    "ExistingFile",
    "ResponseEnvelope",
    "TransportResponse",
]
