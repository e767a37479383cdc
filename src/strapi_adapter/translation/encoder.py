"""List-query encoding for both dialect generations.

Builds the query-string fragment for list-type operations from an abstract
pagination/sort/filter/reference description.  Dialect differences come from
the ``Dialect`` fields only.

Usage:
    from strapi_adapter.translation.dialects import MODERN
    from strapi_adapter.translation.encoder import encode_list_query
    from strapi_adapter.translation.models import ListParams

    params = ListParams.model_validate({
        "pagination": {"page": 2, "perPage": 25},
        "sort": {"field": "title", "order": "ASC"},
        "filter": {"q": "hello", "status": "draft"},
    })
    encode_list_query(params, MODERN)
    # 'sort=title:asc&pagination[start]=25&pagination[limit]=25'
    # '&_q=hello&filters[status]_eq=draft'
"""

from collections.abc import Iterable
from typing import Any
from urllib.parse import quote

from strapi_adapter.translation.dialects import Dialect
from strapi_adapter.translation.models import ListParams

# Foreign-key suffix stripped from a reference target ("post_id" -> "post")
REFERENCE_SUFFIX = "_id"

_KEY_SAFE = "[]$_"
_SORT_SAFE = ":_."


def _format_value(value: Any) -> str:
    """Render a filter value the way the admin UI would stringify it."""
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif value is None:
        text = "null"
    elif isinstance(value, list | tuple):
        text = ",".join(_format_value(v) for v in value)
        return text
    else:
        text = str(value)
    return quote(text, safe="")


def _term(key: str, value: Any) -> str:
    return f"{quote(key, safe=_KEY_SAFE)}={_format_value(value)}"


def encode_sort(params: ListParams, dialect: Dialect) -> str:
    """Encode the sort term.

    An empty field selects the dialect's default sort.  An empty order with
    a non-empty field is passed through verbatim.
    """
    sort = params.sort
    if sort.field == "":
        field = dialect.default_sort_field
        order = dialect.sort_order(dialect.default_sort_order)
    else:
        field = sort.field
        order = dialect.sort_order(sort.order or "")
    return f"{dialect.sort_param}={quote(f'{field}:{order}', safe=_SORT_SAFE)}"


def encode_pagination(params: ListParams, dialect: Dialect) -> str:
    """Encode the start/limit pair, ``start = (page - 1) * per_page``."""
    page = params.pagination.page
    per_page = params.pagination.per_page
    start = (page - 1) * per_page
    return "&".join([
        _term(dialect.start_param, start),
        _term(dialect.limit_param, per_page),
    ])


def filter_terms(
    filters: dict[str, Any],
    dialect: Dialect,
    target: str | None = None,
    reference_id: Any = None,
) -> list[str]:
    """Encode a filter map (plus optional reference scoping) into terms.

    Terms follow the iteration order of *filters*.  A non-empty ``q`` value
    becomes the full-text search token wherever it appears.
    """
    terms: list[str] = []
    for key, value in filters.items():
        if key == "q" and value != "":
            terms.append(_term(dialect.search_param, value))
        else:
            terms.append(_term(dialect.filter_key(key), value))

    if (
        target
        and target.endswith(REFERENCE_SUFFIX)
        and reference_id is not None
        and reference_id != ""
    ):
        field = target[: -len(REFERENCE_SUFFIX)]
        terms.append(_term(dialect.filter_key(field), reference_id))

    return terms


def encode_filter_query(
    filters: dict[str, Any],
    dialect: Dialect,
    target: str | None = None,
    reference_id: Any = None,
) -> str:
    """Encode only the filter part, as used by the companion count request."""
    return "&".join(filter_terms(filters, dialect, target, reference_id))


def encode_list_query(params: ListParams, dialect: Dialect) -> str:
    """Build the full list-query fragment: sort, pagination, then filters.

    Never emits a leading, trailing, or doubled ``&`` -- an empty filter map
    simply contributes no terms.
    """
    terms = [encode_sort(params, dialect), encode_pagination(params, dialect)]
    terms.extend(filter_terms(params.filter, dialect, params.target, params.id))
    return "&".join(terms)


def encode_ids_query(ids: Iterable[Any], dialect: Dialect) -> str:
    """Encode a native batch lookup (``id_in=1&id_in=2`` or ``filters[id][$in][0]=1``)."""
    return "&".join(
        _term(dialect.ids_filter_template.format(index=index), value)
        for index, value in enumerate(ids)
    )
