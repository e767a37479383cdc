"""Dialect configuration for the two Strapi REST generations.

A ``Dialect`` captures every wire-level difference between the legacy
(offset-limit, v3-style) and modern (bracket notation, v4-style) REST APIs
as data.  The query encoder and response normalizer read these fields
instead of branching on a dialect name, so a provider instance selects its
dialect exactly once at construction time.

Usage:
    from strapi_adapter.translation.dialects import LEGACY, MODERN, dialect_for

    dialect = dialect_for("modern")
    assert dialect.filter_template == "filters[{key}]_eq"

    # Legacy deployment that exposes /<resource>/count instead of Content-Range
    counting = LEGACY.model_copy(update={"total_sources": ("header", "count")})
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

TotalSource = Literal["header", "meta", "count"]


class Dialect(BaseModel):
    """Wire conventions of one backend generation."""

    model_config = ConfigDict(frozen=True)

    name: str

    # Sorting
    sort_param: str = "sort"
    lowercase_sort_order: bool = False
    default_sort_field: str = "updated_at"
    default_sort_order: str = "DESC"

    # Pagination
    start_param: str = "_start"
    limit_param: str = "_limit"

    # Filtering
    search_param: str = "_q"
    filter_template: str = "{key}"
    ids_filter_template: str = "id_in"
    native_get_many: bool = False

    # Totals, in priority order
    total_sources: tuple[TotalSource, ...] = ("header",)
    count_path: str = "count"

    # Payload shape
    attributes_envelope: bool = False
    wrap_body: bool = False
    populate: str | None = None
    api_path_suffix: str = "/api"
    media_marker: str = "mime"

    def filter_key(self, key: str) -> str:
        """Return the query parameter name for an equality filter on *key*."""
        return self.filter_template.format(key=key)

    def sort_order(self, order: str) -> str:
        """Return *order* in the casing this dialect expects."""
        return order.lower() if self.lowercase_sort_order else order


LEGACY = Dialect(name="legacy")

MODERN = Dialect(
    name="modern",
    lowercase_sort_order=True,
    start_param="pagination[start]",
    limit_param="pagination[limit]",
    filter_template="filters[{key}]_eq",
    ids_filter_template="filters[id][$in][{index}]",
    total_sources=("meta",),
    attributes_envelope=True,
    wrap_body=True,
    populate="*",
)

DIALECTS: dict[str, Dialect] = {
    LEGACY.name: LEGACY,
    MODERN.name: MODERN,
}


def dialect_for(name: str) -> Dialect:
    """Look up a dialect preset by name.

    Args:
        name: ``"legacy"`` or ``"modern"`` (case-insensitive).

    Returns:
        The matching ``Dialect`` preset.

    Raises:
        ValueError: If *name* does not match a preset.
    """
    try:
        return DIALECTS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown dialect '{name}'. Available: {', '.join(DIALECTS)}"
        ) from None
