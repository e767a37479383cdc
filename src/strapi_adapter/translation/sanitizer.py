"""Removal of server-managed timestamp fields from outgoing payloads."""

from typing import Any

# created_at/updated_at (relational stores) and createdAt/updatedAt (Mongo)
SERVER_MANAGED_FIELDS = frozenset({"created_at", "updated_at", "createdAt", "updatedAt"})


def sanitize_record(record: dict[str, Any]) -> dict[str, Any]:
    """Return a shallow copy of *record* without server-managed timestamps.

    Only top-level keys are removed; nested values are carried over
    untouched.  Applying this to a record without timestamp fields yields
    an equal record.
    """
    return {k: v for k, v in record.items() if k not in SERVER_MANAGED_FIELDS}
