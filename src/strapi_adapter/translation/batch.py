"""Batch fallback: emulate bulk operations with parallel singular requests.

Used for update-many, delete-many, and (for dialects without native batch
filtering) get-many.  Requests run concurrently through ``asyncio.gather``;
results come back in input order, never completion order.  The first
failure fails the whole batch -- there are no partial results and no
retries.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any, TypeVar

from strapi_adapter.errors import MalformedPayloadError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def reference_key(ref: Any) -> Any:
    """Reduce a bare id or a mapping carrying ``id``/``_id`` to the lookup key.

    Raises:
        MalformedPayloadError: If a mapping carries neither id field.
    """
    if isinstance(ref, dict):
        key = ref.get("id", ref.get("_id"))
        if key is None:
            raise MalformedPayloadError(f"Reference has no id: {ref!r}")
        return key
    return ref


def is_null_reference(ref: Any) -> bool:
    """True for ``None`` and for empty relation envelopes ``{"data": None}``."""
    if ref is None:
        return True
    return isinstance(ref, dict) and "data" in ref and ref["data"] is None


def filter_references(refs: Iterable[Any]) -> list[Any]:
    """Drop null references and normalize the rest to lookup keys."""
    return [reference_key(ref) for ref in refs if not is_null_reference(ref)]


class BatchDispatcher:
    """Fans out one request per item and joins the results in order."""

    async def fan_out(
        self,
        items: Sequence[T],
        send: Callable[[T], Awaitable[R]],
    ) -> list[R]:
        """Run ``send(item)`` for every item concurrently.

        Args:
            items: Ordered inputs (ids, typically).
            send: Coroutine function issuing one request.

        Returns:
            Results where position *i* corresponds to ``items[i]``.

        Raises:
            Exception: The first exception raised by any request, unchanged.
        """
        if not items:
            return []
        logger.debug(f"Fanning out {len(items)} request(s)")
        return list(await asyncio.gather(*(send(item) for item in items)))
