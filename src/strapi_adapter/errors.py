"""Exception hierarchy for the data provider.

Every error raised by the translation engine derives from
``DataProviderError`` so callers can catch the whole family at once.
Transport failures raised by an injected transport are never wrapped --
they propagate to the caller unchanged.
"""


class DataProviderError(Exception):
    """Base class for all data provider errors."""

    pass


class UnsupportedOperationError(DataProviderError):
    """Raised when the router receives an operation type it does not know."""

    def __init__(self, operation: object) -> None:
        self.operation = operation
        super().__init__(f"Unsupported fetch action type {operation}")


class MissingCountError(DataProviderError):
    """Raised when a list response carries no total-count signal."""

    def __init__(self, operation: str, resource: str) -> None:
        self.operation = operation
        self.resource = resource
        super().__init__(
            f"{operation} on '{resource}' returned no total count. "
            "List responses must carry the total either in a Content-Range "
            "header, in meta.pagination.total, or through the companion "
            "count endpoint. If you are using CORS, did you declare "
            "Content-Range in the Access-Control-Expose-Headers header?"
        )


class MalformedPayloadError(DataProviderError):
    """Raised when a payload violates the dialect's shape assumptions."""

    pass


class TransportError(DataProviderError):
    """Raised by the HTTP transport for responses with status >= 400."""

    def __init__(
        self,
        status_code: int,
        detail: str | None = None,
        url: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail or "A server error occurred."
        self.url = url
        super().__init__(f"HTTP {status_code}: {self.detail}")
