class LedgerError(Exception):
    """Base class for failures surfaced to the dashboard."""


class QueryError(LedgerError):
    """The store rejected the request. ``str(exc)`` is the store's own message."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NetworkError(LedgerError):
    """The request to the store could not be completed."""


class ValidationError(LedgerError):
    """Form input rejected before anything is sent to the store."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
