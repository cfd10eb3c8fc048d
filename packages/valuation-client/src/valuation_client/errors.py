from typing import Any, Optional


class ValuationClientError(Exception):
    """Base class for every error raised by the valuation clients.

    The message is always fit to show to an end user as-is.
    """


class BackendConnectionError(ValuationClientError):
    """The backend could not be reached at all."""


class BackendTimeoutError(ValuationClientError):
    """The backend did not answer within the allotted time."""


class BackendResponseError(ValuationClientError):
    """The backend answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class StreamError(ValuationClientError):
    """The streaming endpoint reported a failure mid-stream."""
