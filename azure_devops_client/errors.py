"""Errors raised by the Azure DevOps client."""

from datetime import timedelta

from .models import AzureModel


class ErrorBody(AzureModel):
    """Error payload returned by Azure DevOps on a failed request."""

    message: str | None = None
    type_name: str | None = None
    type_key: str | None = None
    error_code: int | None = None
    event_id: int | None = None
    inner_exception: dict | None = None


class AzureDevOpsError(Exception):
    """Base class for all client errors."""


class NetworkError(AzureDevOpsError):
    """The request never produced an HTTP response."""


class UrlError(AzureDevOpsError):
    """A request path could not be turned into a URL."""


class CodecError(AzureDevOpsError):
    """A request or response body could not be encoded or decoded."""


class CacheError(AzureDevOpsError):
    """The response cache could not produce a stored entry."""


class FaultError(AzureDevOpsError):
    """The server answered with a non-success status."""

    def __init__(self, status: int, error: ErrorBody | None):
        self.status = status
        self.error = error
        message = error.message if error and error.message else "no error body"
        super().__init__(f"Azure DevOps API error {status}: {message}")


class RateLimitError(AzureDevOpsError):
    """The rate limit is exhausted; ``wait`` is the time until it resets."""

    def __init__(self, wait: timedelta):
        self.wait = wait
        super().__init__(f"Rate limit exceeded, resets in {int(wait.total_seconds())}s")


class UnexpectedNotModified(RuntimeError):
    """A 304 arrived although no conditional request could have been sent."""
