"""Shared enumerations, transport records and the schema base model."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DEFAULT_HOST = "https://dev.azure.com"

# https://learn.microsoft.com/en-us/azure/devops/integrate/concepts/rate-limits
X_RATELIMIT_LIMIT = "x-ratelimit-limit"
X_RATELIMIT_REMAINING = "x-ratelimit-remaining"
X_RATELIMIT_RESET = "x-ratelimit-reset"

T = TypeVar("T")


class ApiVersion(str, Enum):
    """REST API versions the client knows how to request."""

    V5_0 = "5.0"
    V5_1 = "5.1"
    V6_0 = "6.0"
    V7_1 = "7.1"


DEFAULT_API_VERSION = ApiVersion.V5_1


class MediaType(str, Enum):
    JSON = "application/json"
    JSON_PATCH = "application/json-patch+json"


class AuthenticationConstraint(Enum):
    """Controls what sort of authentication a request requires."""

    UNCONSTRAINED = "unconstrained"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PullStatus(str, Enum):
    ABANDONED = "abandoned"
    ACTIVE = "active"
    DRAFT = "draft"
    ALL = "all"
    COMPLETED = "completed"
    NOT_SET = "notSet"


class MergeStrategy(str, Enum):
    NO_FAST_FORWARD = "noFastForward"
    REBASE = "rebase"
    REBASE_MERGE = "rebaseMerge"
    SQUASH = "squash"


@dataclass(frozen=True)
class RateLimit:
    """Rate limit headers of a single response. Any value may be missing."""

    limit: int | None = None
    remaining: int | None = None
    reset: int | None = None


@dataclass
class ApiResponse(Generic[T]):
    """A typed response body together with its transport metadata.

    ``link`` is the next-page URI from the Link header, if any.
    """

    status: int
    body: T
    etag: str | None = None
    link: str | None = None
    rate_limit: RateLimit = field(default_factory=RateLimit)


class AzureModel(BaseModel):
    """Base for request and response schemas.

    Fields are snake_case in Python and camelCase on the wire. Unknown
    response fields are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )
