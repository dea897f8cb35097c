"""Azure DevOps REST client: shared configuration and request pipeline."""

import logging
import time
from dataclasses import dataclass, replace
from datetime import timedelta
from functools import lru_cache
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from .credentials import Basic, ClientSecret, Credentials, Token, resolve_credentials
from .errors import (
    AzureDevOpsError,
    CacheError,
    CodecError,
    ErrorBody,
    FaultError,
    NetworkError,
    RateLimitError,
    UnexpectedNotModified,
)
from .http_cache import FileHttpCache, HttpCache, NoopHttpCache
from .models import (
    DEFAULT_API_VERSION,
    DEFAULT_HOST,
    X_RATELIMIT_LIMIT,
    X_RATELIMIT_REMAINING,
    X_RATELIMIT_RESET,
    ApiResponse,
    ApiVersion,
    AuthenticationConstraint,
    MediaType,
    RateLimit,
)
from .projects import Project, Projects
from .repository import OrgRepositories, Repositories, Repository
from .settings import Settings, get_settings
from .urls import build_url, next_link
from .work_items import WorkItems

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_USER_AGENT = "azure-devops-client"


@dataclass(frozen=True)
class ClientConfig:
    """Everything a request needs to know about where and as whom to send it."""

    host: str = DEFAULT_HOST
    agent: str = DEFAULT_USER_AGENT
    org: str = ""
    credentials: Credentials | None = None
    api_version: ApiVersion = DEFAULT_API_VERSION


def _parse_count(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        parsed = int(value)
    except ValueError:
        return None
    return parsed if parsed >= 0 else None


def get_header_values(headers: httpx.Headers | dict) -> tuple[RateLimit, str | None]:
    """Read the rate limit headers and the ETag of a response.

    Missing or non-numeric rate limit values come back as None.
    """
    rate_limit = RateLimit(
        limit=_parse_count(headers.get(X_RATELIMIT_LIMIT)),
        remaining=_parse_count(headers.get(X_RATELIMIT_REMAINING)),
        reset=_parse_count(headers.get(X_RATELIMIT_RESET)),
    )
    if rate_limit.limit is not None:
        logger.debug("x-ratelimit-limit: %s", rate_limit.limit)
    if rate_limit.remaining is not None:
        logger.debug("x-ratelimit-remaining: %s", rate_limit.remaining)
    if rate_limit.reset is not None:
        logger.debug("x-ratelimit-reset: %s", rate_limit.reset)

    etag = headers.get("etag")
    if etag is not None:
        logger.debug("etag: %s", etag)
    return rate_limit, etag


def classify_error(
    status: int,
    body: bytes,
    rate_limit: RateLimit,
    now: float | None = None,
) -> AzureDevOpsError:
    """Turn a non-success response into the error the caller should see.

    An exhausted rate limit with a known reset time becomes a RateLimitError
    carrying the time left until the reset (never negative). Everything else is
    a FaultError with the decoded error body.
    """
    if rate_limit.remaining == 0 and rate_limit.reset is not None:
        now = time.time() if now is None else now
        wait = max(0, rate_limit.reset - int(now))
        return RateLimitError(timedelta(seconds=wait))
    return FaultError(status, _decode_error(body))


def _decode_error(body: bytes) -> ErrorBody | None:
    if not body.strip():
        return None
    try:
        return ErrorBody.model_validate_json(body)
    except ValidationError as e:
        raise CodecError(f"Failed to decode error body: {e}") from e


@lru_cache(maxsize=None)
def _type_adapter(tp) -> TypeAdapter:
    return TypeAdapter(tp)


def decode_body(status: int, body: bytes, out: Any = Any) -> Any:
    """Decode a success body into ``out``. No content decodes to None."""
    if status == httpx.codes.NO_CONTENT or not body:
        return None
    try:
        return _type_adapter(out).validate_json(body)
    except ValidationError as e:
        raise CodecError(f"Failed to decode response body: {e}") from e


def encode_body(body: Any) -> bytes | None:
    """Encode a request body (model, dict, list or raw bytes) as JSON."""
    if body is None or isinstance(body, bytes):
        return body
    try:
        return _type_adapter(type(body)).dump_json(body, by_alias=True, exclude_none=True)
    except (TypeError, ValueError) as e:
        raise CodecError(f"Failed to encode request body: {e}") from e


def credentials_from_settings(settings: Settings) -> Credentials | None:
    if settings.azure_devops_client_id and settings.azure_devops_client_secret:
        return ClientSecret(settings.azure_devops_client_id, settings.azure_devops_client_secret)
    if settings.azure_devops_token:
        if settings.azure_devops_auth == "token":
            return Token(settings.azure_devops_token)
        return Basic(settings.azure_devops_token)
    return None


class AzureClient:
    """Entry point for the Azure DevOps REST API.

    Resource facades (``projects()``, ``repo()``, ...) keep a reference to this
    client and send every request through ``_request``. Changing settings with
    the ``set_*`` methods affects facades already handed out; do not change
    them while requests are in flight.

    Usage::

        async with AzureClient("my-agent", "my-org", Basic(pat)) as client:
            repos = await client.repos("my-project").list()
    """

    def __init__(
        self,
        agent: str,
        org: str,
        credentials: Credentials | None = None,
        *,
        host: str = DEFAULT_HOST,
        http: httpx.AsyncClient | None = None,
        http_cache: HttpCache | None = None,
        api_version: ApiVersion | str = DEFAULT_API_VERSION,
    ):
        self.config = ClientConfig(
            host=host,
            agent=agent,
            org=org,
            credentials=credentials,
            api_version=ApiVersion(api_version),
        )
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=30.0)
        self.http_cache = http_cache or NoopHttpCache()

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs) -> "AzureClient":
        """Build a client from environment settings (see ``Settings``)."""
        settings = settings or get_settings()
        if not settings.azure_devops_org:
            raise RuntimeError("AZURE_DEVOPS_ORG is not set")
        if settings.azure_devops_cache_dir and "http_cache" not in kwargs:
            kwargs["http_cache"] = FileHttpCache(settings.azure_devops_cache_dir)
        return cls(
            settings.azure_devops_user_agent,
            settings.azure_devops_org,
            credentials_from_settings(settings),
            host=settings.azure_devops_host,
            api_version=settings.azure_devops_api_version,
            **kwargs,
        )

    @property
    def org(self) -> str:
        return self.config.org

    @property
    def host(self) -> str:
        return self.config.host

    def set_credentials(self, credentials: Credentials | None) -> None:
        self.config = replace(self.config, credentials=credentials)

    def set_api_version(self, api_version: ApiVersion | str) -> None:
        self.config = replace(self.config, api_version=ApiVersion(api_version))

    def set_host(self, host: str) -> None:
        self.config = replace(self.config, host=host)

    def set_organization(self, org: str) -> None:
        self.config = replace(self.config, org=org)

    def projects(self) -> Projects:
        return Projects(self)

    def project(self, project: str) -> Project:
        return Project(self, project)

    def repos(self, project: str) -> Repositories:
        """Repositories of one project."""
        return Repositories(self, project)

    def org_repos(self) -> OrgRepositories:
        """Repositories across every project of the organization."""
        return OrgRepositories(self)

    def repo(self, project: str, repo: str) -> Repository:
        return Repository(self, project, repo)

    def work_items(self, project: str) -> WorkItems:
        return WorkItems(self, project)

    async def __aenter__(self) -> "AzureClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP transport if this client created it."""
        if self._owns_http:
            await self._http.aclose()

    def _url_and_auth(
        self, uri: str, authentication: AuthenticationConstraint
    ) -> tuple[httpx.URL, str | None]:
        auth = resolve_credentials(self.config.credentials, authentication)
        url = build_url(uri, self.config.api_version)
        for key, value in auth.query_params.items():
            url = url.copy_add_param(key, value)
        return url, auth.authorization

    async def _request(
        self,
        method: str,
        uri: str,
        body: bytes | None = None,
        media_type: MediaType = MediaType.JSON,
        authentication: AuthenticationConstraint = AuthenticationConstraint.UNCONSTRAINED,
        out: Any = Any,
    ) -> ApiResponse:
        """Perform one HTTP exchange and decode the result into ``out``."""
        method = method.upper()
        url, auth = self._url_and_auth(uri, authentication)

        headers = {
            "User-Agent": self.config.agent,
            "Accept": media_type.value,
            "Content-Type": media_type.value,
        }
        if auth is not None:
            headers["Authorization"] = auth
        if method == "GET":
            etag = await self.http_cache.lookup_etag(uri)
            if etag is not None:
                headers["If-None-Match"] = etag

        logger.debug("Request: %s %s", method, url.copy_remove_param("client_secret"))
        try:
            response = await self._http.request(method, url, headers=headers, content=body)
        except httpx.TransportError as e:
            raise NetworkError(f"{method} {uri} failed: {e}") from e

        rate_limit, etag = get_header_values(response.headers)
        status = response.status_code
        content = response.content
        link = next_link(response.links)

        if httpx.codes.is_success(status):
            logger.debug("response payload %s", content.decode("utf-8", errors="replace"))
            result = decode_body(status, content, out)
            if method == "GET" and etag is not None and self.http_cache.enabled:
                try:
                    await self.http_cache.cache_response(uri, content, etag, link)
                except CacheError as e:
                    # failing to cache isn't fatal
                    logger.debug("Failed to cache body & etag: %s", e)
            return ApiResponse(status=status, body=result, etag=etag, link=link, rate_limit=rate_limit)

        if status == httpx.codes.NOT_MODIFIED:
            if not self.http_cache.enabled:
                raise UnexpectedNotModified(f"{method} {uri} returned 304 without a response cache")
            cached = await self.http_cache.lookup_body(uri)
            result = decode_body(httpx.codes.OK, cached, out)
            if link is None:
                link = await self.http_cache.lookup_next_link(uri)
            return ApiResponse(status=status, body=result, etag=etag, link=link, rate_limit=rate_limit)

        raise classify_error(status, content, rate_limit)

    def _absolute(self, path: str) -> str:
        return self.config.host + path

    async def get(self, path: str, out: type[T] = Any) -> T:
        return await self.get_media(path, MediaType.JSON, out)

    async def get_media(self, path: str, media: MediaType, out: type[T] = Any) -> T:
        response = await self._request("GET", self._absolute(path), None, media, out=out)
        return response.body

    async def get_page(self, path: str, out: type[T] = Any) -> ApiResponse[T]:
        """GET a list endpoint, keeping the next-page link."""
        return await self._request("GET", self._absolute(path), out=out)

    async def follow(self, link: str, out: type[T] = Any) -> ApiResponse[T]:
        """GET the absolute next-page link of a previous page."""
        return await self._request("GET", link, out=out)

    async def delete(self, path: str, out: type[T] = Any) -> T:
        response = await self._request("DELETE", self._absolute(path), out=out)
        return response.body

    async def post(self, path: str, message: Any, out: type[T] = Any) -> T:
        return await self.post_media(path, message, MediaType.JSON, out=out)

    async def post_media(
        self,
        path: str,
        message: Any,
        media: MediaType,
        authentication: AuthenticationConstraint = AuthenticationConstraint.UNCONSTRAINED,
        out: type[T] = Any,
    ) -> T:
        response = await self._request(
            "POST", self._absolute(path), encode_body(message), media, authentication, out
        )
        return response.body

    async def patch(self, path: str, message: Any, out: type[T] = Any) -> T:
        return await self.patch_media(path, message, MediaType.JSON, out)

    async def patch_media(self, path: str, message: Any, media: MediaType, out: type[T] = Any) -> T:
        response = await self._request("PATCH", self._absolute(path), encode_body(message), media, out=out)
        return response.body
