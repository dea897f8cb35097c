"""Async client for the Azure DevOps REST API.

Covers projects, git repositories, pull requests and work items, with
optional ETag response caching.
"""

from .client import AzureClient, ClientConfig
from .credentials import Basic, ClientSecret, Credentials, Token
from .errors import (
    AzureDevOpsError,
    CacheError,
    CodecError,
    FaultError,
    NetworkError,
    RateLimitError,
    UnexpectedNotModified,
    UrlError,
)
from .http_cache import FileHttpCache, HttpCache, MemoryHttpCache, NoopHttpCache
from .models import ApiResponse, ApiVersion, MediaType, MergeStrategy, PullStatus, RateLimit
from .projects import Project, ProjectListOptions, ProjectOptions, Projects
from .pull_requests import (
    CompletionOptions,
    PullListOptions,
    PullRequest,
    PullRequestOptions,
    PullRequests,
    PullUpdateOptions,
)
from .repository import OrgRepositories, Repositories, Repository, RepoListOptions, RepoOptions
from .work_items import WorkItems

__all__ = [
    "AzureClient",
    "ClientConfig",
    "Basic",
    "ClientSecret",
    "Credentials",
    "Token",
    "AzureDevOpsError",
    "CacheError",
    "CodecError",
    "FaultError",
    "NetworkError",
    "RateLimitError",
    "UnexpectedNotModified",
    "UrlError",
    "FileHttpCache",
    "HttpCache",
    "MemoryHttpCache",
    "NoopHttpCache",
    "ApiResponse",
    "ApiVersion",
    "MediaType",
    "MergeStrategy",
    "PullStatus",
    "RateLimit",
    "Project",
    "ProjectListOptions",
    "ProjectOptions",
    "Projects",
    "CompletionOptions",
    "PullListOptions",
    "PullRequest",
    "PullRequestOptions",
    "PullRequests",
    "PullUpdateOptions",
    "OrgRepositories",
    "Repositories",
    "Repository",
    "RepoListOptions",
    "RepoOptions",
    "WorkItems",
]
