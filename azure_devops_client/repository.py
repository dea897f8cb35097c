"""Git repositories interface."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import Field

from .models import ApiResponse, AzureModel
from .projects import Href, ProjectSummary
from .pull_requests import PullRequest, PullRequests
from .urls import build_path, serialize_params, with_query

if TYPE_CHECKING:
    from .client import AzureClient

ORG_REPOSITORIES_PATH = "/{org}/_apis/git/repositories"
REPOSITORIES_PATH = "/{org}/{project}/_apis/git/repositories"
REPOSITORY_PATH = "/{org}/{project}/_apis/git/repositories/{repo}"


class ProjectId(AzureModel):
    id: str


class RepoOptions(AzureModel):
    """Body of a create-repository request.

    ``project`` is only needed when the project is not part of the URL.
    """

    name: str
    project: ProjectId | None = None


@dataclass
class RepoListOptions:
    include_links: bool | None = None
    include_all_urls: bool | None = None
    include_hidden: bool | None = None

    def serialize(self) -> dict[str, str]:
        return serialize_params(
            {
                "includeLinks": self.include_links,
                "includeAllUrls": self.include_all_urls,
                "includeHidden": self.include_hidden,
            }
        )


class RepoLinks(AzureModel):
    self_link: Href | None = Field(default=None, alias="self")
    project: Href | None = None
    web: Href | None = None
    ssh: Href | None = None
    commits: Href | None = None
    refs: Href | None = None
    pull_requests: Href | None = None
    items: Href | None = None
    pushes: Href | None = None


class RepoResponse(AzureModel):
    id: str
    name: str
    url: str | None = None
    project: ProjectSummary | None = None
    default_branch: str | None = None
    size: int | None = None
    remote_url: str | None = None
    ssh_url: str | None = None
    web_url: str | None = None
    is_disabled: bool | None = None
    links: RepoLinks | None = Field(default=None, alias="_links")


class ReposResponse(AzureModel):
    value: list[RepoResponse] = Field(default_factory=list)
    count: int = 0


class Repositories:
    """Repositories of a single project."""

    def __init__(self, ops: "AzureClient", project: str):
        self.ops = ops
        self.project = project

    def _path(self) -> str:
        return build_path(REPOSITORIES_PATH, org=self.ops.org, project=self.project)

    async def create(self, repo: RepoOptions) -> RepoResponse:
        """Create a new repository."""
        return await self.ops.post(self._path(), repo, out=RepoResponse)

    async def list(self, options: RepoListOptions | None = None) -> ApiResponse[ReposResponse]:
        """List the repositories of the project.

        https://learn.microsoft.com/en-us/rest/api/azure/devops/git/repositories/list
        """
        options = options or RepoListOptions()
        path = with_query(self._path(), options.serialize())
        return await self.ops.get_page(path, out=ReposResponse)


class OrgRepositories:
    """Repositories across every project of an organization."""

    def __init__(self, ops: "AzureClient"):
        self.ops = ops

    async def list(self, options: RepoListOptions | None = None) -> ApiResponse[ReposResponse]:
        options = options or RepoListOptions()
        path = with_query(build_path(ORG_REPOSITORIES_PATH, org=self.ops.org), options.serialize())
        return await self.ops.get_page(path, out=ReposResponse)


class Repository:
    def __init__(self, ops: "AzureClient", project: str, repo: str):
        self.ops = ops
        self.project = project
        self.repo = repo

    def _path(self) -> str:
        return build_path(REPOSITORY_PATH, org=self.ops.org, project=self.project, repo=self.repo)

    async def get(self) -> RepoResponse:
        return await self.ops.get(self._path(), out=RepoResponse)

    async def delete(self) -> None:
        """Delete the repository. The API answers 204 No Content."""
        await self.ops.delete(self._path())

    def pulls(self) -> PullRequests:
        return PullRequests(self.ops, self.project, self.repo)

    def pull(self, id: int) -> PullRequest:
        """Shorthand for ``pulls().pull(id)``."""
        return PullRequest(self.ops, self.project, self.repo, id)
