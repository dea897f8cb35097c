"""Pull requests interface."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import Field

from .models import ApiResponse, AzureModel, MergeStrategy, PullStatus, SortDirection
from .projects import ProjectSummary
from .urls import build_path, serialize_params, with_query
from .work_items import ResourceRefsResponse

if TYPE_CHECKING:
    from .client import AzureClient

PULL_REQUESTS_PATH = "/{org}/{project}/_apis/git/repositories/{repo}/pullrequests"
PULL_REQUEST_PATH = "/{org}/{project}/_apis/git/repositories/{repo}/pullrequests/{id}"


class Reviewer(AzureModel):
    id: str


class PullRequestOptions(AzureModel):
    """Body of a create-pull-request request."""

    source_ref_name: str
    target_ref_name: str
    title: str
    description: str | None = None
    reviewers: list[Reviewer] | None = None
    is_draft: bool | None = None


class CommitRef(AzureModel):
    commit_id: str | None = None
    url: str | None = None


class CompletionOptions(AzureModel):
    bypass_policy: bool | None = None
    bypass_reason: str | None = None
    delete_source_branch: bool | None = None
    merge_strategy: MergeStrategy | None = None
    merge_commit_message: str | None = None


class PullUpdateOptions(AzureModel):
    """Body of an update-pull-request request. Only set fields are sent."""

    title: str | None = None
    description: str | None = None
    status: PullStatus | None = None
    is_draft: bool | None = None
    last_merge_source_commit: CommitRef | None = None
    completion_options: CompletionOptions | None = None


@dataclass
class PullListOptions:
    skip: int | None = None
    top: int | None = None
    direction: SortDirection | None = None
    status: PullStatus | None = None
    repository_id: str | None = None
    source_ref_name: str | None = None
    source_repository_id: str | None = None
    target_ref_name: str | None = None
    reviewer_id: str | None = None
    creator_id: str | None = None
    include_links: bool | None = None

    def serialize(self) -> dict[str, str]:
        return serialize_params(
            {
                "$skip": self.skip,
                "$top": self.top,
                "direction": self.direction,
                "searchCriteria.status": self.status,
                "searchCriteria.repositoryId": self.repository_id,
                "searchCriteria.sourceRefName": self.source_ref_name,
                "searchCriteria.sourceRepositoryId": self.source_repository_id,
                "searchCriteria.targetRefName": self.target_ref_name,
                "searchCriteria.reviewerId": self.reviewer_id,
                "searchCriteria.creatorId": self.creator_id,
                "searchCriteria.includeLinks": self.include_links,
            }
        )


class IdentityRef(AzureModel):
    id: str
    display_name: str | None = None
    unique_name: str | None = None
    url: str | None = None
    image_url: str | None = None
    descriptor: str | None = None


class PullRequestRepo(AzureModel):
    id: str
    name: str
    url: str | None = None
    project: ProjectSummary | None = None


class PullRequestResponse(AzureModel):
    pull_request_id: int
    code_review_id: int | None = None
    repository: PullRequestRepo | None = None
    status: PullStatus | None = None
    created_by: IdentityRef | None = None
    creation_date: str | None = None
    title: str | None = None
    description: str | None = None
    source_ref_name: str | None = None
    target_ref_name: str | None = None
    merge_status: str | None = None
    is_draft: bool | None = None
    merge_id: str | None = None
    last_merge_source_commit: CommitRef | None = None
    last_merge_target_commit: CommitRef | None = None
    last_merge_commit: CommitRef | None = None
    reviewers: list[dict[str, Any]] = Field(default_factory=list)
    labels: list[dict[str, Any]] = Field(default_factory=list)
    url: str | None = None
    supports_iterations: bool | None = None
    artifact_id: str | None = None


class PullRequestsResponse(AzureModel):
    value: list[PullRequestResponse] = Field(default_factory=list)
    count: int = 0


class PullRequests:
    def __init__(self, ops: "AzureClient", project: str, repo: str):
        self.ops = ops
        self.project = project
        self.repo = repo

    # https://dev.azure.com/{org}/{project}/_apis/git/repositories/{repo}/pullrequests?api-version=5.1
    def _path(self) -> str:
        return build_path(PULL_REQUESTS_PATH, org=self.ops.org, project=self.project, repo=self.repo)

    async def create(self, options: PullRequestOptions) -> PullRequestResponse:
        return await self.ops.post(self._path(), options, out=PullRequestResponse)

    def pull(self, id: int) -> "PullRequest":
        return PullRequest(self.ops, self.project, self.repo, id)

    async def list(self, options: PullListOptions | None = None) -> ApiResponse[PullRequestsResponse]:
        options = options or PullListOptions()
        path = with_query(self._path(), options.serialize())
        return await self.ops.get_page(path, out=PullRequestsResponse)


class PullRequest:
    def __init__(self, ops: "AzureClient", project: str, repo: str, id: int):
        self.ops = ops
        self.project = project
        self.repo = repo
        self.id = id

    def _path(self, more: str = "") -> str:
        path = build_path(
            PULL_REQUEST_PATH, org=self.ops.org, project=self.project, repo=self.repo, id=self.id
        )
        return path + more

    async def get(self) -> PullRequestResponse:
        return await self.ops.get(self._path(), out=PullRequestResponse)

    async def update(self, options: PullUpdateOptions) -> PullRequestResponse:
        return await self.ops.patch(self._path(), options, out=PullRequestResponse)

    async def activate(self) -> PullRequestResponse:
        """Shorthand for updating the status to active."""
        return await self.update(PullUpdateOptions(status=PullStatus.ACTIVE))

    async def abandon(self) -> PullRequestResponse:
        """Shorthand for updating the status to abandoned."""
        return await self.update(PullUpdateOptions(status=PullStatus.ABANDONED))

    async def work_items(self) -> ResourceRefsResponse:
        """Work items linked to this pull request."""
        return await self.ops.get(self._path("/workitems"), out=ResourceRefsResponse)
