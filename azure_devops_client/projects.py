"""Projects interface."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import Field

from .models import ApiResponse, AzureModel
from .urls import build_path, serialize_params, with_query

if TYPE_CHECKING:
    from .client import AzureClient
    from .repository import Repositories
    from .work_items import WorkItems

PROJECTS_PATH = "/{org}/_apis/projects"
PROJECT_PATH = "/{org}/_apis/projects/{project}"

# Process template ids shipped with every organization
AGILE_TEMPLATE_ID = "adcc42ab-9882-485e-a3ed-7678f01f66bc"
SCRUM_TEMPLATE_ID = "6b724908-ef14-45cf-84f8-768b5384da45"
BASIC_TEMPLATE_ID = "b8a3a935-7e91-48b8-a94c-606d37c3e9f2"


class VersionControl(AzureModel):
    source_control_type: str = "Git"


class ProcessTemplate(AzureModel):
    template_type_id: str = AGILE_TEMPLATE_ID


class Capabilities(AzureModel):
    versioncontrol: VersionControl = Field(default_factory=VersionControl)
    process_template: ProcessTemplate = Field(default_factory=ProcessTemplate)


class ProjectOptions(AzureModel):
    """Body of a create-project request."""

    name: str
    description: str = ""
    visibility: str | None = None
    capabilities: Capabilities = Field(default_factory=Capabilities)

    @classmethod
    def new(
        cls,
        name: str,
        description: str = "",
        source_control_type: str = "Git",
        template_type_id: str = AGILE_TEMPLATE_ID,
    ) -> "ProjectOptions":
        return cls(
            name=name,
            description=description,
            capabilities=Capabilities(
                versioncontrol=VersionControl(source_control_type=source_control_type),
                process_template=ProcessTemplate(template_type_id=template_type_id),
            ),
        )


@dataclass
class ProjectListOptions:
    state_filter: str | None = None
    top: int | None = None
    skip: int | None = None
    continuation_token: str | None = None
    get_default_team_image_url: bool | None = None

    def serialize(self) -> dict[str, str]:
        return serialize_params(
            {
                "stateFilter": self.state_filter,
                "$top": self.top,
                "$skip": self.skip,
                "continuationToken": self.continuation_token,
                "getDefaultTeamImageUrl": self.get_default_team_image_url,
            }
        )


class ProjectStatus(AzureModel):
    """Reference to the long running operation behind a create or delete."""

    id: str
    status: str
    url: str


class Href(AzureModel):
    href: str


class ProjectLinks(AzureModel):
    self_link: Href | None = Field(default=None, alias="self")
    collection: Href | None = None
    web: Href | None = None


class TeamRef(AzureModel):
    id: str
    name: str
    url: str | None = None


class ProjectSummary(AzureModel):
    id: str
    name: str
    url: str | None = None
    description: str | None = None
    state: str | None = None
    revision: int | None = None
    visibility: str | None = None
    last_update_time: str | None = None


class ProjectsResponse(AzureModel):
    value: list[ProjectSummary] = Field(default_factory=list)
    count: int = 0


class ProjectResponse(ProjectSummary):
    links: ProjectLinks | None = Field(default=None, alias="_links")
    default_team: TeamRef | None = None


class Projects:
    def __init__(self, ops: "AzureClient"):
        self.ops = ops

    def _path(self) -> str:
        return build_path(PROJECTS_PATH, org=self.ops.org)

    async def create(self, project: ProjectOptions) -> ProjectStatus:
        """Queue creation of a new project."""
        return await self.ops.post(self._path(), project, out=ProjectStatus)

    async def list(self, options: ProjectListOptions | None = None) -> ApiResponse[ProjectsResponse]:
        """List projects in the organization."""
        options = options or ProjectListOptions()
        path = with_query(self._path(), options.serialize())
        return await self.ops.get_page(path, out=ProjectsResponse)


class Project:
    def __init__(self, ops: "AzureClient", project: str):
        self.ops = ops
        self.project = project

    # GET https://dev.azure.com/{organization}/_apis/projects/{projectId}?api-version=5.1
    def _path(self) -> str:
        return build_path(PROJECT_PATH, org=self.ops.org, project=self.project)

    async def get(self) -> ProjectResponse:
        return await self.ops.get(self._path(), out=ProjectResponse)

    async def delete(self) -> ProjectStatus:
        return await self.ops.delete(self._path(), out=ProjectStatus)

    def repos(self) -> "Repositories":
        return self.ops.repos(self.project)

    def work_items(self) -> "WorkItems":
        return self.ops.work_items(self.project)
