"""Work items interface."""

from typing import TYPE_CHECKING, Any

from pydantic import ConfigDict, Field

from .models import ApiResponse, AzureModel, MediaType
from .urls import build_path, serialize_params, with_query

if TYPE_CHECKING:
    from .client import AzureClient

WORK_ITEMS_PATH = "/{org}/{project}/_apis/wit/workitems"
WORK_ITEM_PATH = "/{org}/{project}/_apis/wit/workitems/{id}"
# The leading $ is part of the route, not a template placeholder
WORK_ITEM_CREATE_PATH = "/{org}/{project}/_apis/wit/workitems/${work_item_type}"
WIQL_PATH = "/{org}/{project}/_apis/wit/wiql"

# The batch endpoint accepts at most this many ids per request
MAX_IDS_PER_REQUEST = 200


class WorkItemRef(AzureModel):
    id: int
    url: str | None = None


class WorkItemQueryResult(AzureModel):
    """Result of a WIQL query: references only, fetch fields with ``list``."""

    query_type: str | None = None
    as_of: str | None = None
    work_items: list[WorkItemRef] = Field(default_factory=list)


class ResourceRef(AzureModel):
    id: str
    url: str | None = None


class ResourceRefsResponse(AzureModel):
    value: list[ResourceRef] = Field(default_factory=list)
    count: int = 0


class WorkItemFields(AzureModel):
    """Well-known system fields. Any other field is kept as an extra."""

    model_config = ConfigDict(extra="allow")

    title: str | None = Field(default=None, alias="System.Title")
    state: str | None = Field(default=None, alias="System.State")
    work_item_type: str | None = Field(default=None, alias="System.WorkItemType")
    area_path: str | None = Field(default=None, alias="System.AreaPath")
    iteration_path: str | None = Field(default=None, alias="System.IterationPath")
    assigned_to: dict[str, Any] | None = Field(default=None, alias="System.AssignedTo")
    description: str | None = Field(default=None, alias="System.Description")


class WorkItem(AzureModel):
    id: int
    rev: int | None = None
    fields: WorkItemFields = Field(default_factory=WorkItemFields)
    url: str | None = None


class WorkItemsResponse(AzureModel):
    value: list[WorkItem] = Field(default_factory=list)
    count: int = 0


def field_patch(fields: dict[str, Any]) -> list[dict[str, Any]]:
    """JSON Patch document setting each ``{"System.Title": ...}`` field."""
    return [{"op": "add", "path": f"/fields/{name}", "value": value} for name, value in fields.items()]


class WorkItems:
    def __init__(self, ops: "AzureClient", project: str):
        self.ops = ops
        self.project = project

    def _path(self, template: str, **segments) -> str:
        return build_path(template, org=self.ops.org, project=self.project, **segments)

    async def get(self, id: int) -> WorkItem:
        return await self.ops.get(self._path(WORK_ITEM_PATH, id=id), out=WorkItem)

    async def create(self, work_item_type: str, fields: dict[str, Any]) -> WorkItem:
        """Create a work item of the given type ("Bug", "Task", ...)."""
        path = self._path(WORK_ITEM_CREATE_PATH, work_item_type=work_item_type)
        return await self.ops.post_media(path, field_patch(fields), MediaType.JSON_PATCH, out=WorkItem)

    async def update(self, id: int, fields: dict[str, Any]) -> WorkItem:
        path = self._path(WORK_ITEM_PATH, id=id)
        return await self.ops.patch_media(path, field_patch(fields), MediaType.JSON_PATCH, out=WorkItem)

    async def delete(self, id: int) -> dict[str, Any]:
        """Move a work item to the recycle bin."""
        return await self.ops.delete(self._path(WORK_ITEM_PATH, id=id), out=dict[str, Any])

    async def query(self, wiql: str) -> WorkItemQueryResult:
        """Run a WIQL query such as ``SELECT [System.Id] FROM WorkItems``."""
        return await self.ops.post(self._path(WIQL_PATH), {"query": wiql}, out=WorkItemQueryResult)

    async def list(self, ids, fields=None) -> ApiResponse[WorkItemsResponse]:
        """Fetch several work items by id, optionally limited to some fields."""
        ids = [int(i) for i in ids]
        if not ids:
            raise ValueError("ids must not be empty")
        if len(ids) > MAX_IDS_PER_REQUEST:
            raise ValueError(f"At most {MAX_IDS_PER_REQUEST} ids per request, got {len(ids)}")
        params = serialize_params(
            {
                "ids": ",".join(str(i) for i in ids),
                "fields": ",".join(fields) if fields else None,
            }
        )
        path = with_query(self._path(WORK_ITEMS_PATH), params)
        return await self.ops.get_page(path, out=WorkItemsResponse)
