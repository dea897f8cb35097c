"""Integration tests for the resource interfaces.

Each test checks the request a facade sends and the type it decodes into.
Only the HTTP transport (httpx) is mocked.
"""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from azure_devops_client.client import AzureClient
from azure_devops_client.credentials import Basic
from azure_devops_client.models import MergeStrategy, PullStatus, SortDirection
from azure_devops_client.projects import ProjectListOptions, ProjectOptions, ProjectResponse, ProjectStatus
from azure_devops_client.pull_requests import (
    CompletionOptions,
    PullListOptions,
    PullRequestOptions,
    PullRequestResponse,
    PullUpdateOptions,
)
from azure_devops_client.repository import ProjectId, RepoListOptions, RepoOptions, RepoResponse
from azure_devops_client.work_items import MAX_IDS_PER_REQUEST, WorkItem, WorkItemQueryResult

BASE = "https://dev.azure.com/acme"

PULL = {
    "pullRequestId": 7,
    "status": "active",
    "title": "Add feature",
    "sourceRefName": "refs/heads/feature",
    "targetRefName": "refs/heads/main",
}


@pytest.fixture
async def client():
    c = AzureClient("test-agent", "acme", Basic("pat"))
    yield c
    await c.aclose()


def _respond(client, *responses):
    mock = AsyncMock(side_effect=list(responses))
    client._http.request = mock
    return mock


def _request(mock, index=0):
    """(method, url without query, query params, headers, json body)."""
    call = mock.call_args_list[index]
    method, url = call.args
    content = call.kwargs["content"]
    body = json.loads(content) if content else None
    base = f"{url.scheme}://{url.host}{url.path}"
    return method, base, dict(url.params), call.kwargs["headers"], body


class TestProjects:
    async def test_create(self, client):
        mock = _respond(
            client,
            httpx.Response(202, json={"id": "op-1", "status": "queued", "url": f"{BASE}/_apis/operations/op-1"}),
        )

        status = await client.projects().create(ProjectOptions.new("Fabrikam"))

        method, url, _, _, body = _request(mock)
        assert method == "POST"
        assert url == f"{BASE}/_apis/projects"
        assert body["name"] == "Fabrikam"
        assert body["capabilities"]["versioncontrol"] == {"sourceControlType": "Git"}
        assert isinstance(status, ProjectStatus)
        assert status.status == "queued"

    async def test_list_with_options(self, client):
        mock = _respond(client, httpx.Response(200, json={"value": [{"id": "p1", "name": "P"}], "count": 1}))

        page = await client.projects().list(ProjectListOptions(top=1))

        method, url, params, _, _ = _request(mock)
        assert method == "GET"
        assert url == f"{BASE}/_apis/projects"
        assert params == {"$top": "1", "api-version": "5.1"}
        assert page.body.value[0].name == "P"

    async def test_get_and_delete(self, client):
        mock = _respond(
            client,
            httpx.Response(200, json={"id": "p1", "name": "P", "state": "wellFormed"}),
            httpx.Response(202, json={"id": "op-2", "status": "queued", "url": "u"}),
        )
        project = client.project("P")

        got = await project.get()
        deleted = await project.delete()

        assert _request(mock, 0)[:2] == ("GET", f"{BASE}/_apis/projects/P")
        assert _request(mock, 1)[:2] == ("DELETE", f"{BASE}/_apis/projects/P")
        assert isinstance(got, ProjectResponse)
        assert got.state == "wellFormed"
        assert deleted.id == "op-2"

    async def test_project_children(self, client):
        project = client.project("P")

        assert project.repos()._path() == "/acme/P/_apis/git/repositories"
        assert project.work_items().project == "P"


class TestRepositories:
    async def test_create(self, client):
        mock = _respond(client, httpx.Response(201, json={"id": "r1", "name": "R"}))

        repo = await client.repos("P").create(RepoOptions(name="R", project=ProjectId(id="p1")))

        method, url, _, _, body = _request(mock)
        assert method == "POST"
        assert url == f"{BASE}/P/_apis/git/repositories"
        assert body == {"name": "R", "project": {"id": "p1"}}
        assert isinstance(repo, RepoResponse)

    async def test_list_across_organization(self, client):
        mock = _respond(client, httpx.Response(200, json={"value": [], "count": 0}))

        await client.org_repos().list(RepoListOptions(include_hidden=True))

        _, url, params, _, _ = _request(mock)
        assert url == f"{BASE}/_apis/git/repositories"
        assert params == {"includeHidden": "true", "api-version": "5.1"}

    async def test_follow_next_page(self, client):
        next_uri = f"{BASE}/P/_apis/git/repositories?continuationToken=t2&api-version=5.1"
        mock = _respond(
            client,
            httpx.Response(
                200,
                json={"value": [{"id": "r1", "name": "R1"}], "count": 1},
                headers={"link": f'<{next_uri}>; rel="next"'},
            ),
            httpx.Response(200, json={"value": [{"id": "r2", "name": "R2"}], "count": 1}),
        )
        names = []

        page = await client.repos("P").list()
        names += [r.name for r in page.body.value]
        while page.link:
            page = await client.follow(page.link, out=type(page.body))
            names += [r.name for r in page.body.value]

        assert names == ["R1", "R2"]
        assert _request(mock, 1)[2]["continuationToken"] == "t2"

    async def test_get_and_delete(self, client):
        mock = _respond(
            client,
            httpx.Response(200, json={"id": "r1", "name": "R", "defaultBranch": "refs/heads/main"}),
            httpx.Response(204),
        )
        repo = client.repo("P", "R")

        got = await repo.get()
        deleted = await repo.delete()

        assert _request(mock, 0)[:2] == ("GET", f"{BASE}/P/_apis/git/repositories/R")
        assert _request(mock, 1)[:2] == ("DELETE", f"{BASE}/P/_apis/git/repositories/R")
        assert got.default_branch == "refs/heads/main"
        assert deleted is None


class TestPullRequests:
    async def test_create(self, client):
        mock = _respond(client, httpx.Response(201, json=PULL))

        pull = await client.repo("P", "R").pulls().create(
            PullRequestOptions(
                source_ref_name="refs/heads/feature",
                target_ref_name="refs/heads/main",
                title="Add feature",
            )
        )

        method, url, _, _, body = _request(mock)
        assert method == "POST"
        assert url == f"{BASE}/P/_apis/git/repositories/R/pullrequests"
        assert body == {
            "sourceRefName": "refs/heads/feature",
            "targetRefName": "refs/heads/main",
            "title": "Add feature",
        }
        assert isinstance(pull, PullRequestResponse)
        assert pull.pull_request_id == 7

    async def test_list(self, client):
        mock = _respond(client, httpx.Response(200, json={"value": [PULL], "count": 1}))

        page = await client.repo("P", "R").pulls().list(
            PullListOptions(status=PullStatus.ALL, direction=SortDirection.DESC)
        )

        _, url, params, _, _ = _request(mock)
        assert url == f"{BASE}/P/_apis/git/repositories/R/pullrequests"
        assert params == {"searchCriteria.status": "all", "direction": "desc", "api-version": "5.1"}
        assert page.body.value[0].title == "Add feature"

    async def test_update(self, client):
        mock = _respond(client, httpx.Response(200, json={**PULL, "status": "completed"}))

        pull = await client.repo("P", "R").pull(7).update(
            PullUpdateOptions(
                status=PullStatus.COMPLETED,
                completion_options=CompletionOptions(merge_strategy=MergeStrategy.SQUASH),
            )
        )

        method, url, _, _, body = _request(mock)
        assert method == "PATCH"
        assert url == f"{BASE}/P/_apis/git/repositories/R/pullrequests/7"
        assert body == {"status": "completed", "completionOptions": {"mergeStrategy": "squash"}}
        assert pull.status == PullStatus.COMPLETED

    async def test_abandon_and_activate(self, client):
        mock = _respond(
            client,
            httpx.Response(200, json={**PULL, "status": "abandoned"}),
            httpx.Response(200, json=PULL),
        )
        pull = client.repo("P", "R").pull(7)

        abandoned = await pull.abandon()
        activated = await pull.activate()

        assert _request(mock, 0)[4] == {"status": "abandoned"}
        assert _request(mock, 1)[4] == {"status": "active"}
        assert abandoned.status == PullStatus.ABANDONED
        assert activated.status == PullStatus.ACTIVE

    async def test_work_items(self, client):
        mock = _respond(
            client,
            httpx.Response(200, json={"value": [{"id": "42", "url": f"{BASE}/_apis/wit/workItems/42"}], "count": 1}),
        )

        refs = await client.repo("P", "R").pull(7).work_items()

        assert _request(mock)[:2] == ("GET", f"{BASE}/P/_apis/git/repositories/R/pullrequests/7/workitems")
        assert [r.id for r in refs.value] == ["42"]


class TestWorkItems:
    async def test_get(self, client):
        mock = _respond(client, httpx.Response(200, json={"id": 42, "rev": 3, "fields": {"System.Title": "Bug"}}))

        item = await client.work_items("P").get(42)

        assert _request(mock)[:2] == ("GET", f"{BASE}/P/_apis/wit/workitems/42")
        assert isinstance(item, WorkItem)
        assert item.fields.title == "Bug"

    async def test_list(self, client):
        mock = _respond(client, httpx.Response(200, json={"value": [{"id": 1}, {"id": 2}], "count": 2}))

        page = await client.work_items("P").list([1, 2], fields=["System.Title", "System.State"])

        _, url, params, _, _ = _request(mock)
        assert url == f"{BASE}/P/_apis/wit/workitems"
        assert params == {"ids": "1,2", "fields": "System.Title,System.State", "api-version": "5.1"}
        assert [w.id for w in page.body.value] == [1, 2]

    async def test_list_rejects_bad_id_counts(self, client):
        mock = _respond(client)
        work_items = client.work_items("P")

        with pytest.raises(ValueError):
            await work_items.list([])
        with pytest.raises(ValueError):
            await work_items.list(range(MAX_IDS_PER_REQUEST + 1))
        mock.assert_not_called()

    async def test_create_sends_json_patch(self, client):
        mock = _respond(client, httpx.Response(200, json={"id": 43, "fields": {"System.Title": "New bug"}}))

        item = await client.work_items("P").create("Bug", {"System.Title": "New bug"})

        method, url, _, headers, body = _request(mock)
        assert method == "POST"
        assert url == f"{BASE}/P/_apis/wit/workitems/$Bug"
        assert headers["Content-Type"] == "application/json-patch+json"
        assert body == [{"op": "add", "path": "/fields/System.Title", "value": "New bug"}]
        assert item.id == 43

    async def test_update_sends_json_patch(self, client):
        mock = _respond(client, httpx.Response(200, json={"id": 43, "fields": {"System.State": "Active"}}))

        item = await client.work_items("P").update(43, {"System.State": "Active"})

        method, url, _, headers, body = _request(mock)
        assert method == "PATCH"
        assert url == f"{BASE}/P/_apis/wit/workitems/43"
        assert headers["Content-Type"] == "application/json-patch+json"
        assert body == [{"op": "add", "path": "/fields/System.State", "value": "Active"}]
        assert item.fields.state == "Active"

    async def test_delete(self, client):
        mock = _respond(client, httpx.Response(200, json={"id": 43, "code": 200}))

        result = await client.work_items("P").delete(43)

        assert _request(mock)[:2] == ("DELETE", f"{BASE}/P/_apis/wit/workitems/43")
        assert result["id"] == 43

    async def test_query(self, client):
        mock = _respond(client, httpx.Response(200, json={"queryType": "flat", "workItems": [{"id": 5}]}))

        result = await client.work_items("P").query("SELECT [System.Id] FROM WorkItems")

        method, url, _, _, body = _request(mock)
        assert method == "POST"
        assert url == f"{BASE}/P/_apis/wit/wiql"
        assert body == {"query": "SELECT [System.Id] FROM WorkItems"}
        assert isinstance(result, WorkItemQueryResult)
        assert result.work_items[0].id == 5
