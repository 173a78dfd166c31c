"""Azure DevOps REST collaborator.

Every call is a single request with a fixed timeout: no retries and no
backoff, a failure surfaces to the caller as ``AdoApiError``. Raw payloads are
turned into ``WorkItem`` records here and nowhere else.
"""
import logging
from typing import Any
from urllib.parse import quote as url_quote

import httpx

from storyforge.exceptions import AdoApiError
from storyforge.schemas.work_item import WikiPage, WorkItem
from storyforge.services import wiql

logger = logging.getLogger(__name__)

# Field reference names requested when hydrating work items.
WORK_ITEM_FIELDS: tuple[str, ...] = (
    "System.Id",
    "System.Title",
    "System.WorkItemType",
    "System.State",
    "System.Parent",
    "System.AssignedTo",
    "System.CreatedBy",
    "System.CreatedDate",
    "System.ChangedDate",
    "System.IterationPath",
    "System.AreaPath",
    "System.Description",
    "System.Tags",
    "Microsoft.VSTS.Common.Priority",
    "Microsoft.VSTS.Scheduling.StartDate",
    "Microsoft.VSTS.Scheduling.TargetDate",
    "Microsoft.VSTS.Scheduling.StoryPoints",
    "Microsoft.VSTS.Scheduling.Effort",
)

JSON_PATCH = "application/json-patch+json"


def _display_name(identity: Any) -> str | None:
    if isinstance(identity, dict):
        return identity.get("displayName") or identity.get("uniqueName")
    return identity or None


def _number(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _int_or_none(value: Any) -> int | None:
    number = _number(value)
    return int(number) if number is not None else None


def to_work_item(raw: dict[str, Any]) -> WorkItem:
    """Translate an ADO ``{id, fields: {...}}`` payload into a ``WorkItem``."""
    fields = raw.get("fields") or {}
    return WorkItem(
        id=int(raw.get("id") or fields.get("System.Id")),
        type=fields.get("System.WorkItemType"),
        title=fields.get("System.Title") or "",
        state=fields.get("System.State"),
        parent_id=_int_or_none(fields.get("System.Parent")),
        assigned_to=_display_name(fields.get("System.AssignedTo")),
        created_by=_display_name(fields.get("System.CreatedBy")),
        created_date=fields.get("System.CreatedDate"),
        changed_date=fields.get("System.ChangedDate"),
        start_date=fields.get("Microsoft.VSTS.Scheduling.StartDate"),
        target_date=fields.get("Microsoft.VSTS.Scheduling.TargetDate"),
        story_points=_number(fields.get("Microsoft.VSTS.Scheduling.StoryPoints")),
        effort=_number(fields.get("Microsoft.VSTS.Scheduling.Effort")),
        priority=_int_or_none(fields.get("Microsoft.VSTS.Common.Priority")),
        description=fields.get("System.Description"),
        area_path=fields.get("System.AreaPath"),
        iteration_path=fields.get("System.IterationPath"),
        tags=fields.get("System.Tags"),
    )


def infer_process_template(type_names: list[str]) -> str:
    """Guess the process template (Basic/Scrum/Agile/CMMI/Custom) from type names."""
    types = {t.lower() for t in type_names}
    if "issue" in types and "user story" not in types and "product backlog item" not in types:
        return "Basic"
    if "product backlog item" in types or "impediment" in types:
        return "Scrum"
    if "user story" in types:
        return "Agile"
    if types & {"requirement", "risk", "review", "change request"}:
        return "CMMI"
    return "Custom"


def _find_page(page: dict[str, Any], wanted_path: str) -> dict[str, Any] | None:
    stack = [page]
    while stack:
        current = stack.pop()
        if (current.get("path") or "").lower() == wanted_path:
            return current
        stack.extend(reversed(current.get("subPages") or []))
    return None


class AdoClient:
    """Async client for one ADO organization/project, authenticated with a PAT."""

    def __init__(
        self,
        org_url: str,
        project: str,
        pat: str,
        *,
        api_version: str = "7.1",
        timeout: float = 30.0,
        batch_size: int = 200,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.org_url = org_url.rstrip("/")
        self.project = project
        self.api_version = api_version
        self.batch_size = batch_size
        self._http = httpx.AsyncClient(
            base_url=self.org_url,
            auth=httpx.BasicAuth("", pat),
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "AdoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def _project_path(self) -> str:
        return "/" + url_quote(self.project, safe="")

    def work_item_url(self, work_item_id: int) -> str:
        return f"{self.org_url}/{self.project}/_workitems/edit/{work_item_id}/"

    def api_work_item_url(self, work_item_id: int) -> str:
        """REST resource URL, as used in relation links."""
        return f"{self.org_url}/_apis/wit/workItems/{work_item_id}"

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        params = {"api-version": self.api_version, **kwargs.pop("params", {})}
        try:
            response = await self._http.request(method, path, params=params, **kwargs)
        except httpx.TimeoutException as e:
            raise AdoApiError(f"Azure DevOps request timed out: {method} {path}") from e
        except httpx.RequestError as e:
            raise AdoApiError("No response from Azure DevOps. Check your organization URL.") from e
        if response.is_error:
            message = response.reason_phrase or f"HTTP {response.status_code}"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                message = body["message"]
            logger.error("ADO %s %s failed: %s %s", method, path, response.status_code, message)
            raise AdoApiError(message, status=response.status_code)
        if not response.content:
            return None
        return response.json()

    async def test_connection(self) -> dict[str, Any]:
        data = await self._request("GET", f"/_apis/projects/{url_quote(self.project, safe='')}")
        return {
            "name": data.get("name"),
            "id": data.get("id"),
            "state": data.get("state"),
            "url": data.get("url"),
        }

    async def get_work_item_types(self) -> list[dict[str, Any]]:
        data = await self._request("GET", f"{self._project_path}/_apis/wit/workitemtypes")
        return data.get("value", [])

    async def query_ids(self, wiql: str) -> list[int]:
        data = await self._request("POST", f"{self._project_path}/_apis/wit/wiql", json={"query": wiql})
        return [ref["id"] for ref in (data or {}).get("workItems") or []]

    async def get_work_items(self, ids: list[int]) -> list[WorkItem]:
        """Hydrate ids in batches; ADO caps a single request at 200 ids."""
        items: list[WorkItem] = []
        fields = ",".join(WORK_ITEM_FIELDS)
        for start in range(0, len(ids), self.batch_size):
            batch = ids[start:start + self.batch_size]
            data = await self._request(
                "GET",
                f"{self._project_path}/_apis/wit/workitems",
                params={"ids": ",".join(str(i) for i in batch), "fields": fields},
            )
            items.extend(to_work_item(raw) for raw in data.get("value", []))
        return items

    async def query_work_items(self, wiql: str) -> list[WorkItem]:
        ids = await self.query_ids(wiql)
        if not ids:
            return []
        return await self.get_work_items(ids)

    async def get_work_item(self, work_item_id: int) -> WorkItem:
        data = await self._request(
            "GET",
            f"{self._project_path}/_apis/wit/workitems/{work_item_id}",
            params={"fields": ",".join(WORK_ITEM_FIELDS)},
        )
        return to_work_item(data)

    async def get_children_of(
        self,
        parent_ids: list[int],
        types: list[str] | None = None,
    ) -> list[WorkItem]:
        """Direct children of any of ``parent_ids``, one query per batch of parents."""
        children: list[WorkItem] = []
        for start in range(0, len(parent_ids), self.batch_size):
            batch = parent_ids[start:start + self.batch_size]
            children.extend(await self.query_work_items(wiql.children_query(batch, types)))
        return children

    async def get_child_work_items(self, parent_id: int, types: list[str] | None = None) -> list[WorkItem]:
        return await self.get_children_of([parent_id], types)

    async def get_relations(self, work_item_id: int) -> list[dict[str, Any]]:
        data = await self._request(
            "GET",
            f"{self._project_path}/_apis/wit/workitems/{work_item_id}",
            params={"$expand": "relations"},
        )
        return data.get("relations") or []

    async def create_work_item(self, work_item_type: str, operations: list[dict[str, Any]]) -> WorkItem:
        data = await self._request(
            "POST",
            f"{self._project_path}/_apis/wit/workitems/${url_quote(work_item_type, safe='')}",
            json=operations,
            headers={"Content-Type": JSON_PATCH},
        )
        logger.info("Created %s #%s", work_item_type, data.get("id"))
        return to_work_item(data)

    async def update_work_item(self, work_item_id: int, operations: list[dict[str, Any]]) -> WorkItem:
        logger.debug("Updating work item #%s with %d operations", work_item_id, len(operations))
        data = await self._request(
            "PATCH",
            f"{self._project_path}/_apis/wit/workitems/{work_item_id}",
            json=operations,
            headers={"Content-Type": JSON_PATCH},
        )
        logger.info("Updated work item #%s", work_item_id, extra={"work_item_id": work_item_id})
        return to_work_item(data)

    async def get_wikis(self) -> list[dict[str, Any]]:
        data = await self._request("GET", f"{self._project_path}/_apis/wiki/wikis")
        return data.get("value", [])

    async def find_wiki_page_by_title(self, page_title: str) -> WikiPage | None:
        """First page, across all project wikis, whose path is ``/<title>`` (case-insensitive)."""
        wanted = f"/{page_title.lower()}"
        for wiki in await self.get_wikis():
            try:
                tree = await self._request(
                    "GET",
                    f"{self._project_path}/_apis/wiki/wikis/{wiki['id']}/pages",
                    params={"recursionLevel": "full"},
                )
            except AdoApiError as e:
                logger.warning("Error searching wiki %s: %s", wiki.get("name"), e)
                continue
            page = _find_page(tree or {}, wanted)
            if page is not None:
                return WikiPage(
                    wiki_name=wiki["name"],
                    page_id=page.get("id"),
                    page_path=page["path"],
                    url=f"{self.org_url}/{self.project}/_wiki/wikis/{wiki['name']}/{page.get('id')}{page['path']}",
                )
        return None
