"""Typed work item records translated from ADO payloads."""
from pydantic import Field

from storyforge.schemas.common import CamelModel


class WorkItem(CamelModel):
    """One ADO work item with named optional fields.

    Built only by ``services.ado_client.to_work_item``; nothing past that
    boundary reads ADO field reference strings.
    """

    id: int
    type: str | None = None
    title: str = ""
    state: str | None = None
    parent_id: int | None = None
    assigned_to: str | None = None
    created_by: str | None = None
    created_date: str | None = None
    changed_date: str | None = None
    start_date: str | None = None
    target_date: str | None = None
    story_points: float | None = None
    effort: float | None = None
    priority: int | None = None
    description: str | None = None
    area_path: str | None = None
    iteration_path: str | None = None
    tags: str | None = None


class Progress(CamelModel):
    completed_effort: float = 0
    total_effort: float = 0
    percentage: int = 0


class WorkItemNode(WorkItem):
    children: list["WorkItemNode"] = []
    progress: Progress | None = None


class RoadmapFeature(WorkItem):
    progress: Progress = Field(default_factory=Progress)


class EpicGroup(CamelModel):
    epic: WorkItem
    features: list[RoadmapFeature] = []


class RoadmapResponse(CamelModel):
    scheduled: list[EpicGroup] = []
    orphaned_scheduled: list[RoadmapFeature] = []
    unscheduled: list[RoadmapFeature] = []
    total: int = 0


class BacklogResponse(CamelModel):
    success: bool = True
    work_items: list[WorkItem] = []
    hierarchy: list[WorkItemNode] = []
    count: int = 0


class WorkItemResponse(CamelModel):
    success: bool = True
    work_item: WorkItem


class WorkItemCreate(CamelModel):
    """Logical field names; translated through the field mapping table."""

    type: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str | None = None
    assigned_to: str | None = None
    priority: int | None = None
    area_path: str | None = None
    iteration_path: str | None = None
    tags: str | None = None
    story_points: float | None = None
    acceptance_criteria: str | None = None
    repro_steps: str | None = None
    parent: int | None = None


class WorkItemUpdate(CamelModel):
    title: str | None = None
    state: str | None = None
    assigned_to: str | None = None
    priority: int | None = None
    description: str | None = None
    acceptance_criteria: str | None = None
    story_points: float | None = None
    area_path: str | None = None
    iteration_path: str | None = None
    tags: str | None = None
    parent: int | None = None


class WorkItemUpdateResponse(CamelModel):
    success: bool = True
    work_item: WorkItem
    fields_updated: int = 0


class WorkItemMove(CamelModel):
    """``parent`` set to null or "" detaches the item from its parent."""

    parent: int | str | None = None
    iteration_path: str | None = None
    state: str | None = None


class WikiPage(CamelModel):
    wiki_name: str
    page_id: int | None = None
    page_path: str
    url: str


class WikiSearchResponse(CamelModel):
    found: bool
    wiki: WikiPage | None = None


class FeatureDetailsResponse(CamelModel):
    success: bool = True
    work_item: WorkItem
    wiki: WikiPage | None = None
    child_items: list[WorkItem] = []
    progress: Progress = Field(default_factory=Progress)


class WorkItemListResponse(CamelModel):
    work_items: list[WorkItem] = []


class EpicListResponse(CamelModel):
    epics: list[WorkItem] = []
