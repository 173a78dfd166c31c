"""Stage-gate board schemas."""
from pydantic import Field

from storyforge.schemas.common import CamelModel


class StageGateFeature(CamelModel):
    id: int
    title: str
    state: str
    stage: str
    assigned_to: str = "Unassigned"
    description: str = ""
    created_date: str | None = None
    changed_date: str | None = None
    parent: int | None = None
    work_item_type: str = "Feature"


class StageGateResponse(CamelModel):
    success: bool = True
    features: list[StageGateFeature] = []
    grouped: dict[str, list[StageGateFeature]] = {}
    counts: dict[str, int] = {}


class StageGateFeatureDetail(StageGateFeature):
    created_by: str = "Unknown"
    area_path: str | None = None
    iteration_path: str | None = None
    ado_url: str


class StageGateFeatureDetailResponse(CamelModel):
    success: bool = True
    feature: StageGateFeatureDetail


class PriorityUpdate(CamelModel):
    id: int
    priority: int = Field(..., ge=1, le=4)


class PriorityUpdateRequest(CamelModel):
    updates: list[PriorityUpdate]


class PriorityUpdateResult(CamelModel):
    id: int
    success: bool
    error: str | None = None


class PriorityUpdateResponse(CamelModel):
    success: bool = True
    updated: int = 0
    total: int = 0
    results: list[PriorityUpdateResult] = []
