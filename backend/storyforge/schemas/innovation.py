"""Innovation funnel schemas. Item keys are snake_case, as stored."""
from datetime import datetime

from pydantic import BaseModel, Field, StrictInt

from storyforge.engine.rice import DEFAULT_FUNNEL_STAGE


class InnovationItemCreate(BaseModel):
    title: str | None = None
    description: str | None = None
    stage: str = DEFAULT_FUNNEL_STAGE
    ado_feature_id: int | None = None
    rice_reach: int | None = Field(None, ge=0)
    rice_impact: int | None = Field(None, ge=0, le=3)
    rice_confidence: int | None = Field(None, ge=0, le=100)
    rice_effort: int | None = Field(None, ge=0)
    roi_estimate: str | None = None
    roi_notes: str | None = None
    owner: str | None = None
    requestor: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    status_notes: str | None = None


class InnovationItemUpdate(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    title: str | None = None
    description: str | None = None
    stage: str | None = None
    ado_feature_id: int | None = None
    rice_reach: int | None = Field(None, ge=0)
    rice_impact: int | None = Field(None, ge=0, le=3)
    rice_confidence: int | None = Field(None, ge=0, le=100)
    rice_effort: int | None = Field(None, ge=0)
    roi_estimate: str | None = None
    roi_notes: str | None = None
    owner: str | None = None
    requestor: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    status_notes: str | None = None
    rejection_reason: str | None = None


class StageMove(BaseModel):
    stage: str | None = None
    rejection_reason: str | None = None


class OrderUpdate(BaseModel):
    new_order: StrictInt = Field(..., alias="newOrder", ge=0)

    class Config:
        populate_by_name = True


class InnovationItemResponse(BaseModel):
    id: int
    title: str
    description: str | None
    stage: str
    stage_order: int
    ado_feature_id: int | None
    rice_reach: int | None
    rice_impact: int | None
    rice_confidence: int | None
    rice_effort: int | None
    rice_score: float | None
    roi_estimate: str | None
    roi_notes: str | None
    owner: str | None
    requestor: str | None
    category: str | None
    tags: list[str] | None
    status_notes: str | None
    rejection_reason: str | None
    created_at: datetime | None
    updated_at: datetime | None
    stage_changed_at: datetime | None

    class Config:
        from_attributes = True


class InnovationItemEnvelope(BaseModel):
    success: bool = True
    item: InnovationItemResponse


class InnovationItemListResponse(BaseModel):
    success: bool = True
    items: list[InnovationItemResponse] = []


class InnovationDeleteResponse(BaseModel):
    success: bool = True
    deleted: int


class TopInnovationItem(BaseModel):
    id: int
    title: str
    rice_score: float | None
    stage: str

    class Config:
        from_attributes = True


class InnovationStats(BaseModel):
    total: int = 0
    by_stage: dict[str, int] = Field(default_factory=dict, alias="byStage")
    average_rice_score: float | None = Field(None, alias="averageRiceScore")
    top_items: list[TopInnovationItem] = Field(default_factory=list, alias="topItems")

    class Config:
        populate_by_name = True


class InnovationStatsResponse(BaseModel):
    success: bool = True
    stats: InnovationStats


class InnovationStagesResponse(BaseModel):
    success: bool = True
    stages: list[str]
