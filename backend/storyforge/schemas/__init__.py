"""Pydantic schemas."""
from storyforge.schemas.common import CamelModel, ErrorResponse
from storyforge.schemas.innovation import (
    InnovationItemCreate,
    InnovationItemResponse,
    InnovationItemUpdate,
    InnovationStats,
    OrderUpdate,
    StageMove,
)
from storyforge.schemas.search import CacheStats, SimilarMatch, SimilarSearchRequest
from storyforge.schemas.settings import SanitizedSettings, SettingsSave
from storyforge.schemas.stagegate import PriorityUpdate, StageGateFeature
from storyforge.schemas.visibility import VisibilityUpdate
from storyforge.schemas.work_item import (
    Progress,
    RoadmapFeature,
    WorkItem,
    WorkItemCreate,
    WorkItemNode,
    WorkItemUpdate,
)

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "InnovationItemCreate",
    "InnovationItemResponse",
    "InnovationItemUpdate",
    "InnovationStats",
    "OrderUpdate",
    "StageMove",
    "CacheStats",
    "SimilarMatch",
    "SimilarSearchRequest",
    "SanitizedSettings",
    "SettingsSave",
    "PriorityUpdate",
    "StageGateFeature",
    "VisibilityUpdate",
    "Progress",
    "RoadmapFeature",
    "WorkItem",
    "WorkItemCreate",
    "WorkItemNode",
    "WorkItemUpdate",
]
