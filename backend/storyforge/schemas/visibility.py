"""Feature visibility schemas."""
from storyforge.schemas.common import CamelModel


class FeatureVisibilityItem(CamelModel):
    id: int
    title: str
    state: str | None = None
    is_visible: bool = True


class FeatureVisibilityListResponse(CamelModel):
    success: bool = True
    features: list[FeatureVisibilityItem] = []


class VisibilityUpdate(CamelModel):
    feature_id: int
    is_visible: bool = True


class VisibilityUpdateResponse(CamelModel):
    success: bool = True
    feature_id: int
    is_visible: bool


class BulkVisibilityUpdate(CamelModel):
    updates: list[VisibilityUpdate]


class BulkVisibilityUpdateResponse(CamelModel):
    success: bool = True
    updated: int = 0
