"""SQLAlchemy models."""
from storyforge.models.app_settings import SETTINGS_ROW_ID, AppSettings
from storyforge.models.feature_visibility import FeatureVisibility
from storyforge.models.field_mapping import FieldMapping, StatusTemplate
from storyforge.models.innovation import InnovationItem
from storyforge.models.work_item_cache import CachedWorkItem

__all__ = [
    "SETTINGS_ROW_ID",
    "AppSettings",
    "CachedWorkItem",
    "FeatureVisibility",
    "FieldMapping",
    "InnovationItem",
    "StatusTemplate",
]
