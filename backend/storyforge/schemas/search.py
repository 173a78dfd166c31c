"""Duplicate detection schemas."""
from datetime import datetime

from pydantic import BaseModel, Field

from storyforge.schemas.common import CamelModel


class SimilarSearchRequest(CamelModel):
    title: str | None = None
    description: str | None = None
    limit: int = Field(default=5, ge=1)


class SimilarMatch(CamelModel):
    id: int
    title: str
    type: str | None = None
    state: str | None = None
    created_date: str | None = None
    description: str | None = None
    similarity_score: int
    reason: str


class SimilarSearchResponse(CamelModel):
    matches: list[SimilarMatch] = []
    count: int = 0


class CacheRefreshResponse(CamelModel):
    success: bool = True
    message: str
    count: int = 0


class CacheStats(BaseModel):
    """Keys kept snake_case to match the cache table columns."""

    total: int = 0
    new_count: int = 0
    active_count: int = 0
    last_refresh: datetime | None = None
