"""Feature visibility API routes."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.database import get_db
from storyforge.deps import get_ado_client, get_area_path
from storyforge.schemas.visibility import (
    BulkVisibilityUpdate,
    BulkVisibilityUpdateResponse,
    FeatureVisibilityItem,
    FeatureVisibilityListResponse,
    VisibilityUpdate,
    VisibilityUpdateResponse,
)
from storyforge.services import visibility_service, wiql
from storyforge.services.ado_client import AdoClient

router = APIRouter(prefix="/feature-visibility", tags=["feature-visibility"])


@router.get("", response_model=FeatureVisibilityListResponse)
async def list_feature_visibility(
    db: Annotated[AsyncSession, Depends(get_db)],
    client: Annotated[AdoClient, Depends(get_ado_client)],
    area_path: Annotated[str | None, Depends(get_area_path)],
):
    features = await client.query_work_items(wiql.features_query(area_path, order_by="[System.Title] ASC"))
    flags = await visibility_service.visibility_map(db)
    return FeatureVisibilityListResponse(features=[
        FeatureVisibilityItem(id=f.id, title=f.title, state=f.state, is_visible=flags.get(f.id, True))
        for f in features
    ])


@router.post("/update", response_model=VisibilityUpdateResponse)
async def update_feature_visibility(
    data: VisibilityUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    row = await visibility_service.set_visibility(db, data.feature_id, data.is_visible)
    return VisibilityUpdateResponse(feature_id=row.feature_id, is_visible=row.is_visible)


@router.post("/bulk-update", response_model=BulkVisibilityUpdateResponse)
async def bulk_update_feature_visibility(
    data: BulkVisibilityUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    updated = await visibility_service.bulk_set_visibility(
        db, ((u.feature_id, u.is_visible) for u in data.updates),
    )
    return BulkVisibilityUpdateResponse(updated=updated)
