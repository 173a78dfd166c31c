"""Roadmap timeline API route."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.database import get_db
from storyforge.deps import get_ado_client, get_area_path
from storyforge.engine.hierarchy import group_roadmap
from storyforge.engine.progress import shallow_progress
from storyforge.exceptions import AdoApiError
from storyforge.schemas.work_item import EpicGroup, RoadmapFeature, RoadmapResponse, WorkItem
from storyforge.services import visibility_service, wiql
from storyforge.services.ado_client import AdoClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/roadmap", tags=["roadmap"])


@router.get("/features", response_model=RoadmapResponse)
async def get_roadmap_features(
    db: Annotated[AsyncSession, Depends(get_db)],
    client: Annotated[AdoClient, Depends(get_ado_client)],
    area_path: Annotated[str | None, Depends(get_area_path)],
):
    """Visible open features grouped by parent epic, with direct-children progress."""
    # No ORDER BY: features without a start date would make ADO reject the query.
    query = wiql.features_query(area_path, excluded_states=("Closed", "Removed"), order_by=None)
    features = await client.query_work_items(query)
    if not features:
        return RoadmapResponse()

    hidden = await visibility_service.hidden_feature_ids(db)
    features = [f for f in features if f.id not in hidden]

    epic_ids = list(dict.fromkeys(f.parent_id for f in features if f.parent_id is not None))
    epics = await client.get_work_items(epic_ids) if epic_ids else []

    children: list[WorkItem] = []
    try:
        children = await client.get_children_of([f.id for f in features])
    except AdoApiError as e:
        logger.warning("Progress unavailable, child fetch failed: %s", e)

    roadmap_features = [
        RoadmapFeature(**f.model_dump(), progress=shallow_progress(f.id, children))
        for f in features
    ]
    groups = group_roadmap(roadmap_features, epics)
    return RoadmapResponse(
        scheduled=[EpicGroup(epic=bucket.epic, features=bucket.features) for bucket in groups.scheduled],
        orphaned_scheduled=groups.orphaned_scheduled,
        unscheduled=groups.unscheduled,
        total=groups.total,
    )
