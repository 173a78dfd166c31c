"""Stage-gate board API routes."""
import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.database import get_db
from storyforge.deps import get_ado_client, get_area_path
from storyforge.engine.stage_mapper import DEFAULT_STAGE, all_stages, state_to_stage
from storyforge.exceptions import AdoError
from storyforge.schemas.stagegate import (
    PriorityUpdate,
    PriorityUpdateRequest,
    PriorityUpdateResponse,
    PriorityUpdateResult,
    StageGateFeature,
    StageGateFeatureDetail,
    StageGateFeatureDetailResponse,
    StageGateResponse,
)
from storyforge.schemas.work_item import WorkItem
from storyforge.services import visibility_service, wiql
from storyforge.services.ado_client import AdoClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stagegate", tags=["stagegate"])

Client = Annotated[AdoClient, Depends(get_ado_client)]

PRIORITY_FIELD = "/fields/Microsoft.VSTS.Common.Priority"


def _to_stage_feature(item: WorkItem) -> StageGateFeature:
    state = item.state or "New"
    return StageGateFeature(
        id=item.id,
        title=item.title,
        state=state,
        stage=state_to_stage(state),
        assigned_to=item.assigned_to or "Unassigned",
        description=item.description or "",
        created_date=item.created_date,
        changed_date=item.changed_date,
        parent=item.parent_id,
    )


@router.get("/features", response_model=StageGateResponse)
async def get_stagegate_features(
    db: Annotated[AsyncSession, Depends(get_db)],
    client: Client,
    area_path: Annotated[str | None, Depends(get_area_path)],
):
    items = await client.query_work_items(wiql.features_query(area_path))
    hidden = await visibility_service.hidden_feature_ids(db)
    features = [_to_stage_feature(item) for item in items if item.id not in hidden]

    grouped: dict[str, list[StageGateFeature]] = {stage: [] for stage in all_stages()}
    for feature in features:
        grouped.get(feature.stage, grouped[DEFAULT_STAGE]).append(feature)
    counts = {stage: len(grouped[stage]) for stage in grouped}
    logger.debug("Stage gate: %d features", len(features), extra={"count": len(features)})
    return StageGateResponse(features=features, grouped=grouped, counts=counts)


@router.get("/feature/{feature_id}", response_model=StageGateFeatureDetailResponse)
async def get_stagegate_feature(feature_id: int, client: Client):
    item = await client.get_work_item(feature_id)
    base = _to_stage_feature(item)
    detail = StageGateFeatureDetail(
        **base.model_dump(exclude={"work_item_type"}),
        work_item_type=item.type or "Feature",
        created_by=item.created_by or "Unknown",
        area_path=item.area_path,
        iteration_path=item.iteration_path,
        ado_url=client.work_item_url(feature_id),
    )
    return StageGateFeatureDetailResponse(feature=detail)


@router.post("/update-priorities", response_model=PriorityUpdateResponse)
async def update_priorities(data: PriorityUpdateRequest, client: Client):
    """Set ADO priority on each item; one failure does not stop the others."""

    async def apply(update: PriorityUpdate) -> PriorityUpdateResult:
        try:
            await client.update_work_item(
                update.id, [{"op": "add", "path": PRIORITY_FIELD, "value": update.priority}],
            )
        except AdoError as e:
            logger.warning("Failed to update priority for work item %s: %s", update.id, e, extra={"work_item_id": update.id})
            return PriorityUpdateResult(id=update.id, success=False, error=str(e))
        return PriorityUpdateResult(id=update.id, success=True)

    results = await asyncio.gather(*(apply(u) for u in data.updates))
    updated = sum(1 for r in results if r.success)
    logger.info("Updated priorities for %d/%d work items", updated, len(results))
    return PriorityUpdateResponse(updated=updated, total=len(results), results=list(results))
