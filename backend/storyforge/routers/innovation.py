"""Innovation funnel API routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.database import get_db
from storyforge.engine.rice import FUNNEL_STAGES
from storyforge.schemas.innovation import (
    InnovationDeleteResponse,
    InnovationItemCreate,
    InnovationItemEnvelope,
    InnovationItemListResponse,
    InnovationItemResponse,
    InnovationItemUpdate,
    InnovationStagesResponse,
    InnovationStatsResponse,
    OrderUpdate,
    StageMove,
)
from storyforge.services import innovation_service

router = APIRouter(prefix="/innovation", tags=["innovation"])

Db = Annotated[AsyncSession, Depends(get_db)]


def _envelope(item) -> InnovationItemEnvelope:
    return InnovationItemEnvelope(item=InnovationItemResponse.model_validate(item))


@router.get("/items", response_model=InnovationItemListResponse)
async def list_items(db: Db, stage: Annotated[str | None, Query()] = None):
    items = await innovation_service.list_items(db, stage)
    return InnovationItemListResponse(items=[InnovationItemResponse.model_validate(i) for i in items])


@router.get("/items/{item_id}", response_model=InnovationItemEnvelope)
async def get_item(item_id: int, db: Db):
    return _envelope(await innovation_service.get_item(db, item_id))


@router.post("/items", response_model=InnovationItemEnvelope, status_code=status.HTTP_201_CREATED)
async def create_item(data: InnovationItemCreate, db: Db):
    return _envelope(await innovation_service.create_item(db, data))


@router.put("/items/{item_id}", response_model=InnovationItemEnvelope)
async def update_item(item_id: int, data: InnovationItemUpdate, db: Db):
    return _envelope(await innovation_service.update_item(db, item_id, data))


@router.delete("/items/{item_id}", response_model=InnovationDeleteResponse)
async def delete_item(item_id: int, db: Db):
    return InnovationDeleteResponse(deleted=await innovation_service.delete_item(db, item_id))


@router.patch("/items/{item_id}/stage", response_model=InnovationItemEnvelope)
async def move_item_stage(item_id: int, data: StageMove, db: Db):
    item = await innovation_service.move_stage(db, item_id, data.stage, data.rejection_reason)
    return _envelope(item)


@router.patch("/items/{item_id}/order", response_model=InnovationItemEnvelope)
async def reorder_item(item_id: int, data: OrderUpdate, db: Db):
    return _envelope(await innovation_service.reorder(db, item_id, data.new_order))


@router.get("/stats", response_model=InnovationStatsResponse)
async def get_stats(db: Db):
    return InnovationStatsResponse(stats=await innovation_service.stats(db))


@router.get("/stages", response_model=InnovationStagesResponse)
async def get_stages():
    return InnovationStagesResponse(stages=list(FUNNEL_STAGES))
