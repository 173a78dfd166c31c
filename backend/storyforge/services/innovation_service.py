"""Innovation funnel CRUD, stage moves and intra-stage ranking.

Every function runs inside the caller's session; ``Database.session()`` and
``get_db`` commit once at the end, so a reorder's shifts and the final
assignment land atomically.
"""
import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.engine.patch import apply_patch
from storyforge.engine.rice import FUNNEL_STAGES, REJECTED_STAGE, calculate_rice_score, is_valid_stage
from storyforge.exceptions import NotFoundError, ValidationError
from storyforge.models.innovation import InnovationItem
from storyforge.schemas.innovation import (
    InnovationItemCreate,
    InnovationItemUpdate,
    InnovationStats,
    TopInnovationItem,
)

logger = logging.getLogger(__name__)

RICE_FIELDS = ("rice_reach", "rice_impact", "rice_confidence", "rice_effort")
TOP_ITEMS_LIMIT = 5


def _invalid_stage() -> ValidationError:
    return ValidationError(f"Invalid stage. Must be one of: {', '.join(FUNNEL_STAGES)}", field="stage")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _recompute_rice(item: InnovationItem) -> None:
    item.rice_score = calculate_rice_score(
        item.rice_reach, item.rice_impact, item.rice_confidence, item.rice_effort,
    )


async def _next_order(db: AsyncSession, stage: str) -> int:
    result = await db.execute(
        select(func.max(InnovationItem.stage_order)).where(InnovationItem.stage == stage)
    )
    current = result.scalar_one_or_none()
    return 0 if current is None else current + 1


async def list_items(db: AsyncSession, stage: str | None = None) -> list[InnovationItem]:
    """All items, or one stage's, by rank then newest first."""
    query = select(InnovationItem)
    if stage:
        if not is_valid_stage(stage):
            raise _invalid_stage()
        query = query.where(InnovationItem.stage == stage)
    query = query.order_by(InnovationItem.stage_order.asc(), InnovationItem.created_at.desc(), InnovationItem.id.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_item(db: AsyncSession, item_id: int) -> InnovationItem:
    item = await db.get(InnovationItem, item_id)
    if item is None:
        raise NotFoundError("Innovation item", item_id)
    return item


async def create_item(db: AsyncSession, data: InnovationItemCreate) -> InnovationItem:
    if not data.title or not data.title.strip():
        raise ValidationError("Title is required", field="title")
    stage = data.stage
    if not is_valid_stage(stage):
        raise _invalid_stage()

    values = data.model_dump(exclude={"stage"})
    # Zero and empty inputs are stored as "not provided".
    for name in (*RICE_FIELDS, "ado_feature_id"):
        values[name] = values[name] or None
    item = InnovationItem(**values, stage=stage, stage_order=await _next_order(db, stage))
    _recompute_rice(item)
    db.add(item)
    await db.flush()
    await db.refresh(item)
    logger.info("Created innovation item %s in %s", item.id, stage, extra={"item_id": item.id})
    return item


async def update_item(db: AsyncSession, item_id: int, data: InnovationItemUpdate) -> InnovationItem:
    """Partial update. Title and stage cannot be cleared; RICE is recomputed from merged inputs."""
    item = await get_item(db, item_id)
    patch = data.model_dump(exclude_unset=True)
    if "title" in patch and patch["title"] is not None and not patch["title"].strip():
        raise ValidationError("Title cannot be empty", field="title")
    if patch.get("stage") is not None and not is_valid_stage(patch["stage"]):
        raise _invalid_stage()

    changed = apply_patch(item, patch, keep_if_none=("title", "stage"))
    if any(name in patch for name in RICE_FIELDS):
        _recompute_rice(item)
    now = _now()
    if "stage" in changed:
        item.stage_changed_at = now
    item.updated_at = now
    await db.flush()
    await db.refresh(item)
    logger.debug("Updated innovation item %s: %s", item_id, sorted(changed), extra={"item_id": item_id})
    return item


async def delete_item(db: AsyncSession, item_id: int) -> int:
    item = await get_item(db, item_id)
    await db.delete(item)
    await db.flush()
    logger.info("Deleted innovation item %s", item_id, extra={"item_id": item_id})
    return item_id


async def move_stage(
    db: AsyncSession,
    item_id: int,
    stage: str | None,
    rejection_reason: str | None = None,
) -> InnovationItem:
    """Append the item to the end of ``stage``.

    The rejection reason is stored only when moving to Rejected.
    """
    if not stage or not is_valid_stage(stage):
        raise _invalid_stage()
    item = await get_item(db, item_id)
    item.stage_order = await _next_order(db, stage)
    item.stage = stage
    if stage == REJECTED_STAGE:
        item.rejection_reason = rejection_reason or None
    now = _now()
    item.stage_changed_at = now
    item.updated_at = now
    await db.flush()
    await db.refresh(item)
    logger.info("Moved innovation item %s to %s", item_id, stage, extra={"item_id": item_id})
    return item


async def reorder(db: AsyncSession, item_id: int, new_order: int) -> InnovationItem:
    """Move the item to ``new_order`` within its stage, shifting the items in between."""
    item = await get_item(db, item_id)
    old_order = item.stage_order
    if new_order == old_order:
        return item

    if new_order < old_order:
        shift = (
            update(InnovationItem)
            .where(
                InnovationItem.stage == item.stage,
                InnovationItem.stage_order >= new_order,
                InnovationItem.stage_order < old_order,
            )
            .values(stage_order=InnovationItem.stage_order + 1)
        )
    else:
        shift = (
            update(InnovationItem)
            .where(
                InnovationItem.stage == item.stage,
                InnovationItem.stage_order > old_order,
                InnovationItem.stage_order <= new_order,
            )
            .values(stage_order=InnovationItem.stage_order - 1)
        )
    await db.execute(shift.execution_options(synchronize_session="fetch"))
    item.stage_order = new_order
    item.updated_at = _now()
    await db.flush()
    await db.refresh(item)
    return item


def _round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


async def stats(db: AsyncSession) -> InnovationStats:
    by_stage = {stage: 0 for stage in FUNNEL_STAGES}
    result = await db.execute(
        select(InnovationItem.stage, func.count()).group_by(InnovationItem.stage)
    )
    total = 0
    for stage, count in result.all():
        by_stage[stage] = count
        total += count

    average = (
        await db.execute(select(func.avg(InnovationItem.rice_score)).where(InnovationItem.rice_score.is_not(None)))
    ).scalar_one_or_none()

    top = await db.execute(
        select(InnovationItem)
        .where(InnovationItem.rice_score.is_not(None))
        .order_by(InnovationItem.rice_score.desc())
        .limit(TOP_ITEMS_LIMIT)
    )
    return InnovationStats(
        total=total,
        by_stage=by_stage,
        average_rice_score=_round2(average) if average is not None else None,
        top_items=[TopInnovationItem.model_validate(i) for i in top.scalars().all()],
    )
