"""Per-feature show/hide flags. Features without a row are visible."""
import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.models.feature_visibility import FeatureVisibility

logger = logging.getLogger(__name__)


async def visibility_map(db: AsyncSession) -> dict[int, bool]:
    result = await db.execute(select(FeatureVisibility.feature_id, FeatureVisibility.is_visible))
    return {feature_id: is_visible for feature_id, is_visible in result.all()}


async def hidden_feature_ids(db: AsyncSession) -> set[int]:
    result = await db.execute(
        select(FeatureVisibility.feature_id).where(FeatureVisibility.is_visible.is_(False))
    )
    return set(result.scalars().all())


async def is_visible(db: AsyncSession, feature_id: int) -> bool:
    result = await db.execute(
        select(FeatureVisibility.is_visible).where(FeatureVisibility.feature_id == feature_id)
    )
    value = result.scalar_one_or_none()
    return True if value is None else value


async def set_visibility(db: AsyncSession, feature_id: int, visible: bool) -> FeatureVisibility:
    """Insert or update the flag for one feature."""
    result = await db.execute(select(FeatureVisibility).where(FeatureVisibility.feature_id == feature_id))
    row = result.scalar_one_or_none()
    if row is None:
        row = FeatureVisibility(feature_id=feature_id)
        db.add(row)
    row.is_visible = visible
    row.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.debug("Feature %s visible=%s", feature_id, visible, extra={"feature_id": feature_id})
    return row


async def bulk_set_visibility(db: AsyncSession, updates: Iterable[tuple[int, bool]]) -> int:
    """Apply all flags in the caller's transaction; later duplicates win."""
    wanted: dict[int, bool] = {}
    for feature_id, visible in updates:
        wanted[feature_id] = visible
    if not wanted:
        return 0

    result = await db.execute(select(FeatureVisibility).where(FeatureVisibility.feature_id.in_(wanted)))
    existing = {row.feature_id: row for row in result.scalars().all()}
    now = datetime.now(timezone.utc)
    for feature_id, visible in wanted.items():
        row = existing.get(feature_id)
        if row is None:
            row = FeatureVisibility(feature_id=feature_id)
            db.add(row)
        row.is_visible = visible
        row.updated_at = now
    await db.flush()
    logger.info("Bulk updated visibility for %d features", len(wanted), extra={"count": len(wanted)})
    return len(wanted)
