"""Local snapshot of recent ADO work items and duplicate search over it."""
import logging
from datetime import date, timedelta

from sqlalchemy import case, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.engine import similarity
from storyforge.models.work_item_cache import CachedWorkItem
from storyforge.schemas.search import CacheStats, SimilarMatch
from storyforge.services import wiql
from storyforge.services.ado_client import AdoClient

logger = logging.getLogger(__name__)

CLOSED_STATES: tuple[str, ...] = ("Closed", "Removed", "Done")


def history_start(months: int, today: date | None = None) -> date:
    """First day of the refresh window, ``months`` calendar months back."""
    today = today or date.today()
    month_index = today.year * 12 + today.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    # Clamp to the last day of a shorter month.
    next_month = date(year + month // 12, month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return date(year, month, min(today.day, last_day))


async def refresh_work_items_cache(
    db: AsyncSession,
    client: AdoClient,
    types: list[str],
    months: int = 6,
    area_path: str | None = None,
) -> int:
    """Replace the cache with recent non-closed items. Returns the row count.

    When ADO returns nothing the existing snapshot is kept. Delete and insert
    run in the caller's transaction, so readers never see a half-filled table.
    """
    since = history_start(months)
    items = await client.query_work_items(wiql.recent_work_items_query(types, since, area_path))
    if not items:
        logger.info("No work items found to cache")
        return 0

    await db.execute(delete(CachedWorkItem))
    db.add_all(
        CachedWorkItem(
            id=item.id,
            title=item.title,
            type=item.type,
            state=item.state,
            parent_id=item.parent_id,
            created_date=item.created_date,
            description=item.description or "",
            area_path=item.area_path,
            iteration_path=item.iteration_path,
        )
        for item in items
    )
    await db.flush()
    logger.info("Cached %d work items", len(items), extra={"count": len(items)})
    return len(items)


async def search_similar(
    db: AsyncSession,
    title: str | None,
    description: str | None = "",
    limit: int = similarity.DEFAULT_LIMIT,
    candidate_limit: int = 200,
) -> list[SimilarMatch]:
    """Ranked open work items that look like duplicates of ``title``/``description``.

    The SQL pass is a broad OR over keyword substrings; ranking happens in
    ``engine.similarity``.
    """
    keywords = similarity.extract_keywords(title)
    if not keywords:
        return []

    conditions = []
    for keyword in keywords:
        conditions.append(func.lower(CachedWorkItem.title).contains(keyword, autoescape=True))
        conditions.append(func.lower(CachedWorkItem.description).contains(keyword, autoescape=True))

    result = await db.execute(
        select(CachedWorkItem)
        .where(CachedWorkItem.state.not_in(CLOSED_STATES), or_(*conditions))
        .order_by(CachedWorkItem.created_date.desc())
        .limit(candidate_limit)
    )
    candidates = result.scalars().all()

    matches = [
        SimilarMatch(
            id=row.id,
            title=row.title,
            type=row.type,
            state=row.state,
            created_date=row.created_date,
            description=row.description,
            similarity_score=similarity.calculate_similarity(title, row.title, description, row.description),
            reason=similarity.similarity_reason(title, row.title),
        )
        for row in candidates
    ]
    return similarity.rank_matches(matches, limit)


async def cache_stats(db: AsyncSession) -> CacheStats:
    result = await db.execute(
        select(
            func.count(CachedWorkItem.id),
            func.count(case((CachedWorkItem.state == "New", 1))),
            func.count(case((CachedWorkItem.state == "Active", 1))),
            func.max(CachedWorkItem.last_fetched),
        )
    )
    total, new_count, active_count, last_refresh = result.one()
    return CacheStats(
        total=total,
        new_count=new_count,
        active_count=active_count,
        last_refresh=last_refresh,
    )
