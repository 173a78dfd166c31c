"""
Tests: work item cache and duplicate search.

Covers:
    - refresh replaces the snapshot; an empty ADO answer or a failed write keeps it
    - search: open items only, ranking, limit, LIKE wildcards
    - stats counters
    - refresh window month arithmetic
"""
from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from storyforge.models import CachedWorkItem
from storyforge.services import cache_service


async def _refresh(db, fake_ado):
    return await cache_service.refresh_work_items_cache(db, fake_ado, ["User Story", "Bug"])


def _seed(fake_ado):
    fake_ado.add(id=1, type="Bug", title="Login page crashes on submit", state="New",
                 created_date="2024-05-01T00:00:00Z", description="Submitting the login form crashes")
    fake_ado.add(id=2, type="User Story", title="Export monthly report as PDF", state="Active",
                 created_date="2024-05-02T00:00:00Z")
    fake_ado.add(id=3, type="Bug", title="Login crashes on submit", state="Closed",
                 created_date="2024-05-03T00:00:00Z")
    fake_ado.add(id=4, type="User Story", title="Login page crashes on save", state="New",
                 created_date="2024-05-04T00:00:00Z")


# ═════════════════════════════════════════════════════════════════════════════
# Refresh
# ═════════════════════════════════════════════════════════════════════════════

async def test_refresh_replaces_snapshot(db, fake_ado):
    _seed(fake_ado)
    assert await _refresh(db, fake_ado) == 3

    del fake_ado.items[4]
    assert await _refresh(db, fake_ado) == 2
    stats = await cache_service.cache_stats(db)
    assert stats.total == 2


async def test_empty_result_keeps_existing_snapshot(db, fake_ado):
    _seed(fake_ado)
    await _refresh(db, fake_ado)
    fake_ado.items.clear()

    assert await _refresh(db, fake_ado) == 0
    assert (await cache_service.cache_stats(db)).total == 3


async def test_failed_refresh_keeps_previous_snapshot(database, fake_ado, monkeypatch):
    _seed(fake_ado)
    async with database.session() as db:
        assert await _refresh(db, fake_ado) == 3

    duplicate = fake_ado.items[2]

    async def query_work_items(wiql):
        return [duplicate, duplicate]

    monkeypatch.setattr(fake_ado, "query_work_items", query_work_items)
    with pytest.raises(IntegrityError):
        async with database.session() as db:
            await _refresh(db, fake_ado)

    async with database.session() as db:
        rows = (await db.execute(select(CachedWorkItem.id).order_by(CachedWorkItem.id))).scalars().all()
    assert rows == [1, 2, 4]


async def test_refresh_query_covers_window_and_types(db, fake_ado):
    await cache_service.refresh_work_items_cache(db, fake_ado, ["Bug"], months=3, area_path="Web\\Team")
    query = fake_ado.queries[-1]
    assert "[System.WorkItemType] IN ('Bug')" in query
    assert "[System.AreaPath] UNDER 'Web\\Team'" in query
    assert f"'{cache_service.history_start(3).isoformat()}'" in query


# ═════════════════════════════════════════════════════════════════════════════
# Search
# ═════════════════════════════════════════════════════════════════════════════

async def test_search_ranks_open_items(db, fake_ado):
    _seed(fake_ado)
    await _refresh(db, fake_ado)

    matches = await cache_service.search_similar(db, "Login page crashes on submit")

    assert [m.id for m in matches] == [1, 4]
    assert matches[0].similarity_score == 70
    assert matches[0].reason.startswith('Similar keywords: "login", "page"')


async def test_search_respects_limit(db, fake_ado):
    _seed(fake_ado)
    await _refresh(db, fake_ado)
    matches = await cache_service.search_similar(db, "Login page crashes on submit", limit=1)
    assert [m.id for m in matches] == [1]


async def test_search_without_keywords_returns_nothing(db, fake_ado):
    _seed(fake_ado)
    await _refresh(db, fake_ado)
    assert await cache_service.search_similar(db, "the a an") == []


async def test_search_ignores_punctuation_in_query(db, fake_ado):
    fake_ado.add(id=9, type="Bug", title="Discount of 100% applied twice", state="New")
    fake_ado.add(id=10, type="Bug", title="Discount applied to 100 items", state="New")
    await _refresh(db, fake_ado)
    matches = await cache_service.search_similar(db, "100% discount applied twice")
    assert [m.id for m in matches] == [9, 10]


# ═════════════════════════════════════════════════════════════════════════════
# Stats, window
# ═════════════════════════════════════════════════════════════════════════════

async def test_cache_stats(db, fake_ado):
    _seed(fake_ado)
    await _refresh(db, fake_ado)
    stats = await cache_service.cache_stats(db)
    assert stats.total == 3
    assert stats.new_count == 2
    assert stats.active_count == 1
    assert stats.last_refresh is not None


async def test_cache_stats_empty(db):
    stats = await cache_service.cache_stats(db)
    assert stats.total == 0
    assert stats.last_refresh is None


def test_history_start():
    assert cache_service.history_start(6, date(2024, 8, 15)) == date(2024, 2, 15)
    assert cache_service.history_start(6, date(2024, 3, 10)) == date(2023, 9, 10)
    assert cache_service.history_start(1, date(2024, 3, 31)) == date(2024, 2, 29)
    assert cache_service.history_start(12, date(2024, 1, 1)) == date(2023, 1, 1)
