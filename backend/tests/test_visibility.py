"""
Tests: feature visibility flags.

Covers:
    - default visible when no row exists
    - single and bulk upsert, later duplicates win
    - list endpoint merging ADO features with stored flags
"""
from storyforge.services import visibility_service as svc


async def test_default_is_visible(db):
    assert await svc.is_visible(db, 42) is True
    assert await svc.hidden_feature_ids(db) == set()


async def test_set_visibility_inserts_then_updates(db):
    await svc.set_visibility(db, 42, False)
    assert await svc.is_visible(db, 42) is False

    await svc.set_visibility(db, 42, True)
    assert await svc.is_visible(db, 42) is True
    assert await svc.visibility_map(db) == {42: True}


async def test_bulk_set_visibility(db):
    await svc.set_visibility(db, 1, False)
    count = await svc.bulk_set_visibility(db, [(1, True), (2, False), (3, True), (2, True), (3, False)])
    assert count == 3
    assert await svc.visibility_map(db) == {1: True, 2: True, 3: False}
    assert await svc.hidden_feature_ids(db) == {3}


async def test_bulk_set_visibility_empty(db):
    assert await svc.bulk_set_visibility(db, []) == 0


async def test_list_endpoint_merges_flags(client, fake_ado):
    fake_ado.add(id=1, type="Feature", title="Checkout", state="Active")
    fake_ado.add(id=2, type="Feature", title="Search", state="New")
    fake_ado.add(id=3, type="Epic", title="Commerce", state="Active")

    response = await client.post("/api/feature-visibility/update", json={"featureId": 2, "isVisible": False})
    assert response.json() == {"success": True, "featureId": 2, "isVisible": False}

    features = (await client.get("/api/feature-visibility")).json()["features"]
    assert {f["id"]: f["isVisible"] for f in features} == {1: True, 2: False}


async def test_bulk_update_endpoint(client):
    response = await client.post("/api/feature-visibility/bulk-update", json={
        "updates": [{"featureId": 5, "isVisible": False}, {"featureId": 6, "isVisible": True}],
    })
    assert response.json() == {"success": True, "updated": 2}
