"""
Tests: /api/innovation routes.

Covers:
    - create (201) and validation failures as {success, error, field}
    - 404 body shape
    - stage move, reorder body validation, delete
    - stats and stages payloads
"""


async def _post(client, **body):
    response = await client.post("/api/innovation/items", json=body)
    assert response.status_code == 201, response.text
    return response.json()["item"]


async def test_create_item(client):
    item = await _post(client, title="Self-service onboarding", rice_reach=1000, rice_impact=2,
                       rice_confidence=60, rice_effort=2, tags=["growth"])
    assert item["stage"] == "Intake"
    assert item["stage_order"] == 0
    assert item["rice_score"] == 600
    assert item["tags"] == ["growth"]


async def test_create_without_title_is_400_with_field(client):
    response = await client.post("/api/innovation/items", json={"description": "no title"})
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Title is required", "field": "title"}


async def test_create_with_bad_stage_is_400(client):
    response = await client.post("/api/innovation/items", json={"title": "x", "stage": "Shipped"})
    assert response.status_code == 400
    assert response.json()["field"] == "stage"


async def test_create_with_empty_stage_is_400(client):
    response = await client.post("/api/innovation/items", json={"title": "x", "stage": ""})
    assert response.status_code == 400
    assert response.json()["field"] == "stage"


async def test_get_missing_item_is_404(client):
    response = await client.get("/api/innovation/items/12345")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Innovation item 12345 not found"


async def test_update_item(client):
    item = await _post(client, title="Old")
    response = await client.put(f"/api/innovation/items/{item['id']}", json={"title": "New", "owner": "dana"})
    assert response.status_code == 200
    updated = response.json()["item"]
    assert updated["title"] == "New"
    assert updated["owner"] == "dana"


async def test_move_stage(client):
    item = await _post(client, title="Reject me")
    response = await client.patch(
        f"/api/innovation/items/{item['id']}/stage",
        json={"stage": "Rejected", "rejection_reason": "duplicate"},
    )
    assert response.status_code == 200
    moved = response.json()["item"]
    assert moved["stage"] == "Rejected"
    assert moved["rejection_reason"] == "duplicate"


async def test_move_stage_without_stage_is_400(client):
    item = await _post(client, title="Stay")
    response = await client.patch(f"/api/innovation/items/{item['id']}/stage", json={})
    assert response.status_code == 400
    assert response.json()["field"] == "stage"


async def test_reorder(client):
    first = await _post(client, title="A")
    second = await _post(client, title="B")
    response = await client.patch(f"/api/innovation/items/{second['id']}/order", json={"newOrder": 0})
    assert response.status_code == 200
    assert response.json()["item"]["stage_order"] == 0

    listed = (await client.get("/api/innovation/items", params={"stage": "Intake"})).json()["items"]
    assert [i["id"] for i in listed] == [second["id"], first["id"]]


async def test_reorder_rejects_non_integer(client):
    item = await _post(client, title="A")
    response = await client.patch(f"/api/innovation/items/{item['id']}/order", json={"newOrder": "abc"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["field"] == "newOrder"


async def test_list_with_invalid_stage_is_400(client):
    response = await client.get("/api/innovation/items", params={"stage": "Nope"})
    assert response.status_code == 400


async def test_delete_item(client):
    item = await _post(client, title="Temp")
    response = await client.delete(f"/api/innovation/items/{item['id']}")
    assert response.json() == {"success": True, "deleted": item["id"]}
    assert (await client.get(f"/api/innovation/items/{item['id']}")).status_code == 404


async def test_stats_payload(client):
    await _post(client, title="Scored", rice_reach=100, rice_impact=1, rice_confidence=100, rice_effort=1)
    await _post(client, title="Parked", stage="Parked")

    stats = (await client.get("/api/innovation/stats")).json()["stats"]

    assert stats["total"] == 2
    assert stats["byStage"]["Intake"] == 1
    assert stats["byStage"]["Parked"] == 1
    assert stats["averageRiceScore"] == 100
    assert [t["title"] for t in stats["topItems"]] == ["Scored"]


async def test_stages(client):
    body = (await client.get("/api/innovation/stages")).json()
    assert body["stages"] == [
        "Intake", "Triage", "Discovery", "Ready for Build", "In Flight", "Parked", "Rejected",
    ]
