"""
Tests: logical field -> ADO field translation.

Covers:
    - seed data loaded once on init
    - per-type lookups
    - create operations: None skipped, parent relation, unmapped dropped
    - update operations
"""
from storyforge.services import field_mapper


async def test_seed_runs_once(db):
    assert await field_mapper.seed_field_mappings(db) == 0
    assert await field_mapper.seed_status_templates(db) == 0
    assert await field_mapper.available_mapped_types(db) == ["Bug", "Epic", "Feature", "Task", "User Story"]


async def test_lookup_by_type(db):
    assert await field_mapper.get_ado_field_name(db, "Bug", "repro_steps") == "Microsoft.VSTS.TCM.ReproSteps"
    assert await field_mapper.get_ado_field_name(db, "Epic", "repro_steps") is None
    mappings = await field_mapper.get_field_mappings_for_type(db, "User Story")
    assert mappings["story_points"] == "Microsoft.VSTS.Scheduling.StoryPoints"
    assert mappings["title"] == "System.Title"


async def test_build_patch_operations(db):
    ops = await field_mapper.build_patch_operations(
        db,
        "User Story",
        {"title": "Checkout", "story_points": 5, "description": None, "repro_steps": "n/a", "parent": 7},
        parent_url="https://dev.azure.com/contoso/_apis/wit/workItems/7",
    )
    assert ops == [
        {"op": "add", "path": "/fields/System.Title", "value": "Checkout"},
        {"op": "add", "path": "/fields/Microsoft.VSTS.Scheduling.StoryPoints", "value": 5},
        {
            "op": "add",
            "path": "/relations/-",
            "value": {
                "rel": "System.LinkTypes.Hierarchy-Reverse",
                "url": "https://dev.azure.com/contoso/_apis/wit/workItems/7",
                "attributes": {"comment": "Parent work item"},
            },
        },
    ]


async def test_build_patch_operations_unknown_type(db):
    assert await field_mapper.build_patch_operations(db, "Risk", {"title": "x"}) == []


def test_build_update_operations():
    ops = field_mapper.build_update_operations({"state": "Active", "priority": 2, "bogus": 1, "tags": None})
    assert ops == [
        {"op": "add", "path": "/fields/System.State", "value": "Active"},
        {"op": "add", "path": "/fields/Microsoft.VSTS.Common.Priority", "value": 2},
    ]
