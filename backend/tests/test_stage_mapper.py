"""
Tests: ADO state to stage-gate stage mapping.
"""
import pytest

from storyforge.engine.stage_mapper import all_stages, stage_mapping, state_to_stage


@pytest.mark.parametrize("state,stage", [
    ("To Do", "Intake"),
    ("Doing", "Development"),
    ("Done", "Complete"),
    ("New", "Intake"),
    ("Active", "Discovery"),
    ("Resolved", "Testing"),
    ("Closed", "Complete"),
    ("Removed", "Complete"),
    ("In Progress", "Development"),
    ("Design", "Discovery"),
    ("Ready for Dev", "Discovery"),
    ("In Testing", "Testing"),
    ("UAT", "Testing"),
    ("Ready for Release", "Testing"),
])
def test_known_states(state, stage):
    assert state_to_stage(state) == stage


def test_unknown_and_missing_states_map_to_intake():
    assert state_to_stage("Blocked") == "Intake"
    assert state_to_stage("") == "Intake"
    assert state_to_stage(None) == "Intake"


def test_every_mapped_stage_is_a_known_stage():
    assert set(stage_mapping().values()) <= set(all_stages())
    assert all_stages() == ["Intake", "Discovery", "Development", "Testing", "Complete"]


def test_stage_mapping_returns_a_copy():
    mapping = stage_mapping()
    mapping["New"] = "Complete"
    assert state_to_stage("New") == "Intake"
