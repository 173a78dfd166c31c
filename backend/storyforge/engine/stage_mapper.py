"""ADO work item state -> stage-gate stage.

Covers the Basic, Agile and Scrum process templates plus common custom
states. The table is fixed for every project; per-project mappings are not
supported yet.
"""

DEFAULT_STAGE = "Intake"

STAGES: tuple[str, ...] = ("Intake", "Discovery", "Development", "Testing", "Complete")

STATE_TO_STAGE: dict[str, str] = {
    # Basic
    "To Do": "Intake",
    "Doing": "Development",
    "Done": "Complete",
    # Agile / Scrum
    "New": "Intake",
    "Active": "Discovery",
    "Resolved": "Testing",
    "Closed": "Complete",
    "Removed": "Complete",
    # Common custom states
    "In Progress": "Development",
    "Design": "Discovery",
    "Ready for Dev": "Discovery",
    "In Testing": "Testing",
    "UAT": "Testing",
    "Ready for Release": "Testing",
}


def state_to_stage(state: str | None) -> str:
    """Unmapped or missing states land in Intake."""
    if not state:
        return DEFAULT_STAGE
    return STATE_TO_STAGE.get(state, DEFAULT_STAGE)


def all_stages() -> list[str]:
    return list(STAGES)


def stage_mapping() -> dict[str, str]:
    return dict(STATE_TO_STAGE)
