"""RICE prioritisation for the innovation funnel."""

FUNNEL_STAGES: tuple[str, ...] = (
    "Intake",
    "Triage",
    "Discovery",
    "Ready for Build",
    "In Flight",
    "Parked",
    "Rejected",
)

REJECTED_STAGE = "Rejected"
DEFAULT_FUNNEL_STAGE = "Intake"


def is_valid_stage(stage: str | None) -> bool:
    return stage in FUNNEL_STAGES


def calculate_rice_score(
    reach: float | None,
    impact: float | None,
    confidence: float | None,
    effort: float | None,
) -> float | None:
    """(reach * impact * confidence%) / effort.

    Returns None, not 0, when any input is missing or zero: the score is
    then not computable. Confidence is a 0-100 percentage.
    """
    if not reach or not impact or not confidence or not effort:
        return None
    return (reach * impact * (confidence / 100)) / effort
