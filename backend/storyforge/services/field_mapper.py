"""Logical field name -> ADO field reference translation.

Logical names are the snake_case attribute names used by the API schemas
(``assigned_to``, ``story_points``...). Creation goes through the per-type
``field_mappings`` table; edits of existing items use ``UPDATE_FIELD_MAP``.
"""
import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.models.field_mapping import FieldMapping, StatusTemplate

logger = logging.getLogger(__name__)

PARENT_LINK = "System.LinkTypes.Hierarchy-Reverse"

UPDATE_FIELD_MAP: dict[str, str] = {
    "title": "System.Title",
    "state": "System.State",
    "assigned_to": "System.AssignedTo",
    "priority": "Microsoft.VSTS.Common.Priority",
    "description": "System.Description",
    "acceptance_criteria": "Microsoft.VSTS.Common.AcceptanceCriteria",
    "story_points": "Microsoft.VSTS.Scheduling.StoryPoints",
    "area_path": "System.AreaPath",
    "iteration_path": "System.IterationPath",
    "tags": "System.Tags",
    "parent": "System.Parent",
}

_COMMON = {
    "title": "System.Title",
    "description": "System.Description",
    "state": "System.State",
    "priority": "Microsoft.VSTS.Common.Priority",
    "area_path": "System.AreaPath",
    "iteration_path": "System.IterationPath",
}

DEFAULT_FIELD_MAPPINGS: dict[str, dict[str, str]] = {
    "Bug": {
        **_COMMON,
        "assigned_to": "System.AssignedTo",
        "severity": "Microsoft.VSTS.Common.Severity",
        "tags": "System.Tags",
        "repro_steps": "Microsoft.VSTS.TCM.ReproSteps",
        "system_info": "Microsoft.VSTS.TCM.SystemInfo",
        "acceptance_criteria": "Microsoft.VSTS.Common.AcceptanceCriteria",
        "found_in_build": "Microsoft.VSTS.Build.FoundIn",
        "integration_build": "Microsoft.VSTS.Build.IntegrationBuild",
    },
    "User Story": {
        **_COMMON,
        "assigned_to": "System.AssignedTo",
        "tags": "System.Tags",
        "acceptance_criteria": "Microsoft.VSTS.Common.AcceptanceCriteria",
        "story_points": "Microsoft.VSTS.Scheduling.StoryPoints",
        "risk": "Microsoft.VSTS.Common.Risk",
        "value": "Microsoft.VSTS.Common.BusinessValue",
    },
    "Task": {
        **_COMMON,
        "assigned_to": "System.AssignedTo",
        "tags": "System.Tags",
        "activity": "Microsoft.VSTS.Common.Activity",
        "remaining_work": "Microsoft.VSTS.Scheduling.RemainingWork",
        "original_estimate": "Microsoft.VSTS.Scheduling.OriginalEstimate",
        "completed_work": "Microsoft.VSTS.Scheduling.CompletedWork",
    },
    "Epic": dict(_COMMON),
    "Feature": {
        **_COMMON,
        "value": "Microsoft.VSTS.Common.BusinessValue",
        "target_date": "Microsoft.VSTS.Scheduling.TargetDate",
    },
}

DEFAULT_STATUS_TEMPLATES: list[dict[str, Any]] = [
    {
        "name": "Default (Full Status)",
        "description": "Comprehensive status update with all sections",
        "sections": ["accomplishments", "in_progress", "blockers", "next_steps", "risks", "metrics"],
        "format_style": "bullets",
    },
    {
        "name": "Weekly Sprint Update",
        "description": "Standard weekly sprint status for agile teams",
        "sections": ["accomplishments", "in_progress", "blockers", "next_steps"],
        "format_style": "bullets",
    },
    {
        "name": "Executive Summary Only",
        "description": "Brief summary for leadership (no detailed sections)",
        "sections": ["accomplishments", "risks"],
        "format_style": "paragraphs",
    },
    {
        "name": "Risk-Focused Update",
        "description": "Emphasizes risks and blockers for escalation",
        "sections": ["accomplishments", "blockers", "risks", "next_steps"],
        "format_style": "mixed",
    },
]


async def seed_field_mappings(db: AsyncSession) -> int:
    """Insert the standard mappings into an empty table. Returns rows added."""
    existing = (await db.execute(select(func.count()).select_from(FieldMapping))).scalar_one()
    if existing:
        logger.debug("Field mappings already exist, skipping seed")
        return 0
    count = 0
    for work_item_type, fields in DEFAULT_FIELD_MAPPINGS.items():
        for logical_field, ado_field_name in fields.items():
            db.add(FieldMapping(
                work_item_type=work_item_type,
                logical_field=logical_field,
                ado_field_name=ado_field_name,
            ))
            count += 1
    await db.flush()
    logger.info("Seeded %d field mappings", count, extra={"count": count})
    return count


async def seed_status_templates(db: AsyncSession) -> int:
    existing = (await db.execute(select(func.count()).select_from(StatusTemplate))).scalar_one()
    if existing:
        return 0
    for template in DEFAULT_STATUS_TEMPLATES:
        db.add(StatusTemplate(**template))
    await db.flush()
    logger.info("Seeded %d status templates", len(DEFAULT_STATUS_TEMPLATES))
    return len(DEFAULT_STATUS_TEMPLATES)


async def get_ado_field_name(db: AsyncSession, work_item_type: str, logical_field: str) -> str | None:
    result = await db.execute(
        select(FieldMapping.ado_field_name).where(
            FieldMapping.work_item_type == work_item_type,
            FieldMapping.logical_field == logical_field,
        )
    )
    return result.scalar_one_or_none()


async def get_field_mappings_for_type(db: AsyncSession, work_item_type: str) -> dict[str, str]:
    result = await db.execute(
        select(FieldMapping.logical_field, FieldMapping.ado_field_name)
        .where(FieldMapping.work_item_type == work_item_type)
    )
    return {logical: ado for logical, ado in result.all()}


async def available_mapped_types(db: AsyncSession) -> list[str]:
    result = await db.execute(
        select(FieldMapping.work_item_type).distinct().order_by(FieldMapping.work_item_type)
    )
    return list(result.scalars().all())


def parent_relation(parent_url: str) -> dict[str, Any]:
    return {
        "op": "add",
        "path": "/relations/-",
        "value": {
            "rel": PARENT_LINK,
            "url": parent_url,
            "attributes": {"comment": "Parent work item"},
        },
    }


async def build_patch_operations(
    db: AsyncSession,
    work_item_type: str,
    data: Mapping[str, Any],
    parent_url: str | None = None,
) -> list[dict[str, Any]]:
    """JSON-Patch ``add`` operations for a new work item of ``work_item_type``.

    None values are skipped. ``parent`` becomes a hierarchy relation to
    ``parent_url``; fields without a mapping for the type are logged and
    dropped.
    """
    mappings = await get_field_mappings_for_type(db, work_item_type)
    operations: list[dict[str, Any]] = []
    for logical_field, value in data.items():
        if value is None:
            continue
        if logical_field == "parent":
            if parent_url:
                operations.append(parent_relation(parent_url))
            continue
        ado_field = mappings.get(logical_field)
        if ado_field is None:
            logger.warning("No mapping found for %s.%s", work_item_type, logical_field)
            continue
        operations.append({"op": "add", "path": f"/fields/{ado_field}", "value": value})
    return operations


def build_update_operations(data: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Operations for editing an existing item; None and unknown fields are skipped."""
    return [
        {"op": "add", "path": f"/fields/{UPDATE_FIELD_MAP[name]}", "value": value}
        for name, value in data.items()
        if value is not None and name in UPDATE_FIELD_MAP
    ]
