"""Work item tree building and roadmap grouping.

Each item is placed exactly once, by looking at its own parent pointer only,
so building the tree never walks a parent chain.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TypeVar

from storyforge.schemas.work_item import WorkItem, WorkItemNode

T = TypeVar("T", bound=WorkItem)


def build_hierarchy(items: list[WorkItem]) -> list[WorkItemNode]:
    """Turn a flat list into a forest.

    Roots are items without a parent or whose parent is not in ``items``.
    Input order is preserved among siblings and among roots.
    """
    nodes: dict[int, WorkItemNode] = {}
    for item in items:
        nodes[item.id] = WorkItemNode(**item.model_dump(exclude={"children", "progress"}), children=[])

    roots: list[WorkItemNode] = []
    for item in items:
        node = nodes[item.id]
        parent = nodes.get(item.parent_id) if item.parent_id is not None else None
        if parent is not None and parent is not node:
            parent.children.append(node)
        else:
            roots.append(node)
    return roots


def parse_date(value: str | None) -> datetime | None:
    """ADO dates are ISO 8601; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_scheduled(item: WorkItem) -> bool:
    return bool(item.start_date and item.target_date)


def sort_by_start_date(features: list[T]) -> list[T]:
    """Ascending start date; items without one go last, in input order."""
    dated = [f for f in features if parse_date(f.start_date) is not None]
    undated = [f for f in features if parse_date(f.start_date) is None]
    dated.sort(key=lambda f: parse_date(f.start_date))
    return dated + undated


@dataclass
class EpicBucket:
    epic: WorkItem
    features: list = field(default_factory=list)


@dataclass
class RoadmapGroups:
    scheduled: list[EpicBucket] = field(default_factory=list)
    orphaned_scheduled: list = field(default_factory=list)
    unscheduled: list = field(default_factory=list)
    total: int = 0


def group_roadmap(features: list[T], epics: list[WorkItem]) -> RoadmapGroups:
    """Partition features for the roadmap timeline.

    - ``scheduled``: epics with at least one feature that has both dates;
      each bucket keeps all of that epic's features
    - ``orphaned_scheduled``: dated features with no known parent epic
    - ``unscheduled``: features missing a date that are either orphaned or
      belong to an epic with no dated feature at all
    """
    ordered = sort_by_start_date(features)
    buckets: dict[int, EpicBucket] = {epic.id: EpicBucket(epic=epic) for epic in epics}

    orphans: list[T] = []
    for feature in ordered:
        bucket = buckets.get(feature.parent_id) if feature.parent_id is not None else None
        if bucket is not None:
            bucket.features.append(feature)
        else:
            orphans.append(feature)

    scheduled: list[EpicBucket] = []
    unscheduled: list[T] = [f for f in orphans if not is_scheduled(f)]
    for bucket in buckets.values():
        if any(is_scheduled(f) for f in bucket.features):
            scheduled.append(bucket)
        else:
            unscheduled.extend(bucket.features)

    return RoadmapGroups(
        scheduled=scheduled,
        orphaned_scheduled=[f for f in orphans if is_scheduled(f)],
        unscheduled=sort_by_start_date(unscheduled),
        total=len(ordered),
    )
