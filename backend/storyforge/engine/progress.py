"""Effort-weighted completion for features and epics.

Two depth policies: the roadmap looks at direct children only, the backlog
tree sums over all descendants.
"""
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from storyforge.schemas.work_item import Progress, WorkItem, WorkItemNode

DONE_STATES: frozenset[str] = frozenset({"Done", "Closed", "Resolved"})

# Hard stop for descendant walks; ADO hierarchies are a handful of levels deep.
MAX_DEPTH = 32


def effort_of(item: WorkItem) -> float:
    """Story points, else the Effort field, else 0."""
    if item.story_points is not None:
        return item.story_points
    if item.effort is not None:
        return item.effort
    return 0


def percentage(completed: float, total: float) -> int:
    if total <= 0:
        return 0
    ratio = Decimal(str(completed)) * 100 / Decimal(str(total))
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def aggregate(children: Iterable[WorkItem]) -> Progress:
    completed = 0.0
    total = 0.0
    for child in children:
        effort = effort_of(child)
        total += effort
        if child.state in DONE_STATES:
            completed += effort
    return Progress(completed_effort=completed, total_effort=total, percentage=percentage(completed, total))


def shallow_progress(parent_id: int, items: Iterable[WorkItem]) -> Progress:
    """Roadmap policy: only items whose parent is ``parent_id``."""
    return aggregate(item for item in items if item.parent_id == parent_id)


def _children_index(items: Iterable[WorkItem]) -> dict[int, list[WorkItem]]:
    by_parent: dict[int, list[WorkItem]] = {}
    for item in items:
        if item.parent_id is not None:
            by_parent.setdefault(item.parent_id, []).append(item)
    return by_parent


def _descendants(parent_id: int, by_parent: dict[int, list[WorkItem]]) -> list[WorkItem]:
    descendants: list[WorkItem] = []
    visited: set[int] = {parent_id}
    stack: list[tuple[int, int]] = [(parent_id, 0)]
    while stack:
        current, depth = stack.pop()
        if depth >= MAX_DEPTH:
            continue
        for child in by_parent.get(current, []):
            if child.id in visited:
                continue
            visited.add(child.id)
            descendants.append(child)
            stack.append((child.id, depth + 1))
    return descendants


def deep_progress(parent_id: int, items: Iterable[WorkItem]) -> Progress:
    """Backlog policy: every descendant of ``parent_id`` found in ``items``."""
    return aggregate(_descendants(parent_id, _children_index(items)))


def annotate_tree(roots: list[WorkItemNode]) -> None:
    """Attach deep progress to every node that has children."""
    nodes: list[WorkItemNode] = []
    stack = list(roots)
    seen: set[int] = set()
    while stack:
        node = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        nodes.append(node)
        stack.extend(node.children)

    by_parent = _children_index(nodes)
    for node in nodes:
        if node.children:
            node.progress = aggregate(_descendants(node.id, by_parent))
