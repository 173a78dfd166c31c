"""WIQL statements used against Azure DevOps."""
from collections.abc import Iterable
from datetime import date


def quote(value: str) -> str:
    """WIQL string literal; single quotes are doubled."""
    return "'" + value.replace("'", "''") + "'"


def _type_list(types: Iterable[str]) -> str:
    return ", ".join(quote(t) for t in types)


def _area_filter(area_path: str | None) -> str:
    return f" AND [System.AreaPath] UNDER {quote(area_path)}" if area_path else ""


def features_query(
    area_path: str | None = None,
    excluded_states: Iterable[str] = ("Removed",),
    order_by: str | None = "[System.CreatedDate] DESC",
) -> str:
    wiql = (
        "SELECT [System.Id] FROM WorkItems"
        " WHERE [System.WorkItemType] = 'Feature'"
        f" AND [System.State] NOT IN ({_type_list(excluded_states)})"
    )
    wiql += _area_filter(area_path)
    if order_by:
        wiql += f" ORDER BY {order_by}"
    return wiql


def recent_work_items_query(types: Iterable[str], since: date, area_path: str | None = None) -> str:
    wiql = (
        "SELECT [System.Id] FROM WorkItems"
        f" WHERE [System.CreatedDate] >= {quote(since.isoformat())}"
        " AND [System.State] NOT IN ('Closed', 'Removed', 'Done')"
        f" AND [System.WorkItemType] IN ({_type_list(types)})"
    )
    return wiql + _area_filter(area_path) + " ORDER BY [System.CreatedDate] DESC"


def active_work_items_query(types: Iterable[str], area_path: str | None = None) -> str:
    wiql = (
        "SELECT [System.Id] FROM WorkItems"
        " WHERE [System.State] NOT IN ('Closed', 'Removed')"
        f" AND [System.WorkItemType] IN ({_type_list(types)})"
    )
    return wiql + _area_filter(area_path) + " ORDER BY [System.WorkItemType] DESC, [System.CreatedDate] DESC"


def epics_and_features_query(types: Iterable[str], area_path: str | None = None) -> str:
    wiql = (
        "SELECT [System.Id] FROM WorkItems"
        f" WHERE [System.WorkItemType] IN ({_type_list(types)})"
        " AND [System.State] NOT IN ('Closed', 'Removed')"
    )
    return wiql + _area_filter(area_path) + " ORDER BY [System.CreatedDate] DESC"


def children_query(parent_ids: Iterable[int], types: Iterable[str] | None = None) -> str:
    ids = ", ".join(str(int(i)) for i in parent_ids)
    wiql = f"SELECT [System.Id] FROM WorkItems WHERE [System.Parent] IN ({ids})"
    if types:
        wiql += f" AND [System.WorkItemType] IN ({_type_list(types)})"
    return wiql
