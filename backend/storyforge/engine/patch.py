"""Partial-update merge shared by every PATCH/PUT style operation."""
from collections.abc import Iterable, Mapping
from typing import Any


def apply_patch(
    target: Any,
    patch: Mapping[str, Any],
    keep_if_none: Iterable[str] = (),
) -> dict[str, Any]:
    """Copy the provided fields of ``patch`` onto ``target``.

    ``patch`` must hold only the fields the caller actually sent (e.g.
    ``model.model_dump(exclude_unset=True)``); absent fields keep their
    current value. An explicit None clears a field, except for the names in
    ``keep_if_none``, where None also means "keep". Returns the fields that
    changed, mapped to their new values.
    """
    keep = set(keep_if_none)
    changed: dict[str, Any] = {}
    for name, value in patch.items():
        if value is None and name in keep:
            continue
        if getattr(target, name) != value:
            changed[name] = value
        setattr(target, name, value)
    return changed
