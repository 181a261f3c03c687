"""Field-level diff between two document snapshots.

The diff is driven by the new state: every key of the new snapshot whose
value is absent from, or unequal to, the old snapshot is reported. Keys that
disappeared from the new snapshot are not reported as deletions. Values
compare by equality (so 1 == 1.0 and equal datetimes never differ) and are
rendered to display strings only after the comparison.
"""

from __future__ import annotations

import json
from datetime import date, datetime, time
from typing import Any

from hookie.audit.types import ID_FIELD, AuditChange

_MISSING = object()


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def render_value(value: Any) -> str:
    """Render a snapshot value as its display string.

    None renders as "", booleans as "true"/"false", temporal values as
    ISO-8601 and containers as compact JSON.
    """
    if value is None or value is _MISSING:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=_json_default, separators=(",", ":"), sort_keys=True)
    return str(value)


def compute_change_set(
    old: dict[str, Any], new: dict[str, Any]
) -> dict[str, AuditChange]:
    """Compute the change set from old to new.

    Example:
        compute_change_set({"a": 1, "b": 2}, {"a": 1, "b": 3, "c": 4})
        # {"b": AuditChange("2", "3"), "c": AuditChange("", "4")}
    """
    changes: dict[str, AuditChange] = {}
    for key, new_value in new.items():
        if key == ID_FIELD:
            continue
        old_value = old.get(key, _MISSING)
        if old_value is _MISSING or old_value != new_value:
            changes[key] = AuditChange(
                old=render_value(old_value),
                new=render_value(new_value),
            )
    return changes
