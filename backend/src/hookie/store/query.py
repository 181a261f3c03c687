"""Filter matching and partial updates for dict documents."""

from __future__ import annotations

from typing import Any

_MISSING = object()


def get_path(document: dict[str, Any], path: str) -> Any:
    """Resolve a dotted path. Returns _MISSING when a segment is absent."""
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def matches(document: dict[str, Any], filter: dict[str, Any]) -> bool:
    """True if every (dotted) key in filter equals the document's value."""
    for path, expected in filter.items():
        actual = get_path(document, path)
        if actual is _MISSING:
            if expected is not None:
                return False
        elif actual != expected:
            return False
    return True


def apply_set(document: dict[str, Any], fields: dict[str, Any]) -> None:
    """Apply a ``$set``-style partial update in place (dotted keys allowed)."""
    for path, value in fields.items():
        *parents, leaf = path.split(".")
        target = document
        for part in parents:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        target[leaf] = value
