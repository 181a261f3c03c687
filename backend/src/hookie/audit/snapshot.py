"""Document snapshots — the field-keyed view of a model used for diffing.

Supported model shapes:
- dataclass instances (tags via ``field(metadata={"store": ..., "json": ...})``)
- pydantic models (store tag via ``Field(json_schema_extra={"store": ...})``,
  transport tag via ``serialization_alias`` / ``alias``)
- plain objects (public instance attributes)

Key resolution order for every field: store tag, then transport tag, then
the declared name converted to snake_case. A tag of "-" drops the field.
Empty values (None, False, 0, "", empty collections, datetime.min, nested
models whose fields are all empty) are omitted so the same model type always
snapshots to a stable key set.
"""

from __future__ import annotations

import dataclasses
import inspect
import re
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

from hookie.audit.types import ID_FIELD
from hookie.errors import SnapshotError
from hookie.marker import Auditable

_ACRONYM_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_RE = re.compile(r"([a-z\d])([A-Z])")


def to_snake_case(name: str) -> str:
    """Normalize a declared field name.

    Example: to_snake_case("HTTPStatusCode") -> "http_status_code"
    """
    name = _ACRONYM_RE.sub(r"\1_\2", name)
    name = _CAMEL_RE.sub(r"\1_\2", name)
    return name.lower()


def _tag_name(tag: str | None) -> str | None:
    """Return the name part of a tag ("name,omitempty" -> "name")."""
    if not tag:
        return None
    return tag.split(",", 1)[0].strip() or None


@dataclass(frozen=True)
class FieldSpec:
    """Naming metadata for one model field."""

    declared: str
    store_tag: str | None = None
    transport_tag: str | None = None

    @property
    def key(self) -> str | None:
        """Resolved snapshot key, or None if the field is excluded."""
        name = _tag_name(self.store_tag) or _tag_name(self.transport_tag)
        if name == "-":
            return None
        return name or to_snake_case(self.declared)


def is_struct_like(value: Any) -> bool:
    if isinstance(value, type) or inspect.isroutine(value) or inspect.ismodule(value):
        return False
    if dataclasses.is_dataclass(value) or isinstance(value, BaseModel):
        return True
    return hasattr(value, "__dict__")


def is_empty(value: Any) -> bool:
    """Omit-if-empty rule shared by every snapshot."""
    if value is None or value is False:
        return True
    if isinstance(value, (str, bytes, bytearray, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    if isinstance(value, (int, float, complex, Decimal)):
        return value == 0
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) == datetime.min
    if isinstance(value, date):
        return value == date.min
    return False


def iter_fields(model: Any) -> Iterator[tuple[FieldSpec, Any]]:
    """Yield (FieldSpec, value) for every declared field of a model.

    Raises:
        SnapshotError: If the model is not struct-like
    """
    if not is_struct_like(model):
        raise SnapshotError(f"expected a struct-like model, got {type(model).__name__}")

    if dataclasses.is_dataclass(model):
        for f in dataclasses.fields(model):
            meta = f.metadata
            yield (
                FieldSpec(f.name, meta.get("store") or meta.get("bson"), meta.get("json")),
                getattr(model, f.name),
            )
    elif isinstance(model, BaseModel):
        for name, info in type(model).model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            yield (
                FieldSpec(
                    name,
                    extra.get("store") or extra.get("bson"),
                    info.serialization_alias or info.alias,
                ),
                getattr(model, name),
            )
    else:
        for name, value in vars(model).items():
            if not name.startswith("_"):
                yield FieldSpec(name), value


def _snapshot_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return _snapshot_value(value.value)
    if isinstance(value, (list, tuple)):
        return [_snapshot_value(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted((_snapshot_value(v) for v in value), key=repr)
    if isinstance(value, dict):
        return {str(k): _snapshot_value(v) for k, v in value.items()}
    if is_struct_like(value):
        return snapshot(value)
    return value


def snapshot(model: Any) -> dict[str, Any]:
    """Compute the document snapshot of a model instance.

    Values are converted before the omit-empty check, so a nested model
    whose fields are all empty is omitted along with it. The identity field
    (``_id``) is rendered as a string. Fields holding the marker itself are
    skipped.

    Raises:
        SnapshotError: If the model is not struct-like
    """
    result: dict[str, Any] = {}
    for spec, value in iter_fields(model):
        if isinstance(value, Auditable):
            continue
        key = spec.key
        if key is None:
            continue
        if key == ID_FIELD:
            if not is_empty(value):
                result[key] = str(value)
            continue
        converted = _snapshot_value(value)
        if is_empty(converted):
            continue
        result[key] = converted
    return result
