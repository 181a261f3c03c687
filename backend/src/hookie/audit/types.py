"""Audit trail record types.

Defines the persisted shapes of the audit trail:
- AuditMeta: latest known snapshot of one document (overwritten on update)
- AuditChangeRecord: immutable per-update change set (append-only)
- AuditChange: the old/new pair for one field

Field names in ``to_document()`` are wire-level names and must stay stable
for backward-compatible storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

ID_FIELD = "_id"
STATE_FIELD = "document_current_state"


class Operation(Enum):
    """The kind of mutation a lifecycle event belongs to."""

    INSERT = "insert"
    UPDATE = "update"

    @classmethod
    def parse(cls, value: Any, default: Operation) -> Operation:
        """Read a stored audit_event. Missing or unknown values give ``default``."""
        try:
            return cls(value)
        except (TypeError, ValueError):
            return default


class AuditResult(Enum):
    """Outcome of one Audit Trail Engine call.

    RECORDED: Meta record created (insert) or change record + meta written
    UNCHANGED: Update produced no changes; meta snapshot refreshed
    PARTIAL: Change record write failed but meta was overwritten
    MISSING_META: Update on a document with no meta record; nothing written
    SNAPSHOT_FAILED: Model could not be snapshotted; nothing written
    STORE_FAILED: A store call failed; later steps skipped
    CANCELLED: Context cancelled or deadline passed before a store call
    """

    RECORDED = "recorded"
    UNCHANGED = "unchanged"
    PARTIAL = "partial"
    MISSING_META = "missing_meta"
    SNAPSHOT_FAILED = "snapshot_failed"
    STORE_FAILED = "store_failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class AuditChange:
    """Display-string old/new pair for one changed field.

    ``old`` is "" when the field did not exist in the previous state.
    """

    old: str
    new: str

    def to_document(self) -> dict[str, str]:
        return {"old": self.old, "new": self.new}

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> AuditChange:
        return cls(old=data.get("old", ""), new=data.get("new", ""))


@dataclass
class Provenance:
    """Who and where a mutation came from."""

    user_id: str | None = None
    user_type: str = "unknown"
    url: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    tags: list[str] = field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "user_type": self.user_type,
            "audit_url": self.url,
            "audit_ip_address": self.ip_address,
            "audit_user_agent": self.user_agent,
            "audit_tags": list(self.tags),
        }

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> Provenance:
        return cls(
            user_id=data.get("user_id"),
            user_type=data.get("user_type") or "unknown",
            url=data.get("audit_url"),
            ip_address=data.get("audit_ip_address"),
            user_agent=data.get("audit_user_agent"),
            tags=list(data.get("audit_tags") or []),
        )


@dataclass
class AuditMeta:
    """Latest snapshot of one tracked document plus provenance."""

    document_id: str
    collection: str
    audit_event: Operation
    document_current_state: dict[str, Any]
    provenance: Provenance
    audit_created_at: datetime
    audit_updated_at: datetime | None = None
    id: str | None = None

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "document_id": self.document_id,
            "collection": self.collection,
            "audit_event": self.audit_event.value,
            STATE_FIELD: self.document_current_state,
            **self.provenance.to_document(),
            "audit_created_at": self.audit_created_at,
            "audit_updated_at": self.audit_updated_at,
        }
        if self.id is not None:
            doc[ID_FIELD] = self.id
        return doc

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> AuditMeta:
        return cls(
            id=str(data[ID_FIELD]) if data.get(ID_FIELD) is not None else None,
            document_id=data.get("document_id") or "",
            collection=data.get("collection") or "",
            audit_event=Operation.parse(data.get("audit_event"), Operation.INSERT),
            document_current_state=dict(data.get(STATE_FIELD) or {}),
            provenance=Provenance.from_document(data),
            audit_created_at=data.get("audit_created_at"),
            audit_updated_at=data.get("audit_updated_at"),
        )


@dataclass
class AuditChangeRecord:
    """Immutable record of the fields changed by one update."""

    document_id: str
    collection: str
    audit_event: Operation
    change: dict[str, AuditChange]
    provenance: Provenance
    audit_created_at: datetime
    id: str | None = None

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "document_id": self.document_id,
            "collection": self.collection,
            "audit_event": self.audit_event.value,
            **self.provenance.to_document(),
            "audit_created_at": self.audit_created_at,
            "change": {k: v.to_document() for k, v in self.change.items()},
        }
        if self.id is not None:
            doc[ID_FIELD] = self.id
        return doc

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> AuditChangeRecord:
        return cls(
            id=str(data[ID_FIELD]) if data.get(ID_FIELD) is not None else None,
            document_id=data.get("document_id") or "",
            collection=data.get("collection") or "",
            audit_event=Operation.parse(data.get("audit_event"), Operation.UPDATE),
            change={
                k: AuditChange.from_document(v)
                for k, v in (data.get("change") or {}).items()
            },
            provenance=Provenance.from_document(data),
            audit_created_at=data.get("audit_created_at"),
        )
