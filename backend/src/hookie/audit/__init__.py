"""Audit trail: snapshots, diffs, records and the engine that writes them."""

from hookie.audit.context import (
    AuditContext,
    audit_context,
    current_audit_context,
    reset_audit_context,
    set_audit_context,
)
from hookie.audit.diff import compute_change_set, render_value
from hookie.audit.engine import AuditTrailEngine
from hookie.audit.snapshot import snapshot, to_snake_case
from hookie.audit.types import (
    AuditChange,
    AuditChangeRecord,
    AuditMeta,
    AuditResult,
    Operation,
    Provenance,
)

__all__ = [
    "AuditChange",
    "AuditChangeRecord",
    "AuditContext",
    "AuditMeta",
    "AuditResult",
    "AuditTrailEngine",
    "Operation",
    "Provenance",
    "audit_context",
    "compute_change_set",
    "current_audit_context",
    "render_value",
    "reset_audit_context",
    "set_audit_context",
    "snapshot",
    "to_snake_case",
]
