"""Hookie — lifecycle hooks and audit trail for document models.

Usage:
    from hookie import Auditable, initialize

    @dataclass
    class Invoice(Auditable):
        id: str = field(default="", metadata={"store": "_id"})
        total: int = 0

    services = initialize()
    services.dispatcher.post_save(invoice, collection="invoices",
                                  operation="insert", document_id=invoice.id)
"""

from hookie.audit import AuditContext, AuditResult, Operation, audit_context
from hookie.audit.engine import AuditTrailEngine
from hookie.bootstrap import HookieServices, initialize
from hookie.discovery import ModelRegistry, SourceInspector
from hookie.hooks import HookDispatcher, HookEvent, HookPoint
from hookie.marker import Auditable

__all__ = [
    "AuditContext",
    "AuditResult",
    "AuditTrailEngine",
    "Auditable",
    "HookDispatcher",
    "HookEvent",
    "HookPoint",
    "HookieServices",
    "ModelRegistry",
    "Operation",
    "SourceInspector",
    "audit_context",
    "initialize",
]
