"""Audit context — provenance and cancellation for one lifecycle call.

The context travels either explicitly (``context=`` on dispatcher calls) or
implicitly through a ContextVar bound by middleware or by application code.
ContextVars are scoped to the current thread/asyncio task, so concurrent
requests never see each other's actor.

Usage:
    with audit_context(AuditContext(user_id="U001", ip_address="10.0.0.1")):
        dispatcher.post_save(invoice, collection="invoices",
                             operation="update", document_id=invoice_id)
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace

from hookie.errors import AuditCancelledError


@dataclass(frozen=True)
class AuditContext:
    """Immutable provenance for audit records.

    Attributes:
        user_id: Acting user, if known
        user_type: Kind of actor (falls back to the configured default)
        ip_address: Client address of the originating request
        user_agent: Client user agent of the originating request
        url: URL of the originating request
        tags: Free-form tags added to the configured defaults
        deadline: ``time.monotonic()`` value after which store calls abort
        cancel_event: Event that, once set, aborts pending store calls
    """

    user_id: str | None = None
    user_type: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    url: str | None = None
    tags: tuple[str, ...] = ()
    deadline: float | None = None
    cancel_event: threading.Event | None = None

    def with_timeout(self, seconds: float) -> AuditContext:
        """Return a copy whose deadline is ``seconds`` from now."""
        return replace(self, deadline=time.monotonic() + seconds)

    @property
    def cancelled(self) -> bool:
        if self.cancel_event is not None and self.cancel_event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def check(self) -> None:
        """Raise AuditCancelledError if the context is cancelled or expired."""
        if self.cancelled:
            raise AuditCancelledError("audit context cancelled or deadline exceeded")


_current_context: ContextVar[AuditContext | None] = ContextVar(
    "hookie_audit_context", default=None
)


def current_audit_context() -> AuditContext:
    """Return the bound context, or an empty one if none is bound."""
    return _current_context.get() or AuditContext()


def set_audit_context(context: AuditContext | None) -> Token:
    """Bind a context for the current task. Returns a token for reset."""
    return _current_context.set(context)


def reset_audit_context(token: Token) -> None:
    _current_context.reset(token)


@contextmanager
def audit_context(context: AuditContext) -> Iterator[AuditContext]:
    """Bind ``context`` for the duration of a ``with`` block."""
    token = set_audit_context(context)
    try:
        yield context
    finally:
        reset_audit_context(token)
