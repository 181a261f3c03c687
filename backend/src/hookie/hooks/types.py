"""Hook system types for Hookie.

Defines:
- HookPoint: the four lifecycle events
- HookEvent: runtime state passed to user-defined hook methods
- one Protocol per lifecycle event, implemented by models that want to
  replace the default behavior for that event

Implementing one hook does not require implementing the others:

    @dataclass
    class Invoice(Auditable):
        number: str = ""

        def pre_save(self, event: HookEvent) -> None:
            self.number = self.number.upper()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from hookie.audit.context import AuditContext
from hookie.audit.types import Operation


class HookPoint(Enum):
    """Lifecycle events. Values are the hook method names."""

    BEFORE_INSERT = "before_insert"
    AFTER_INSERT = "after_insert"
    PRE_SAVE = "pre_save"
    POST_SAVE = "post_save"


@dataclass
class HookEvent:
    """Runtime context passed to every user hook.

    Attributes:
        hook_point: The lifecycle event being dispatched
        model: The model instance
        filter: Selector used for updates, if any
        collection: Target collection name
        operation: INSERT or UPDATE (None if the caller passed none)
        document_id: Store identifier of the document
        context: Provenance and cancellation for the call
    """

    hook_point: HookPoint
    model: Any
    filter: Any = None
    collection: str = ""
    operation: Operation | None = None
    document_id: str = ""
    context: AuditContext = field(default_factory=AuditContext)


@runtime_checkable
class BeforeInsertHook(Protocol):
    def before_insert(self, event: HookEvent) -> None: ...


@runtime_checkable
class AfterInsertHook(Protocol):
    def after_insert(self, event: HookEvent) -> None: ...


@runtime_checkable
class PreSaveHook(Protocol):
    def pre_save(self, event: HookEvent) -> None: ...


@runtime_checkable
class PostSaveHook(Protocol):
    def post_save(self, event: HookEvent) -> None: ...


HOOK_PROTOCOLS: dict[HookPoint, type] = {
    HookPoint.BEFORE_INSERT: BeforeInsertHook,
    HookPoint.AFTER_INSERT: AfterInsertHook,
    HookPoint.PRE_SAVE: PreSaveHook,
    HookPoint.POST_SAVE: PostSaveHook,
}
