"""Hookie lifecycle hook system.

Provides four extension points around document mutations:
- before_insert: before a new document is written
- after_insert: after a new document is written (audits inserts by default)
- pre_save: before an insert or update is written
- post_save: after an insert or update is written (audits by default)

A model replaces the default for an event by defining the method of the
same name, taking a single HookEvent:

    @dataclass
    class Invoice(Auditable):
        number: str = ""

        def post_save(self, event: HookEvent) -> None:
            notify_billing(event.document_id)
"""

from hookie.hooks.dispatcher import HookDispatcher
from hookie.hooks.probe import Capabilities, has_hook, probe
from hookie.hooks.types import (
    AfterInsertHook,
    BeforeInsertHook,
    HookEvent,
    HookPoint,
    PostSaveHook,
    PreSaveHook,
)

__all__ = [
    "AfterInsertHook",
    "BeforeInsertHook",
    "Capabilities",
    "HookDispatcher",
    "HookEvent",
    "HookPoint",
    "PostSaveHook",
    "PreSaveHook",
    "has_hook",
    "probe",
]
