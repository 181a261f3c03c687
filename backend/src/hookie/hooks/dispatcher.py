"""Hook Dispatcher — routes lifecycle events to user hooks or defaults.

For each event:
1. If the model implements the matching hook method, call it with a
   HookEvent and return. Default behavior is suppressed and exceptions
   raised by the hook propagate unchanged.
2. Otherwise run the default:
   - before_insert / pre_save: trace only
   - after_insert: trace, then record an insert if the model is audited
   - post_save: trace, then record the event's operation if audited

Default audit bookkeeping never fails the triggering insert/save: store and
snapshot errors are logged by the engine and reported as an AuditResult.
"""

from __future__ import annotations

import logging
from typing import Any

from hookie.audit.context import AuditContext, current_audit_context
from hookie.audit.engine import AuditTrailEngine
from hookie.audit.types import AuditResult, Operation
from hookie.discovery.registry import ModelRegistry, identity_of
from hookie.hooks.probe import has_hook
from hookie.hooks.types import HookEvent, HookPoint

logger = logging.getLogger(__name__)


def _coerce_operation(operation: Operation | str | None) -> Operation | None:
    if operation is None or isinstance(operation, Operation):
        return operation
    try:
        return Operation(operation)
    except ValueError:
        return None


class HookDispatcher:
    """Single entry point for model-owning code around inserts and saves.

    Example:
        dispatcher.pre_save(invoice, filter={"_id": oid}, collection="invoices",
                            operation="update", document_id=str(oid))
        collection.update_one({"_id": oid}, {"$set": ...})
        dispatcher.post_save(invoice, filter={"_id": oid}, collection="invoices",
                             operation="update", document_id=str(oid))
    """

    def __init__(self, registry: ModelRegistry, engine: AuditTrailEngine):
        self.registry = registry
        self.engine = engine

    def before_insert(
        self,
        model: Any,
        filter: Any = None,
        collection: str = "",
        operation: Operation | str | None = Operation.INSERT,
        document_id: str = "",
        context: AuditContext | None = None,
    ) -> AuditResult | None:
        return self.dispatch(
            HookPoint.BEFORE_INSERT, model, filter, collection, operation, document_id, context
        )

    def after_insert(
        self,
        model: Any,
        filter: Any = None,
        collection: str = "",
        operation: Operation | str | None = Operation.INSERT,
        document_id: str = "",
        context: AuditContext | None = None,
    ) -> AuditResult | None:
        return self.dispatch(
            HookPoint.AFTER_INSERT, model, filter, collection, operation, document_id, context
        )

    def pre_save(
        self,
        model: Any,
        filter: Any = None,
        collection: str = "",
        operation: Operation | str | None = None,
        document_id: str = "",
        context: AuditContext | None = None,
    ) -> AuditResult | None:
        return self.dispatch(
            HookPoint.PRE_SAVE, model, filter, collection, operation, document_id, context
        )

    def post_save(
        self,
        model: Any,
        filter: Any = None,
        collection: str = "",
        operation: Operation | str | None = None,
        document_id: str = "",
        context: AuditContext | None = None,
    ) -> AuditResult | None:
        return self.dispatch(
            HookPoint.POST_SAVE, model, filter, collection, operation, document_id, context
        )

    def dispatch(
        self,
        hook_point: HookPoint,
        model: Any,
        filter: Any = None,
        collection: str = "",
        operation: Operation | str | None = None,
        document_id: str = "",
        context: AuditContext | None = None,
    ) -> AuditResult | None:
        """Dispatch one lifecycle event.

        Returns:
            The engine's AuditResult when default audit work ran, else None.

        Raises:
            RegistryNotReadyError: If the registry has not been sealed
            Exception: Anything raised by a user-defined hook
        """
        event = HookEvent(
            hook_point=hook_point,
            model=model,
            filter=filter,
            collection=collection,
            operation=_coerce_operation(operation),
            document_id=document_id,
            context=context or current_audit_context(),
        )

        if has_hook(model, hook_point):
            getattr(model, hook_point.value)(event)
            return None

        identity = identity_of(model)
        logger.debug("default %s hook triggered for %s", hook_point.value, identity)

        if hook_point in (HookPoint.BEFORE_INSERT, HookPoint.PRE_SAVE):
            return None
        if not self.registry.is_enabled(identity):
            return None

        if hook_point is HookPoint.AFTER_INSERT:
            record_as = Operation.INSERT
        else:
            record_as = event.operation
            if record_as is None:
                logger.warning(
                    "post_save for %s with unsupported operation %r; not audited",
                    identity,
                    operation,
                )
                return None

        return self.engine.record(
            model,
            record_as,
            collection=event.collection,
            document_id=event.document_id,
            context=event.context,
        )
