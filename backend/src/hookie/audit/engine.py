"""Audit Trail Engine.

Computes document snapshots, diffs them against the last recorded snapshot
and persists the results:

- insert: a new meta record holding the full snapshot (no change record)
- update: fetch meta, diff, append a change record if anything changed,
  then overwrite the meta snapshot

The meta overwrite and the change record are two separate writes; the meta
record is overwritten even when the change record write fails.

Failures never raise to the caller. They are logged and reported through the
returned AuditResult.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from hookie.audit.context import AuditContext, current_audit_context
from hookie.audit.diff import compute_change_set
from hookie.audit.snapshot import snapshot
from hookie.audit.types import (
    ID_FIELD,
    STATE_FIELD,
    AuditChangeRecord,
    AuditMeta,
    AuditResult,
    Operation,
    Provenance,
)
from hookie.config import AuditConfig
from hookie.discovery.registry import identity_of
from hookie.errors import AuditCancelledError, SnapshotError, StoreError
from hookie.store.adapter import DocumentStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AuditTrailEngine:
    """Records audit meta and change records for model mutations."""

    def __init__(
        self,
        store: DocumentStore,
        config: AuditConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.config = config or AuditConfig()
        self._clock = clock

    def provenance(self, context: AuditContext) -> Provenance:
        """Build record provenance from a context plus configured defaults."""
        tags = list(self.config.default_tags)
        tags.extend(t for t in context.tags if t not in tags)
        return Provenance(
            user_id=context.user_id,
            user_type=context.user_type or self.config.default_user_type,
            url=context.url,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            tags=tags,
        )

    def record(
        self,
        model: Any,
        operation: Operation,
        collection: str = "",
        document_id: str = "",
        context: AuditContext | None = None,
    ) -> AuditResult:
        """Record one mutation of ``model``.

        Args:
            model: The model instance in its post-mutation state
            operation: INSERT or UPDATE
            collection: Collection the model is stored in
            document_id: Store identifier of the document
            context: Provenance/cancellation; defaults to the bound context

        Returns:
            The AuditResult describing what was written
        """
        context = context or current_audit_context()
        try:
            if operation is Operation.INSERT:
                return self._record_insert(model, collection, document_id, context)
            return self._record_update(model, collection, document_id, context)
        except AuditCancelledError as e:
            logger.warning(
                "Audit %s of %s aborted: %s", operation.value, identity_of(model), e
            )
            return AuditResult.CANCELLED

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _state(self, model: Any, document_id: str) -> dict[str, Any] | None:
        try:
            state = snapshot(model)
        except SnapshotError as e:
            logger.error("Cannot snapshot %s: %s", identity_of(model), e)
            return None
        # the meta lookup keys on the snapshot's _id
        if document_id and ID_FIELD not in state:
            state[ID_FIELD] = document_id
        return state

    def _record_insert(
        self, model: Any, collection: str, document_id: str, context: AuditContext
    ) -> AuditResult:
        state = self._state(model, document_id)
        if state is None:
            return AuditResult.SNAPSHOT_FAILED

        meta = AuditMeta(
            document_id=document_id or str(state.get(ID_FIELD, "")),
            collection=collection,
            audit_event=Operation.INSERT,
            document_current_state=state,
            provenance=self.provenance(context),
            audit_created_at=self._clock(),
        )

        context.check()
        try:
            meta_id = self.store.insert_one(self.config.meta_collection, meta.to_document())
        except StoreError as e:
            logger.error("Failed to insert audit meta for %s: %s", meta.document_id, e)
            return AuditResult.STORE_FAILED

        logger.debug("Created audit meta %s for document %s", meta_id, meta.document_id)
        return AuditResult.RECORDED

    def _record_update(
        self, model: Any, collection: str, document_id: str, context: AuditContext
    ) -> AuditResult:
        meta_collection = self.config.meta_collection
        identity = identity_of(model)

        if document_id:
            context.check()
            try:
                existing = self.store.find_one(
                    meta_collection, {f"{STATE_FIELD}.{ID_FIELD}": document_id}
                )
            except StoreError as e:
                logger.error("Failed to fetch audit meta for %s: %s", document_id, e)
                return AuditResult.STORE_FAILED
            if existing is None:
                logger.error(
                    "No audit meta record for %s document %s; update not audited",
                    identity,
                    document_id,
                )
                return AuditResult.MISSING_META
        else:
            logger.error("Cannot audit update of %s without a document id", identity)
            return AuditResult.MISSING_META

        state = self._state(model, document_id)
        if state is None:
            return AuditResult.SNAPSHOT_FAILED

        meta = AuditMeta.from_document(existing)
        changes = compute_change_set(meta.document_current_state, state)
        now = self._clock()
        provenance = self.provenance(context)
        result = AuditResult.RECORDED if changes else AuditResult.UNCHANGED

        if changes:
            record = AuditChangeRecord(
                document_id=document_id,
                collection=collection or meta.collection,
                audit_event=Operation.UPDATE,
                change=changes,
                provenance=provenance,
                audit_created_at=now,
            )
            context.check()
            try:
                self.store.insert_one(self.config.audit_collection, record.to_document())
            except StoreError as e:
                logger.error("Failed to insert audit change record for %s: %s", document_id, e)
                result = AuditResult.PARTIAL

        context.check()
        try:
            updated = self.store.update_by_id(
                meta_collection,
                meta.id,
                {
                    STATE_FIELD: state,
                    "audit_event": Operation.UPDATE.value,
                    "audit_updated_at": now,
                    **provenance.to_document(),
                },
            )
        except StoreError as e:
            logger.error("Failed to update audit meta for %s: %s", document_id, e)
            return AuditResult.STORE_FAILED
        if not updated:
            logger.error("Audit meta %s for %s vanished before update", meta.id, document_id)
            return AuditResult.STORE_FAILED

        logger.debug(
            "Audited update of %s: %d field(s) changed", document_id, len(changes)
        )
        return result
