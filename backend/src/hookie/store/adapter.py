"""DocumentStore Protocol — the interface Hookie consumes from a data store."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DocumentStore(Protocol):
    """Synchronous CRUD against named collections.

    Documents are plain dicts. The store assigns an ``_id`` on insert when the
    document does not carry one. Filters are equality matches; dotted keys
    address nested fields (``{"document_current_state._id": "abc"}``).

    All failures raise StoreError. A missing document is not a failure:
    ``find_one`` returns None and ``update_by_id`` returns False.
    """

    def insert_one(self, collection: str, document: dict[str, Any]) -> str: ...

    def find_one(
        self, collection: str, filter: dict[str, Any]
    ) -> dict[str, Any] | None: ...

    def update_by_id(
        self, collection: str, document_id: str, fields: dict[str, Any]
    ) -> bool: ...

    def close(self) -> None: ...
