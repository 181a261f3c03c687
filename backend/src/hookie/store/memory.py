"""In-memory document store.

Thread-safe and copy-on-read/write, so callers can never mutate stored
state through a returned document. Used for tests and for the default
``memory://`` store URL.
"""

from __future__ import annotations

import copy
import threading
import uuid
from typing import Any

from hookie.errors import StoreError
from hookie.store.query import apply_set, matches


class MemoryDocumentStore:
    """Dict-backed DocumentStore."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def insert_one(self, collection: str, document: dict[str, Any]) -> str:
        doc = copy.deepcopy(document)
        doc_id = str(doc.get("_id") or uuid.uuid4().hex)
        doc["_id"] = doc_id
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            if doc_id in docs:
                raise StoreError(f"duplicate _id '{doc_id}' in collection '{collection}'")
            docs[doc_id] = doc
        return doc_id

    def find_one(
        self, collection: str, filter: dict[str, Any]
    ) -> dict[str, Any] | None:
        with self._lock:
            for doc in self._collections.get(collection, {}).values():
                if matches(doc, filter):
                    return copy.deepcopy(doc)
        return None

    def find(self, collection: str, filter: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Return every matching document, in insertion order."""
        with self._lock:
            return [
                copy.deepcopy(doc)
                for doc in self._collections.get(collection, {}).values()
                if matches(doc, filter or {})
            ]

    def update_by_id(
        self, collection: str, document_id: str, fields: dict[str, Any]
    ) -> bool:
        with self._lock:
            doc = self._collections.get(collection, {}).get(str(document_id))
            if doc is None:
                return False
            apply_set(doc, copy.deepcopy(fields))
        return True

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._collections.get(collection, {}))

    def close(self) -> None:
        pass
