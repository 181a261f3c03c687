"""Document store layer — protocol, adapters and factory."""

from hookie.store.adapter import DocumentStore
from hookie.store.config import StoreConfig, create_store
from hookie.store.memory import MemoryDocumentStore

__all__ = ["DocumentStore", "MemoryDocumentStore", "StoreConfig", "create_store"]
