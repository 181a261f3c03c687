"""Store configuration and adapter factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hookie.store.adapter import DocumentStore


@dataclass
class StoreConfig:
    """Document store connection configuration.

    Supports memory://, sqlite:/// and postgresql:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls) -> StoreConfig:
        """Create config from environment variables.

        Resolution order:
        1. HOOKIE_STORE_URL env var
        2. DATABASE_URL env var (standard)
        3. Default: memory://
        """
        url = os.environ.get("HOOKIE_STORE_URL") or os.environ.get("DATABASE_URL")
        return cls(url=url or "memory://")

    @property
    def is_memory(self) -> bool:
        return self.url.startswith("memory")

    @property
    def is_sql(self) -> bool:
        return self.url.startswith(("sqlite", "postgresql"))

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver.
        """
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.url


def create_store(config: StoreConfig) -> DocumentStore:
    """Create a document store based on the URL scheme.

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_memory:
        from hookie.store.memory import MemoryDocumentStore

        return MemoryDocumentStore()

    if config.is_sql:
        from hookie.store.sql import SQLDocumentStore

        return SQLDocumentStore(config.sqlalchemy_url)

    raise ValueError(f"Unsupported store URL scheme: {config.url}")
