"""Hookie configuration resolved from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from hookie.store.config import StoreConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _split_tags(raw: str) -> list[str]:
    return [t.strip() for t in raw.split(",") if t.strip()]


@dataclass
class AuditConfig:
    """Where and how the audit trail is written.

    Attributes:
        audit_collection: Collection for change records
        meta_collection: Collection for meta (latest snapshot) records
        default_tags: Tags added to every audit record
        default_user_type: user_type recorded when the context has none
    """

    audit_collection: str = "audit_logs"
    meta_collection: str = "audit_logs_meta"
    default_tags: list[str] = field(default_factory=lambda: ["audit", "log"])
    default_user_type: str = "unknown"

    @classmethod
    def from_env(cls) -> AuditConfig:
        defaults = cls()
        tags = os.environ.get("HOOKIE_AUDIT_TAGS")
        return cls(
            audit_collection=os.environ.get("HOOKIE_AUDIT_COLLECTION", defaults.audit_collection),
            meta_collection=os.environ.get("HOOKIE_META_COLLECTION", defaults.meta_collection),
            default_tags=_split_tags(tags) if tags is not None else defaults.default_tags,
            default_user_type=os.environ.get(
                "HOOKIE_DEFAULT_USER_TYPE", defaults.default_user_type
            ),
        )


@dataclass
class HookieSettings:
    """Top-level settings used by bootstrap and the CLI."""

    project_root: Path
    store: StoreConfig
    audit: AuditConfig
    registry_table: Path | None = None
    log_level: str | None = None

    @classmethod
    def from_env(cls, project_root: Path | None = None) -> HookieSettings:
        """Create settings from environment variables.

        Resolution order for the project root:
        1. project_root argument
        2. HOOKIE_PROJECT_ROOT env var
        3. Current working directory
        """
        root = project_root or Path(os.environ.get("HOOKIE_PROJECT_ROOT") or Path.cwd())
        table = os.environ.get("HOOKIE_REGISTRY_TABLE")
        return cls(
            project_root=Path(root),
            store=StoreConfig.from_env(),
            audit=AuditConfig.from_env(),
            registry_table=Path(table) if table else None,
            log_level=os.environ.get("HOOKIE_LOG_LEVEL", "").upper() or None,
        )


def configure_logging(level: str | int = "INFO") -> None:
    """Install a basic stderr handler and set the ``hookie`` logger level.

    The handler is only added when the root logger has none; the level
    always applies to Hookie's own loggers.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("hookie").setLevel(level)
