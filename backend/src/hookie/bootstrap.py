"""Initialize Hookie services for a host application.

Call ``initialize()`` once at process start, before any model is saved.
The returned registry is sealed; dispatcher calls made before this returns
fail with RegistryNotReadyError instead of racing the scan.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from hookie.audit.engine import AuditTrailEngine
from hookie.config import HookieSettings, configure_logging
from hookie.discovery.inspector import ScanReport, SourceInspector
from hookie.discovery.registry import ModelRegistry
from hookie.discovery.table import load_registry_table
from hookie.hooks.dispatcher import HookDispatcher
from hookie.store.adapter import DocumentStore
from hookie.store.config import create_store

logger = logging.getLogger(__name__)


@dataclass
class HookieServices:
    """Container for all initialized Hookie services."""

    settings: HookieSettings
    registry: ModelRegistry
    store: DocumentStore
    engine: AuditTrailEngine
    dispatcher: HookDispatcher
    scan_report: ScanReport | None = None

    def close(self) -> None:
        self.store.close()


def initialize(
    project_root: Path | None = None,
    store: DocumentStore | None = None,
    settings: HookieSettings | None = None,
) -> HookieServices:
    """Build the registry, store, engine and dispatcher.

    The registry comes from the registry table when one is configured
    (HOOKIE_REGISTRY_TABLE), otherwise from a source scan of the project.
    When a log level is configured (HOOKIE_LOG_LEVEL) it is applied first.

    Raises:
        ModuleResolutionError: If the project descriptor cannot be read
        RegistryTableError: If the configured registry table is invalid
    """
    settings = settings or HookieSettings.from_env(project_root)
    if settings.log_level:
        configure_logging(settings.log_level)

    registry = ModelRegistry()
    scan_report = None
    if settings.registry_table is not None:
        models = load_registry_table(settings.registry_table, registry)
        logger.info(
            "Loaded %d audit-enabled model(s) from %s", len(models), settings.registry_table
        )
    else:
        scan_report = SourceInspector(settings.project_root).scan(registry)
    registry.seal()

    store = store or create_store(settings.store)
    engine = AuditTrailEngine(store, settings.audit)
    dispatcher = HookDispatcher(registry, engine)
    logger.info("hookie in action (%d audited model(s))", len(registry))

    return HookieServices(
        settings=settings,
        registry=registry,
        store=store,
        engine=engine,
        dispatcher=dispatcher,
        scan_report=scan_report,
    )
