"""Tests for settings and service initialization."""

import logging
import textwrap
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from hookie import AuditResult, Auditable, initialize
from hookie.config import AuditConfig, HookieSettings, configure_logging
from hookie.discovery.registry import identity_of
from hookie.discovery.table import save_registry_table
from hookie.errors import ModuleResolutionError, RegistryTableError
from hookie.store import MemoryDocumentStore, StoreConfig

ENV_VARS = (
    "HOOKIE_STORE_URL",
    "DATABASE_URL",
    "HOOKIE_AUDIT_COLLECTION",
    "HOOKIE_META_COLLECTION",
    "HOOKIE_AUDIT_TAGS",
    "HOOKIE_DEFAULT_USER_TYPE",
    "HOOKIE_PROJECT_ROOT",
    "HOOKIE_REGISTRY_TABLE",
    "HOOKIE_LOG_LEVEL",
)


@dataclass
class Invoice(Auditable):
    id: str = field(default="", metadata={"store": "_id"})
    total: int = 0


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_hookie_logger():
    logger = logging.getLogger("hookie")
    level = logger.level
    yield
    logger.setLevel(level)


@pytest.fixture
def project(tmp_path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "shop"\n')
    package = tmp_path / "src" / "shop"
    package.mkdir(parents=True)
    (package / "__init__.py").write_text("")
    (package / "models.py").write_text(textwrap.dedent("""
        from hookie import Auditable


        class Order(Auditable):
            pass
    """))
    return tmp_path


# =============================================================================
# Configuration
# =============================================================================


class TestAuditConfig:
    def test_defaults(self):
        config = AuditConfig.from_env()

        assert config.audit_collection == "audit_logs"
        assert config.meta_collection == "audit_logs_meta"
        assert config.default_tags == ["audit", "log"]
        assert config.default_user_type == "unknown"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("HOOKIE_AUDIT_COLLECTION", "trail")
        monkeypatch.setenv("HOOKIE_META_COLLECTION", "trail_meta")
        monkeypatch.setenv("HOOKIE_AUDIT_TAGS", "billing, audit ,")
        monkeypatch.setenv("HOOKIE_DEFAULT_USER_TYPE", "system")

        config = AuditConfig.from_env()

        assert config.audit_collection == "trail"
        assert config.meta_collection == "trail_meta"
        assert config.default_tags == ["billing", "audit"]
        assert config.default_user_type == "system"

    def test_empty_tags_env_disables_tags(self, monkeypatch):
        monkeypatch.setenv("HOOKIE_AUDIT_TAGS", "")
        assert AuditConfig.from_env().default_tags == []


class TestHookieSettings:
    def test_argument_root_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOOKIE_PROJECT_ROOT", "/elsewhere")
        assert HookieSettings.from_env(tmp_path).project_root == tmp_path

    def test_env_root(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOOKIE_PROJECT_ROOT", str(tmp_path))
        assert HookieSettings.from_env().project_root == tmp_path

    def test_cwd_root(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        assert HookieSettings.from_env().project_root == Path.cwd()

    def test_table_and_log_level(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOOKIE_REGISTRY_TABLE", str(tmp_path / "t.yaml"))
        monkeypatch.setenv("HOOKIE_LOG_LEVEL", "debug")

        settings = HookieSettings.from_env(tmp_path)

        assert settings.registry_table == tmp_path / "t.yaml"
        assert settings.log_level == "DEBUG"
        assert settings.store.is_memory


class TestConfigureLogging:
    def test_accepts_names_and_ints(self):
        configure_logging("debug")
        configure_logging(logging.INFO)
        configure_logging("not-a-level")
        assert logging.getLogger("hookie").level == logging.INFO

    def test_sets_hookie_logger_level(self):
        configure_logging("warning")
        assert logging.getLogger("hookie").level == logging.WARNING


# =============================================================================
# initialize()
# =============================================================================


class TestInitialize:
    def test_scans_project(self, project):
        services = initialize(project)

        assert services.registry.is_sealed
        assert services.registry.list_registered() == ["shop.models.Order"]
        assert services.scan_report.models == ["shop.models.Order"]
        assert isinstance(services.store, MemoryDocumentStore)
        services.close()

    def test_missing_descriptor_fails(self, tmp_path):
        with pytest.raises(ModuleResolutionError):
            initialize(tmp_path)

    def test_loads_registry_table(self, monkeypatch, tmp_path):
        table = tmp_path / "hookie_models.yaml"
        save_registry_table([identity_of(Invoice)], table)
        monkeypatch.setenv("HOOKIE_REGISTRY_TABLE", str(table))

        # no pyproject.toml: the table replaces the source scan
        services = initialize(tmp_path)

        assert services.scan_report is None
        assert services.registry.is_enabled(identity_of(Invoice))

    def test_invalid_registry_table(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOOKIE_REGISTRY_TABLE", str(tmp_path / "missing.yaml"))
        with pytest.raises(RegistryTableError):
            initialize(tmp_path)

    def test_end_to_end_audit(self, monkeypatch, tmp_path):
        table = tmp_path / "hookie_models.yaml"
        save_registry_table([identity_of(Invoice)], table)
        monkeypatch.setenv("HOOKIE_REGISTRY_TABLE", str(table))
        store = MemoryDocumentStore()
        services = initialize(tmp_path, store=store)

        invoice = Invoice(id="inv-1", total=100)
        assert services.dispatcher.after_insert(
            invoice, collection="invoices", document_id="inv-1"
        ) is AuditResult.RECORDED

        invoice.total = 250
        assert services.dispatcher.post_save(
            invoice, collection="invoices", operation="update", document_id="inv-1"
        ) is AuditResult.RECORDED

        [record] = store.find("audit_logs")
        assert record["change"] == {"total": {"old": "100", "new": "250"}}

    def test_explicit_settings_and_sql_store(self, project, tmp_path):
        settings = HookieSettings(
            project_root=project,
            store=StoreConfig(f"sqlite:///{tmp_path / 'audit.db'}"),
            audit=AuditConfig(),
        )

        services = initialize(settings=settings)
        try:
            assert services.registry.is_enabled("shop.models.Order")
            assert services.store.find_one("audit_logs_meta", {"document_id": "x"}) is None
        finally:
            services.close()

    def test_logs_ready(self, project, caplog):
        caplog.set_level(logging.INFO, logger="hookie.bootstrap")
        initialize(project)
        assert "hookie in action" in caplog.text

    def test_applies_configured_log_level(self, monkeypatch, project):
        monkeypatch.setenv("HOOKIE_LOG_LEVEL", "debug")

        initialize(project)

        assert logging.getLogger("hookie").level == logging.DEBUG

    def test_no_log_level_leaves_logging_alone(self, project):
        logging.getLogger("hookie").setLevel(logging.ERROR)

        settings = HookieSettings.from_env(project)
        initialize(settings=settings)

        assert settings.log_level is None
        assert logging.getLogger("hookie").level == logging.ERROR
