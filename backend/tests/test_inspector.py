"""Tests for the Source Inspector (static model discovery)."""

import ast
import logging
import textwrap
from pathlib import Path

import pytest

from hookie.discovery.inspector import SourceInspector, discover_models, find_marked_classes
from hookie.discovery.project import load_descriptor, module_name_for
from hookie.discovery.registry import ModelRegistry
from hookie.errors import DiscoveryError, ModuleResolutionError


def _marked(source: str) -> list[str]:
    return find_marked_classes(ast.parse(textwrap.dedent(source)))


def _write(root: Path, relative: str, content: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content))
    return path


@pytest.fixture
def project(tmp_path):
    """A small src-layout project with a mix of marked and plain models."""
    _write(tmp_path, "pyproject.toml", """
        [project]
        name = "shop"
    """)
    _write(tmp_path, "src/shop/__init__.py", "")
    _write(tmp_path, "src/shop/models.py", """
        from dataclasses import dataclass

        from hookie import Auditable


        @dataclass
        class Order(Auditable):
            total: int = 0


        @dataclass
        class Note:
            text: str = ""
    """)
    _write(tmp_path, "src/shop/billing/__init__.py", """
        import hookie.marker as hm


        class Invoice:
            audit: hm.Auditable | None = None
            number: str = ""
    """)
    return tmp_path


# =============================================================================
# Marker matching
# =============================================================================


class TestFindMarkedClasses:
    def test_base_class_from_import(self):
        assert _marked("""
            from hookie import Auditable
            class A(Auditable): pass
        """) == ["A"]

    def test_aliased_import(self):
        assert _marked("""
            from hookie.marker import Auditable as Tracked
            class A(Tracked): pass
        """) == ["A"]

    def test_qualified_module_reference(self):
        assert _marked("""
            import hookie
            class A(hookie.Auditable): pass
        """) == ["A"]

    def test_dotted_module_reference(self):
        assert _marked("""
            import hookie.marker
            class A(hookie.marker.Auditable): pass
        """) == ["A"]

    def test_from_package_import_module(self):
        assert _marked("""
            from hookie import marker
            class A(marker.Auditable): pass
        """) == ["A"]

    def test_marker_declared_in_same_unit(self):
        assert _marked("""
            class Auditable: pass
            class A(Auditable): pass
        """) == ["A"]

    def test_annotated_field_by_value(self):
        assert _marked("""
            from hookie import Auditable
            class A:
                audit: Auditable
                name: str
        """) == ["A"]

    def test_annotated_field_by_reference(self):
        assert _marked("""
            from typing import Optional
            from hookie import Auditable
            class A:
                audit: Optional[Auditable] = None
            class B:
                audit: Auditable | None = None
            class C:
                audit: "Auditable | None" = None
        """) == ["A", "B", "C"]

    def test_marker_not_first_field(self):
        assert _marked("""
            from hookie import Auditable
            class A:
                name: str = ""
                total: int = 0
                audit: Auditable | None = None
        """) == ["A"]

    def test_unrelated_auditable_not_matched(self):
        assert _marked("""
            from other.lib import Auditable
            class A(Auditable): pass
        """) == []

    def test_other_module_qualifier_not_matched(self):
        assert _marked("""
            import other
            class A(other.Auditable): pass
        """) == []

    def test_list_of_marker_not_matched(self):
        assert _marked("""
            from hookie import Auditable
            class A:
                items: list[Auditable] = []
        """) == []

    def test_plain_class_not_matched(self):
        assert _marked("class A:\n    name: str = ''\n") == []

    def test_nested_class_qualname(self):
        assert _marked("""
            from hookie import Auditable
            class Outer:
                class Inner(Auditable): pass
        """) == ["Outer.Inner"]

    def test_local_subclass_of_marked_class(self):
        assert _marked("""
            from hookie import Auditable
            class Child(Base): pass
            class Base(Auditable): pass
            class Unrelated: pass
        """) == ["Child", "Base"]

    def test_classes_inside_functions_ignored(self):
        assert _marked("""
            from hookie import Auditable
            def factory():
                class Local(Auditable): pass
                return Local
        """) == []


# =============================================================================
# Project descriptor
# =============================================================================


class TestProjectDescriptor:
    def test_missing_descriptor_is_fatal(self, tmp_path):
        with pytest.raises(ModuleResolutionError, match="could not read"):
            load_descriptor(tmp_path)

    def test_malformed_descriptor_is_fatal(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[project\nname = ")
        with pytest.raises(ModuleResolutionError, match="could not parse"):
            load_descriptor(tmp_path)

    def test_defaults_to_src_layout(self, project):
        descriptor = load_descriptor(project)
        assert descriptor.name == "shop"
        assert descriptor.source_roots == [(project / "src").resolve()]

    def test_flat_layout(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("")
        descriptor = load_descriptor(tmp_path)
        assert descriptor.source_roots == [tmp_path.resolve()]
        assert descriptor.name == tmp_path.name

    def test_setuptools_where(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(
            '[tool.setuptools.packages.find]\nwhere = ["lib"]\n'
        )
        assert load_descriptor(tmp_path).source_roots == [(tmp_path / "lib").resolve()]

    def test_hookie_settings_take_precedence(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(
            '[tool.setuptools.packages.find]\nwhere = ["lib"]\n'
            '[tool.hookie]\nsource-roots = ["app"]\nexclude = ["legacy"]\n'
        )
        descriptor = load_descriptor(tmp_path)
        assert descriptor.source_roots == [(tmp_path / "app").resolve()]
        assert descriptor.is_excluded("legacy_models")
        assert descriptor.is_excluded("build")
        assert not descriptor.is_excluded("models")

    def test_module_name_for(self, tmp_path):
        root = tmp_path.resolve()
        assert module_name_for(root / "pkg" / "mod.py", root) == "pkg.mod"
        assert module_name_for(root / "pkg" / "__init__.py", root) == "pkg"

    def test_module_name_for_invalid_path(self, tmp_path):
        root = tmp_path.resolve()
        with pytest.raises(DiscoveryError):
            module_name_for(root / "my-scripts" / "mod.py", root)


# =============================================================================
# Full scan
# =============================================================================


class TestSourceInspector:
    def test_scan_registers_marked_models(self, project):
        registry = ModelRegistry()
        report = SourceInspector(project).scan(registry)
        registry.seal()

        assert report.models == ["shop.models.Order", "shop.billing.Invoice"]
        assert registry.is_enabled("shop.models.Order")
        assert registry.is_enabled("shop.billing.Invoice")
        assert not registry.is_enabled("shop.models.Note")
        assert report.modules_scanned == 3

    def test_excluded_directories_skipped(self, project):
        _write(project, "src/shop/cmd/run.py", """
            from hookie import Auditable
            class Job(Auditable): pass
        """)
        _write(project, "src/shop/vendor_lib/thing.py", """
            from hookie import Auditable
            class Thing(Auditable): pass
        """)
        registry, report = discover_models(project)
        assert "shop.cmd.run.Job" not in report.models
        assert "shop.vendor_lib.thing.Thing" not in report.models

    def test_parse_failure_skips_file_and_continues(self, project, caplog):
        _write(project, "src/shop/broken.py", "class Oops(:\n")
        registry = ModelRegistry()
        with caplog.at_level(logging.WARNING, logger="hookie.discovery.inspector"):
            report = SourceInspector(project).scan(registry)

        assert "shop.models.Order" in report.models
        assert [s.path.name for s in report.skipped] == ["broken.py"]
        assert "could not parse" in report.skipped[0].reason
        assert "broken.py" in caplog.text

    def test_unnameable_module_skipped(self, project):
        _write(project, "src/shop/my-scripts/tool.py", """
            from hookie import Auditable
            class Tool(Auditable): pass
        """)
        _, report = discover_models(project)
        assert any(s.path.name == "tool.py" for s in report.skipped)
        assert not any("Tool" in m for m in report.models)

    def test_missing_descriptor_aborts_scan(self, tmp_path):
        _write(tmp_path, "models.py", "from hookie import Auditable\nclass A(Auditable): pass\n")
        with pytest.raises(ModuleResolutionError):
            SourceInspector(tmp_path).scan(ModelRegistry())

    def test_source_is_never_executed(self, project):
        _write(project, "src/shop/side_effect.py", """
            raise RuntimeError("imported!")
            from hookie import Auditable
            class Boom(Auditable): pass
        """)
        _, report = discover_models(project)
        assert "shop.side_effect.Boom" in report.models

    def test_discover_models_returns_sealed_registry(self, project):
        registry, _ = discover_models(project)
        assert registry.is_sealed
