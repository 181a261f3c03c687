"""Source Inspector — static discovery of audit-enabled models.

Walks the project's source roots, parses every module with ``ast`` (nothing
is imported or executed) and finds class declarations that carry the
``Auditable`` marker, either as a base class or as an annotated class-body
field (``audit: Auditable | None = None``). Each match is registered in a
ModelRegistry under ``<module>.<qualname>``.

Failure policy:
- an unreadable or unparseable file is logged and skipped;
- a file whose path does not map to a module name is logged and skipped;
- a missing or malformed ``pyproject.toml`` aborts the scan
  (ModuleResolutionError), since identities cannot be resolved without it.
"""

from __future__ import annotations

import ast
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from hookie.discovery.project import ProjectDescriptor, load_descriptor, module_name_for
from hookie.discovery.registry import ModelRegistry
from hookie.errors import DiscoveryError

logger = logging.getLogger(__name__)

MARKER_NAME = "Auditable"
MARKER_MODULES = frozenset({"hookie", "hookie.marker"})

_OPTIONAL_WRAPPERS = frozenset({"Optional", "typing.Optional", "Union", "typing.Union"})


@dataclass
class SkippedFile:
    """A source file the scan could not inspect."""

    path: Path
    reason: str


@dataclass
class ScanReport:
    """Outcome of one Source Inspector pass.

    Attributes:
        modules_scanned: Number of modules parsed successfully
        models: Identities found, in discovery order
        skipped: Files that were skipped, with the reason
    """

    modules_scanned: int = 0
    models: list[str] = field(default_factory=list)
    skipped: list[SkippedFile] = field(default_factory=list)


# =============================================================================
# AST helpers
# =============================================================================


def _dotted(node: ast.expr) -> str | None:
    """Render a Name/Attribute chain as a dotted string, else None."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = _dotted(node.value)
        return f"{base}.{node.attr}" if base else None
    return None


@dataclass
class _MarkerBindings:
    """Names under which the marker is reachable inside one module."""

    names: set[str] = field(default_factory=set)
    modules: set[str] = field(default_factory=set)

    @classmethod
    def collect(cls, tree: ast.Module) -> _MarkerBindings:
        bindings = cls()
        for node in ast.walk(tree):
            if isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                for alias in node.names:
                    if node.module in MARKER_MODULES and alias.name in (MARKER_NAME, "*"):
                        bindings.names.add(alias.asname or MARKER_NAME)
                    elif f"{node.module}.{alias.name}" in MARKER_MODULES:
                        bindings.modules.add(alias.asname or alias.name)
            elif isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.name not in MARKER_MODULES:
                        continue
                    if alias.asname:
                        bindings.modules.add(alias.asname)
                    else:
                        # "import hookie.marker" binds "hookie" and makes the
                        # full dotted path usable as a qualifier
                        bindings.modules.add(alias.name)
                        bindings.modules.add(alias.name.split(".")[0])
            elif isinstance(node, ast.ClassDef) and node.name == MARKER_NAME:
                bindings.names.add(MARKER_NAME)
        return bindings

    def refers_to_marker(self, node: ast.expr | None) -> bool:
        """True if a type expression is the marker, by value or by reference."""
        if node is None:
            return False
        if isinstance(node, ast.Name):
            return node.id in self.names
        if isinstance(node, ast.Attribute):
            return node.attr == MARKER_NAME and _dotted(node.value) in self.modules
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            try:
                inner = ast.parse(node.value, mode="eval").body
            except SyntaxError:
                return False
            return self.refers_to_marker(inner)
        if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
            return self.refers_to_marker(node.left) or self.refers_to_marker(node.right)
        if isinstance(node, ast.Subscript) and _dotted(node.value) in _OPTIONAL_WRAPPERS:
            args = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
            return any(self.refers_to_marker(a) for a in args)
        return False


def _iter_classes(body: list[ast.stmt], prefix: str = ""):
    """Yield (qualname, ClassDef) for module-level and nested classes."""
    for stmt in body:
        if isinstance(stmt, ast.ClassDef):
            qualname = f"{prefix}{stmt.name}"
            yield qualname, stmt
            yield from _iter_classes(stmt.body, f"{qualname}.")


def _embeds_marker(cls: ast.ClassDef, bindings: _MarkerBindings) -> bool:
    if any(bindings.refers_to_marker(base) for base in cls.bases):
        return True
    for stmt in cls.body:
        if (
            isinstance(stmt, ast.AnnAssign)
            and isinstance(stmt.target, ast.Name)
            and bindings.refers_to_marker(stmt.annotation)
        ):
            return True
    return False


def find_marked_classes(tree: ast.Module) -> list[str]:
    """Return qualnames of classes in a parsed module that carry the marker.

    Classes that inherit from a marked class declared in the same module are
    included as well.
    """
    bindings = _MarkerBindings.collect(tree)
    classes = list(_iter_classes(tree.body))
    marked = {q for q, c in classes if _embeds_marker(c, bindings)}

    changed = True
    while changed:
        changed = False
        for qualname, cls in classes:
            if qualname in marked:
                continue
            if any(_dotted(base) in marked for base in cls.bases):
                marked.add(qualname)
                changed = True

    return [q for q, _ in classes if q in marked]


# =============================================================================
# Inspector
# =============================================================================


class SourceInspector:
    """One-shot scanner that populates a ModelRegistry from source.

    Example:
        registry = ModelRegistry()
        report = SourceInspector("/srv/app").scan(registry)
        registry.seal()
    """

    def __init__(self, root: Path | str, descriptor: ProjectDescriptor | None = None):
        self.root = Path(root)
        self._descriptor = descriptor

    @property
    def descriptor(self) -> ProjectDescriptor:
        """The project descriptor, loaded on first access (may raise)."""
        if self._descriptor is None:
            self._descriptor = load_descriptor(self.root)
        return self._descriptor

    def iter_source_files(self):
        """Yield (path, source_root) for every candidate module, sorted."""
        descriptor = self.descriptor
        seen: set[Path] = set()
        for source_root in descriptor.source_roots:
            if not source_root.is_dir():
                logger.warning("Source root %s does not exist, skipping", source_root)
                continue
            for dirpath, dirnames, filenames in os.walk(source_root):
                dirnames[:] = sorted(d for d in dirnames if not descriptor.is_excluded(d))
                for filename in sorted(filenames):
                    if not filename.endswith(".py"):
                        continue
                    path = Path(dirpath) / filename
                    if path in seen:
                        continue
                    seen.add(path)
                    yield path, source_root

    def scan(self, registry: ModelRegistry) -> ScanReport:
        """Inspect the whole tree and register every marked model.

        Raises:
            ModuleResolutionError: If the project descriptor cannot be read
        """
        descriptor = self.descriptor
        report = ScanReport()
        logger.info(
            "Scanning %s for audit-enabled models (roots: %s)",
            descriptor.name,
            ", ".join(str(r) for r in descriptor.source_roots),
        )

        for path, source_root in self.iter_source_files():
            try:
                identities = self.inspect_file(path, source_root)
            except DiscoveryError as e:
                logger.warning("Skipping %s: %s", path, e)
                report.skipped.append(SkippedFile(path=path, reason=str(e)))
                continue

            report.modules_scanned += 1
            for identity in identities:
                registry.register(identity)
                report.models.append(identity)

        logger.info(
            "Scan complete: %d module(s), %d model(s), %d skipped",
            report.modules_scanned,
            len(report.models),
            len(report.skipped),
        )
        return report

    def inspect_file(self, path: Path, source_root: Path) -> list[str]:
        """Return the identities of marked classes declared in one file.

        Raises:
            DiscoveryError: If the file cannot be read, parsed or named
        """
        module = module_name_for(path, source_root)
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DiscoveryError(f"could not read file: {e}") from e
        try:
            tree = ast.parse(source, filename=str(path))
        except (SyntaxError, ValueError) as e:
            raise DiscoveryError(f"could not parse file: {e}") from e

        return [f"{module}.{qualname}" for qualname in find_marked_classes(tree)]


def discover_models(root: Path | str) -> tuple[ModelRegistry, ScanReport]:
    """Scan a project and return a sealed registry with the scan report."""
    registry = ModelRegistry()
    report = SourceInspector(root).scan(registry)
    registry.seal()
    return registry, report
