"""Project descriptor and module path resolution.

Reads the project's ``pyproject.toml`` to find its source roots and scan
exclusions, and maps source files to dotted module names. The dotted name is
what ``cls.__module__`` reports at runtime, so identities computed here match
identities computed from live instances.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from hookie.errors import DiscoveryError, ModuleResolutionError

DESCRIPTOR_NAME = "pyproject.toml"

DEFAULT_EXCLUDE_PREFIXES = (
    ".",
    "__pycache__",
    "build",
    "dist",
    "vendor",
    "cmd",
    "venv",
    "node_modules",
    "site-packages",
    "migrations",
)


@dataclass
class ProjectDescriptor:
    """Resolved layout of the project being scanned.

    Attributes:
        root: Project root directory (holds pyproject.toml)
        name: Project name from [project], or the root directory name
        source_roots: Directories that act as import roots
        exclude_prefixes: Directory name prefixes skipped during the scan
    """

    root: Path
    name: str
    source_roots: list[Path] = field(default_factory=list)
    exclude_prefixes: tuple[str, ...] = DEFAULT_EXCLUDE_PREFIXES

    def is_excluded(self, directory_name: str) -> bool:
        return any(directory_name.startswith(p) for p in self.exclude_prefixes)


def load_descriptor(root: Path | str) -> ProjectDescriptor:
    """Read ``pyproject.toml`` under root and resolve the source roots.

    Source root precedence:
    1. [tool.hookie] source-roots
    2. [tool.setuptools.packages.find] where
    3. ``src`` if that directory exists
    4. the project root itself

    Raises:
        ModuleResolutionError: If the descriptor is missing or malformed
    """
    root = Path(root).resolve()
    descriptor_path = root / DESCRIPTOR_NAME

    try:
        data = tomllib.loads(descriptor_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ModuleResolutionError(
            f"could not read {DESCRIPTOR_NAME} at {descriptor_path}: {e}"
        ) from e
    except tomllib.TOMLDecodeError as e:
        raise ModuleResolutionError(
            f"could not parse {descriptor_path}: {e}"
        ) from e

    tool = data.get("tool", {})
    hookie_cfg = tool.get("hookie", {})
    name = data.get("project", {}).get("name") or root.name

    roots = hookie_cfg.get("source-roots")
    if roots is None:
        roots = tool.get("setuptools", {}).get("packages", {}).get("find", {}).get("where")
    if roots is None:
        roots = ["src"] if (root / "src").is_dir() else ["."]
    if isinstance(roots, str):
        roots = [roots]

    extra_exclude = hookie_cfg.get("exclude", [])
    if not isinstance(extra_exclude, list):
        raise ModuleResolutionError(
            f"[tool.hookie] exclude must be a list in {descriptor_path}"
        )

    return ProjectDescriptor(
        root=root,
        name=name,
        source_roots=[(root / r).resolve() for r in roots],
        exclude_prefixes=DEFAULT_EXCLUDE_PREFIXES + tuple(extra_exclude),
    )


def module_name_for(path: Path, source_root: Path) -> str:
    """Map a source file to its dotted module name relative to source_root.

    ``pkg/sub/mod.py`` -> ``pkg.sub.mod``; ``pkg/__init__.py`` -> ``pkg``.

    Raises:
        DiscoveryError: If the path does not map to a valid module name
    """
    try:
        relative = path.resolve().relative_to(source_root)
    except ValueError as e:
        raise DiscoveryError(f"{path} is outside source root {source_root}") from e

    parts = list(relative.with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    if not parts or not all(p.isidentifier() for p in parts):
        raise DiscoveryError(f"cannot derive a module name from {relative}")
    return ".".join(parts)
