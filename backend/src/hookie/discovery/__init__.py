"""Discovery of audit-enabled models: registry, source inspector, table."""

from hookie.discovery.inspector import (
    ScanReport,
    SkippedFile,
    SourceInspector,
    discover_models,
    find_marked_classes,
)
from hookie.discovery.project import ProjectDescriptor, load_descriptor
from hookie.discovery.registry import ModelRegistry, identity_of
from hookie.discovery.table import (
    load_registry_table,
    read_registry_table,
    save_registry_table,
)

__all__ = [
    "ModelRegistry",
    "ProjectDescriptor",
    "ScanReport",
    "SkippedFile",
    "SourceInspector",
    "discover_models",
    "find_marked_classes",
    "identity_of",
    "load_descriptor",
    "load_registry_table",
    "read_registry_table",
    "save_registry_table",
]
