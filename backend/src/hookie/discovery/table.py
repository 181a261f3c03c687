"""Registry table — the build-step form of the model registry.

``hookie scan --output hookie_models.yaml`` writes the identities found by
the Source Inspector to a YAML file that can be committed or shipped with a
build. At startup, ``load_registry_table`` populates a registry from it
without parsing any source.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import yaml

from hookie.discovery.registry import ModelRegistry
from hookie.errors import RegistryTableError

TABLE_VERSION = 1


def save_registry_table(identities: list[str], path: Path) -> None:
    """Write identities to a YAML registry table."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "version": TABLE_VERSION,
        "generated_at": datetime.now(UTC).isoformat(),
        "models": sorted(set(identities)),
    }
    with open(path, "w") as f:
        yaml.safe_dump(data, f, sort_keys=False)


def read_registry_table(path: Path) -> list[str]:
    """Read the identities listed in a registry table.

    Raises:
        RegistryTableError: If the file is missing, unparseable or malformed
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise RegistryTableError(f"could not read registry table {path}: {e}") from e
    except yaml.YAMLError as e:
        raise RegistryTableError(f"could not parse registry table {path}: {e}") from e

    if not isinstance(data, dict):
        raise RegistryTableError(f"registry table {path} must be a mapping")
    if data.get("version") != TABLE_VERSION:
        raise RegistryTableError(
            f"unsupported registry table version {data.get('version')!r} in {path}"
        )
    models = data.get("models") or []
    if not isinstance(models, list) or not all(isinstance(m, str) for m in models):
        raise RegistryTableError(f"'models' in {path} must be a list of strings")
    return models


def load_registry_table(path: Path, registry: ModelRegistry) -> list[str]:
    """Register every identity listed in the table and return them."""
    models = read_registry_table(path)
    for identity in models:
        registry.register(identity)
    return models
