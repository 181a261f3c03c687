"""Capability Probe — which hooks a model implements and whether it is audited.

Pure queries over type metadata; nothing here mutates registry state.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any

from hookie.discovery.registry import ModelRegistry, identity_of
from hookie.hooks.types import HOOK_PROTOCOLS, HookPoint


@dataclass(frozen=True)
class Capabilities:
    """Result of probing one model instance."""

    before_insert: bool
    after_insert: bool
    pre_save: bool
    post_save: bool
    audit_enabled: bool

    def has_hook(self, hook_point: HookPoint) -> bool:
        return getattr(self, hook_point.value)


def _accepts_event(method: Any) -> bool:
    """True if the bound method can be called with a single event argument."""
    try:
        inspect.signature(method).bind(None)
    except TypeError:
        return False
    except ValueError:
        # no introspectable signature (builtins); trust the name
        return True
    return True


def has_hook(model: Any, hook_point: HookPoint) -> bool:
    """Check whether a model implements the hook for one lifecycle event."""
    if not isinstance(model, HOOK_PROTOCOLS[hook_point]):
        return False
    method = getattr(model, hook_point.value, None)
    return callable(method) and _accepts_event(method)


def probe(model: Any, registry: ModelRegistry) -> Capabilities:
    """Probe every lifecycle hook and the audit flag of a model.

    Raises:
        RegistryNotReadyError: If the registry has not been sealed
    """
    return Capabilities(
        before_insert=has_hook(model, HookPoint.BEFORE_INSERT),
        after_insert=has_hook(model, HookPoint.AFTER_INSERT),
        pre_save=has_hook(model, HookPoint.PRE_SAVE),
        post_save=has_hook(model, HookPoint.POST_SAVE),
        audit_enabled=registry.is_enabled(identity_of(model)),
    )
