"""Model registry for Hookie.

Maps fully-qualified model type identities to their audit-enabled flag.
Follows a write-once, read-many lifecycle: identities are registered during
startup (by the Source Inspector or from a registry table), then the
registry is sealed and only read from.
"""

import logging
import threading
from typing import Any

from hookie.errors import RegistryNotReadyError, RegistrySealedError

logger = logging.getLogger(__name__)


def identity_of(model_or_type: Any) -> str:
    """Return the fully-qualified identity of a model instance or class.

    Example: ``identity_of(Invoice())`` -> ``"billing.models.Invoice"``
    """
    cls = model_or_type if isinstance(model_or_type, type) else type(model_or_type)
    return f"{cls.__module__}.{cls.__qualname__}"


class ModelRegistry:
    """Registry of audit-enabled model types.

    Construct one per process, populate it during startup, then call
    ``seal()``. Queries made before sealing raise RegistryNotReadyError so a
    dispatch issued during startup fails instead of racing the scan.

    Example:
        registry = ModelRegistry()
        registry.register("billing.models.Invoice")
        registry.seal()
        registry.is_enabled("billing.models.Invoice")  # True
    """

    def __init__(self) -> None:
        self._models: dict[str, bool] = {}
        self._lock = threading.Lock()
        self._sealed = False

    def register(self, identity: str) -> None:
        """Mark a model identity as audit-enabled.

        Idempotent — re-registering the same identity is a no-op.

        Raises:
            RegistrySealedError: If the registry has already been sealed
        """
        with self._lock:
            if self._sealed:
                raise RegistrySealedError(
                    f"Cannot register '{identity}': registry is sealed"
                )
            if identity in self._models:
                return
            self._models[identity] = True
        logger.info("Registered audit-enabled model %s", identity)

    def seal(self) -> None:
        """Finish the population phase. Further writes are rejected."""
        with self._lock:
            self._sealed = True

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    def is_enabled(self, identity: str) -> bool:
        """Report whether a model identity is registered and enabled.

        Raises:
            RegistryNotReadyError: If called before ``seal()``
        """
        if not self._sealed:
            raise RegistryNotReadyError(
                "Model registry queried before initialization completed"
            )
        return self._models.get(identity, False)

    def is_model_enabled(self, model_or_type: Any) -> bool:
        """Shortcut for ``is_enabled(identity_of(model_or_type))``."""
        return self.is_enabled(identity_of(model_or_type))

    def list_registered(self) -> list[str]:
        """List all registered identities, sorted."""
        with self._lock:
            return sorted(self._models)

    def __contains__(self, identity: object) -> bool:
        return identity in self._models

    def __len__(self) -> int:
        return len(self._models)
