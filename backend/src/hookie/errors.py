"""Exception hierarchy for Hookie."""


class HookieError(Exception):
    """Base class for all Hookie errors."""


class DiscoveryError(HookieError):
    """A single source file could not be inspected."""


class ModuleResolutionError(DiscoveryError):
    """The project descriptor could not be read or parsed.

    Fatal: type identities cannot be trusted without it.
    """


class RegistryError(HookieError):
    """Base class for model registry errors."""


class RegistrySealedError(RegistryError):
    """A write was attempted after the registry was sealed."""


class RegistryNotReadyError(RegistryError):
    """The registry was queried before initialization completed."""


class RegistryTableError(RegistryError):
    """A registry table file is unreadable or malformed."""


class SnapshotError(HookieError):
    """A model instance cannot be decomposed into a field-keyed snapshot."""


class StoreError(HookieError):
    """A document store operation failed."""


class AuditCancelledError(HookieError):
    """The caller's context was cancelled or its deadline passed."""
