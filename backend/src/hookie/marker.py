"""Capability marker for audit-enabled models.

A model opts into audit tracking by inheriting from ``Auditable`` or by
declaring a class-level annotated field of that type:

    @dataclass
    class Invoice(Auditable):
        number: str

    @dataclass
    class Customer:
        audit: Auditable | None = None
        name: str = ""

The marker carries no state. Detection is static: the Source Inspector reads
class declarations without importing them.
"""


class Auditable:
    """Zero-size marker signalling participation in the hook/audit system."""

    __slots__ = ()
