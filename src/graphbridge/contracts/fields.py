# src/graphbridge/contracts/fields.py
"""Field descriptor contracts.

A FieldDescriptor is one row of a class's field table: the name, the declared
type, how the walkers should treat it, and whether it can be read and written.
Tables are built once per class by graphbridge.core.introspection.describe().
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from graphbridge.core.containers import CollectionDescriptor


class FieldKind(StrEnum):
    """How a declared type is walked."""

    TERMINAL = "terminal"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    COMPOSITE = "composite"


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Declared shape of a single field or property.

    Attributes:
        name: Attribute name on the owning instance
        declared_type: Resolved annotation (Optional unwrapped)
        kind: Walk category for the declared type
        collection: Collection operations for SEQUENCE/MAPPING kinds, else None
        readable: Attribute can be read
        writable: Attribute can be assigned
        is_property: Backed by a ``property`` rather than instance storage
    """

    name: str
    declared_type: Any
    kind: FieldKind
    collection: CollectionDescriptor | None = None
    readable: bool = True
    writable: bool = True
    is_property: bool = False

    @property
    def is_collection(self) -> bool:
        return self.kind in (FieldKind.SEQUENCE, FieldKind.MAPPING)

    def get(self, instance: Any) -> Any:
        """Read the field from an instance.

        Missing instance attributes (declared but never assigned) read as None.
        Property getters propagate their own exceptions.
        """
        if self.is_property:
            return getattr(instance, self.name)
        return getattr(instance, self.name, None)

    def set(self, instance: Any, value: Any) -> None:
        setattr(instance, self.name, value)
