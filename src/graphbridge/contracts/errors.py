# src/graphbridge/contracts/errors.py
"""Error taxonomy for graph operations.

Structural limits (cycles, depth) and conversion mismatches are NOT errors:
they surface as sentinel values or pass-through values and the walk carries on.
Only operations where the caller explicitly asked for a typed mutation raise.

Hierarchy:
    GraphBridgeError
    └── InvalidOperationError
        ├── ElementTypeMismatchError   (append of an incompatible element)
        └── ElementConstructionError   (no parameterless constructor)
"""

from __future__ import annotations

from typing import Any


class GraphBridgeError(Exception):
    """Base class for all graphbridge errors."""


class InvalidOperationError(GraphBridgeError):
    """Raised when a requested typed-graph mutation cannot be honoured."""


class ElementTypeMismatchError(InvalidOperationError):
    """Raised when an element cannot be placed into a typed collection.

    The collection is left unchanged.

    Attributes:
        element_type: Declared element type of the collection
        item_type: Runtime type of the rejected item
        field_name: Name of the collection field, if known
    """

    def __init__(self, element_type: Any, item_type: type, *, field_name: str | None = None) -> None:
        self.element_type = element_type
        self.item_type = item_type
        self.field_name = field_name
        target = getattr(element_type, "__name__", repr(element_type))
        where = f" (field '{field_name}')" if field_name else ""
        super().__init__(f"Cannot add item of type {item_type.__name__} to collection of {target}{where}")


class ElementConstructionError(InvalidOperationError):
    """Raised when a default instance was requested for a type that has none.

    Attributes:
        element_type: The type that could not be constructed
    """

    def __init__(self, element_type: Any) -> None:
        self.element_type = element_type
        name = getattr(element_type, "__qualname__", repr(element_type))
        super().__init__(f"Type {name} has no parameterless constructor")
