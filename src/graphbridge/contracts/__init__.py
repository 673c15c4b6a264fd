"""Shared contracts for graphbridge.

This package is a LEAF MODULE with no outbound dependencies to core/engine,
so the host boundary and the walkers can both import it freely.

Import patterns:
    from graphbridge.contracts import AttributeMap, FieldKind, CIRCULAR_REFERENCE
"""

from graphbridge.contracts.dynamic import (
    CIRCULAR_REFERENCE,
    MAX_DEPTH_REACHED,
    SENTINELS,
    AttributeMap,
    Hook,
    HookFactory,
    is_sentinel,
    plain_value,
    unique_name,
)
from graphbridge.contracts.errors import (
    ElementConstructionError,
    ElementTypeMismatchError,
    GraphBridgeError,
    InvalidOperationError,
)
from graphbridge.contracts.fields import FieldDescriptor, FieldKind

__all__ = [
    "CIRCULAR_REFERENCE",
    "MAX_DEPTH_REACHED",
    "SENTINELS",
    "AttributeMap",
    "ElementConstructionError",
    "ElementTypeMismatchError",
    "FieldDescriptor",
    "FieldKind",
    "GraphBridgeError",
    "Hook",
    "HookFactory",
    "InvalidOperationError",
    "is_sentinel",
    "plain_value",
    "unique_name",
]
