# src/graphbridge/core/__init__.py
"""Core infrastructure: Introspection, Containers, Coercion, Traversal, Configuration, Logging."""

from graphbridge.core.coercion import coerce_scalar, is_instance_of
from graphbridge.core.config import BridgeSettings, load_settings
from graphbridge.core.containers import CollectionDescriptor, describe_collection
from graphbridge.core.introspection import (
    TERMINAL_TYPES,
    classify,
    construct_default,
    describe,
    is_default_value,
    is_terminal_type,
    is_terminal_value,
    read_write_fields,
    unwrap_optional,
    zero_value,
)
from graphbridge.core.logging import configure_logging
from graphbridge.core.traversal import DEFAULT_MAX_DEPTH, ROOT_PATH, VisitedSet

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "ROOT_PATH",
    "TERMINAL_TYPES",
    "BridgeSettings",
    "CollectionDescriptor",
    "VisitedSet",
    "classify",
    "coerce_scalar",
    "configure_logging",
    "construct_default",
    "describe",
    "describe_collection",
    "is_default_value",
    "is_instance_of",
    "is_terminal_type",
    "is_terminal_value",
    "load_settings",
    "read_write_fields",
    "unwrap_optional",
    "zero_value",
]
