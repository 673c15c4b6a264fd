# src/graphbridge/engine/pruner.py
"""Default pruner: strip default-like content from a typed graph, bottom-up.

After a host script has filled a scaffolded document, most of the scaffold is
still default (empty strings, zeros, placeholder elements). prune_defaults()
removes it:

- Collection elements that are default-like are dropped
- Collections left empty are set to None (configurable)
- Composite children that are entirely default-like are set to None

The return value says whether the root itself ended up default-like.

Read-only fields (properties without setters, frozen dataclass fields) are
never mutated but still count towards their owner's default-ness.
"""

from __future__ import annotations

from typing import Any

import structlog

from graphbridge.contracts.fields import FieldDescriptor, FieldKind
from graphbridge.core.containers import CollectionDescriptor, describe_collection
from graphbridge.core.introspection import (
    UNREADABLE,
    describe,
    is_default_value,
    is_terminal_value,
    read_field,
)
from graphbridge.core.traversal import DEFAULT_MAX_DEPTH, VisitedSet

logger = structlog.get_logger(__name__)


def prune_defaults(
    root: Any,
    null_empty_collections: bool = True,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> bool:
    """Prune default-like content from ``root`` in place.

    A root that is itself a list, set or dict is pruned in place; an immutable
    root collection (tuple, frozenset) cannot be changed, only judged.

    Args:
        root: Typed graph root (mutated); None is default-like
        null_empty_collections: Assign None to collection fields left empty
        max_depth: Recursion cap; nodes beyond it are left untouched

    Returns:
        True if the root is default-like after pruning
    """
    default, _ = _Pruner(null_empty_collections, max_depth).prune(root, 0)
    return default


class _Pruner:
    def __init__(self, null_empty_collections: bool, max_depth: int) -> None:
        self._null_empty_collections = null_empty_collections
        self._max_depth = max_depth
        self._visited = VisitedSet()

    def prune(self, node: Any, depth: int) -> tuple[bool, Any]:
        """Prune one node.

        Returns:
            (is_default, value the owner must hold afterwards)
        """
        if is_terminal_value(node):
            return is_default_value(node), node
        if depth > self._max_depth:
            logger.debug("max_depth_reached", node_type=type(node).__qualname__, depth=depth)
            return False, node
        with self._visited.visiting(node) as entered:
            if not entered:
                # Nodes on the current path are never pruned
                logger.debug("cycle_detected", node_type=type(node).__qualname__, depth=depth)
                return False, node
            runtime = describe_collection(type(node))
            if runtime is not None:
                pruned = self._prune_collection(node, runtime, depth)
                return runtime.count(pruned) == 0, pruned
            return self._prune_composite(node, depth), node

    def _prune_collection(self, collection: Any, descriptor: CollectionDescriptor, depth: int) -> Any:
        kept: list[Any] = []
        if descriptor.is_mapping:
            for key, item in list(collection.items()):
                default, item = self.prune(item, depth + 1)
                if not default:
                    kept.append((key, item))
        else:
            for item in descriptor.values(collection):
                default, item = self.prune(item, depth + 1)
                if not default:
                    kept.append(item)
        return descriptor.replace_items(collection, kept)

    def _prune_composite(self, node: Any, depth: int) -> bool:
        all_default = True
        for field in describe(type(node)):
            if not field.readable:
                continue
            if field.writable:
                default = self._prune_field(node, field, depth)
            else:
                default = _read_only_default(node, field)
            if not default:
                all_default = False
        return all_default

    def _prune_field(self, owner: Any, field: FieldDescriptor, depth: int) -> bool:
        value = read_field(field, owner)
        if value is UNREADABLE:
            logger.debug("getter_skipped", owner=type(owner).__qualname__, field=field.name)
            return True
        if value is None:
            return True
        if field.kind is FieldKind.TERMINAL:
            return is_default_value(value)

        default, pruned = self.prune(value, depth + 1)
        if default and (field.kind is FieldKind.COMPOSITE or self._null_empty_collections):
            field.set(owner, None)
        elif pruned is not value:
            field.set(owner, pruned)
        return default


def _read_only_default(owner: Any, field: FieldDescriptor) -> bool:
    value = read_field(field, owner)
    if value is UNREADABLE or value is None:
        return True
    if is_terminal_value(value):
        return is_default_value(value)
    if field.is_collection and not isinstance(value, str | bytes):
        try:
            return len(value) == 0
        except TypeError:
            return False
    return False
