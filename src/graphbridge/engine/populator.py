# src/graphbridge/engine/populator.py
"""Graph populator: guarantee every reachable collection holds an element.

Top-down, depth-first over readable+writable fields:

- Collection field unset -> assign an empty concrete container
- Collection empty       -> synthesise one default element, append, recurse into it
- Collection non-empty   -> recurse into existing elements, add nothing
- Composite field unset  -> construct a default instance, assign, recurse
- Terminal field         -> untouched

Types without a parameterless constructor are skipped silently. An unset
composite field is left unset when its declared type is already being
populated further up the path (a default Person gets no default best friend);
collections of such types are still seeded, down to max_depth. Fixed-size
sequences (tuple[T, ...]) grow by field-level replacement: the populator
assigns a new tuple holding the synthesised element. A tuple reached as an
element of another collection has no owning field and is only recursed into.

Typical use is scaffolding: populate an empty document so a host script can
see (and fill) every nested shape, then prune what it left untouched.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

import structlog

from graphbridge.contracts.errors import ElementConstructionError
from graphbridge.contracts.fields import FieldDescriptor, FieldKind
from graphbridge.core.coercion import coerce_scalar
from graphbridge.core.containers import CollectionDescriptor, describe_collection
from graphbridge.core.introspection import (
    UNREADABLE,
    construct_default,
    is_terminal_value,
    read_field,
    read_write_fields,
    unwrap_optional,
)
from graphbridge.core.traversal import DEFAULT_MAX_DEPTH, VisitedSet

logger = structlog.get_logger(__name__)

_NOTHING: Any = object()


def ensure_non_empty(
    root: Any,
    max_depth: int = DEFAULT_MAX_DEPTH,
    *,
    placeholder_key: str = "key",
) -> None:
    """Populate every reachable collection of ``root`` in place.

    Args:
        root: Typed graph root (mutated)
        max_depth: Recursion cap
        placeholder_key: Key used when seeding an empty map

    Raises:
        ValueError: If root is None
    """
    if root is None:
        raise ValueError("root must not be None")
    _Populator(max_depth, placeholder_key).visit(root, 0)


class _Populator:
    def __init__(self, max_depth: int, placeholder_key: str) -> None:
        self._max_depth = max_depth
        self._placeholder_key = placeholder_key
        self._visited = VisitedSet()
        self._types_on_path: Counter[type] = Counter()

    def visit(self, node: Any, depth: int) -> None:
        if node is None or depth > self._max_depth or is_terminal_value(node):
            return
        with self._visited.visiting(node) as entered:
            if not entered:
                logger.debug("populate_cycle_skipped", node_type=type(node).__qualname__, depth=depth)
                return
            runtime = describe_collection(type(node))
            if runtime is not None:
                # Bare collection without an owning field: recurse only
                for item in runtime.values(node):
                    self.visit(item, depth + 1)
                return
            self._types_on_path[type(node)] += 1
            try:
                for field in read_write_fields(type(node)):
                    self._visit_field(node, field, depth)
            finally:
                self._types_on_path[type(node)] -= 1

    def _visit_field(self, owner: Any, field: FieldDescriptor, depth: int) -> None:
        value = read_field(field, owner)
        if value is UNREADABLE:
            return

        if field.collection is not None:
            if value is None:
                value = field.collection.create()
                field.set(owner, value)
            elif not field.collection.accepts(value):
                return
            filled = self._fill(value, field.collection, depth)
            if filled is not value:
                field.set(owner, filled)
            return

        if field.kind is FieldKind.COMPOSITE:
            if value is None:
                if self._types_on_path[field.declared_type] > 0:
                    logger.debug("populate_recursive_type_skipped", field=field.name, depth=depth)
                    return
                child = self._default_of(field.declared_type)
                if child is _NOTHING:
                    return
                field.set(owner, child)
                value = child
            self.visit(value, depth + 1)

    def _fill(self, collection: Any, descriptor: CollectionDescriptor, depth: int) -> Any:
        """Seed an empty collection or recurse into a populated one.

        Returns:
            The collection the owner must hold (a new one for immutable containers)
        """
        if descriptor.count(collection) > 0:
            for item in descriptor.values(collection):
                self._visit_element(item, descriptor.element_type, depth + 1)
            return collection

        element = self._default_of(descriptor.element_type)
        if element is _NOTHING:
            return collection
        if descriptor.is_mapping:
            key = coerce_scalar(self._placeholder_key, descriptor.key_type)
            collection = descriptor.put(collection, key, element)
        else:
            collection = descriptor.append(collection, element)
        self._visit_element(element, descriptor.element_type, depth + 1)
        return collection

    def _visit_element(self, item: Any, declared: Any, depth: int) -> None:
        nested = describe_collection(unwrap_optional(declared))
        if nested is None or item is None:
            self.visit(item, depth)
            return
        if depth > self._max_depth:
            return
        with self._visited.visiting(item) as entered:
            if not entered:
                return
            filled = self._fill(item, nested, depth)
            if filled is not item:
                logger.debug("populate_fixed_size_without_owner", element_type=type(item).__qualname__)

    def _default_of(self, declared: Any) -> Any:
        try:
            return construct_default(declared)
        except ElementConstructionError:
            logger.debug("populate_construction_skipped", declared=getattr(declared, "__qualname__", repr(declared)))
            return _NOTHING
