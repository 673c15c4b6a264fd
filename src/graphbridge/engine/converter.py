# src/graphbridge/engine/converter.py
"""Typed graph -> AttributeMap conversion.

to_dynamic() turns a typed object graph into a tree of AttributeMaps that a
host environment can read and write without knowing the Python types:

    Terminal value              -> unchanged
    str-keyed mapping           -> AttributeMap (one key per entry)
    mapping with other keys     -> [AttributeMap(key=str(k), value=...), ...]
    other iterable              -> list of converted elements
    composite object            -> AttributeMap of readable fields

Every AttributeMap produced from a mapping or composite gets a hook attached
under ``hook_name`` (``run`` by default). A hook is a zero-argument callable
built by ``hook_factory(original_value, path)``.

to_dynamic_with_list_hooks() additionally attaches, for every sequence field
of a composite, ``add_to_<field>(item)`` and ``add_default_to_<field>()``
hooks that append to the live typed collection and mirror the new element
into the dynamic list.

Cycles and the depth cap never raise: the offending child is replaced with
CIRCULAR_REFERENCE or MAX_DEPTH_REACHED.
"""

from __future__ import annotations

import collections.abc as abc
import inspect
from typing import Any

import structlog

from graphbridge.contracts.dynamic import (
    CIRCULAR_REFERENCE,
    MAX_DEPTH_REACHED,
    AttributeMap,
    Hook,
    HookFactory,
)
from graphbridge.contracts.errors import ElementTypeMismatchError, InvalidOperationError
from graphbridge.contracts.fields import FieldDescriptor, FieldKind
from graphbridge.core.coercion import coerce_scalar, is_instance_of
from graphbridge.core.containers import CollectionDescriptor
from graphbridge.core.introspection import (
    UNREADABLE,
    construct_default,
    describe,
    extra_instance_attributes,
    is_terminal_value,
    read_field,
)
from graphbridge.core.traversal import DEFAULT_MAX_DEPTH, ROOT_PATH, VisitedSet, index_path, member_path

logger = structlog.get_logger(__name__)

DEFAULT_HOOK_NAME = "run"


def default_hook_factory(value: Any, path: str) -> Hook:
    """Hook that logs its node and returns the node's path."""
    node_type = type(value).__qualname__ if value is not None else "None"

    def hook() -> str:
        logger.info("hook_invoked", path=path, node_type=node_type)
        return path

    return hook


def to_dynamic(
    root: Any,
    hook_name: str = DEFAULT_HOOK_NAME,
    hook_factory: HookFactory | None = None,
    include_nulls: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> AttributeMap:
    """Convert a typed graph to an AttributeMap tree with per-node hooks.

    Args:
        root: Graph root; terminals, lists and None are wrapped as ``value``
        hook_name: Name under which each node's hook is attached
        hook_factory: ``(original_value, path) -> hook``; defaults to a logging hook
        include_nulls: Keep None-valued children in maps
        max_depth: Recursion cap

    Returns:
        AttributeMap for the root
    """
    converter = _Converter(
        hook_name=hook_name,
        hook_factory=hook_factory or default_hook_factory,
        include_nulls=include_nulls,
        max_depth=max_depth,
        list_hooks=False,
    )
    return converter.convert_root(root)


def to_dynamic_with_list_hooks(
    root: Any,
    include_nulls: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
    hook_name: str | None = None,
    hook_factory: HookFactory | None = None,
) -> AttributeMap:
    """Convert a typed graph, attaching add_to_/add_default_to_ hooks per sequence field.

    Node hooks are attached only when ``hook_name`` is given.

    The list hooks capture the owning instance and field by reference:

        doc = to_dynamic_with_list_hooks(invoice)
        doc.add_to_lines(LineItem(sku="A-1"))   # invoice.lines grows too
        doc.add_default_to_lines()              # appends LineItem()

    Raises (from the hooks, not from conversion):
        ElementTypeMismatchError: add_to_<field> got an incompatible item
        ElementConstructionError: add_default_to_<field> on a type without
            a parameterless constructor
    """
    converter = _Converter(
        hook_name=hook_name,
        hook_factory=hook_factory or default_hook_factory,
        include_nulls=include_nulls,
        max_depth=max_depth,
        list_hooks=True,
    )
    return converter.convert_root(root)


class _Converter:
    def __init__(
        self,
        *,
        hook_name: str | None,
        hook_factory: HookFactory,
        include_nulls: bool,
        max_depth: int,
        list_hooks: bool,
    ) -> None:
        self._hook_name = hook_name
        self._hook_factory = hook_factory
        self._include_nulls = include_nulls
        self._max_depth = max_depth
        self._list_hooks = list_hooks
        self._visited = VisitedSet()

    def fresh(self) -> _Converter:
        """Converter with the same options and an empty cycle guard."""
        return _Converter(
            hook_name=self._hook_name,
            hook_factory=self._hook_factory,
            include_nulls=self._include_nulls,
            max_depth=self._max_depth,
            list_hooks=self._list_hooks,
        )

    def convert_root(self, root: Any) -> AttributeMap:
        result = self.convert(root, ROOT_PATH, 0)
        if isinstance(result, AttributeMap):
            return result
        wrapper = AttributeMap(value=result)
        self._attach_node_hook(wrapper, root, ROOT_PATH)
        return wrapper

    def convert(self, value: Any, path: str, depth: int) -> Any:
        if depth > self._max_depth:
            logger.debug("max_depth_reached", path=path, depth=depth)
            return MAX_DEPTH_REACHED
        if is_terminal_value(value):
            return value
        if isinstance(value, type) or inspect.isroutine(value):
            return value
        with self._visited.visiting(value) as entered:
            if not entered:
                logger.debug("cycle_detected", path=path, node_type=type(value).__qualname__)
                return CIRCULAR_REFERENCE
            if isinstance(value, abc.Mapping):
                if all(isinstance(k, str) for k in value):
                    return self._convert_string_map(value, path, depth)
                return self._convert_keyed_pairs(value, path, depth)
            if isinstance(value, abc.Iterable) and not isinstance(value, str | bytes | bytearray):
                return [self.convert(item, index_path(path, i), depth + 1) for i, item in enumerate(value)]
            return self._convert_composite(value, path, depth)

    def _convert_string_map(self, value: abc.Mapping[str, Any], path: str, depth: int) -> AttributeMap:
        node = AttributeMap()
        entries = value.data_items() if isinstance(value, AttributeMap) else value.items()
        for key, item in entries:
            self._put(node, key, self.convert(item, member_path(path, key), depth + 1))
        self._attach_node_hook(node, value, path)
        return node

    def _convert_keyed_pairs(self, value: abc.Mapping[Any, Any], path: str, depth: int) -> list[AttributeMap]:
        pairs = []
        for key, item in value.items():
            item_path = index_path(path, key)
            pair = AttributeMap(key=str(key), value=self.convert(item, item_path, depth + 1))
            self._attach_node_hook(pair, item, item_path)
            pairs.append(pair)
        return pairs

    def _convert_composite(self, value: Any, path: str, depth: int) -> AttributeMap:
        node = AttributeMap()
        fields = describe(type(value))
        sequence_fields: list[tuple[FieldDescriptor, CollectionDescriptor, list[Any]]] = []

        for field in fields:
            if not field.readable:
                continue
            raw = read_field(field, value)
            if raw is UNREADABLE:
                logger.debug("getter_skipped", path=path, field=field.name)
                continue
            child_path = member_path(path, field.name)
            child = self.convert(raw, child_path, depth + 1)
            if self._list_hooks and field.kind is FieldKind.SEQUENCE and field.collection is not None:
                if raw is None:
                    child = []
                if isinstance(child, list):
                    node[field.name] = child
                    sequence_fields.append((field, field.collection, child))
                    continue
            self._put(node, field.name, child)

        for name in extra_instance_attributes(value, fields):
            raw = getattr(value, name)
            self._put(node, name, self.convert(raw, member_path(path, name), depth + 1))

        for field, descriptor, mirror in sequence_fields:
            self._attach_list_hooks(node, value, field, descriptor, mirror, member_path(path, field.name), depth)
        self._attach_node_hook(node, value, path)
        return node

    def _put(self, node: AttributeMap, key: str, child: Any) -> None:
        if child is None and not self._include_nulls:
            return
        node[key] = child

    def _attach_node_hook(self, node: AttributeMap, value: Any, path: str) -> None:
        if self._hook_name:
            node.attach_hook(self._hook_name, self._hook_factory(value, path))

    # -- List hooks -----------------------------------------------------------

    def _attach_list_hooks(
        self,
        node: AttributeMap,
        owner: Any,
        field: FieldDescriptor,
        descriptor: CollectionDescriptor,
        mirror: list[Any],
        path: str,
        depth: int,
    ) -> None:
        element_type = descriptor.element_type

        def assign(collection: Any) -> None:
            if not field.writable:
                raise InvalidOperationError(f"Field '{field.name}' on {type(owner).__name__} is read-only")
            field.set(owner, collection)

        def add_to(item: Any = None) -> Any:
            to_add = item
            if item is not None and not is_instance_of(item, element_type):
                to_add = coerce_scalar(item, element_type)
            if to_add is not None and not is_instance_of(to_add, element_type):
                raise ElementTypeMismatchError(element_type, type(item), field_name=field.name)

            collection = field.get(owner)
            if collection is None:
                collection = descriptor.create()
                assign(collection)
            before = descriptor.count(collection)
            updated = descriptor.append(collection, to_add)
            if updated is not collection:
                assign(updated)
            if descriptor.count(updated) > before:
                item_path = index_path(path, before)
                mirror.append(self.fresh().convert(to_add, item_path, depth + 2))
            return to_add

        def add_default_to() -> Any:
            return add_to(construct_default(element_type))

        node.attach_hook(f"add_to_{field.name}", add_to)
        node.attach_hook(f"add_default_to_{field.name}", add_default_to)
