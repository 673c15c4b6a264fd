# src/graphbridge/core/containers.py
"""Collection descriptors derived from declared types.

A CollectionDescriptor answers, for one declared collection type:
- what concrete container to build when the field is unset
- what the element (or map value) type is
- how to enumerate, clear, append and replace contents

Abstract declarations (Sequence[T], Collection[T], Mapping[str, T] ...) are
materialised as list / set / dict. Immutable containers (tuple[T, ...],
frozenset[T]) cannot change in place: every mutating operation returns the
container the owner must hold afterwards, and callers assign it back to the
owning field. That is how fixed-size sequences are grown and pruned.
"""

from __future__ import annotations

import collections.abc as abc
from collections import OrderedDict, defaultdict, deque
from dataclasses import dataclass
from typing import Any, get_args, get_origin

_SEQUENCE_CONTAINERS: dict[Any, type] = {
    list: list,
    abc.Sequence: list,
    abc.MutableSequence: list,
    abc.Collection: list,
    abc.Iterable: list,
    deque: deque,
    set: set,
    abc.Set: set,
    abc.MutableSet: set,
    frozenset: frozenset,
}

_MAPPING_CONTAINERS: dict[Any, type] = {
    dict: dict,
    abc.Mapping: dict,
    abc.MutableMapping: dict,
    OrderedDict: OrderedDict,
    defaultdict: dict,
}

_IMMUTABLE_CONTAINERS = (tuple, frozenset)


@dataclass(frozen=True, slots=True)
class CollectionDescriptor:
    """Element type plus container operations for one declared collection type.

    Attributes:
        declared_type: The annotation this descriptor was derived from
        container: Concrete class created for unset fields
        element_type: Element type (sequences) or value type (maps)
        key_type: Key type for maps, None for sequences
    """

    declared_type: Any
    container: type
    element_type: Any = Any
    key_type: Any = None

    @property
    def is_mapping(self) -> bool:
        return self.key_type is not None

    @property
    def is_string_keyed(self) -> bool:
        return self.key_type is str

    @property
    def fixed_size(self) -> bool:
        return issubclass(self.container, _IMMUTABLE_CONTAINERS)

    def accepts(self, value: Any) -> bool:
        """Whether a runtime value is a container these operations apply to."""
        if self.is_mapping:
            return isinstance(value, abc.Mapping)
        return isinstance(value, abc.Collection) and not isinstance(value, str | bytes | bytearray | abc.Mapping)

    def create(self) -> Any:
        return self.container()

    def count(self, collection: Any) -> int:
        return len(collection)

    def values(self, collection: Any) -> list[Any]:
        """Elements of a sequence, or values of a map, as a snapshot list."""
        if self.is_mapping:
            return list(collection.values())
        return list(collection)

    def clear(self, collection: Any) -> Any:
        """Empty a collection; returns the collection the owner should hold."""
        if _is_mutable(collection):
            collection.clear()
            return collection
        return type(collection)()

    def append(self, collection: Any, item: Any) -> Any:
        """Add one element; returns the collection the owner should hold."""
        if isinstance(collection, abc.MutableSequence):
            collection.append(item)
            return collection
        if isinstance(collection, abc.MutableSet):
            collection.add(item)
            return collection
        if isinstance(collection, tuple):
            return (*collection, item)
        if isinstance(collection, frozenset):
            return collection | {item}
        raise TypeError(f"Cannot append to {type(collection).__name__}")

    def put(self, collection: Any, key: Any, value: Any) -> Any:
        """Set one map entry; returns the map the owner should hold."""
        if isinstance(collection, abc.MutableMapping):
            collection[key] = value
            return collection
        return {**collection, key: value}

    def replace_items(self, collection: Any, kept: list[Any]) -> Any:
        """Replace contents with ``kept`` (elements, or (key, value) pairs for maps).

        Mutable containers keep their identity; immutable ones are rebuilt.
        """
        if _is_mutable(collection):
            collection.clear()
            if isinstance(collection, abc.MutableMapping):
                collection.update(kept)
            elif isinstance(collection, abc.MutableSet):
                collection.update(kept)
            else:
                collection.extend(kept)
            return collection
        if self.is_mapping:
            return dict(kept)
        return type(collection)(kept)


def _is_mutable(collection: Any) -> bool:
    return isinstance(collection, abc.MutableSequence | abc.MutableSet | abc.MutableMapping)


def describe_collection(declared: Any) -> CollectionDescriptor | None:
    """Derive a CollectionDescriptor from a declared type.

    Args:
        declared: A type annotation with Optional already unwrapped

    Returns:
        Descriptor, or None if the declaration is not a collection.
        Heterogeneous tuples (tuple[int, str]) are records, not collections.
    """
    if declared in (str, bytes, bytearray):
        return None

    origin = get_origin(declared) or declared
    args = get_args(declared)

    if origin in _MAPPING_CONTAINERS:
        key_type, value_type = (args[0], args[1]) if len(args) == 2 else (Any, Any)
        return CollectionDescriptor(declared, _MAPPING_CONTAINERS[origin], value_type, key_type)

    if origin is tuple:
        if not args:
            return CollectionDescriptor(declared, tuple, Any)
        if len(args) == 2 and args[1] is Ellipsis:
            return CollectionDescriptor(declared, tuple, args[0])
        return None

    if origin in _SEQUENCE_CONTAINERS:
        return CollectionDescriptor(declared, _SEQUENCE_CONTAINERS[origin], args[0] if args else Any)

    # User subclasses of the builtin containers, e.g. class Lines(list[LineItem])
    if isinstance(declared, type):
        if issubclass(declared, dict):
            key_type, value_type = _base_args(declared, dict, (Any, Any))
            return CollectionDescriptor(declared, declared, value_type, key_type)
        for base in (list, set, frozenset, deque):
            if issubclass(declared, base):
                (element_type,) = _base_args(declared, base, (Any,))
                return CollectionDescriptor(declared, declared, element_type)
    return None


def _base_args(cls: type, base: type, default: tuple[Any, ...]) -> tuple[Any, ...]:
    for klass in cls.__mro__:
        for orig in getattr(klass, "__orig_bases__", ()):
            if get_origin(orig) is base and len(get_args(orig)) == len(default):
                return get_args(orig)
    return default
