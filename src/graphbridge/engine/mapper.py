# src/graphbridge/engine/mapper.py
"""AttributeMap -> typed graph write-back.

apply_dynamic() copies a (possibly host-edited) dynamic tree back onto a
typed graph. The source may be an AttributeMap, any Mapping, or any object
read by attribute. For each writable field of the target:

- missing / None in source -> field set to None
- terminal                 -> coerced to the declared type, assigned
- sequence                 -> cleared and refilled element by element
- map                      -> cleared and refilled entry by entry
- composite                -> nested instance fetched or created, then recursed

Coercion is best-effort: a value that cannot be converted is assigned as is.
Values for opaque declarations (Any, object, dict[str, Any] values) are
unwrapped to plain dicts and lists first. Hooks and other callables in the
source are never written back, and sentinel markers leave the target field
or element untouched.

Non-string map keys arrive as strings. Enum keys are matched by value, then
by member name (``"Level.HIGH"`` or ``"HIGH"``).
"""

from __future__ import annotations

import collections.abc as abc
from enum import Enum
from typing import Any

import structlog

from graphbridge.contracts.dynamic import AttributeMap, is_sentinel, plain_value
from graphbridge.contracts.errors import ElementConstructionError
from graphbridge.contracts.fields import FieldDescriptor, FieldKind
from graphbridge.core.coercion import coerce_scalar
from graphbridge.core.containers import CollectionDescriptor
from graphbridge.core.introspection import (
    UNREADABLE,
    classify,
    construct_default,
    describe,
    read_field,
    unwrap_optional,
)
from graphbridge.core.traversal import VisitedSet

logger = structlog.get_logger(__name__)

_SKIP: Any = object()


def apply_dynamic(target: Any, source: Any) -> None:
    """Write ``source`` onto ``target`` in place. No-op when either is None."""
    if target is None or source is None:
        return
    _Mapper().apply(target, source)


def _lookup(source: Any, name: str) -> Any:
    """Read one member from a source node; callables read as _SKIP."""
    if isinstance(source, AttributeMap):
        if source.is_hook(name):
            return _SKIP
        value = source.get(name)
    elif isinstance(source, abc.Mapping):
        value = source.get(name)
    else:
        value = getattr(source, name, None)
    if callable(value) and not isinstance(value, type):
        return _SKIP
    return value


def _coerce_key(key: Any, key_type: Any) -> Any:
    coerced = coerce_scalar(key, key_type)
    key_type = unwrap_optional(key_type)
    if not (isinstance(key_type, type) and issubclass(key_type, Enum)) or isinstance(coerced, key_type):
        return coerced
    if isinstance(key, str):
        # str() of a plain Enum member is "ClassName.MEMBER"
        member = key_type.__members__.get(key.rpartition(".")[2])
        if member is not None:
            return member
    return coerced


def _entries(source: Any) -> list[tuple[Any, Any]]:
    """Data entries of a map-shaped source value, hooks excluded."""
    if isinstance(source, AttributeMap):
        return list(source.data_items())
    return [(k, v) for k, v in source.items() if not callable(v)]


class _Mapper:
    def __init__(self) -> None:
        self._targets = VisitedSet()
        self._sources = VisitedSet()

    def apply(self, target: Any, source: Any) -> None:
        with self._targets.visiting(target) as fresh_target, self._sources.visiting(source) as fresh_source:
            if not (fresh_target and fresh_source):
                logger.debug("cycle_detected", node_type=type(target).__qualname__)
                return
            for field in describe(type(target)):
                if not (field.readable and field.writable):
                    continue
                value = _lookup(source, field.name)
                if value is _SKIP:
                    continue
                self._apply_field(target, field, value)

    def _apply_field(self, target: Any, field: FieldDescriptor, value: Any) -> None:
        if value is None:
            field.set(target, None)
            return
        if is_sentinel(value):
            logger.debug("sentinel_skipped", field=field.name, marker=value)
            return

        if field.kind is FieldKind.TERMINAL:
            field.set(target, coerce_scalar(plain_value(value), field.declared_type))
            return

        if field.collection is not None:
            existing = read_field(field, target)
            rebuilt = self._build_collection(field.collection, existing, value)
            if rebuilt is not _SKIP and rebuilt is not existing:
                field.set(target, rebuilt)
            return

        # Composite: only map-like sources or instances of the declared type
        if not (isinstance(value, abc.Mapping) or isinstance(value, field.declared_type)):
            logger.debug("composite_source_ignored", field=field.name, source_type=type(value).__name__)
            return
        nested = read_field(field, target)
        if nested is UNREADABLE or nested is None:
            nested = self._construct(field.declared_type)
            if nested is _SKIP:
                return
            field.set(target, nested)
        if nested is not value:
            self.apply(nested, value)

    def _build_collection(self, descriptor: CollectionDescriptor, existing: Any, value: Any) -> Any:
        """Refill ``existing`` (or a new container) from a source value.

        Returns:
            The container the owner must hold, or _SKIP if the source value is
            not collection-shaped (sentinel strings, scalars)
        """
        if descriptor.is_mapping:
            items = self._map_items(descriptor, value)
        else:
            items = self._sequence_items(descriptor, value)
        if items is _SKIP:
            logger.debug("collection_source_ignored", source_type=type(value).__name__)
            return _SKIP

        if existing is UNREADABLE or existing is None or not descriptor.accepts(existing):
            existing = self._construct(descriptor.declared_type)
            if existing is _SKIP:
                return _SKIP
        return descriptor.replace_items(existing, items)

    def _sequence_items(self, descriptor: CollectionDescriptor, value: Any) -> Any:
        if isinstance(value, str | bytes | abc.Mapping) or not isinstance(value, abc.Iterable):
            return _SKIP
        items = []
        for item in value:
            element = self._materialise(descriptor.element_type, item)
            if element is not _SKIP:
                items.append(element)
        return items

    def _map_items(self, descriptor: CollectionDescriptor, value: Any) -> Any:
        if isinstance(value, abc.Mapping):
            pairs = _entries(value)
        elif isinstance(value, list):
            # Non-str keys arrive as [{"key": ..., "value": ...}, ...]
            pairs = [(_lookup(p, "key"), _lookup(p, "value")) for p in value if isinstance(p, abc.Mapping)]
        else:
            return _SKIP
        items = []
        for key, item in pairs:
            if key is None or key is _SKIP:
                continue
            element = self._materialise(descriptor.element_type, item)
            if element is not _SKIP:
                items.append((_coerce_key(key, descriptor.key_type), element))
        return items

    def _materialise(self, declared: Any, value: Any) -> Any:
        """Typed value for one collection element or map value."""
        if value is None:
            return None
        if value is _SKIP or is_sentinel(value):
            return _SKIP
        kind, descriptor = classify(declared)
        if kind is FieldKind.TERMINAL:
            return coerce_scalar(plain_value(value), declared)
        if descriptor is not None:
            return self._build_collection(descriptor, None, value)
        if not (isinstance(value, abc.Mapping) or isinstance(value, declared)):
            logger.debug("element_source_ignored", element_type=getattr(declared, "__name__", repr(declared)))
            return _SKIP
        element = self._construct(declared)
        if element is not _SKIP:
            self.apply(element, value)
        return element

    def _construct(self, declared: Any) -> Any:
        try:
            return construct_default(declared)
        except ElementConstructionError:
            logger.warning("element_skipped", element_type=getattr(declared, "__qualname__", repr(declared)))
            return _SKIP
