# src/graphbridge/core/introspection.py
"""Runtime type introspection shared by every walker.

Everything the walkers know about a class comes from here:

1. Terminal types: leaves that are never recursed into (numbers, text,
   Decimal, date/time, timedelta, UUID, enums, and Optional forms of these).
2. Field tables: describe(cls) turns type annotations and properties into a
   cached tuple of FieldDescriptor rows.
3. Default construction: construct_default(tp) builds the "empty" value of a
   declared type (parameterless constructor, empty container, zero scalar).
4. Default-likeness: is_default_value(v) decides whether a terminal value is
   its type's zero value.

Annotations are resolved with typing.get_type_hints(). Classes whose
annotations cannot be resolved (forward references to names that do not
exist at runtime) fall back to the raw annotations, with unresolved strings
treated as opaque (Any).
"""

from __future__ import annotations

import dataclasses
import inspect
import types
import typing
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, Literal, Union, get_args, get_origin
from uuid import UUID

from graphbridge.contracts.errors import ElementConstructionError
from graphbridge.contracts.fields import FieldDescriptor, FieldKind
from graphbridge.core.containers import CollectionDescriptor, describe_collection

# Leaf types. Enum subclasses are terminal too (checked separately because
# IntEnum/StrEnum also subclass int/str and need enum-specific zero values).
TERMINAL_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    Decimal,
    datetime,
    date,
    time,
    timedelta,
    UUID,
)

_NONE_TYPE = type(None)


# =============================================================================
# Declared-type classification
# =============================================================================


def _is_union(tp: Any) -> bool:
    return get_origin(tp) in (Union, types.UnionType)


def unwrap_optional(tp: Any) -> Any:
    """Strip Annotated[...] and a None member from a union.

    Optional[int] -> int, int | None -> int, int | str -> int | str (unchanged).
    """
    if get_origin(tp) is typing.Annotated:
        tp = get_args(tp)[0]
    if _is_union(tp):
        members = [a for a in get_args(tp) if a is not _NONE_TYPE]
        if len(members) == 1:
            return unwrap_optional(members[0])
    return tp


def is_terminal_type(tp: Any) -> bool:
    """Whether a declared type is walked as a leaf.

    Any, object, Literal[...], TypeVars and unresolved forward references are
    opaque and count as terminal: nothing is constructed or recursed into on
    the strength of such a declaration.
    """
    tp = unwrap_optional(tp)
    if tp is Any or tp is object or tp is _NONE_TYPE:
        return True
    if _is_union(tp):
        return all(is_terminal_type(a) for a in get_args(tp) if a is not _NONE_TYPE)
    if get_origin(tp) is Literal:
        return True
    if isinstance(tp, type):
        return issubclass(tp, Enum) or issubclass(tp, TERMINAL_TYPES)
    if isinstance(tp, str | typing.TypeVar | typing.ForwardRef):
        return True
    return False


def is_terminal_value(value: Any) -> bool:
    return value is None or isinstance(value, Enum) or isinstance(value, TERMINAL_TYPES)


def classify(tp: Any) -> tuple[FieldKind, CollectionDescriptor | None]:
    """Walk category and collection operations for a declared type."""
    tp = unwrap_optional(tp)
    if is_terminal_type(tp):
        return FieldKind.TERMINAL, None
    descriptor = describe_collection(tp)
    if descriptor is not None:
        kind = FieldKind.MAPPING if descriptor.is_mapping else FieldKind.SEQUENCE
        return kind, descriptor
    if isinstance(tp, type):
        return FieldKind.COMPOSITE, None
    # Callable[...], heterogeneous tuples and other shapes we do not walk
    return FieldKind.TERMINAL, None


# =============================================================================
# Field tables
# =============================================================================


def resolve_type_hints(cls: type) -> dict[str, Any]:
    """Resolve a class's annotations, falling back to raw annotations.

    Never raises. Unresolvable string annotations become Any.
    """
    try:
        return typing.get_type_hints(cls)
    except Exception:
        pass
    try:
        localns = {**vars(cls), cls.__name__: cls}
        return typing.get_type_hints(cls, localns=localns)
    except Exception:
        pass
    raw: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        try:
            annotations = inspect.get_annotations(klass)
        except Exception:
            continue
        for name, annotation in annotations.items():
            raw[name] = Any if isinstance(annotation, str) else annotation
    return raw


def _is_class_level(hint: Any) -> bool:
    origin = get_origin(hint)
    return hint is ClassVar or origin is ClassVar or isinstance(hint, dataclasses.InitVar)


def _instances_are_frozen(cls: type) -> bool:
    if issubclass(cls, tuple):
        return True
    params = getattr(cls, "__dataclass_params__", None)
    return bool(params is not None and params.frozen)


def _property_type(prop: property) -> Any:
    if prop.fget is None:
        return Any
    try:
        return typing.get_type_hints(prop.fget).get("return", Any)
    except Exception:
        return Any


@lru_cache(maxsize=None)
def describe(cls: type) -> tuple[FieldDescriptor, ...]:
    """Build the field descriptor table for a class.

    Rows come from public annotated attributes (ClassVar/InitVar excluded) in
    MRO order, followed by public properties. Properties are writable only
    when they define a setter; annotated attributes are writable unless the
    class is a frozen dataclass or a tuple subclass.

    Args:
        cls: Any class; builtins and terminal types yield an empty table

    Returns:
        Tuple of FieldDescriptor rows
    """
    if not isinstance(cls, type) or issubclass(cls, TERMINAL_TYPES) or issubclass(cls, Enum):
        return ()

    properties: dict[str, property] = {}
    for klass in reversed(cls.__mro__):
        for name, attr in vars(klass).items():
            if isinstance(attr, property) and not name.startswith("_"):
                properties[name] = attr

    frozen = _instances_are_frozen(cls)
    rows: list[FieldDescriptor] = []
    for name, hint in resolve_type_hints(cls).items():
        if name.startswith("_") or name in properties or _is_class_level(hint):
            continue
        declared = unwrap_optional(hint)
        kind, collection = classify(declared)
        rows.append(FieldDescriptor(name, declared, kind, collection, readable=True, writable=not frozen))

    for name, prop in properties.items():
        declared = unwrap_optional(_property_type(prop))
        kind, collection = classify(declared)
        rows.append(
            FieldDescriptor(
                name,
                declared,
                kind,
                collection,
                readable=prop.fget is not None,
                writable=prop.fset is not None,
                is_property=True,
            )
        )
    return tuple(rows)


def read_write_fields(cls: type) -> tuple[FieldDescriptor, ...]:
    """Fields that can be both read and assigned (the mutating walkers' view)."""
    return tuple(f for f in describe(cls) if f.readable and f.writable)


class _Unreadable:
    def __repr__(self) -> str:
        return "UNREADABLE"


# Returned by read_field() when a getter raises
UNREADABLE: Any = _Unreadable()


def read_field(field: FieldDescriptor, instance: Any) -> Any:
    """Read a field, returning UNREADABLE instead of propagating getter errors."""
    try:
        return field.get(instance)
    except Exception:
        return UNREADABLE


def extra_instance_attributes(instance: Any, declared: tuple[FieldDescriptor, ...]) -> list[str]:
    """Public instance attributes that the class does not declare."""
    try:
        namespace = vars(instance)
    except TypeError:
        return []
    known = {f.name for f in declared}
    return [name for name in namespace if not name.startswith("_") and name not in known]


# =============================================================================
# Default construction and zero values
# =============================================================================


def zero_enum_member(enum_cls: type[Enum]) -> Enum:
    """The enum's zero member: value 0 if present, else the first declared member."""
    members = list(enum_cls)
    if not members:
        raise ElementConstructionError(enum_cls)
    for member in members:
        if member.value == 0:
            return member
    return members[0]


def zero_value(tp: type) -> Any:
    """Zero value of a terminal type."""
    if issubclass(tp, Enum):
        return zero_enum_member(tp)
    if issubclass(tp, datetime):
        return datetime.min
    if issubclass(tp, date):
        return date.min
    if issubclass(tp, time):
        return time()
    if issubclass(tp, timedelta):
        return timedelta()
    if issubclass(tp, UUID):
        return UUID(int=0)
    # bool, int, float, complex, str, bytes, Decimal (and their subclasses)
    return tp()


def has_parameterless_constructor(tp: type) -> bool:
    if inspect.isabstract(tp) or getattr(tp, "_is_protocol", False):
        return False
    try:
        signature = inspect.signature(tp)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures; let construction decide
        return True
    for param in signature.parameters.values():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.default is inspect.Parameter.empty:
            return False
    return True


def construct_default(tp: Any) -> Any:
    """Build the default value for a declared type.

    - Terminal types: their zero value
    - Collection types: an empty concrete container
    - Classes: the parameterless constructor

    Raises:
        ElementConstructionError: If the type is opaque, abstract, has no
            parameterless constructor, or its constructor raises
    """
    tp = unwrap_optional(tp)
    kind, collection = classify(tp)
    if collection is not None:
        return collection.create()
    if tp is Any or tp is object or not isinstance(tp, type):
        raise ElementConstructionError(tp)
    if kind is FieldKind.TERMINAL:
        return zero_value(tp)
    if not has_parameterless_constructor(tp):
        raise ElementConstructionError(tp)
    try:
        return tp()
    except Exception as e:
        raise ElementConstructionError(tp) from e


def is_default_value(value: Any) -> bool:
    """Whether a terminal value is default-like.

    Text is default when empty or whitespace-only; enums when they are the zero
    member; numbers when zero; date/time values at their minimum; UUID when
    nil. None is always default. Values of any other type are not default.
    """
    if value is None:
        return True
    if isinstance(value, Enum):
        return value is zero_enum_member(type(value))
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, bytes):
        return len(value) == 0
    if isinstance(value, bool | int | float | complex | Decimal):
        return value == 0
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) == datetime.min
    if isinstance(value, date):
        return value == date.min
    if isinstance(value, time):
        return value.replace(tzinfo=None) == time()
    if isinstance(value, timedelta):
        return value == timedelta()
    if isinstance(value, UUID):
        return value.int == 0
    return False
