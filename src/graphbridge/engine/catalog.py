# src/graphbridge/engine/catalog.py
"""Type discovery: the closed set of types reachable from a root instance.

discover() walks TYPES, not instances. Starting from type(root) it follows:
1. Generic origins and arguments (list[LineItem] -> list, LineItem)
2. Element/value types of container subclasses (class Lines(list[LineItem]))
3. Classes declared in the body of a visited class
4. Declared types of every annotated field and annotated property

The result lets a host environment be told which types exist without a
hand-maintained list. type_handles() turns it into host-facing handles keyed
by a host-legal identifier.
"""

from __future__ import annotations

import keyword
import re
import types
import typing
from dataclasses import dataclass
from typing import Any, Literal, get_args, get_origin

import structlog

from graphbridge.contracts.dynamic import unique_name
from graphbridge.contracts.fields import FieldDescriptor
from graphbridge.core.introspection import construct_default, describe

logger = structlog.get_logger(__name__)

# Reflection machinery is never catalogued: descriptors, callables, modules
_METADATA_TYPES: tuple[type, ...] = (
    property,
    classmethod,
    staticmethod,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.ModuleType,
    types.GenericAlias,
    types.UnionType,
    type(None),
    object,
)

_NON_IDENTIFIER = re.compile(r"\W")


def _is_metadata_type(tp: type) -> bool:
    if tp in _METADATA_TYPES:
        return True
    # type itself and every metaclass
    if issubclass(tp, type):
        return True
    return tp.__module__ == "typing"


def discover(root: Any) -> set[type]:
    """Discover every type structurally reachable from ``root``'s type.

    Never raises; ``discover(None)`` returns an empty set.

    Args:
        root: Any instance

    Returns:
        Set of reachable classes (metadata types excluded)
    """
    if root is None:
        return set()
    return discover_type(type(root))


def discover_type(tp: type) -> set[type]:
    """Discover every type structurally reachable from ``tp`` itself."""
    found: set[type] = set()
    _visit_annotation(tp, found)
    logger.debug("types_discovered", root=tp.__qualname__, count=len(found))
    return found


def _visit_annotation(tp: Any, found: set[type]) -> None:
    origin = get_origin(tp)
    if origin is typing.Annotated:
        _visit_annotation(get_args(tp)[0], found)
        return
    if origin is Literal:
        return
    if origin is not None:
        # Parameterised generic or union: the origin class plus every argument
        if isinstance(origin, type):
            _visit_annotation(origin, found)
        for arg in get_args(tp):
            if arg is not Ellipsis:
                _visit_annotation(arg, found)
        return
    if not isinstance(tp, type) or _is_metadata_type(tp) or tp in found:
        return

    found.add(tp)

    for orig_base in getattr(tp, "__orig_bases__", ()):
        for arg in get_args(orig_base):
            _visit_annotation(arg, found)

    prefix = f"{tp.__qualname__}."
    for attr in list(vars(tp).values()):
        if isinstance(attr, type) and attr.__qualname__.startswith(prefix):
            _visit_annotation(attr, found)

    for field in describe(tp):
        _visit_annotation(field.declared_type, found)


# =============================================================================
# Host-facing handles
# =============================================================================


def host_identifier(tp: type) -> str:
    """Host-legal identifier derived from a type's simple name.

    Generic parameter markers are stripped, qualified-name separators become
    underscores: ``Invoice.Line`` -> ``Invoice_Line``, ``Box[int]`` -> ``Box``.
    """
    name = tp.__qualname__.replace("<locals>.", "")
    name = re.sub(r"\[.*\]", "", name)
    name = _NON_IDENTIFIER.sub("_", name.replace(".", "_"))
    if not name or name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


@dataclass(frozen=True, slots=True)
class TypeHandle:
    """Inspectable, constructible handle for one discovered type.

    Calling the handle constructs an instance with the given arguments, the
    way a host would write ``new Receipt("INV-1", "scan.pdf")``. Handles also
    stand in for their type in isinstance() and issubclass(), so a script can
    test ``isinstance(item, LineItem)`` against the bound name.
    """

    name: str
    type: type

    @property
    def qualified_name(self) -> str:
        return f"{self.type.__module__}.{self.type.__qualname__}"

    @property
    def fields(self) -> tuple[FieldDescriptor, ...]:
        return describe(self.type)

    def new(self) -> Any:
        """Construct a default instance.

        Raises:
            ElementConstructionError: If the type has no parameterless constructor
        """
        return construct_default(self.type)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.type(*args, **kwargs)

    def __instancecheck__(self, instance: Any) -> bool:
        return isinstance(instance, self.type)

    def __subclasscheck__(self, subclass: type) -> bool:
        return issubclass(subclass, self.type)


def type_handles(discovered: set[type]) -> dict[str, TypeHandle]:
    """Build one handle per type, keyed by unique host identifier.

    Types are ordered by qualified name, then module, so identifier collisions
    resolve deterministically (Line, Line_1, ...).
    """
    handles: dict[str, TypeHandle] = {}
    for tp in sorted(discovered, key=lambda t: (t.__qualname__, t.__module__)):
        name = unique_name(handles, host_identifier(tp))
        handles[name] = TypeHandle(name, tp)
    return dict(sorted(handles.items()))
