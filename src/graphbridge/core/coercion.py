# src/graphbridge/core/coercion.py
"""Best-effort scalar coercion.

Host environments hand back loosely typed scalars (floats for integers,
strings for dates, numbers for enums). coerce_scalar() converts them to the
declared type using pydantic's lax-mode validation:

    coerce_scalar(3.0, int)            -> 3
    coerce_scalar("2024-01-31", date)  -> date(2024, 1, 31)
    coerce_scalar(2, Color)            -> Color.BLUE
    coerce_scalar(5, str)              -> "5"

A value that cannot be converted is returned UNCHANGED rather than raising.
Callers that must not accept an unconverted value (typed collection hooks)
check the result with isinstance() themselves.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import structlog
from pydantic import ConfigDict, TypeAdapter, ValidationError

from graphbridge.core.introspection import unwrap_optional

logger = structlog.get_logger(__name__)

_LAX_CONFIG = ConfigDict(coerce_numbers_to_str=True)


@lru_cache(maxsize=256)
def _adapter_for(target: Any) -> TypeAdapter[Any] | None:
    try:
        return TypeAdapter(target, config=_LAX_CONFIG)
    except Exception:
        # Types pydantic cannot build a schema for are never coerced
        return None


def coerce_scalar(value: Any, target: Any) -> Any:
    """Convert ``value`` to ``target`` when possible, else return it unchanged.

    Args:
        value: Source value (from the host side)
        target: Declared type; Optional is unwrapped

    Returns:
        Converted value, or ``value`` itself on any conversion failure
    """
    if value is None:
        return None
    target = unwrap_optional(target)
    if target is Any or target is object:
        return value
    if isinstance(target, type) and isinstance(value, target):
        return value

    try:
        adapter = _adapter_for(target)
    except TypeError:
        # Unhashable annotation; cannot be cached or coerced
        return value
    if adapter is None:
        return value

    try:
        return adapter.validate_python(value)
    except (ValidationError, TypeError, ValueError):
        logger.debug(
            "coercion_passthrough",
            target=getattr(target, "__name__", repr(target)),
            value_type=type(value).__name__,
        )
        return value


def is_instance_of(value: Any, declared: Any) -> bool:
    """isinstance() against a declared type; opaque declarations accept anything."""
    declared = unwrap_optional(declared)
    if value is None or declared is Any or declared is object:
        return True
    if isinstance(declared, type):
        return isinstance(value, declared)
    try:
        adapter = _adapter_for(declared)
    except TypeError:
        return True
    if adapter is None:
        return True
    try:
        adapter.validate_python(value, strict=True)
    except (ValidationError, TypeError, ValueError):
        return False
    return True
