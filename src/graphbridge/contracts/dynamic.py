# src/graphbridge/contracts/dynamic.py
"""Dynamic attribute map handed to the host environment.

An AttributeMap is the host-visible form of a typed node: an ordered
string-keyed mapping whose values are scalars, nested AttributeMaps, lists, or
hooks (callables that mutate the live typed graph when invoked).

Both access styles work, so a host can treat it as a dict or as an object:

    node["city"]          node.city
    node["city"] = "Oslo" node.city = "Oslo"

Names that collide with Mapping methods (``keys``, ``items``, ``get`` ...) are
only reachable by subscription.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, MutableMapping
from typing import Any

# Sentinels written in place of a node the converter refused to descend into.
CIRCULAR_REFERENCE = "[[CircularReference]]"
MAX_DEPTH_REACHED = "[[MaxDepthReached]]"

SENTINELS: frozenset[str] = frozenset({CIRCULAR_REFERENCE, MAX_DEPTH_REACHED})

Hook = Callable[..., Any]

# (original_value, path) -> zero-argument hook
HookFactory = Callable[[Any, str], Callable[[], Any]]


def unique_name(existing: Iterable[str], desired: str) -> str:
    """Return ``desired`` or the first free ``desired_N`` (N = 1, 2, ...).

    Args:
        existing: Names already taken
        desired: Preferred name

    Returns:
        A name not present in ``existing``
    """
    taken = existing if isinstance(existing, set | frozenset | dict) else set(existing)
    if desired not in taken:
        return desired
    i = 1
    while f"{desired}_{i}" in taken:
        i += 1
    return f"{desired}_{i}"


class AttributeMap(MutableMapping[str, Any]):
    """Ordered, attribute-accessible mapping with hook bookkeeping."""

    __slots__ = ("_data", "_hooks")

    def __init__(self, data: Iterable[tuple[str, Any]] | dict[str, Any] | None = None, /, **kwargs: Any) -> None:
        object.__setattr__(self, "_data", {})
        object.__setattr__(self, "_hooks", set())
        if data is not None:
            self.update(data)
        if kwargs:
            self.update(kwargs)

    # -- Mapping protocol -------------------------------------------------

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise TypeError(f"AttributeMap keys must be str, got {type(key).__name__}")
        # Plain assignment over a hook turns the key back into data
        self._hooks.discard(key)
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._hooks.discard(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    # -- Attribute access ---------------------------------------------------

    def __getattr__(self, key: str) -> Any:
        if key.startswith("_"):
            raise AttributeError(key)
        try:
            return self._data[key]
        except KeyError as e:
            raise AttributeError(key) from e

    def __setattr__(self, key: str, value: Any) -> None:
        if key.startswith("_"):
            raise AttributeError(f"Cannot set private attribute '{key}' on AttributeMap")
        self[key] = value

    def __delattr__(self, key: str) -> None:
        try:
            del self[key]
        except KeyError as e:
            raise AttributeError(key) from e

    def __repr__(self) -> str:
        data = {k: v for k, v in self._data.items() if k not in self._hooks}
        if self._hooks:
            return f"AttributeMap({data!r}, hooks={sorted(self._hooks)!r})"
        return f"AttributeMap({data!r})"

    # -- Hooks --------------------------------------------------------------

    def attach_hook(self, name: str, hook: Hook) -> str:
        """Attach a hook under ``name`` or the first free ``name_N``.

        Returns:
            The name the hook was stored under
        """
        actual = unique_name(self._data, name)
        self._data[actual] = hook
        self._hooks.add(actual)
        return actual

    def is_hook(self, key: str) -> bool:
        return key in self._hooks

    def hooks(self) -> dict[str, Hook]:
        """Attached hooks by name, in insertion order."""
        return {k: v for k, v in self._data.items() if k in self._hooks}

    def data_items(self) -> Iterator[tuple[str, Any]]:
        """Iterate entries that are data, not hooks."""
        for key, value in self._data.items():
            if key not in self._hooks:
                yield key, value

    def to_plain(self) -> dict[str, Any]:
        """Recursively convert to plain dicts and lists with hooks removed."""
        return {key: plain_value(value) for key, value in self.data_items()}


def plain_value(value: Any) -> Any:
    """Strip AttributeMaps (and their hooks) from a value, recursively.

    AttributeMaps become dicts of their data entries; lists and plain dicts
    are rebuilt around their unwrapped items, dropping callables other than
    classes. Anything else is returned as is.
    """
    if isinstance(value, AttributeMap):
        return value.to_plain()
    if isinstance(value, list):
        return [plain_value(v) for v in value]
    if isinstance(value, dict):
        return {k: plain_value(v) for k, v in value.items() if isinstance(v, type) or not callable(v)}
    return value


def is_sentinel(value: Any) -> bool:
    """Whether a value is one of the converter's structural-limit markers."""
    return isinstance(value, str) and value in SENTINELS
