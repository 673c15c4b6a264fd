# src/graphbridge/core/traversal.py
"""Traversal bookkeeping shared by the walkers: cycle guard and paths."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

ROOT_PATH = "Root"

DEFAULT_MAX_DEPTH = 64


class VisitedSet:
    """Identity-keyed set of the nodes on the active traversal stack.

    Keyed by id(): every tracked node is referenced by a live stack frame for
    as long as it is in the set, so ids cannot be recycled while tracked.
    Nodes leave the set when the walk leaves them, so a shared (but acyclic)
    node reached through two paths is visited both times.
    """

    __slots__ = ("_ids",)

    def __init__(self) -> None:
        self._ids: set[int] = set()

    def __contains__(self, node: object) -> bool:
        return id(node) in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    @contextmanager
    def visiting(self, node: Any) -> Iterator[bool]:
        """Track ``node`` for the duration of the block.

        Yields:
            False if ``node`` is already on the path (a cycle), True otherwise
        """
        key = id(node)
        if key in self._ids:
            yield False
            return
        self._ids.add(key)
        try:
            yield True
        finally:
            self._ids.discard(key)


def member_path(path: str, name: str) -> str:
    return f"{path}.{name}"


def index_path(path: str, index: object) -> str:
    return f"{path}[{index}]"
