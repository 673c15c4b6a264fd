# src/graphbridge/engine/session.py
"""Interop session: expose a typed graph to a script host and sync it back.

A session wires the walkers together for the usual round trip:

    with InteropSession(invoice, host) as session:
        session.run("root.number = 'INV-1'; root.add_default_to_lines()")
    # invoice.number == "INV-1", invoice.lines has one more LineItem

open() binds one TypeHandle per discovered type (so scripts can construct
``LineItem()``) plus the root AttributeMap under ``root_name``. sync() writes
the AttributeMap back onto the typed root through apply_dynamic().

The host itself is anything implementing ScriptHost. NamespaceHost runs
Python source against a plain namespace dict.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any, Protocol, runtime_checkable

import structlog

from graphbridge.contracts.dynamic import AttributeMap
from graphbridge.core.config import BridgeSettings
from graphbridge.engine.catalog import TypeHandle, discover, type_handles
from graphbridge.engine.converter import to_dynamic_with_list_hooks
from graphbridge.engine.mapper import apply_dynamic

logger = structlog.get_logger(__name__)


@runtime_checkable
class ScriptHost(Protocol):
    """Minimal surface a scripting environment must offer."""

    def bind(self, name: str, value: Any) -> None:
        """Make ``value`` visible to scripts under ``name``."""
        ...

    def execute(self, source: str) -> Any:
        """Run script source and return its result."""
        ...


class NamespaceHost:
    """ScriptHost that executes Python source in a private namespace.

    The script's result is whatever it assigns to ``result`` (None otherwise).
    Only for trusted scripts: there is no sandboxing.
    """

    def __init__(self) -> None:
        self.namespace: dict[str, Any] = {}

    def bind(self, name: str, value: Any) -> None:
        self.namespace[name] = value

    def execute(self, source: str) -> Any:
        self.namespace.pop("result", None)
        exec(compile(source, "<script>", "exec"), self.namespace)
        return self.namespace.get("result")


class InteropSession:
    """One root, one host, one open/run/sync cycle.

    Args:
        root: Typed graph root; mutated by sync()
        host: Script host the graph is exposed to
        settings: Walk options; defaults to BridgeSettings()
        root_name: Host name for the root map; overrides settings.root_name
    """

    def __init__(
        self,
        root: Any,
        host: ScriptHost,
        settings: BridgeSettings | None = None,
        root_name: str | None = None,
    ) -> None:
        if root is None:
            raise ValueError("root must not be None")
        self.root = root
        self.host = host
        self.settings = settings or BridgeSettings()
        self.root_name = root_name or self.settings.root_name
        self.handles: dict[str, TypeHandle] = {}
        self.tree: AttributeMap | None = None

    @property
    def is_open(self) -> bool:
        return self.tree is not None

    def open(self) -> AttributeMap:
        """Bind type handles and the converted root into the host.

        Returns:
            The bound root AttributeMap
        """
        self.handles = type_handles(discover(self.root))
        for name, handle in self.handles.items():
            self.host.bind(name, handle)

        self.tree = to_dynamic_with_list_hooks(
            self.root,
            include_nulls=self.settings.include_nulls,
            max_depth=self.settings.max_depth,
            hook_name=self.settings.hook_name,
        )
        self.host.bind(self.root_name, self.tree)
        logger.debug(
            "session_opened",
            root=type(self.root).__qualname__,
            types=len(self.handles),
            root_name=self.root_name,
        )
        return self.tree

    def run(self, source: str) -> Any:
        """Execute script source in the host; opens the session if needed."""
        if self.tree is None:
            self.open()
        return self.host.execute(source)

    def sync(self) -> None:
        """Write the bound AttributeMap back onto the typed root."""
        if self.tree is None:
            return
        apply_dynamic(self.root, self.tree)
        logger.debug("session_synced", root=type(self.root).__qualname__)

    def close(self) -> None:
        """Drop the bound tree. The host keeps whatever it already holds."""
        self.tree = None

    def __enter__(self) -> InteropSession:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if exc_type is None:
                self.sync()
        finally:
            self.close()
