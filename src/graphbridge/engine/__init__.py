"""Graph walkers and the host interop session.

This module provides the operations over typed object graphs:
- discover / type_handles: Type catalog for a root instance
- ensure_non_empty: Populate every reachable collection
- prune_defaults: Strip default-like content bottom-up
- to_dynamic / to_dynamic_with_list_hooks: Typed graph -> AttributeMap
- apply_dynamic: AttributeMap -> typed graph
- InteropSession: Bind a graph into a ScriptHost and sync it back

Example:
    from graphbridge.engine import NamespaceHost, InteropSession, ensure_non_empty

    invoice = Invoice()
    ensure_non_empty(invoice)

    with InteropSession(invoice, NamespaceHost()) as session:
        session.run("root.lines[0].sku = 'A-1'")
"""

from graphbridge.engine.catalog import TypeHandle, discover, discover_type, host_identifier, type_handles
from graphbridge.engine.converter import (
    DEFAULT_HOOK_NAME,
    default_hook_factory,
    to_dynamic,
    to_dynamic_with_list_hooks,
)
from graphbridge.engine.mapper import apply_dynamic
from graphbridge.engine.populator import ensure_non_empty
from graphbridge.engine.pruner import prune_defaults
from graphbridge.engine.session import InteropSession, NamespaceHost, ScriptHost

__all__ = [
    "DEFAULT_HOOK_NAME",
    "InteropSession",
    "NamespaceHost",
    "ScriptHost",
    "TypeHandle",
    "apply_dynamic",
    "default_hook_factory",
    "discover",
    "discover_type",
    "ensure_non_empty",
    "host_identifier",
    "prune_defaults",
    "to_dynamic",
    "to_dynamic_with_list_hooks",
    "type_handles",
]
