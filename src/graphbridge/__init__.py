"""
graphbridge: Expose typed Python object graphs to dynamic script hosts.

Discovers the types reachable from a root object, scaffolds empty documents,
converts graphs to attribute maps with callable hooks, writes edited maps
back, and prunes whatever was left at its default.
"""

__version__ = "0.1.0"
