# tests/property/__init__.py
"""Property-based tests for graphbridge.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of: round trips restore the graph,
cycles yield exactly one sentinel, pruning and populating are idempotent.
"""
