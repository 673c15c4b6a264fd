# tests/fixtures/__init__.py
"""Example payload models shared by unit and property tests."""
