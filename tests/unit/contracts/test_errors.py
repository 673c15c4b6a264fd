# tests/unit/contracts/test_errors.py
"""Tests for the error hierarchy."""

from __future__ import annotations

from graphbridge.contracts.errors import (
    ElementConstructionError,
    ElementTypeMismatchError,
    GraphBridgeError,
    InvalidOperationError,
)
from tests.fixtures.models import LineItem, Receipt


class TestErrorHierarchy:
    def test_hard_errors_share_invalid_operation_base(self) -> None:
        assert issubclass(ElementTypeMismatchError, InvalidOperationError)
        assert issubclass(ElementConstructionError, InvalidOperationError)
        assert issubclass(InvalidOperationError, GraphBridgeError)

    def test_type_mismatch_carries_structured_attributes(self) -> None:
        error = ElementTypeMismatchError(LineItem, str, field_name="lines")

        assert error.element_type is LineItem
        assert error.item_type is str
        assert error.field_name == "lines"
        assert "Cannot add item of type str to collection of LineItem (field 'lines')" in str(error)

    def test_construction_error_names_type(self) -> None:
        error = ElementConstructionError(Receipt)

        assert error.element_type is Receipt
        assert "Receipt has no parameterless constructor" in str(error)
