# tests/unit/core/test_introspection.py
"""Tests for type classification, field tables and default values."""

from collections import deque
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Literal, Optional
from uuid import UUID, uuid4

import pytest

from graphbridge.contracts.errors import ElementConstructionError
from graphbridge.contracts.fields import FieldKind
from graphbridge.core.introspection import (
    UNREADABLE,
    classify,
    construct_default,
    describe,
    extra_instance_attributes,
    is_default_value,
    is_terminal_type,
    read_field,
    read_write_fields,
    resolve_type_hints,
    unwrap_optional,
    zero_enum_member,
)
from tests.fixtures.models import (
    Account,
    Address,
    Currency,
    Invoice,
    LineItem,
    Money,
    Person,
    Receipt,
    Status,
)


class Broken:
    ref: "DoesNotExist"  # noqa: F821
    count: int


class TestTerminalTypes:
    """Tests for is_terminal_type and unwrap_optional."""

    @pytest.mark.parametrize(
        "tp",
        [bool, int, float, complex, str, bytes, Decimal, datetime, date, time, timedelta, UUID, Status, Currency],
    )
    def test_scalar_types_are_terminal(self, tp: type) -> None:
        assert is_terminal_type(tp)

    def test_optional_scalar_is_terminal(self) -> None:
        assert is_terminal_type(Optional[int])
        assert is_terminal_type(str | None)

    def test_union_of_scalars_is_terminal(self) -> None:
        assert is_terminal_type(int | str)

    def test_opaque_declarations_are_terminal(self) -> None:
        assert is_terminal_type(Any)
        assert is_terminal_type(object)
        assert is_terminal_type(Literal["a", "b"])

    def test_composites_and_collections_are_not_terminal(self) -> None:
        assert not is_terminal_type(Address)
        assert not is_terminal_type(list[int])

    def test_unwrap_optional(self) -> None:
        assert unwrap_optional(Optional[Address]) is Address
        assert unwrap_optional(Address | None) is Address
        assert unwrap_optional(int | str) == int | str


class TestClassify:
    def test_sequence(self) -> None:
        kind, collection = classify(list[LineItem])

        assert kind is FieldKind.SEQUENCE
        assert collection is not None
        assert collection.element_type is LineItem

    def test_mapping(self) -> None:
        kind, collection = classify(dict[str, int])

        assert kind is FieldKind.MAPPING
        assert collection is not None
        assert collection.key_type is str

    def test_composite(self) -> None:
        assert classify(Address) == (FieldKind.COMPOSITE, None)

    def test_heterogeneous_tuple_is_not_walked(self) -> None:
        assert classify(tuple[int, str]) == (FieldKind.TERMINAL, None)


class TestDescribe:
    """Tests for field descriptor tables."""

    def test_dataclass_fields_in_declaration_order_then_properties(self) -> None:
        names = [f.name for f in describe(Invoice)]

        assert names == [
            "number",
            "status",
            "issued",
            "seller",
            "lines",
            "notes",
            "attachments",
            "totals_by_year",
            "line_count",
        ]

    def test_classvar_excluded(self) -> None:
        assert "schema_version" not in {f.name for f in describe(Invoice)}

    def test_optional_declarations_are_unwrapped(self) -> None:
        fields = {f.name: f for f in describe(Invoice)}

        assert fields["seller"].declared_type.__name__ == "Party"
        assert fields["seller"].kind is FieldKind.COMPOSITE
        assert fields["issued"].declared_type is date

    def test_read_only_property(self) -> None:
        fields = {f.name: f for f in describe(Invoice)}
        line_count = fields["line_count"]

        assert line_count.is_property
        assert line_count.readable
        assert not line_count.writable
        assert line_count.declared_type is int

    def test_property_with_setter_is_writable(self) -> None:
        fields = {f.name: f for f in describe(Account)}

        assert fields["owner"].writable
        assert not fields["display"].writable
        assert "_owner" not in fields

    def test_frozen_dataclass_fields_are_read_only(self) -> None:
        assert all(not f.writable for f in describe(Money))
        assert read_write_fields(Money) == ()

    def test_plain_annotated_class(self) -> None:
        fields = {f.name: f for f in describe(Person)}

        assert fields["best_friend"].kind is FieldKind.COMPOSITE
        assert fields["friends"].kind is FieldKind.SEQUENCE

    def test_terminal_and_builtin_types_have_no_fields(self) -> None:
        assert describe(int) == ()
        assert describe(Status) == ()

    def test_table_is_cached(self) -> None:
        assert describe(Invoice) is describe(Invoice)

    def test_unresolvable_annotations_fall_back_to_any(self) -> None:
        """A forward reference to a missing name never raises."""
        hints = resolve_type_hints(Broken)

        assert hints == {"ref": Any, "count": int}
        fields = {f.name: f for f in describe(Broken)}
        assert fields["ref"].kind is FieldKind.TERMINAL


class TestReadField:
    def test_raising_getter_reads_as_unreadable(self) -> None:
        account = Account()
        broken = next(f for f in describe(Account) if f.name == "broken")

        assert read_field(broken, account) is UNREADABLE

    def test_unassigned_annotated_attribute_reads_as_none(self) -> None:
        person = Person.__new__(Person)
        name = next(f for f in describe(Person) if f.name == "name")

        assert read_field(name, person) is None

    def test_extra_instance_attributes(self) -> None:
        person = Person("Ada")
        person.nickname = "ada"  # type: ignore[attr-defined]
        person._private = 1  # type: ignore[attr-defined]

        assert extra_instance_attributes(person, describe(Person)) == ["nickname"]


class TestZeroValues:
    def test_enum_zero_member_prefers_value_zero(self) -> None:
        assert zero_enum_member(Status) is Status.DRAFT

    def test_enum_zero_member_falls_back_to_first(self) -> None:
        assert zero_enum_member(Currency) is Currency.EUR

    @pytest.mark.parametrize(
        ("tp", "expected"),
        [
            (int, 0),
            (str, ""),
            (Decimal, Decimal("0")),
            (date, date.min),
            (timedelta, timedelta()),
            (UUID, UUID(int=0)),
            (Status, Status.DRAFT),
        ],
    )
    def test_construct_default_terminals(self, tp: type, expected: Any) -> None:
        assert construct_default(tp) == expected

    def test_construct_default_collections(self) -> None:
        assert construct_default(list[int]) == []
        assert construct_default(dict[str, int]) == {}
        assert construct_default(tuple[int, ...]) == ()
        assert isinstance(construct_default(deque[int]), deque)

    def test_construct_default_composite(self) -> None:
        assert construct_default(Optional[Address]) == Address()

    def test_no_parameterless_constructor_raises(self) -> None:
        with pytest.raises(ElementConstructionError) as exc_info:
            construct_default(Receipt)

        assert exc_info.value.element_type is Receipt

    def test_opaque_type_cannot_be_constructed(self) -> None:
        with pytest.raises(ElementConstructionError):
            construct_default(Any)


class TestIsDefaultValue:
    @pytest.mark.parametrize(
        "value",
        [
            None,
            "",
            "   \t",
            b"",
            0,
            0.0,
            False,
            Decimal("0.00"),
            Status.DRAFT,
            Currency.EUR,
            datetime.min,
            datetime.min.replace(tzinfo=timezone.utc),
            date.min,
            time(),
            timedelta(),
            UUID(int=0),
        ],
    )
    def test_default_like(self, value: Any) -> None:
        assert is_default_value(value)

    @pytest.mark.parametrize(
        "value",
        [
            "x",
            b"x",
            1,
            -0.5,
            True,
            Decimal("0.01"),
            Status.SENT,
            Currency.USD,
            date(2026, 1, 1),
            time(12, 0),
            timedelta(seconds=1),
            uuid4(),
            Address(),
            [],
        ],
    )
    def test_not_default_like(self, value: Any) -> None:
        assert not is_default_value(value)
