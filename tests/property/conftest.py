# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategies build fully typed invoice documents (see tests.fixtures.models)
with every optional field either unset or populated.

Usage:
    from tests.property.conftest import invoices

    @given(invoice=invoices())
    def test_round_trip(invoice: Invoice) -> None:
        ...
"""

from __future__ import annotations

from decimal import Decimal

from hypothesis import strategies as st

from graphbridge.contracts.dynamic import SENTINELS

from tests.fixtures.models import (
    Address,
    Attachment,
    Envelope,
    Invoice,
    LineItem,
    Party,
    Person,
    Status,
)

# =============================================================================
# Terminal values
# =============================================================================

short_text = st.text(max_size=12)

amounts = st.decimals(
    min_value=Decimal("-1000000"),
    max_value=Decimal("1000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)

quantities = st.integers(min_value=-1000, max_value=1000)

# Scalars that are never LineItem instances
non_line_items = st.one_of(st.integers(), st.text(max_size=20), st.booleans(), st.decimals(allow_nan=False))


# =============================================================================
# Composite documents
# =============================================================================

addresses = st.builds(Address, street=short_text, city=short_text, country=st.none() | short_text)

parties = st.builds(Party, name=short_text, address=st.none() | addresses)

line_items = st.builds(
    LineItem,
    sku=short_text,
    quantity=quantities,
    unit_price=amounts,
    tags=st.none() | st.lists(short_text, max_size=3),
)

attachments = st.builds(Attachment, file_name=short_text, size=st.integers(min_value=0, max_value=10**9))


@st.composite
def invoices(draw: st.DrawFn) -> Invoice:
    """Invoice with every optional field independently unset or populated."""
    return Invoice(
        number=draw(short_text),
        status=draw(st.sampled_from(Status)),
        issued=draw(st.none() | st.dates()),
        seller=draw(st.none() | parties),
        lines=draw(st.none() | st.lists(line_items, max_size=4)),
        notes=draw(st.none() | st.dictionaries(short_text, short_text, max_size=3)),
        attachments=draw(st.none() | st.lists(attachments, max_size=3).map(tuple)),
        totals_by_year=draw(
            st.none() | st.dictionaries(st.integers(min_value=1900, max_value=2100), amounts, max_size=3)
        ),
    )


@st.composite
def person_rings(draw: st.DrawFn) -> list[Person]:
    """Persons whose best_friend links form a single ring."""
    size = draw(st.integers(min_value=1, max_value=20))
    people = [Person(f"p{i}") for i in range(size)]
    for i, person in enumerate(people):
        person.best_friend = people[(i + 1) % size]
    return people


# =============================================================================
# Opaque payloads
# =============================================================================

# JSON-like data as a host would hand back for Any-typed fields. None is left
# out because maps drop None entries on conversion.
payload_text = short_text.filter(lambda s: s not in SENTINELS)

payloads = st.recursive(
    st.one_of(st.integers(), st.booleans(), payload_text),
    lambda children: st.lists(children, max_size=3) | st.dictionaries(payload_text, children, max_size=3),
    max_leaves=12,
)


@st.composite
def envelopes(draw: st.DrawFn) -> Envelope:
    """Envelope with opaque payloads and an enum-keyed map."""
    return Envelope(
        subject=draw(payload_text),
        meta=draw(st.none() | st.dictionaries(payload_text, payloads, max_size=4)),
        extra=draw(payloads),
        by_status=draw(st.none() | st.dictionaries(st.sampled_from(Status), quantities, max_size=3)),
    )
