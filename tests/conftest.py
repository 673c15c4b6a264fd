# tests/conftest.py
"""Shared test fixtures and helpers.

Fixtures:
- invoice: A small, fully specified Invoice document
- person_cycle: Two Persons that are each other's best friend

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from datetime import date
from decimal import Decimal

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings
from structlog.stdlib import ProcessorFormatter

from tests.fixtures.models import (
    Address,
    Attachment,
    Invoice,
    LineItem,
    Party,
    Person,
    Status,
)

# =============================================================================
# Hypothesis Profiles
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Document fixtures
# =============================================================================


@pytest.fixture
def invoice() -> Invoice:
    """Invoice with every field shape populated."""
    return Invoice(
        number="INV-2026-0001",
        status=Status.SENT,
        issued=date(2026, 3, 14),
        seller=Party(name="Acme", address=Address(street="Main St 1", city="Oslo")),
        lines=[
            LineItem(sku="A-1", quantity=2, unit_price=Decimal("9.50"), tags=["red"]),
            LineItem(sku="B-2", quantity=1, unit_price=Decimal("120.00")),
        ],
        notes={"delivery": "leave at door"},
        attachments=(Attachment(file_name="scan.pdf", size=2048),),
        totals_by_year={2025: Decimal("10.00"), 2026: Decimal("139.00")},
    )


@pytest.fixture
def person_cycle() -> tuple[Person, Person]:
    """A.best_friend = B and B.best_friend = A."""
    a = Person("Ada")
    b = Person("Bob")
    a.best_friend = b
    b.best_friend = a
    return a, b


# =============================================================================
# Logging isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by a test (directly or via the CLI).

    Handlers bound to a captured stream would otherwise outlive the capture.
    """
    root = logging.getLogger()
    level = root.level
    yield
    root.handlers = [h for h in root.handlers if not isinstance(h.formatter, ProcessorFormatter)]
    root.setLevel(level)
    structlog.reset_defaults()
