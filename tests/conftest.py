"""Pytest configuration and shared fixtures for Planwise tests.

Provides envelope/liability factories, a fixed evaluation instant so health
calculations are reproducible, and float helpers for money assertions.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from planwise.models import Envelope, Liability
from planwise.services.debts import DebtAccount

# Every health calculation in the suite is evaluated at this instant.
NOW = datetime(2026, 3, 1)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Keep config/log output inside the test's temp directory."""

    monkeypatch.setenv("PLANWISE_DATA_DIR", str(tmp_path / "instance"))
    monkeypatch.delenv("PLANWISE_DEFAULT_PAY_CYCLE", raising=False)
    monkeypatch.delenv("PLANWISE_DEFAULT_STRATEGY", raising=False)
    monkeypatch.delenv("PLANWISE_DEV_MODE", raising=False)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def envelope_factory():
    """Factory for expense envelopes with sensible defaults."""

    counter = {"value": 0}

    def _create_envelope(
        name: str = "Envelope",
        *,
        priority: str = "important",
        target_amount: float = 0.0,
        current_amount: float = 0.0,
        pay_cycle_amount: float = 0.0,
        frequency: str = "monthly",
        next_payment_due: date | None = None,
        envelope_type: str = "expense",
        id: str | None = None,
    ) -> Envelope:
        counter["value"] += 1
        return Envelope(
            id=id or f"env-{counter['value']}",
            name=name,
            envelope_type=envelope_type,
            priority=priority,
            target_amount=target_amount,
            current_amount=current_amount,
            pay_cycle_amount=pay_cycle_amount,
            frequency=frequency,
            next_payment_due=next_payment_due,
        )

    return _create_envelope


@pytest.fixture
def household(envelope_factory) -> list[Envelope]:
    """A small household budget evaluated at ``NOW`` on a fortnightly cycle.

    - Rent: gap 150, priority score 136 (most urgent)
    - Power: gap 200, priority score 193
    - Netflix / Eating Out: discretionary, no due date
    - Holiday: discretionary, well ahead of schedule
    - Salary: income, ignored by the planners
    """

    return [
        envelope_factory(
            "Rent",
            id="rent",
            priority="essential",
            target_amount=300.0,
            pay_cycle_amount=150.0,
            next_payment_due=date(2026, 3, 15),
        ),
        envelope_factory(
            "Power",
            id="power",
            priority="important",
            target_amount=200.0,
            pay_cycle_amount=100.0,
            next_payment_due=date(2026, 3, 8),
        ),
        envelope_factory("Netflix", id="netflix", priority="discretionary", pay_cycle_amount=20.0),
        envelope_factory(
            "Eating Out", id="dining", priority="discretionary", pay_cycle_amount=80.0
        ),
        envelope_factory(
            "Holiday",
            id="holiday",
            priority="discretionary",
            target_amount=2600.0,
            current_amount=2000.0,
            pay_cycle_amount=50.0,
            frequency="annual",
            next_payment_due=date(2026, 12, 1),
        ),
        envelope_factory(
            "Salary", id="salary", envelope_type="income", priority="discretionary",
            pay_cycle_amount=999.0,
        ),
    ]


@pytest.fixture
def liability_factory():
    """Factory for liability records as loaded from storage."""

    def _create_liability(
        name: str = "Test Debt",
        *,
        balance: float = 1000.00,
        interest_rate: float = 18.0,
        liability_type: str | None = None,
        minimum_payment: float | None = None,
        id: str | None = None,
    ) -> Liability:
        return Liability(
            id=id or name.lower().replace(" ", "-"),
            name=name,
            balance=balance,
            interest_rate=interest_rate,
            liability_type=liability_type,
            minimum_payment=minimum_payment,
        )

    return _create_liability


def make_debt(
    name: str, balance: float, apr: float, minimum_payment: float, id: str | None = None
) -> DebtAccount:
    return DebtAccount(
        id=id or name, name=name, balance=balance, apr=apr, minimum_payment=minimum_payment
    )


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance (default one cent)."""
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"
