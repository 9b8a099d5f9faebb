"""Tests for the debt payoff helpers around the simulator.

Covers:
- Minimum payment estimates from balance size and liability type
- Matching liabilities to the envelopes that fund them
- Month-by-month interest and extra-payment roll-over
- Presentation helpers for payoff histories
"""

from __future__ import annotations

import pytest

from planwise.services.debts import (
    PayoffPoint,
    debt_envelope_budget,
    estimate_minimum_payment,
    extra_payment_capacity,
    format_duration,
    halfway_marker,
    history_progress,
    is_debt_envelope,
    match_envelope,
    minimum_commitment,
    simulate_payoff,
    to_debt_accounts,
)
from tests.conftest import assert_float_equal, make_debt


class TestMinimumPaymentEstimate:
    """Heuristic minimum payments."""

    def test_credit_card_uses_three_percent(self, liability_factory):
        card = liability_factory("Visa", balance=1000.0, liability_type="credit_card")
        assert estimate_minimum_payment(card) == 30.0

    def test_card_in_name_counts_as_credit(self, liability_factory):
        card = liability_factory("Store Card", balance=2000.0)
        assert estimate_minimum_payment(card) == 60.0

    def test_hire_purchase_rate(self, liability_factory):
        hp = liability_factory("Fridge", balance=2000.0, liability_type="hire_purchase")
        assert estimate_minimum_payment(hp) == 70.0

    def test_mortgage_rate(self, liability_factory):
        home = liability_factory("Home", balance=300000.0, liability_type="mortgage")
        assert estimate_minimum_payment(home) == 3000.0

    def test_floor_of_twenty_five(self, liability_factory):
        loan = liability_factory("Loan", balance=500.0, liability_type="personal_loan")
        assert estimate_minimum_payment(loan) == 25.0

    def test_small_balance_paid_in_full(self, liability_factory):
        loan = liability_factory("Afterpay", balance=150.0)
        assert estimate_minimum_payment(loan) == 150.0

    def test_envelope_amount_raises_estimate_but_caps_at_balance(self, liability_factory):
        card = liability_factory("Visa", balance=1000.0, liability_type="credit_card")
        assert estimate_minimum_payment(card, envelope_amount=80.0) == 80.0
        assert estimate_minimum_payment(card, envelope_amount=5000.0) == 1000.0

    def test_recorded_minimum_wins(self, liability_factory):
        loan = liability_factory("Car", balance=8000.0, minimum_payment=240.0)
        assert estimate_minimum_payment(loan) == 240.0

    def test_zero_balance(self, liability_factory):
        assert estimate_minimum_payment(liability_factory("Done", balance=0.0)) == 0.0


class TestEnvelopeMatching:
    def test_is_debt_envelope(self):
        assert is_debt_envelope("Credit Card Repayment")
        assert is_debt_envelope("Car loan")
        assert not is_debt_envelope("Groceries")

    def test_match_by_shared_token(self, liability_factory, envelope_factory):
        card = liability_factory("Visa Card")
        envelopes = [envelope_factory("Student Loan"), envelope_factory("Credit Card Repayment")]

        assert match_envelope(card, envelopes).name == "Credit Card Repayment"

    def test_no_match(self, liability_factory, envelope_factory):
        assert match_envelope(liability_factory("Student"), [envelope_factory("Hire")]) is None

    def test_to_debt_accounts_uses_envelope_budget(self, liability_factory, envelope_factory):
        liabilities = [
            liability_factory("Visa Card", balance=1000.0, interest_rate=20.0, liability_type="credit_card"),
            liability_factory("Car Loan", balance=9000.0, interest_rate=9.5),
        ]
        envelopes = [
            envelope_factory("Credit Card", pay_cycle_amount=120.0),
            envelope_factory("Groceries", pay_cycle_amount=400.0),
        ]

        accounts = to_debt_accounts(liabilities, envelopes)

        assert [(a.name, a.apr, a.minimum_payment) for a in accounts] == [
            ("Visa Card", 20.0, 120.0),
            ("Car Loan", 9.5, 180.0),
        ]
        assert debt_envelope_budget(envelopes) == 120.0


class TestCommitment:
    def test_minimum_commitment_caps_each_minimum(self):
        debts = [make_debt("A", 20.0, 10.0, 50.0), make_debt("B", 500.0, 10.0, 30.0)]
        assert minimum_commitment(debts) == 50.0

    def test_extra_payment_capacity_floors_at_zero(self):
        debts = [make_debt("A", 500.0, 10.0, 30.0)]
        assert extra_payment_capacity(100.0, debts) == 70.0
        assert extra_payment_capacity(10.0, debts) == 0.0


class TestMonthlyMechanics:
    def test_first_month_interest_and_payment(self):
        debts = [make_debt("Card", balance=1000.0, apr=24.0, minimum_payment=50.0)]

        result = simulate_payoff(debts, "snowball", 100.0)

        # 1000 + 2% interest - 100 payment
        assert_float_equal(result.history[1].balance, 920.0)

    def test_leftover_rolls_onto_next_debt_in_same_month(self):
        debts = [
            make_debt("Small", balance=100.0, apr=0.0, minimum_payment=10.0),
            make_debt("Large", balance=1000.0, apr=0.0, minimum_payment=10.0),
        ]

        result = simulate_payoff(debts, "snowball", 300.0)

        assert_float_equal(result.history[1].balance, 800.0)
        assert result.payoff_order[0].name == "Small"
        assert result.payoff_order[0].month == 1
        assert result.interest_paid == 0.0

    def test_interest_paid_is_rounded_to_cents(self):
        debts = [make_debt("Card", balance=1234.56, apr=19.99, minimum_payment=40.0)]

        result = simulate_payoff(debts, "avalanche", 150.0)

        assert result.interest_paid == round(result.interest_paid, 2)
        assert result.interest_paid > 0


class TestPresentationHelpers:
    @pytest.mark.parametrize(
        ("months", "expected"),
        [(0, None), (-3, None), (5, "5m"), (12, "1y"), (14, "1y 2m"), (600, "50y")],
    )
    def test_format_duration(self, months, expected):
        assert format_duration(months) == expected

    def test_halfway_marker_and_progress(self):
        history = [
            PayoffPoint(0, 1000.0),
            PayoffPoint(1, 700.0),
            PayoffPoint(2, 450.0),
            PayoffPoint(3, 200.0),
        ]

        assert halfway_marker(history) == "Month 2"
        assert history_progress(history) == 80.0
        assert halfway_marker(history[:2]) == "Not yet reached"
        assert halfway_marker([]) == "TBC"
        assert history_progress([]) == 0.0
