"""Debt payoff calculators."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from functools import cmp_to_key
from typing import Iterable, Literal, Sequence

from ..models.envelope import Envelope
from ..models.liability import Liability
from .periods import add_months

logger = logging.getLogger(__name__)

Strategy = Literal["snowball", "avalanche", "hybrid"]
STRATEGIES: tuple[str, ...] = ("snowball", "avalanche", "hybrid")

MAX_MONTHS = 600  # 50 years
PAID_OFF_THRESHOLD = 0.5
STAGNATION_MONTHS = 3
HYBRID_RATE_TIE = 1.5  # percentage points

STAGNATION_WARNING = (
    "Payments are barely covering interest. Increase your commitment to see progress."
)
CEILING_WARNING = "Projection exceeds 50 years. Increase payments or review the debt details."

DEBT_ENVELOPE_TOKENS = ("debt", "loan", "repay", "credit", "card", "hire")


@dataclass(slots=True)
class DebtAccount:
    """Represents a liability input for payoff projections."""

    id: str
    name: str
    balance: float
    apr: float  # annual percent
    minimum_payment: float


@dataclass(slots=True)
class PayoffPoint:
    month: int
    balance: float


@dataclass(slots=True)
class PayoffOrder:
    id: str
    name: str
    month: int


@dataclass(slots=True)
class PayoffResult:
    months: int
    interest_paid: float
    payoff_date: date
    payoff_order: list[PayoffOrder]
    history: list[PayoffPoint]
    warnings: list[str]
    monthly_commitment: float
    stalled: bool


@dataclass(slots=True)
class PayoffComparison:
    """Minimum-only run next to a run with extra monthly payment."""

    minimum_commitment: float
    extra: float
    base: PayoffResult
    accelerated: PayoffResult
    interest_saved: float
    months_saved: int


@dataclass(slots=True)
class _WorkingDebt:
    # Mutable per-call copy; never leaves simulate_payoff.
    id: str
    name: str
    balance: float
    apr: float
    rate: float
    minimum_payment: float
    paid_off: bool = field(default=False)


def check_strategy(strategy: str) -> Strategy:
    if strategy not in STRATEGIES:
        raise ValueError("Invalid debt payoff strategy.")
    return strategy  # type: ignore[return-value]


def estimate_minimum_payment(liability: Liability, envelope_amount: float = 0.0) -> float:
    """Heuristic minimum payment from balance size and liability type.

    Uses the liability's own ``minimum_payment`` when one is recorded.
    """

    balance = max(0.0, liability.balance)
    if balance == 0:
        return 0.0
    if liability.minimum_payment is not None:
        return round(min(liability.minimum_payment, balance), 2)

    kind = (liability.liability_type or "").lower()
    name = liability.name.lower()
    rate = 0.02
    if "credit" in kind or "card" in kind or "card" in name:
        rate = 0.03
    elif "store" in kind or "hire" in kind:
        rate = 0.035
    elif "mortgage" in kind or "student" in kind:
        rate = 0.01

    estimated = max(balance * rate, balance if balance < 200 else 25.0)
    if envelope_amount > 0:
        estimated = max(envelope_amount, estimated)
    return round(min(estimated, balance), 2)


def is_debt_envelope(name: str) -> bool:
    candidate = name.lower()
    return any(token in candidate for token in DEBT_ENVELOPE_TOKENS)


def match_envelope(liability: Liability, envelopes: Iterable[Envelope]) -> Envelope | None:
    """Find the debt envelope that funds *liability*, matched by name."""

    liability_name = liability.name.lower()
    for envelope in envelopes:
        envelope_name = envelope.name.lower()
        if envelope_name in liability_name or liability_name in envelope_name:
            return envelope
        tokens = [t for t in envelope_name.replace("-", " ").split() if len(t) > 2]
        if any(token in liability_name for token in tokens):
            return envelope
    return None


def to_debt_accounts(
    liabilities: Iterable[Liability], envelopes: Iterable[Envelope] = ()
) -> list[DebtAccount]:
    """Build simulator inputs, estimating minimum payments where needed."""

    debt_envelopes = [e for e in envelopes if is_debt_envelope(e.name)]
    accounts = []
    for liability in liabilities:
        matched = match_envelope(liability, debt_envelopes)
        envelope_amount = matched.pay_cycle_amount if matched is not None else 0.0
        accounts.append(
            DebtAccount(
                id=liability.id,
                name=liability.name,
                balance=liability.balance,
                apr=liability.interest_rate,
                minimum_payment=estimate_minimum_payment(liability, envelope_amount),
            )
        )
    return accounts


def debt_envelope_budget(envelopes: Iterable[Envelope]) -> float:
    """Total committed per-pay amount across envelopes that fund debts."""

    return sum(max(0.0, e.pay_cycle_amount) for e in envelopes if is_debt_envelope(e.name))


def minimum_commitment(debts: Iterable[DebtAccount]) -> float:
    """Sum of minimum payments, each capped at its own balance."""

    total = sum(
        max(0.0, min(d.minimum_payment, d.balance)) for d in debts if d.balance > 0
    )
    return round(total, 2)


def extra_payment_capacity(debt_budget: float, debts: Iterable[DebtAccount]) -> float:
    return max(0.0, debt_budget - minimum_commitment(debts))


def _hybrid_compare(a: _WorkingDebt, b: _WorkingDebt) -> int:
    # Rates within the tie band are ordered by balance, otherwise by rate.
    if abs(a.apr - b.apr) <= HYBRID_RATE_TIE:
        return (a.balance > b.balance) - (a.balance < b.balance)
    return (a.apr < b.apr) - (a.apr > b.apr)


def order_debts(debts: Sequence[_WorkingDebt], strategy: Strategy) -> list[_WorkingDebt]:
    """Return debts in the order the strategy pays them down."""

    if strategy == "snowball":
        # Sort debts by balance, ascending.
        return sorted(debts, key=lambda d: d.balance)
    if strategy == "avalanche":
        # Sort debts by APR, descending.
        return sorted(debts, key=lambda d: d.apr, reverse=True)
    if strategy == "hybrid":
        return sorted(debts, key=cmp_to_key(_hybrid_compare))
    raise ValueError("Invalid debt payoff strategy.")


def simulate_payoff(
    debts: Iterable[DebtAccount],
    strategy: Strategy,
    monthly_budget: float,
    *,
    start: date | None = None,
) -> PayoffResult | None:
    """Simulate month-by-month repayment of a basket of debts.

    Returns ``None`` when there is nothing to pay or no budget to pay it
    with. The commitment is never less than the combined minimum payments.
    Each month interest accrues first, then minimums are paid in strategy
    order from a shared pool, and whatever is left goes to the first open
    debt. The run ends when the balance clears, when it stops falling for
    several months, or at the fifty-year ceiling.
    """

    check_strategy(strategy)
    working = [
        _WorkingDebt(
            id=d.id,
            name=d.name,
            balance=d.balance,
            apr=max(0.0, d.apr),
            rate=max(0.0, d.apr) / 100,
            minimum_payment=max(0.0, min(d.minimum_payment, d.balance)),
        )
        for d in debts
        if d.balance > 0
    ]
    if not working or monthly_budget <= 0:
        return None

    ordered = order_debts(working, strategy)
    minimum_required = round(sum(min(d.minimum_payment, d.balance) for d in ordered), 2)
    committed = max(monthly_budget, minimum_required)

    month = 0
    total_interest = 0.0
    remaining = sum(d.balance for d in ordered)
    last_balance = remaining
    stagnant_periods = 0
    history = [PayoffPoint(month=0, balance=round(remaining, 2))]
    payoff_order: list[PayoffOrder] = []
    warnings: list[str] = []

    while remaining > PAID_OFF_THRESHOLD and month < MAX_MONTHS:
        month += 1
        pool = committed

        for debt in ordered:
            if debt.balance <= 0 or not debt.rate:
                continue
            interest = debt.balance * debt.rate / 12
            debt.balance += interest
            total_interest += interest

        for debt in ordered:
            if pool <= 0:
                break
            if debt.balance <= 0:
                continue
            payment = min(debt.minimum_payment, debt.balance, pool)
            debt.balance = max(0.0, debt.balance - payment)
            pool -= payment

        # Extra payments roll onto the first open debt in strategy order.
        for debt in ordered:
            if pool <= 0:
                break
            if debt.balance <= 0:
                continue
            payment = min(debt.balance, pool)
            debt.balance = max(0.0, debt.balance - payment)
            pool -= payment

        remaining = sum(d.balance for d in ordered)
        rounded_remaining = round(remaining, 2)
        history.append(PayoffPoint(month=month, balance=rounded_remaining))

        for debt in ordered:
            if not debt.paid_off and debt.balance <= PAID_OFF_THRESHOLD:
                debt.paid_off = True
                payoff_order.append(PayoffOrder(id=debt.id, name=debt.name, month=month))

        # Progress guard: balances must keep falling or the run is abandoned.
        # A drop of exactly PAID_OFF_THRESHOLD still counts as no progress.
        if rounded_remaining >= last_balance - PAID_OFF_THRESHOLD:
            stagnant_periods += 1
        else:
            stagnant_periods = 0
        last_balance = rounded_remaining

        if stagnant_periods >= STAGNATION_MONTHS:
            warnings.append(STAGNATION_WARNING)
            break

    if month >= MAX_MONTHS and remaining > PAID_OFF_THRESHOLD:
        warnings.append(CEILING_WARNING)

    stalled = remaining > PAID_OFF_THRESHOLD
    if stalled:
        logger.warning(
            "Payoff projection stalled: strategy=%s commitment=%.2f months=%s remaining=%.2f",
            strategy,
            committed,
            month,
            remaining,
        )

    return PayoffResult(
        months=month,
        interest_paid=round(total_interest, 2),
        payoff_date=add_months(start or date.today(), month),
        payoff_order=payoff_order,
        history=history,
        warnings=warnings,
        monthly_commitment=committed,
        stalled=stalled,
    )


def compare_payoff(
    debts: Sequence[DebtAccount],
    strategy: Strategy,
    extra: float,
    *,
    start: date | None = None,
) -> PayoffComparison | None:
    """Run the simulator at the minimum commitment and with *extra* on top."""

    minimum = minimum_commitment(debts)
    if minimum <= 0:
        return None
    extra = max(0.0, extra)
    base = simulate_payoff(debts, strategy, minimum, start=start)
    accelerated = simulate_payoff(debts, strategy, minimum + extra, start=start)
    if base is None or accelerated is None:
        return None
    return PayoffComparison(
        minimum_commitment=minimum,
        extra=extra,
        base=base,
        accelerated=accelerated,
        interest_saved=max(0.0, round(base.interest_paid - accelerated.interest_paid, 2)),
        months_saved=max(0, base.months - accelerated.months),
    )


def history_progress(history: Sequence[PayoffPoint]) -> float:
    """Percent of the starting balance cleared by the end of *history*."""

    if not history or not history[0].balance:
        return 0.0
    start = history[0].balance
    cleared = max(0.0, start - history[-1].balance)
    return min(100.0, round(cleared / start * 100, 1))


def halfway_marker(history: Sequence[PayoffPoint]) -> str:
    if not history or not history[0].balance:
        return "TBC"
    halfway = history[0].balance / 2
    for point in history:
        if point.balance <= halfway:
            return f"Month {point.month}"
    return "Not yet reached"


def format_duration(months: int) -> str | None:
    if months <= 0:
        return None
    years, rest = divmod(months, 12)
    if years and rest:
        return f"{years}y {rest}m"
    if years:
        return f"{years}y"
    return f"{months}m"


__all__ = [
    "DebtAccount",
    "PayoffComparison",
    "PayoffOrder",
    "PayoffPoint",
    "PayoffResult",
    "STRATEGIES",
    "Strategy",
    "compare_payoff",
    "debt_envelope_budget",
    "estimate_minimum_payment",
    "extra_payment_capacity",
    "format_duration",
    "halfway_marker",
    "history_progress",
    "is_debt_envelope",
    "match_envelope",
    "minimum_commitment",
    "order_debts",
    "simulate_payoff",
    "to_debt_accounts",
]
