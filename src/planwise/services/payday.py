"""Payday allocation: regular envelope contributions plus surplus suggestions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal, Sequence

from ..models.envelope import Envelope, PayCycle, Priority
from .envelope_health import EnvelopeHealth, by_urgency, calculate_all_envelope_health

logger = logging.getLogger(__name__)

SurplusStatus = Literal["available", "exact", "shortfall"]
SuggestionType = Literal["top-up", "new-goal", "buffer"]


@dataclass(slots=True)
class RegularAllocation:
    """Committed per-pay contribution for one expense envelope."""

    envelope_id: str
    name: str
    priority: Priority
    amount: float


@dataclass(slots=True)
class SurplusSuggestion:
    """One way to use surplus pay.

    A ``top-up`` without an ``envelope_id`` is a proportional split across
    every behind envelope; the split is worked out when it is applied.
    ``new-goal`` and ``buffer`` always come as a pair sized to the same
    leftover; only one of them can be taken.
    """

    type: SuggestionType
    suggested_amount: float
    reason: str
    impact: str
    envelope_id: str | None = None
    envelope_name: str | None = None
    urgency_score: float | None = None

    @property
    def is_split(self) -> bool:
        return self.type == "top-up" and self.envelope_id is None

    @property
    def is_leftover(self) -> bool:
        return self.type in ("new-goal", "buffer")


@dataclass(slots=True)
class AllocationSummary:
    essential_total: float
    important_total: float
    discretionary_total: float
    behind_count: int
    total_gap: float


@dataclass(slots=True)
class PaydayAllocation:
    pay_amount: float
    pay_cycle: PayCycle
    regular_allocations: list[RegularAllocation]
    total_regular: float
    surplus: float
    surplus_status: SurplusStatus
    envelope_health: list[EnvelopeHealth]
    suggestions: list[SurplusSuggestion]
    summary: AllocationSummary


@dataclass(slots=True)
class SurplusAllocation:
    envelope_id: str
    name: str
    amount: float


@dataclass(slots=True)
class AppliedSuggestion:
    regular_allocations: list[RegularAllocation]
    surplus_allocations: list[SurplusAllocation]
    remaining_surplus: float


@dataclass(slots=True)
class DistributionLine:
    envelope_id: str
    name: str
    amount: float
    percent_of_needed: float


@dataclass(slots=True)
class InitialDistribution:
    envelope_health: list[EnvelopeHealth]
    total_needed: float
    can_fully_fund: bool
    allocations: list[DistributionLine]
    remaining_balance: float


def _surplus_status(surplus: float) -> SurplusStatus:
    if surplus > 0:
        return "available"
    if surplus == 0:
        return "exact"
    return "shortfall"


def _behind(health: Sequence[EnvelopeHealth]) -> list[EnvelopeHealth]:
    return by_urgency(h for h in health if h.is_behind)


def generate_surplus_suggestions(
    health: Sequence[EnvelopeHealth], surplus: float
) -> list[SurplusSuggestion]:
    """Suggest uses for *surplus*; returns nothing when there is no surplus.

    Each top-up draws from what earlier top-ups left over. ``new-goal`` and
    ``buffer`` are offered together as alternatives for the money left once
    every gap is closed, so ``suggested_total`` never exceeds the surplus.
    """

    if surplus <= 0:
        return []

    suggestions: list[SurplusSuggestion] = []
    behind = _behind(health)
    total_gap = sum(h.gap for h in behind)
    pool = surplus

    if behind:
        most_urgent = behind[0]
        amount = min(pool, most_urgent.gap)
        pool -= amount
        suggestions.append(
            SurplusSuggestion(
                type="top-up",
                envelope_id=most_urgent.envelope_id,
                envelope_name=most_urgent.name,
                suggested_amount=amount,
                reason=most_urgent.priority_reason,
                impact=f"This will reduce the gap to ${max(0.0, most_urgent.gap - amount):.2f}",
                urgency_score=most_urgent.priority_score,
            )
        )

    if len(behind) > 1 and surplus < total_gap and pool > 0:
        suggestions.append(
            SurplusSuggestion(
                type="top-up",
                suggested_amount=pool,
                reason=f"Split ${pool:.2f} across {len(behind)} behind envelopes",
                impact="Each envelope gets a proportional boost based on its gap",
            )
        )
        pool = 0.0

    if not behind or surplus > total_gap:
        # new-goal and buffer are alternatives for the same leftover money;
        # gaps past the first stay reserved for their envelopes.
        leftover = surplus - total_gap
        if behind:
            goal_reason = "Gaps covered - start a savings goal with the rest"
            buffer_reason = "Gaps covered - keep the rest as buffer in main account"
        else:
            goal_reason = "All envelopes on track - start a savings goal"
            buffer_reason = "Keep as buffer in main account"
        suggestions.append(
            SurplusSuggestion(
                type="new-goal",
                suggested_amount=leftover,
                reason=goal_reason,
                impact="Build emergency fund, holiday savings, or future purchase",
            )
        )
        suggestions.append(
            SurplusSuggestion(
                type="buffer",
                suggested_amount=leftover,
                reason=buffer_reason,
                impact="Financial breathing room for unexpected expenses",
            )
        )

    return suggestions


def suggested_total(suggestions: Sequence[SurplusSuggestion]) -> float:
    """Money committed by taking every top-up and one leftover alternative."""

    top_ups = sum(s.suggested_amount for s in suggestions if s.type == "top-up")
    leftover = max((s.suggested_amount for s in suggestions if s.is_leftover), default=0.0)
    return top_ups + leftover


def calculate_payday_allocation(
    pay_amount: float,
    envelopes: Sequence[Envelope],
    pay_cycle: PayCycle,
    *,
    now: date | datetime | None = None,
) -> PaydayAllocation:
    """Split a paycheck into committed envelope amounts and a surplus."""

    health = calculate_all_envelope_health(envelopes, pay_cycle, now=now)

    regular = [
        RegularAllocation(
            envelope_id=envelope.id,
            name=envelope.name,
            priority=envelope.priority,
            amount=envelope.pay_cycle_amount,
        )
        for envelope in envelopes
        if envelope.is_expense
    ]
    total_regular = sum(a.amount for a in regular)
    surplus = pay_amount - total_regular

    behind = [h for h in health if h.gap_status == "behind"]
    summary = AllocationSummary(
        essential_total=sum(a.amount for a in regular if a.priority == "essential"),
        important_total=sum(a.amount for a in regular if a.priority == "important"),
        discretionary_total=sum(a.amount for a in regular if a.priority == "discretionary"),
        behind_count=len(behind),
        total_gap=sum(h.gap for h in behind),
    )

    suggestions = generate_surplus_suggestions(health, surplus)
    logger.debug(
        "Payday allocation: pay=%.2f regular=%.2f surplus=%.2f behind=%s suggested=%.2f",
        pay_amount,
        total_regular,
        surplus,
        summary.behind_count,
        suggested_total(suggestions),
    )

    return PaydayAllocation(
        pay_amount=pay_amount,
        pay_cycle=pay_cycle,
        regular_allocations=regular,
        total_regular=total_regular,
        surplus=surplus,
        surplus_status=_surplus_status(surplus),
        envelope_health=health,
        suggestions=suggestions,
        summary=summary,
    )


def _split_proportionally(
    behind: Sequence[EnvelopeHealth], pool: float
) -> list[SurplusAllocation]:
    """Share *pool* by gap weight, rounded to cents without exceeding *pool*."""

    total_gap = sum(h.gap for h in behind)
    if pool <= 0 or total_gap <= 0:
        return []

    lines = [
        SurplusAllocation(
            envelope_id=h.envelope_id,
            name=h.name,
            amount=round(pool * h.gap / total_gap, 2),
        )
        for h in behind
    ]
    overshoot = round(sum(line.amount for line in lines) - pool, 2)
    if overshoot > 0:
        lines[-1].amount = round(max(0.0, lines[-1].amount - overshoot), 2)
    return lines


def apply_surplus_suggestion(
    allocation: PaydayAllocation,
    suggestion_index: int,
    *,
    envelopes: Sequence[Envelope] | None = None,
    now: date | datetime | None = None,
) -> AppliedSuggestion:
    """Turn a chosen suggestion into concrete surplus allocations.

    Gaps are re-read at application time: from *envelopes* when given,
    otherwise from the allocation's health snapshot. Nothing beyond the
    available surplus is ever allocated.
    """

    available = max(0.0, allocation.surplus)

    def _unchanged() -> AppliedSuggestion:
        return AppliedSuggestion(
            regular_allocations=list(allocation.regular_allocations),
            surplus_allocations=[],
            remaining_surplus=allocation.surplus,
        )

    if not 0 <= suggestion_index < len(allocation.suggestions):
        return _unchanged()
    suggestion = allocation.suggestions[suggestion_index]
    if suggestion.type != "top-up" or available <= 0:
        return _unchanged()

    if envelopes is not None:
        health = calculate_all_envelope_health(envelopes, allocation.pay_cycle, now=now)
    else:
        health = allocation.envelope_health

    if suggestion.is_split:
        behind = _behind(health)
        pool = min(available, suggestion.suggested_amount, sum(h.gap for h in behind))
        lines = _split_proportionally(behind, pool)
    else:
        current = next((h for h in health if h.envelope_id == suggestion.envelope_id), None)
        amount = 0.0
        if current is not None:
            amount = min(suggestion.suggested_amount, available, max(0.0, current.gap))
        lines = []
        if amount > 0:
            lines.append(
                SurplusAllocation(
                    envelope_id=current.envelope_id,
                    name=current.name,
                    amount=amount,
                )
            )

    allocated = sum(line.amount for line in lines)
    return AppliedSuggestion(
        regular_allocations=list(allocation.regular_allocations),
        surplus_allocations=lines,
        remaining_surplus=allocation.surplus - allocated,
    )


def calculate_initial_distribution(
    current_balance: float,
    envelopes: Sequence[Envelope],
    pay_cycle: PayCycle,
    *,
    now: date | datetime | None = None,
) -> InitialDistribution:
    """Spread an existing balance across envelopes that are behind.

    Every positive gap is funded in full when the balance allows; otherwise
    the balance is shared in proportion to each gap.
    """

    health = calculate_all_envelope_health(envelopes, pay_cycle, now=now)
    needed = [(h, max(0.0, h.gap)) for h in health]
    total_needed = sum(amount for _, amount in needed)

    if current_balance >= total_needed:
        return InitialDistribution(
            envelope_health=health,
            total_needed=total_needed,
            can_fully_fund=True,
            allocations=[
                DistributionLine(h.envelope_id, h.name, amount, 100.0) for h, amount in needed
            ],
            remaining_balance=current_balance - total_needed,
        )

    lines = []
    for h, amount in needed:
        share = max(0.0, current_balance) * amount / total_needed if total_needed > 0 else 0.0
        lines.append(
            DistributionLine(
                envelope_id=h.envelope_id,
                name=h.name,
                amount=round(share, 2),
                percent_of_needed=share / amount * 100 if amount > 0 else 100.0,
            )
        )
    return InitialDistribution(
        envelope_health=health,
        total_needed=total_needed,
        can_fully_fund=False,
        allocations=lines,
        remaining_balance=0.0,
    )


__all__ = [
    "AllocationSummary",
    "AppliedSuggestion",
    "DistributionLine",
    "InitialDistribution",
    "PaydayAllocation",
    "RegularAllocation",
    "SurplusAllocation",
    "SurplusSuggestion",
    "apply_surplus_suggestion",
    "calculate_initial_distribution",
    "calculate_payday_allocation",
    "generate_surplus_suggestions",
    "suggested_total",
]
