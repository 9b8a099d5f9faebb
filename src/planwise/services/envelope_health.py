"""Envelope health: where an envelope should be versus where it is."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Literal

from ..models.envelope import Envelope, PayCycle, Priority
from .periods import days_between, last_due_date, pays_between

logger = logging.getLogger(__name__)

GapStatus = Literal["ahead", "on-track", "behind"]

# Fixed currency band around zero gap, independent of envelope size.
GAP_TOLERANCE = 50.0
NO_DUE_DATE_SCORE = 9999.0


@dataclass(slots=True)
class EnvelopeHealth:
    """Point-in-time health of one expense envelope (never persisted)."""

    envelope_id: str
    name: str
    priority: Priority
    due_date: date | None
    total_due_amount: float
    current_balance: float
    saving_period_start: date | None
    pays_since_start: int
    total_pays_in_period: int
    regular_per_pay: float
    should_have_saved: float
    gap: float
    gap_status: GapStatus
    percent_complete: float
    days_until_due: int | None
    pays_until_due: int | None
    priority_score: float
    priority_reason: str

    @property
    def is_behind(self) -> bool:
        return self.gap > 0 and self.gap_status == "behind"


def classify_gap(gap: float) -> GapStatus:
    """Bucket a gap into ahead / on-track / behind using the fixed band."""

    if gap < -GAP_TOLERANCE:
        return "ahead"
    if gap > GAP_TOLERANCE:
        return "behind"
    return "on-track"


def percent_complete(current: float, should_have_saved: float) -> float:
    if should_have_saved > 0:
        return current / should_have_saved * 100
    return 100.0


def _priority_reason(status: GapStatus, gap: float, days_until_due: int) -> str:
    if status == "ahead":
        return f"On track with ${abs(gap):.2f} buffer"
    if status == "on-track":
        return "On track for due date"
    return f"{days_until_due} days until due, ${gap:.2f} behind schedule"


def _neutral_health(envelope: Envelope) -> EnvelopeHealth:
    return EnvelopeHealth(
        envelope_id=envelope.id,
        name=envelope.name,
        priority=envelope.priority,
        due_date=None,
        total_due_amount=envelope.target_amount,
        current_balance=envelope.current_amount,
        saving_period_start=None,
        pays_since_start=0,
        total_pays_in_period=0,
        regular_per_pay=envelope.pay_cycle_amount,
        should_have_saved=0.0,
        gap=0.0,
        gap_status="on-track",
        percent_complete=100.0,
        days_until_due=None,
        pays_until_due=None,
        priority_score=NO_DUE_DATE_SCORE,
        priority_reason="No due date set",
    )


def calculate_envelope_health(
    envelope: Envelope, pay_cycle: PayCycle, *, now: date | datetime | None = None
) -> EnvelopeHealth:
    """Compare what an envelope should hold by *now* with what it holds.

    The saving period runs from the previous due date (the next due date
    stepped back one recurrence period) to the next due date. Both spans are
    measured in whole pays, so the theoretical per-pay contribution is the
    target spread evenly across the pays in the period. Envelopes without a
    due date get a neutral record instead of an error.
    """

    due_date = envelope.next_payment_due
    if due_date is None:
        return _neutral_health(envelope)

    now = now or datetime.now()
    target = envelope.target_amount
    current = envelope.current_amount

    period_start = last_due_date(due_date, envelope.frequency)
    pays_since_start = pays_between(period_start, now, pay_cycle)
    total_pays = pays_between(period_start, due_date, pay_cycle)

    regular_per_pay = target / total_pays if total_pays > 0 else 0.0
    should_have_saved = min(regular_per_pay * pays_since_start, target)

    gap = should_have_saved - current
    status = classify_gap(gap)

    days_until_due = days_between(now, due_date)
    pays_until_due = pays_between(now, due_date, pay_cycle)

    # Lower scores are more urgent: near due dates and large relative gaps.
    urgency_weight = max(1, 100 - days_until_due)
    gap_weight = gap / target * 100 if gap > 0 and target > 0 else 0.0

    return EnvelopeHealth(
        envelope_id=envelope.id,
        name=envelope.name,
        priority=envelope.priority,
        due_date=due_date,
        total_due_amount=target,
        current_balance=current,
        saving_period_start=period_start,
        pays_since_start=pays_since_start,
        total_pays_in_period=total_pays,
        regular_per_pay=regular_per_pay,
        should_have_saved=should_have_saved,
        gap=gap,
        gap_status=status,
        percent_complete=percent_complete(current, should_have_saved),
        days_until_due=days_until_due,
        pays_until_due=pays_until_due,
        priority_score=urgency_weight + gap_weight,
        priority_reason=_priority_reason(status, gap, days_until_due),
    )


def calculate_all_envelope_health(
    envelopes: Iterable[Envelope], pay_cycle: PayCycle, *, now: date | datetime | None = None
) -> list[EnvelopeHealth]:
    """Return health for every expense envelope, preserving input order."""

    now = now or datetime.now()
    results = [
        calculate_envelope_health(envelope, pay_cycle, now=now)
        for envelope in envelopes
        if envelope.is_expense
    ]
    logger.debug(
        "Computed envelope health: envelopes=%s behind=%s",
        len(results),
        sum(1 for health in results if health.gap_status == "behind"),
    )
    return results


def by_urgency(health: Iterable[EnvelopeHealth]) -> list[EnvelopeHealth]:
    """Sort health records most urgent first (stable for equal scores)."""

    return sorted(health, key=lambda h: h.priority_score)


__all__ = [
    "EnvelopeHealth",
    "GAP_TOLERANCE",
    "GapStatus",
    "by_urgency",
    "calculate_all_envelope_health",
    "calculate_envelope_health",
    "classify_gap",
]
