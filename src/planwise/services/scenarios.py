"""What-if scenarios: temporary spending cuts and where the freed money goes."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterable, Sequence

from ..models.envelope import Envelope, PayCycle, Priority
from .envelope_health import (
    EnvelopeHealth,
    by_urgency,
    calculate_all_envelope_health,
    classify_gap,
    percent_complete,
)
from .periods import months_to_pays, pay_cycles_per_month

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Scenario:
    """A named hypothetical reduction applied for a number of pays."""

    id: str
    name: str
    duration: int  # pays
    affected_priorities: tuple[Priority, ...]
    reduction: float  # percent, 0-100
    description: str = ""
    specific_envelopes: tuple[str, ...] = ()

    def affects(self, envelope: Envelope) -> bool:
        if not envelope.is_expense or envelope.priority not in self.affected_priorities:
            return False
        if not self.specific_envelopes:
            return True
        name = envelope.name.lower()
        return any(token.lower() in name for token in self.specific_envelopes)


@dataclass(slots=True)
class ImpactedEnvelope:
    envelope_id: str
    name: str
    priority: Priority
    current_per_pay: float
    new_per_pay: float
    saved_per_pay: float


@dataclass(slots=True)
class ScenarioProjection:
    current_gap: float
    gap_after_scenario: float
    time_to_close_gap: int
    buffer_after_gap: float
    on_track_after_pays: int


@dataclass(slots=True)
class ScenarioResult:
    scenario: Scenario
    savings_per_pay: float
    savings_per_month: float
    total_savings_over_period: float
    impacted_envelopes: list[ImpactedEnvelope]
    projection: ScenarioProjection
    health_after_scenario: dict[str, list[EnvelopeHealth]] = field(default_factory=dict)


def build_scenario(
    *,
    id: str,
    name: str,
    duration: int,
    affected_priorities: Iterable[Priority],
    reduction: float,
    description: str = "",
    specific_envelopes: Iterable[str] = (),
) -> Scenario:
    """Create a scenario with the reduction clamped to 0-100 and a non-negative duration."""

    return Scenario(
        id=id,
        name=name,
        duration=max(0, int(duration)),
        affected_priorities=tuple(affected_priorities),
        reduction=min(100.0, max(0.0, float(reduction))),
        description=description,
        specific_envelopes=tuple(s for s in specific_envelopes if s),
    )


def _distribute_savings(
    health: Sequence[EnvelopeHealth], savings: float
) -> list[EnvelopeHealth]:
    """Greedily close gaps, most urgent first, capping each at its own gap.

    Returns the projected records in input order.
    """

    remaining = savings
    projected: dict[str, EnvelopeHealth] = {}
    for record in by_urgency(h for h in health if h.gap > 0):
        allocated = min(remaining, record.gap)
        remaining -= allocated
        new_balance = record.current_balance + allocated
        new_gap = record.should_have_saved - new_balance
        projected[record.envelope_id] = replace(
            record,
            current_balance=new_balance,
            gap=new_gap,
            gap_status=classify_gap(new_gap),
            percent_complete=percent_complete(new_balance, record.should_have_saved),
        )
    return [projected.get(record.envelope_id, record) for record in health]


def calculate_scenario(
    envelopes: Sequence[Envelope],
    pay_cycle: PayCycle,
    scenario: Scenario,
    *,
    now: date | datetime | None = None,
) -> ScenarioResult:
    """Project the savings of *scenario* and the envelope health it buys."""

    now = now or datetime.now()
    all_health = calculate_all_envelope_health(envelopes, pay_cycle, now=now)

    impacted: list[ImpactedEnvelope] = []
    for envelope in envelopes:
        if not scenario.affects(envelope):
            continue
        current_per_pay = envelope.pay_cycle_amount
        new_per_pay = current_per_pay * (1 - scenario.reduction / 100)
        impacted.append(
            ImpactedEnvelope(
                envelope_id=envelope.id,
                name=envelope.name,
                priority=envelope.priority,
                current_per_pay=current_per_pay,
                new_per_pay=new_per_pay,
                saved_per_pay=current_per_pay - new_per_pay,
            )
        )

    savings_per_pay = sum(e.saved_per_pay for e in impacted)
    savings_per_month = savings_per_pay * pay_cycles_per_month(pay_cycle)
    total_savings = savings_per_pay * scenario.duration

    current_gap = sum(h.gap for h in all_health if h.gap > 0)
    projected = _distribute_savings(all_health, total_savings)

    time_to_close = math.ceil(current_gap / savings_per_pay) if savings_per_pay > 0 else 0
    projection = ScenarioProjection(
        current_gap=current_gap,
        gap_after_scenario=max(0.0, current_gap - total_savings),
        time_to_close_gap=time_to_close,
        buffer_after_gap=max(0.0, total_savings - current_gap),
        on_track_after_pays=min(scenario.duration, time_to_close),
    )

    logger.debug(
        "Scenario %s: impacted=%s savings_per_pay=%.2f current_gap=%.2f",
        scenario.id,
        len(impacted),
        savings_per_pay,
        current_gap,
    )

    return ScenarioResult(
        scenario=scenario,
        savings_per_pay=savings_per_pay,
        savings_per_month=savings_per_month,
        total_savings_over_period=total_savings,
        impacted_envelopes=impacted,
        projection=projection,
        health_after_scenario={
            tier: [h for h in projected if h.priority == tier]
            for tier in ("essential", "important", "discretionary")
        },
    )


def common_scenarios(pay_cycle: PayCycle) -> list[Scenario]:
    """Canned scenarios; durations are converted from months for the pay cycle."""

    three_months = months_to_pays(3, pay_cycle)
    six_months = months_to_pays(6, pay_cycle)

    return [
        build_scenario(
            id="pause-discretionary",
            name="Pause All Discretionary",
            description="Cut all non-essential spending for 3 months",
            duration=three_months,
            affected_priorities=("discretionary",),
            reduction=100,
        ),
        build_scenario(
            id="reduce-discretionary-half",
            name="Reduce Discretionary by Half",
            description="Keep some treats, but dial back significantly",
            duration=three_months,
            affected_priorities=("discretionary",),
            reduction=50,
        ),
        build_scenario(
            id="pause-subscriptions",
            name="Subscription Audit",
            description="Pause streaming services and subscriptions for 6 months",
            duration=six_months,
            affected_priorities=("discretionary",),
            reduction=100,
            specific_envelopes=("Netflix", "Spotify", "Disney", "Gym", "Subscription"),
        ),
        build_scenario(
            id="no-eating-out",
            name="No Takeaways & Eating Out",
            description="Cook at home for 3 months",
            duration=three_months,
            affected_priorities=("discretionary",),
            reduction=100,
            specific_envelopes=("Eating Out", "Takeaway", "Restaurant", "Hospitality"),
        ),
        build_scenario(
            id="intense-sprint",
            name="Intense 3-Month Sprint",
            description="Essentials only - aggressive buffer building",
            duration=three_months,
            affected_priorities=("discretionary", "important"),
            reduction=100,
        ),
    ]


def find_scenario(scenario_id: str, pay_cycle: PayCycle) -> Scenario:
    """Look up a canned scenario by id; raises ``KeyError`` when unknown."""

    for scenario in common_scenarios(pay_cycle):
        if scenario.id == scenario_id:
            return scenario
    raise KeyError(scenario_id)


__all__ = [
    "ImpactedEnvelope",
    "Scenario",
    "ScenarioProjection",
    "ScenarioResult",
    "build_scenario",
    "calculate_scenario",
    "common_scenarios",
    "find_scenario",
]
