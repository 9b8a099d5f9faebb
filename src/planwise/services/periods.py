"""Pay-cycle and recurrence period arithmetic shared by the planners."""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime, timedelta

from ..models.envelope import FREQUENCIES, PAY_CYCLES, Frequency, PayCycle

# Average days covered by one pay for each cadence.
DAYS_PER_PAY: dict[str, float] = {
    "weekly": 7,
    "fortnightly": 14,
    "monthly": 30.44,
}

PAYS_PER_YEAR: dict[str, int] = {
    "weekly": 52,
    "fortnightly": 26,
    "monthly": 12,
}

PAYS_PER_MONTH: dict[str, float] = {cycle: pays / 12 for cycle, pays in PAYS_PER_YEAR.items()}

# How many pays land inside one recurrence period, keyed by (frequency, pay cycle).
PAYS_IN_FREQUENCY: dict[str, dict[str, float]] = {
    "weekly": {"weekly": 1, "fortnightly": 0.5, "monthly": 0.23},
    "fortnightly": {"weekly": 2, "fortnightly": 1, "monthly": 0.46},
    "monthly": {"weekly": 4.33, "fortnightly": 2.17, "monthly": 1},
    "quarterly": {"weekly": 13, "fortnightly": 6.5, "monthly": 3},
    "annual": {"weekly": 52, "fortnightly": 26, "monthly": 12},
    # One-off expenses are spread over a year.
    "once": {"weekly": 52, "fortnightly": 26, "monthly": 12},
}


def check_pay_cycle(pay_cycle: str) -> PayCycle:
    """Return *pay_cycle* unchanged or raise ``ValueError`` for unknown cadences."""

    if pay_cycle not in PAY_CYCLES:
        raise ValueError(f"Unknown pay cycle: {pay_cycle!r}")
    return pay_cycle  # type: ignore[return-value]


def as_datetime(value: date | datetime) -> datetime:
    """Promote a bare date to midnight so date and timestamp maths agree.

    Aware datetimes keep their wall-clock time and lose the offset, since
    due dates carry no timezone.
    """

    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return datetime(value.year, value.month, value.day)


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole days from *start* to *end*, rounding partial days up."""

    delta = as_datetime(end) - as_datetime(start)
    return math.ceil(delta.total_seconds() / 86400)


def pays_between(start: date | datetime, end: date | datetime, pay_cycle: PayCycle) -> int:
    """Count the pays that fall between two instants (ceiling division on days)."""

    days = days_between(start, end)
    return math.ceil(days / DAYS_PER_PAY[check_pay_cycle(pay_cycle)])


def add_months(value: date, months: int) -> date:
    """Shift *value* by whole months, clamping to the last day of short months."""

    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def last_due_date(next_due: date, frequency: Frequency) -> date:
    """Step a due date back one recurrence period to find the saving-period start."""

    if frequency == "weekly":
        return next_due - timedelta(days=7)
    if frequency == "fortnightly":
        return next_due - timedelta(days=14)
    if frequency == "monthly":
        return add_months(next_due, -1)
    if frequency == "quarterly":
        return add_months(next_due, -3)
    if frequency in ("annual", "once"):
        return add_months(next_due, -12)
    raise ValueError(f"Unknown frequency: {frequency!r}; expected one of {FREQUENCIES}")


def pay_cycles_per_month(pay_cycle: PayCycle) -> float:
    return PAYS_PER_MONTH[check_pay_cycle(pay_cycle)]


def pay_cycles_in_frequency(frequency: Frequency, pay_cycle: PayCycle) -> float:
    return PAYS_IN_FREQUENCY[frequency][check_pay_cycle(pay_cycle)]


def months_to_pays(months: int, pay_cycle: PayCycle) -> int:
    """Convert a span of months into the whole number of pays it contains."""

    return months * PAYS_PER_YEAR[check_pay_cycle(pay_cycle)] // 12


__all__ = [
    "DAYS_PER_PAY",
    "PAYS_PER_MONTH",
    "PAYS_PER_YEAR",
    "add_months",
    "as_datetime",
    "check_pay_cycle",
    "days_between",
    "last_due_date",
    "months_to_pays",
    "pay_cycles_in_frequency",
    "pay_cycles_per_month",
    "pays_between",
]
