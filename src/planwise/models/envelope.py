"""Envelope records handed to the planners by the storage layer."""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from sqlmodel import Field, SQLModel

EnvelopeType = Literal["income", "expense"]
Priority = Literal["essential", "important", "discretionary"]
Frequency = Literal["weekly", "fortnightly", "monthly", "quarterly", "annual", "once"]
PayCycle = Literal["weekly", "fortnightly", "monthly"]

PRIORITIES: tuple[str, ...] = ("essential", "important", "discretionary")
FREQUENCIES: tuple[str, ...] = ("weekly", "fortnightly", "monthly", "quarterly", "annual", "once")
PAY_CYCLES: tuple[str, ...] = ("weekly", "fortnightly", "monthly")


class Envelope(SQLModel):
    """Budget bucket for one recurring expense or savings purpose.

    This is a validated data model, not a table: the planners never persist it.
    ``pay_cycle_amount`` is the committed per-pay contribution the household
    budgeted; it is independent of the theoretical per-pay
    figure the health model derives from the target and due date.
    """

    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=120)
    envelope_type: EnvelopeType = Field(default="expense")
    priority: Priority = Field(default="important")
    target_amount: float = Field(default=0.0, ge=0)
    current_amount: float = Field(default=0.0)
    pay_cycle_amount: float = Field(default=0.0, ge=0)
    frequency: Frequency = Field(default="once")
    next_payment_due: Optional[date] = Field(default=None)

    @property
    def is_expense(self) -> bool:
        return self.envelope_type == "expense"
