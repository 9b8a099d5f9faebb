"""Debt and liability records used for payoff projections."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field, SQLModel


class Liability(SQLModel):
    """Installment or revolving debt as supplied by the storage layer."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=80)
    balance: float = Field(default=0.0)
    interest_rate: float = Field(default=0.0, ge=0)  # annual percent
    liability_type: Optional[str] = Field(default=None, max_length=32)
    minimum_payment: Optional[float] = Field(default=None, ge=0)
