"""Service module exports."""

from . import debts, envelope_health, payday, periods, scenarios

__all__ = [
    "debts",
    "envelope_health",
    "payday",
    "periods",
    "scenarios",
]
