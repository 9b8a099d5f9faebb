"""Planwise: envelope health, payday, scenario and debt payoff planners."""

from __future__ import annotations

from .config import BaseConfig
from .services.debts import compare_payoff, simulate_payoff
from .services.envelope_health import calculate_all_envelope_health, calculate_envelope_health
from .services.payday import apply_surplus_suggestion, calculate_payday_allocation
from .services.scenarios import calculate_scenario, common_scenarios

__all__ = [
    "BaseConfig",
    "apply_surplus_suggestion",
    "calculate_all_envelope_health",
    "calculate_envelope_health",
    "calculate_payday_allocation",
    "calculate_scenario",
    "common_scenarios",
    "compare_payoff",
    "simulate_payoff",
]
