"""Command line entry points for Planwise.

Each command reads a JSON document holding ``envelopes`` and/or
``liabilities`` (and optionally ``pay_cycle``), runs one planner and prints
the result as JSON.
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any

import click
from pydantic import ValidationError

from .config import BaseConfig
from .logging_config import get_logger, setup_logging
from .models import PAY_CYCLES, PRIORITIES, load_envelopes, load_liabilities
from .services.debts import (
    STRATEGIES,
    compare_payoff,
    debt_envelope_budget,
    extra_payment_capacity,
    simulate_payoff,
    to_debt_accounts,
)
from .services.envelope_health import calculate_all_envelope_health
from .services.payday import apply_surplus_suggestion, calculate_payday_allocation
from .services.scenarios import build_scenario, calculate_scenario, common_scenarios, find_scenario

logger = get_logger("cli")

NOW_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"]


def _emit(result: Any) -> None:
    payload = asdict(result) if is_dataclass(result) else result
    if isinstance(payload, list):
        payload = [asdict(item) if is_dataclass(item) else item for item in payload]
    click.echo(json.dumps(payload, indent=2, default=str))


def _read_document(stream) -> dict[str, Any]:
    try:
        document = json.load(stream)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Input is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise click.ClickException("Input must be a JSON object.")
    return document


def _pay_cycle(config: BaseConfig, option: str | None, document: dict[str, Any]) -> str:
    try:
        return config.resolve_pay_cycle(option or document.get("pay_cycle"))
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


def _envelopes(document: dict[str, Any]):
    try:
        return load_envelopes(document.get("envelopes", []))
    except ValidationError as exc:
        raise click.ClickException(f"Invalid envelope data: {exc}") from exc


def _liabilities(document: dict[str, Any]):
    try:
        return load_liabilities(document.get("liabilities", []))
    except ValidationError as exc:
        raise click.ClickException(f"Invalid liability data: {exc}") from exc


pay_cycle_option = click.option(
    "--pay-cycle", type=click.Choice(PAY_CYCLES), default=None, help="Override the pay cycle."
)
now_option = click.option(
    "--now", type=click.DateTime(formats=NOW_FORMATS), default=None, help="Evaluate as of this instant."
)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Envelope budgeting projections."""

    try:
        config = BaseConfig()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(config)
    ctx.obj = config


@cli.command("health")
@click.argument("source", type=click.File("r"))
@pay_cycle_option
@now_option
@click.pass_obj
def health_command(config: BaseConfig, source, pay_cycle: str | None, now: datetime | None) -> None:
    """Show where each expense envelope should be versus where it is."""

    document = _read_document(source)
    cycle = _pay_cycle(config, pay_cycle, document)
    _emit(calculate_all_envelope_health(_envelopes(document), cycle, now=now))


@cli.command("payday")
@click.argument("source", type=click.File("r"))
@click.option("--amount", type=float, required=True, help="Pay amount received.")
@click.option("--apply", "apply_index", type=int, default=None, help="Apply suggestion N.")
@pay_cycle_option
@now_option
@click.pass_obj
def payday_command(
    config: BaseConfig,
    source,
    amount: float,
    apply_index: int | None,
    pay_cycle: str | None,
    now: datetime | None,
) -> None:
    """Split a paycheck into regular allocations and surplus suggestions."""

    document = _read_document(source)
    cycle = _pay_cycle(config, pay_cycle, document)
    envelopes = _envelopes(document)
    allocation = calculate_payday_allocation(amount, envelopes, cycle, now=now)
    if apply_index is None:
        _emit(allocation)
        return
    _emit(apply_surplus_suggestion(allocation, apply_index, envelopes=envelopes, now=now))


@cli.command("scenarios")
@pay_cycle_option
@click.pass_obj
def scenarios_command(config: BaseConfig, pay_cycle: str | None) -> None:
    """List the built-in scenarios for a pay cycle."""

    _emit(common_scenarios(config.resolve_pay_cycle(pay_cycle)))


@cli.command("scenario")
@click.argument("source", type=click.File("r"))
@click.option("--id", "scenario_id", default=None, help="Built-in scenario id.")
@click.option("--reduction", type=click.FloatRange(0, 100), default=None, help="Percent cut.")
@click.option("--duration", type=click.IntRange(min=0), default=None, help="Length in pays.")
@click.option("--tier", "tiers", multiple=True, type=click.Choice(PRIORITIES))
@click.option("--match", "matches", multiple=True, help="Envelope name substring.")
@pay_cycle_option
@now_option
@click.pass_obj
def scenario_command(
    config: BaseConfig,
    source,
    scenario_id: str | None,
    reduction: float | None,
    duration: int | None,
    tiers: tuple[str, ...],
    matches: tuple[str, ...],
    pay_cycle: str | None,
    now: datetime | None,
) -> None:
    """Project a built-in or custom spending-reduction scenario."""

    document = _read_document(source)
    cycle = _pay_cycle(config, pay_cycle, document)
    if scenario_id:
        try:
            scenario = find_scenario(scenario_id, cycle)
        except KeyError as exc:
            raise click.ClickException(f"Unknown scenario: {scenario_id}") from exc
    else:
        if reduction is None or duration is None or not tiers:
            raise click.UsageError("Custom scenarios need --reduction, --duration and --tier.")
        scenario = build_scenario(
            id="custom",
            name="Custom scenario",
            duration=duration,
            affected_priorities=tiers,
            reduction=reduction,
            specific_envelopes=matches,
        )
    _emit(calculate_scenario(_envelopes(document), cycle, scenario, now=now))


@cli.command("payoff")
@click.argument("source", type=click.File("r"))
@click.option("--strategy", type=click.Choice(STRATEGIES), default=None)
@click.option("--budget", type=float, default=None, help="Total monthly budget for one run.")
@click.option("--extra", type=float, default=None, help="Extra on top of minimums to compare.")
@click.option("--start", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.pass_obj
def payoff_command(
    config: BaseConfig,
    source,
    strategy: str | None,
    budget: float | None,
    extra: float | None,
    start: datetime | None,
) -> None:
    """Project debt payoff; compares minimum-only with an extra payment by default."""

    document = _read_document(source)
    envelopes = _envelopes(document)
    debts = to_debt_accounts(_liabilities(document), envelopes)
    chosen = config.resolve_strategy(strategy)
    start_date = start.date() if start else None

    if budget is not None:
        result = simulate_payoff(debts, chosen, budget, start=start_date)
    else:
        if extra is None:
            extra = extra_payment_capacity(debt_envelope_budget(envelopes), debts)
        result = compare_payoff(debts, chosen, extra, start=start_date)

    if result is None:
        logger.info("No payoff projection: debts=%s budget=%s", len(debts), budget)
    _emit(result)


def main() -> None:  # pragma: no cover - console entry point
    cli()


__all__ = ["cli", "main"]
