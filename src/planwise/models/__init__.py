"""Validated input records for the planning services."""

from __future__ import annotations

from typing import Any, Iterable

from .envelope import (
    FREQUENCIES,
    PAY_CYCLES,
    PRIORITIES,
    Envelope,
    EnvelopeType,
    Frequency,
    PayCycle,
    Priority,
)
from .liability import Liability


def load_envelopes(records: Iterable[dict[str, Any]]) -> list[Envelope]:
    """Validate raw envelope dicts; raises ``pydantic.ValidationError`` on bad rows."""

    return [Envelope.model_validate(record) for record in records]


def load_liabilities(records: Iterable[dict[str, Any]]) -> list[Liability]:
    """Validate raw liability dicts; raises ``pydantic.ValidationError`` on bad rows."""

    return [Liability.model_validate(record) for record in records]


__all__ = [
    "Envelope",
    "EnvelopeType",
    "FREQUENCIES",
    "Frequency",
    "Liability",
    "PAY_CYCLES",
    "PRIORITIES",
    "PayCycle",
    "Priority",
    "load_envelopes",
    "load_liabilities",
]
