"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from .models.envelope import PAY_CYCLES, PayCycle
from .services.debts import STRATEGIES, Strategy

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments.

    Household-level defaults live here rather than in the planners: callers
    resolve them and pass explicit values down.
    """

    APP_NAME = "Planwise"
    LOG_FILENAME = "planwise.log"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("PLANWISE_DEV_MODE", default=True)
        self.DEFAULT_PAY_CYCLE = os.getenv("PLANWISE_DEFAULT_PAY_CYCLE", "fortnightly").strip().lower()
        self.DEFAULT_STRATEGY = os.getenv("PLANWISE_DEFAULT_STRATEGY", "snowball").strip().lower()
        if self.DEFAULT_PAY_CYCLE not in PAY_CYCLES:
            raise ValueError(f"PLANWISE_DEFAULT_PAY_CYCLE must be one of {', '.join(PAY_CYCLES)}.")
        if self.DEFAULT_STRATEGY not in STRATEGIES:
            raise ValueError(f"PLANWISE_DEFAULT_STRATEGY must be one of {', '.join(STRATEGIES)}.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where logs are written."""

        data_root = os.getenv("PLANWISE_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def resolve_pay_cycle(self, value: str | None = None) -> PayCycle:
        """Return *value* if given, else the configured household default."""

        cycle = (value or self.DEFAULT_PAY_CYCLE).strip().lower()
        if cycle not in PAY_CYCLES:
            raise ValueError(f"Unknown pay cycle: {value!r}")
        return cycle  # type: ignore[return-value]

    def resolve_strategy(self, value: str | None = None) -> Strategy:
        strategy = (value or self.DEFAULT_STRATEGY).strip().lower()
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown payoff strategy: {value!r}")
        return strategy  # type: ignore[return-value]

