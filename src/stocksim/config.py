from __future__ import annotations
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "STOCKSIM_"


class SimConfig(BaseModel):
    starting_cash: float = Field(default=10_000.0, gt=0)
    portfolio_file: Path = Field(default=Path("portfolio.csv"))
    ledger_file: Path = Field(default=Path("transactions.csv"))
    refresh_bound_pct: float = Field(default=5.0, ge=0, le=100)   # menu "view market (updates prices)"
    tick_bound_pct: float = Field(default=2.0, ge=0, le=100)      # menu "advance market"
    seed: Optional[int] = Field(default=None)
    log_level: str = Field(default="WARNING")
    log_file: Optional[Path] = Field(default=None)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SimConfig":
        """Build a config from STOCKSIM_* variables, e.g. STOCKSIM_STARTING_CASH=5000."""
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is not None and raw.strip() != "":
                values[name] = raw.strip()
        return cls(**values)
