from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Optional

import numpy as np

from .errors import MalformedRecord

MIN_PRICE = 0.01


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


def _round_half_up(value: float, places: int) -> float:
    value = float(value)
    if not math.isfinite(value):
        return value
    q = Decimal(1).scaleb(-places)
    # enough digits for any finite float, 1.8e308 included
    with localcontext() as ctx:
        ctx.prec = 400
        return float(Decimal(repr(value)).quantize(q, rounding=ROUND_HALF_UP))


def round_money(value: float) -> float:
    return _round_half_up(value, 2)


def round_cost(value: float) -> float:
    # average cost keeps extra precision under repeated averaging
    return _round_half_up(value, 4)


def normalize_symbol(symbol: str) -> str:
    return (symbol or "").strip().upper()


@dataclass
class Instrument:
    symbol: str
    name: str
    price: float
    last_price: Optional[float] = None

    def __post_init__(self) -> None:
        if self.last_price is None:
            self.last_price = self.price

    @property
    def change_percent(self) -> float:
        if self.last_price == 0:
            return 0.0
        return (self.price - self.last_price) / self.last_price * 100.0

    def advance(self, bound_pct: float, rng: np.random.Generator) -> float:
        """
        Random walk step: move the price by a uniform draw in
        [-bound_pct, +bound_pct] percent, floored at MIN_PRICE.
        """
        self.last_price = self.price
        pct = float(rng.uniform(-bound_pct, bound_pct))
        self.price = max(round_money(self.price * (1 + pct / 100.0)), MIN_PRICE)
        return self.price


@dataclass
class Position:
    symbol: str
    qty: int = 0
    avg_cost: float = 0.0


@dataclass(frozen=True)
class Transaction:
    timestamp: datetime
    side: Side
    symbol: str
    qty: int
    price: float
    total: float

    @classmethod
    def create(cls, side: Side, symbol: str, qty: int, price: float, timestamp: datetime) -> "Transaction":
        return cls(
            timestamp=timestamp,
            side=Side(side),
            symbol=symbol,
            qty=int(qty),
            price=float(price),
            total=round_money(qty * price),
        )

    def to_line(self) -> str:
        return ",".join([
            self.timestamp.isoformat(),
            self.side.value,
            self.symbol,
            str(self.qty),
            repr(self.price),
            repr(self.total),
        ])

    @classmethod
    def from_line(cls, line: str) -> "Transaction":
        parts = line.strip().split(",")
        if len(parts) != 6:
            raise MalformedRecord(f"expected 6 fields, got {len(parts)}: {line!r}")
        try:
            ts = datetime.fromisoformat(parts[0])
            side = Side(parts[1])
            qty = int(parts[3])
            price = float(parts[4])
            total = float(parts[5])
        except ValueError as e:
            raise MalformedRecord(f"bad ledger line {line!r}: {e}") from e

        if not parts[2] or qty <= 0:
            raise MalformedRecord(f"bad ledger line {line!r}")

        # total is kept as written, not re-derived
        return cls(timestamp=ts, side=side, symbol=parts[2], qty=qty, price=price, total=total)

    def __str__(self) -> str:
        return (
            f"{self.timestamp:%Y-%m-%d %H:%M:%S} {self.side.value} {self.qty} "
            f"{self.symbol} @ {self.price:.2f} = {self.total:.2f}"
        )
