from __future__ import annotations
from typing import Optional

import numpy as np
from loguru import logger

from .core import Instrument
from .errors import SymbolNotFound

# (symbol, name, seed price)
DEFAULT_INSTRUMENTS: list[tuple[str, str, float]] = [
    ("AAPL", "Apple Inc.", 170.00),
    ("GOOG", "Alphabet Inc.", 135.00),
    ("MSFT", "Microsoft Corp.", 330.00),
    ("AMZN", "Amazon.com Inc.", 140.00),
    ("TSLA", "Tesla Inc.", 260.00),
    ("INFY", "Infosys Ltd.", 18.50),
    ("TCS", "Tata Consultancy", 42.00),
    ("RELI", "Reliance Industries", 225.00),
    ("BPCL", "BPCL", 120.00),
    ("SBIN", "State Bank of India", 700.00),
]


class Market:
    def __init__(
        self,
        instruments: Optional[list[tuple[str, str, float]]] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.instruments: dict[str, Instrument] = {}
        self.initialize(instruments if instruments is not None else DEFAULT_INSTRUMENTS)

    def initialize(self, seed: list[tuple[str, str, float]]) -> None:
        self.instruments.clear()
        for symbol, name, price in seed:
            self.add(Instrument(symbol=symbol, name=name, price=float(price)))

    def add(self, instrument: Instrument) -> None:
        if instrument.symbol in self.instruments:
            raise ValueError(f"duplicate symbol: {instrument.symbol}")
        self.instruments[instrument.symbol] = instrument

    def get(self, symbol: str) -> Optional[Instrument]:
        return self.instruments.get(symbol)

    def require(self, symbol: str) -> Instrument:
        inst = self.get(symbol)
        if inst is None:
            raise SymbolNotFound(f"Symbol not found: {symbol}")
        return inst

    def tick(self, bound_pct: float) -> None:
        for inst in self.instruments.values():
            inst.advance(bound_pct, self.rng)
        logger.debug("market tick bound={}% over {} instruments", bound_pct, len(self.instruments))

    def prices(self) -> dict[str, float]:
        return {sym: inst.price for sym, inst in self.instruments.items()}

    def render(self) -> list[dict]:
        return [
            {
                "symbol": inst.symbol,
                "name": inst.name,
                "price": inst.price,
                "change_pct": inst.change_percent,
            }
            for inst in self.instruments.values()
        ]
