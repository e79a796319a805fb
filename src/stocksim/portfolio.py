from __future__ import annotations
import math
from datetime import datetime
from typing import Callable, Mapping, Optional

from loguru import logger

from .core import Position, Side, Transaction, round_cost, round_money
from .errors import InsufficientFunds, InsufficientShares, InvalidQuantity


class Portfolio:
    """
    Cash, open positions and the append-only trade ledger.

    Valuation methods take a ``symbol -> price`` mapping (see ``Market.prices``)
    so the portfolio never holds a reference to the market.
    """

    def __init__(
        self,
        cash: float = 0.0,
        positions: Optional[dict[str, Position]] = None,
        transactions: Optional[list[Transaction]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.cash = round_money(cash)
        self.positions: dict[str, Position] = positions if positions is not None else {}
        self.transactions: list[Transaction] = transactions if transactions is not None else []
        self.clock = clock

    def can_afford(self, total_cost: float) -> bool:
        return self.cash >= total_cost

    def held(self, symbol: str) -> int:
        pos = self.positions.get(symbol)
        return pos.qty if pos else 0

    def buy(self, symbol: str, qty: int, price: float) -> Transaction:
        if qty <= 0:
            raise InvalidQuantity("Quantity must be positive.")

        try:
            total = round_money(qty * price)
        except OverflowError:
            # qty beyond float range
            total = math.inf
        if not self.can_afford(total):
            raise InsufficientFunds(f"Insufficient cash: need {total:.2f}, have {self.cash:.2f}")

        self.cash = round_money(self.cash - total)
        pos = self.positions.get(symbol)
        if pos is None:
            self.positions[symbol] = Position(symbol=symbol, qty=qty, avg_cost=round_cost(price))
        else:
            new_qty = pos.qty + qty
            pos.avg_cost = round_cost((pos.avg_cost * pos.qty + total) / new_qty)
            pos.qty = new_qty

        return self._record(Side.BUY, symbol, qty, price)

    def sell(self, symbol: str, qty: int, price: float) -> Transaction:
        if qty <= 0:
            raise InvalidQuantity("Quantity must be positive.")

        pos = self.positions.get(symbol)
        if pos is None or pos.qty < qty:
            raise InsufficientShares(f"Not enough shares of {symbol} to sell: have {self.held(symbol)}, asked {qty}")

        total = round_money(qty * price)
        pos.qty -= qty
        if pos.qty == 0:
            del self.positions[symbol]
        self.cash = round_money(self.cash + total)

        return self._record(Side.SELL, symbol, qty, price)

    def _record(self, side: Side, symbol: str, qty: int, price: float) -> Transaction:
        tx = Transaction.create(side, symbol, qty, price, timestamp=self.clock())
        self.transactions.append(tx)
        logger.info("{} (cash {:.2f})", tx, self.cash)
        return tx

    def market_value(self, prices: Mapping[str, float]) -> float:
        mv = 0.0
        for pos in self.positions.values():
            mv += pos.qty * prices.get(pos.symbol, 0.0)
        return round_money(mv)

    def total_equity(self, prices: Mapping[str, float]) -> float:
        return round_money(self.cash + self.market_value(prices))

    def summary_view(self, prices: Mapping[str, float]) -> dict:
        rows = []
        for pos in self.positions.values():
            mkt = prices.get(pos.symbol, 0.0)
            rows.append({
                "symbol": pos.symbol,
                "qty": pos.qty,
                "avg_cost": pos.avg_cost,
                "market_price": mkt,
                "unrealized_pnl": round_money((mkt - pos.avg_cost) * pos.qty),
            })

        return {
            "cash": self.cash,
            "market_value": self.market_value(prices),
            "total_equity": self.total_equity(prices),
            "positions": rows,
        }

    def transactions_view(self) -> list[dict]:
        return [
            {
                "time": tx.timestamp,
                "side": tx.side.value,
                "symbol": tx.symbol,
                "qty": tx.qty,
                "price": tx.price,
                "total": tx.total,
            }
            for tx in self.transactions
        ]
