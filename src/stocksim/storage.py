"""
Flat-file persistence for a Portfolio.

Snapshot file::

    cash
    <cash>
    symbol,qty,avgCost
    <symbol>,<qty>,<avgCost>
    ...

Ledger file: one ``Transaction.to_line()`` per line, oldest first.

Loading is tolerant: a malformed cash line reads as 0, and malformed
position or ledger rows are skipped one by one instead of failing the load.
"""
from __future__ import annotations
import math
from pathlib import Path
from typing import Union

from loguru import logger

from .core import Position, Transaction, round_money
from .errors import MalformedRecord, PersistenceFailure
from .portfolio import Portfolio

CASH_HEADER = "cash"
POSITIONS_HEADER = "symbol,qty,avgCost"

PathLike = Union[str, Path]


def save_portfolio(portfolio: Portfolio, snapshot_path: PathLike, ledger_path: PathLike) -> None:
    snapshot_path, ledger_path = Path(snapshot_path), Path(ledger_path)
    lines = [CASH_HEADER, repr(portfolio.cash), POSITIONS_HEADER]
    for pos in portfolio.positions.values():
        lines.append(f"{pos.symbol},{pos.qty},{pos.avg_cost!r}")

    try:
        snapshot_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        with ledger_path.open("w", encoding="utf-8") as fh:
            for tx in portfolio.transactions:
                fh.write(tx.to_line() + "\n")
    except OSError as e:
        raise PersistenceFailure(f"Could not save portfolio: {e}") from e

    logger.info(
        "saved {} positions to {} and {} transactions to {}",
        len(portfolio.positions), snapshot_path, len(portfolio.transactions), ledger_path,
    )


def parse_position(line: str) -> Position:
    parts = line.split(",")
    if len(parts) < 3:
        raise MalformedRecord(f"expected 3 fields: {line!r}")
    try:
        qty = int(parts[1])
        avg_cost = float(parts[2])
        if not math.isfinite(avg_cost):
            raise ValueError("non-finite cost")
    except ValueError as e:
        raise MalformedRecord(f"bad position row {line!r}: {e}") from e
    if not parts[0] or qty <= 0:
        raise MalformedRecord(f"bad position row {line!r}")
    return Position(symbol=parts[0], qty=qty, avg_cost=avg_cost)


def _parse_snapshot(lines: list[str], portfolio: Portfolio) -> None:
    # line 0 is the cash header, line 1 the cash value
    if len(lines) > 1:
        try:
            cash = float(lines[1].strip())
            if not math.isfinite(cash):
                raise ValueError(cash)
            portfolio.cash = round_money(cash)
        except (ValueError, ArithmeticError):
            logger.debug("malformed cash line {!r}, using 0", lines[1])
            portfolio.cash = 0.0

    rows = iter(lines[2:])
    for line in rows:
        if line.strip().lower() == POSITIONS_HEADER.lower():
            break

    for line in rows:
        line = line.strip()
        if not line:
            continue
        try:
            pos = parse_position(line)
        except MalformedRecord as e:
            logger.debug("skipping position row: {}", e)
            continue
        portfolio.positions[pos.symbol] = pos


def _parse_ledger(lines: list[str]) -> list[Transaction]:
    out: list[Transaction] = []
    for line in lines:
        if not line.strip():
            continue
        try:
            out.append(Transaction.from_line(line))
        except MalformedRecord as e:
            logger.debug("skipping ledger line: {}", e)
    return out


def load_portfolio(snapshot_path: PathLike, ledger_path: PathLike, **kwargs) -> Portfolio:
    """
    Rebuild a Portfolio from the two files.

    A missing snapshot file yields an empty portfolio with zero cash; the
    caller decides on a starting balance. Extra keyword arguments (e.g.
    ``clock``) are passed to the Portfolio constructor.
    """
    snapshot_path, ledger_path = Path(snapshot_path), Path(ledger_path)
    portfolio = Portfolio(0.0, **kwargs)
    if not snapshot_path.exists():
        logger.info("no snapshot at {}, starting empty", snapshot_path)
        return portfolio

    try:
        _parse_snapshot(snapshot_path.read_text(encoding="utf-8").splitlines(), portfolio)
        if ledger_path.exists():
            portfolio.transactions.extend(
                _parse_ledger(ledger_path.read_text(encoding="utf-8").splitlines())
            )
    except (OSError, UnicodeDecodeError) as e:
        raise PersistenceFailure(f"Could not load portfolio: {e}") from e

    logger.info(
        "loaded cash {:.2f}, {} positions, {} transactions",
        portfolio.cash, len(portfolio.positions), len(portfolio.transactions),
    )
    return portfolio
