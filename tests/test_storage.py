from datetime import datetime

import pytest

from stocksim.core import Side, Transaction
from stocksim.errors import MalformedRecord, PersistenceFailure
from stocksim.portfolio import Portfolio
from stocksim.storage import load_portfolio, parse_position, save_portfolio


def _traded_portfolio():
    times = iter([datetime(2024, 1, 2, 9, 30, 0), datetime(2024, 1, 2, 9, 31, 15, 250000),
                  datetime(2024, 1, 3, 14, 0, 0)])
    p = Portfolio(10_000.0, clock=lambda: next(times))
    p.buy("AAPL", 10, 170.0)
    p.buy("AAPL", 5, 180.0)
    p.buy("INFY", 7, 18.37)
    return p


def _paths(tmp_path):
    return tmp_path / "portfolio.csv", tmp_path / "transactions.csv"


def test_save_then_load_reproduces_portfolio(tmp_path):
    snap, ledger = _paths(tmp_path)
    p = _traded_portfolio()
    save_portfolio(p, snap, ledger)

    loaded = load_portfolio(snap, ledger)
    assert loaded.cash == p.cash
    assert {s: (x.qty, x.avg_cost) for s, x in loaded.positions.items()} == \
        {s: (x.qty, x.avg_cost) for s, x in p.positions.items()}
    assert loaded.transactions == p.transactions


def test_snapshot_layout(tmp_path):
    snap, ledger = _paths(tmp_path)
    p = Portfolio(8300.0)
    p.buy("AAPL", 10, 170.0)
    save_portfolio(p, snap, ledger)

    lines = snap.read_text().splitlines()
    assert lines[0] == "cash"
    assert float(lines[1]) == 6600.0
    assert lines[2] == "symbol,qty,avgCost"
    assert lines[3] == "AAPL,10,170.0"
    assert ledger.read_text().count("\n") == 1


def test_missing_snapshot_gives_empty_portfolio(tmp_path):
    snap, ledger = _paths(tmp_path)
    p = load_portfolio(snap, ledger)
    assert p.cash == 0.0
    assert p.positions == {}
    assert p.transactions == []


def test_malformed_cash_and_rows_are_tolerated(tmp_path):
    snap, ledger = _paths(tmp_path)
    snap.write_text(
        "cash\n"
        "lots\n"
        "symbol,qty,avgCost\n"
        "AAPL,10,170.0\n"
        "\n"
        "BROKEN\n"
        "MSFT,two,330\n"
        "GOOG,0,135\n"
        "TSLA,3,260.5,extra\n"
    )
    p = load_portfolio(snap, ledger)
    assert p.cash == 0.0
    assert sorted(p.positions) == ["AAPL", "TSLA"]
    assert p.positions["TSLA"].avg_cost == 260.5


def test_header_sentinel_is_case_insensitive_and_may_come_late(tmp_path):
    snap, ledger = _paths(tmp_path)
    snap.write_text("cash\n1234.5\nnoise\nSYMBOL,QTY,AVGCOST\nTCS,4,42.0\n")
    p = load_portfolio(snap, ledger)
    assert p.cash == 1234.5
    assert p.positions["TCS"].qty == 4


def test_bad_ledger_lines_are_skipped_individually(tmp_path):
    snap, ledger = _paths(tmp_path)
    good = Transaction.create(Side.SELL, "BPCL", 2, 120.0, datetime(2024, 5, 1, 12, 0))
    snap.write_text("cash\n100.0\nsymbol,qty,avgCost\n")
    ledger.write_text(
        "garbage\n"
        + good.to_line() + "\n"
        + "2024-05-01T12:00:00,HOLD,BPCL,2,120.0,240.0\n"
        + "not-a-date,BUY,BPCL,2,120.0,240.0\n"
    )
    p = load_portfolio(snap, ledger)
    assert p.transactions == [good]


def test_parse_position_rejects_short_rows():
    with pytest.raises(MalformedRecord):
        parse_position("AAPL,10")


def test_save_failure_is_persistence_failure(tmp_path):
    p = _traded_portfolio()
    with pytest.raises(PersistenceFailure):
        save_portfolio(p, tmp_path / "nope" / "portfolio.csv", tmp_path / "nope" / "tx.csv")
    # in-memory state is untouched
    assert len(p.transactions) == 3


def test_unreadable_snapshot_is_persistence_failure(tmp_path):
    snap = tmp_path / "portfolio.csv"
    snap.mkdir()
    with pytest.raises(PersistenceFailure):
        load_portfolio(snap, tmp_path / "transactions.csv")


def test_huge_cash_loads_without_error(tmp_path):
    snap, ledger = _paths(tmp_path)
    snap.write_text("cash\n1e30\nsymbol,qty,avgCost\nAAPL,1,170.0\n")
    p = load_portfolio(snap, ledger)
    assert p.cash == 1e30
    assert p.positions["AAPL"].qty == 1


def test_non_finite_cash_reads_as_zero(tmp_path):
    snap, ledger = _paths(tmp_path)
    snap.write_text("cash\ninf\nsymbol,qty,avgCost\n")
    assert load_portfolio(snap, ledger).cash == 0.0
