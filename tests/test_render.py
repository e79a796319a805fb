from datetime import datetime

import numpy as np

from stocksim.market import Market
from stocksim.portfolio import Portfolio
from stocksim.render import format_market, format_summary, format_transactions


def test_market_table_lists_symbols_in_order():
    text = format_market(Market(rng=np.random.default_rng(0)).render())
    lines = text.splitlines()
    assert lines[0] == "===== Market ====="
    assert "Change%" in lines[1]
    assert lines[2].split()[0] == "AAPL"
    assert "170.00" in lines[2]
    assert "0.00%" in lines[2]


def test_summary_and_transactions_tables():
    p = Portfolio(10_000.0, clock=lambda: datetime(2024, 2, 29, 23, 59, 1))
    p.buy("AAPL", 10, 170.0)

    summary = format_summary(p.summary_view({"AAPL": 171.0}))
    assert "Cash balance: 8300.00" in summary
    assert "Total equity: 10010.00" in summary
    assert "170.0000" in summary
    assert "10.00" in summary

    ledger = format_transactions(p.transactions_view())
    assert "2024-02-29 23:59:01" in ledger
    assert "1700.00" in ledger


def test_empty_tables():
    p = Portfolio(100.0)
    assert "(no positions)" in format_summary(p.summary_view({}))
    assert "(no transactions)" in format_transactions(p.transactions_view())
