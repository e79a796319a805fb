from __future__ import annotations
import pandas as pd


def _money(v: float) -> str:
    return f"{v:.2f}"


def format_market(rows: list[dict]) -> str:
    df = pd.DataFrame(rows, columns=["symbol", "name", "price", "change_pct"])
    df = df.rename(columns={"symbol": "Symbol", "name": "Name", "price": "Price", "change_pct": "Change%"})
    table = df.to_string(
        index=False,
        justify="left",
        formatters={"Price": _money, "Change%": lambda v: f"{v:.2f}%"},
    )
    return "===== Market =====\n" + table


def format_summary(summary: dict) -> str:
    out = [
        "===== Portfolio Summary =====",
        f"Cash balance: {summary['cash']:.2f}",
        f"Market value of holdings: {summary['market_value']:.2f}",
        f"Total equity: {summary['total_equity']:.2f}",
        "Positions:",
    ]
    rows = summary["positions"]
    if not rows:
        out.append("  (no positions)")
        return "\n".join(out)

    df = pd.DataFrame(rows, columns=["symbol", "qty", "avg_cost", "market_price", "unrealized_pnl"])
    df = df.rename(columns={
        "symbol": "Symbol", "qty": "Qty", "avg_cost": "AvgCost",
        "market_price": "MktPrice", "unrealized_pnl": "UnrealP/L",
    })
    out.append(df.to_string(
        index=False,
        justify="left",
        formatters={
            "AvgCost": lambda v: f"{v:.4f}",
            "MktPrice": _money,
            "UnrealP/L": _money,
        },
    ))
    return "\n".join(out)


def format_transactions(rows: list[dict]) -> str:
    if not rows:
        return "===== Transactions =====\n  (no transactions)"

    df = pd.DataFrame(rows, columns=["time", "side", "symbol", "qty", "price", "total"])
    df["time"] = pd.to_datetime(df["time"]).dt.strftime("%Y-%m-%d %H:%M:%S")
    df = df.rename(columns=str.capitalize)
    table = df.to_string(index=False, justify="left", formatters={"Price": _money, "Total": _money})
    return "===== Transactions =====\n" + table
