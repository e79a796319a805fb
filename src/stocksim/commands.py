from __future__ import annotations
from enum import Enum
from typing import Optional


class Command(str, Enum):
    REFRESH_MARKET = "1"
    VIEW_MARKET = "2"
    BUY = "3"
    SELL = "4"
    VIEW_PORTFOLIO = "5"
    VIEW_TRANSACTIONS = "6"
    SAVE = "7"
    LOAD = "8"
    TICK = "9"
    EXIT = "0"


MENU_LABELS: dict[Command, str] = {
    Command.REFRESH_MARKET: "View Market (updates prices)",
    Command.VIEW_MARKET: "View Market (no update)",
    Command.BUY: "Buy",
    Command.SELL: "Sell",
    Command.VIEW_PORTFOLIO: "View Portfolio",
    Command.VIEW_TRANSACTIONS: "View Transactions",
    Command.SAVE: "Save Portfolio",
    Command.LOAD: "Load Portfolio",
    Command.TICK: "Advance Market (tick)",
    Command.EXIT: "Exit",
}


def parse_command(token: str) -> Optional[Command]:
    try:
        return Command((token or "").strip())
    except ValueError:
        return None


def menu_text() -> str:
    lines = ["", "Menu:"]
    for cmd in Command:
        lines.append(f"{cmd.value}) {MENU_LABELS[cmd]}")
    return "\n".join(lines)
