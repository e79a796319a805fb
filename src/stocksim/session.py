from __future__ import annotations
from typing import Callable, Optional

import numpy as np
from loguru import logger

from .commands import Command, menu_text, parse_command
from .config import SimConfig
from .core import normalize_symbol
from .errors import InsufficientShares, InvalidQuantity, PersistenceFailure, SimulatorError
from .market import Market
from .portfolio import Portfolio
from .render import format_market, format_summary, format_transactions
from .storage import load_portfolio, save_portfolio


def parse_quantity(text: str) -> int:
    try:
        qty = int(text.strip())
    except ValueError:
        raise InvalidQuantity(f"Invalid quantity: {text.strip()!r}") from None
    if qty <= 0:
        raise InvalidQuantity("Quantity must be positive.")
    return qty


class Session:
    """
    Menu-driven trading session.

    Owns the market and the portfolio; reads one line per prompt through
    ``input_fn`` and writes through ``output_fn`` so the loop can be driven
    by a script. Every handler error is reported and the loop keeps going;
    only a closed input stream (EOFError) or the exit command ends it.
    """

    def __init__(
        self,
        config: Optional[SimConfig] = None,
        market: Optional[Market] = None,
        portfolio: Optional[Portfolio] = None,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        self.config = config or SimConfig()
        self.input_fn = input_fn
        self.output_fn = output_fn
        self.market = market if market is not None else Market(rng=np.random.default_rng(self.config.seed))
        self.portfolio = portfolio if portfolio is not None else self._startup_portfolio()

        self._handlers: dict[Command, Callable[[], None]] = {
            Command.REFRESH_MARKET: self.refresh_market,
            Command.VIEW_MARKET: self.view_market,
            Command.BUY: self.buy,
            Command.SELL: self.sell,
            Command.VIEW_PORTFOLIO: self.view_portfolio,
            Command.VIEW_TRANSACTIONS: self.view_transactions,
            Command.SAVE: self.save,
            Command.LOAD: self.load,
            Command.TICK: self.tick,
        }

    def out(self, text: str) -> None:
        self.output_fn(text)

    def ask(self, prompt: str) -> str:
        return self.input_fn(prompt).strip()

    def _startup_portfolio(self) -> Portfolio:
        cfg = self.config
        try:
            portfolio = load_portfolio(cfg.portfolio_file, cfg.ledger_file)
        except PersistenceFailure as e:
            logger.warning("startup load failed: {}", e)
            self.out(f"Starting new portfolio with ${cfg.starting_cash:,.2f} cash.")
            return Portfolio(cfg.starting_cash)

        if portfolio.cash <= 0.0:
            portfolio.cash = cfg.starting_cash
        self.out(f"Portfolio loaded. Cash: {portfolio.cash:.2f}")
        return portfolio

    # ---- loop ----

    def run(self) -> int:
        self.out("Welcome to the Stock Trading Simulator.")
        running = True
        while running:
            self.out(menu_text())
            try:
                line = self.input_fn("Choose: ")
            except EOFError:
                logger.info("input closed, ending session")
                break
            running = self.step(line)

        self.save_on_exit()
        return 0

    def step(self, line: str) -> bool:
        """Handle one menu choice. Returns False when the session should end."""
        cmd = parse_command(line)
        if cmd is None:
            self.out("Unknown option.")
            return True
        if cmd is Command.EXIT:
            return False

        try:
            self._handlers[cmd]()
        except EOFError:
            logger.info("input closed during {}", cmd.name)
            return False
        except (SimulatorError, ValueError) as e:
            self.out(f"Error: {e}")
        except Exception as e:
            logger.exception("unexpected error handling {}", cmd.name)
            self.out(f"Error: {e}")
        return True

    def save_on_exit(self) -> None:
        try:
            save_portfolio(self.portfolio, self.config.portfolio_file, self.config.ledger_file)
            self.out("Portfolio saved. Goodbye.")
        except PersistenceFailure as e:
            self.out(str(e))

    # ---- handlers ----

    def refresh_market(self) -> None:
        self.market.tick(self.config.refresh_bound_pct)
        self.view_market()

    def view_market(self) -> None:
        self.out(format_market(self.market.render()))

    def tick(self) -> None:
        self.market.tick(self.config.tick_bound_pct)
        self.out("Market tick advanced (small random movements).")

    def _confirm(self, prompt: str) -> bool:
        if self.ask(prompt).lower() != "y":
            self.out("Cancelled.")
            return False
        return True

    def buy(self) -> None:
        sym = normalize_symbol(self.ask("Enter symbol to buy: "))
        inst = self.market.require(sym)
        self.out(f"Price: {inst.price:.2f}")
        qty = parse_quantity(self.ask("Enter quantity: "))

        # price is pinned here so the confirmed cost is what gets charged
        price = inst.price
        if not self._confirm(f"Total cost: {qty * price:.2f}. Proceed? (y/n): "):
            return
        self.portfolio.buy(sym, qty, price)
        self.out(f"Bought {qty} of {sym} @ {price:.2f}")

    def sell(self) -> None:
        sym = normalize_symbol(self.ask("Enter symbol to sell: "))
        inst = self.market.require(sym)
        pos = self.portfolio.positions.get(sym)
        if pos is None:
            raise InsufficientShares(f"You don't own any shares of {sym}")

        self.out(f"You own: {pos.qty} shares. Avg cost: {pos.avg_cost:.4f}")
        qty = parse_quantity(self.ask("Enter quantity to sell: "))
        if qty > pos.qty:
            raise InsufficientShares(f"You only own {pos.qty} shares of {sym}")

        price = inst.price
        if not self._confirm(f"Proceeds: {qty * price:.2f}. Proceed? (y/n): "):
            return
        self.portfolio.sell(sym, qty, price)
        self.out(f"Sold {qty} of {sym} @ {price:.2f}")

    def view_portfolio(self) -> None:
        self.out(format_summary(self.portfolio.summary_view(self.market.prices())))

    def view_transactions(self) -> None:
        self.out(format_transactions(self.portfolio.transactions_view()))

    def save(self) -> None:
        save_portfolio(self.portfolio, self.config.portfolio_file, self.config.ledger_file)
        self.out(f"Saved {self.config.portfolio_file} and {self.config.ledger_file}")

    def load(self) -> None:
        # on failure the error propagates to step() and the current portfolio stays
        self.portfolio = load_portfolio(
            self.config.portfolio_file, self.config.ledger_file, clock=self.portfolio.clock
        )
        self.out(f"Loaded portfolio. Cash: {self.portfolio.cash:.2f}")
