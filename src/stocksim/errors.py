from __future__ import annotations


class SimulatorError(Exception):
    """Base class for every error the simulator reports to the user."""


class TradingError(SimulatorError, ValueError):
    """A trade or lookup request that breaks a portfolio or market rule."""


class InsufficientFunds(TradingError):
    pass


class InsufficientShares(TradingError):
    pass


class InvalidQuantity(TradingError):
    pass


class SymbolNotFound(TradingError):
    pass


class PersistenceFailure(SimulatorError):
    """Reading or writing the portfolio files failed."""


class MalformedRecord(SimulatorError, ValueError):
    """A single line of a persisted file could not be parsed."""
