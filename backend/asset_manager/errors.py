"""Error taxonomy for cost-basis, valuation and rebalancing."""
from __future__ import annotations

from datetime import date


class AssetManagerError(RuntimeError):
    """Base class for domain errors raised by the core."""


class UnsupportedPairError(AssetManagerError):
    """Raised when a conversion between two unsupported currencies is requested."""

    def __init__(self, from_currency: str, to_currency: str) -> None:
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(f"Unsupported currency pair: {from_currency} -> {to_currency}")


class RateNotFoundError(AssetManagerError):
    """Raised when no cached, persisted, live or fallback rate exists."""

    def __init__(self, from_currency: str, to_currency: str, on: date) -> None:
        self.from_currency = from_currency
        self.to_currency = to_currency
        self.date = on
        super().__init__(
            f"No exchange rate found for {from_currency} -> {to_currency} on {on.isoformat()}"
        )


class RateFetchError(AssetManagerError):
    """Raised by live rate sources when the upstream cannot be read."""


class InsufficientQuantityError(AssetManagerError):
    """Raised when a sell consumes more than the open lots hold."""

    def __init__(self, symbol: str, required: float, available: float) -> None:
        self.symbol = symbol
        self.required = required
        self.available = available
        self.missing = required - available
        super().__init__(
            f"Insufficient quantity to sell {symbol}: trying to sell {required:g} "
            f"but only {available:g} available ({self.missing:g} missing)"
        )


class HoldingNotFoundError(AssetManagerError):
    """Raised when a symbol has no open position."""

    def __init__(self, symbol: str, reason: str = "no transactions") -> None:
        self.symbol = symbol
        super().__init__(f"Holding not found for symbol {symbol} ({reason})")


class PriceLookupError(AssetManagerError):
    """Raised by price oracles when a quote cannot be produced."""


__all__ = [
    "AssetManagerError",
    "UnsupportedPairError",
    "RateNotFoundError",
    "RateFetchError",
    "InsufficientQuantityError",
    "HoldingNotFoundError",
    "PriceLookupError",
]
