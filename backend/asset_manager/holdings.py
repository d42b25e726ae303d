"""Holdings aggregation: FIFO positions merged with current market prices."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from .errors import AssetManagerError, HoldingNotFoundError, PriceLookupError
from .fifo import FIFOCalculator
from .models import (
    AssetType,
    Currency,
    Holding,
    HoldingFilters,
    HoldingWarning,
    Price,
    Transaction,
    currency_for_asset_type,
    utc_now,
)

logger = logging.getLogger(__name__)

PRICE_SOURCE_UNAVAILABLE = "unavailable"


class TransactionRepository(Protocol):
    def get_all(self, filters: HoldingFilters) -> List[Transaction]:
        ...


class PriceOracle(Protocol):
    """Pluggable market price provider."""

    def get_price(self, symbol: str, asset_type: AssetType) -> Price:
        ...

    def get_prices(self, symbols: Sequence[str], asset_types: Mapping[str, AssetType]) -> Dict[str, Price]:
        ...


class PriceStore(PriceOracle, Protocol):
    """Price oracle that also accepts manually recorded quotes."""

    def set_price(
        self,
        symbol: str,
        asset_type: AssetType,
        price: float,
        *,
        currency: Optional[Currency] = None,
        source: str = "manual",
    ) -> Price:
        ...


class TwdConverter(Protocol):
    def convert_to_twd(self, amount: float, currency: Currency, on: date) -> float:
        ...


class InMemoryTransactionRepository:
    """Minimal in-memory transaction store."""

    def __init__(self, transactions: Sequence[Transaction] = ()) -> None:
        self._transactions: List[Transaction] = list(transactions)

    def add(self, transaction: Transaction) -> None:
        self._transactions.append(transaction)

    def get_all(self, filters: HoldingFilters) -> List[Transaction]:
        selected = self._transactions
        if filters.asset_type is not None:
            selected = [tx for tx in selected if tx.asset_type == filters.asset_type]
        if filters.symbol:
            selected = [tx for tx in selected if tx.symbol == filters.symbol]
        return list(selected)


class InMemoryPriceOracle:
    """Simple price source for tests and examples."""

    def __init__(self, prices: Mapping[str, float], *, updated_at: Optional[datetime] = None) -> None:
        self._prices = dict(prices)
        self._currencies: Dict[str, Currency] = {}
        self._updated_at = updated_at

    def set_price(
        self,
        symbol: str,
        asset_type: AssetType,
        price: float,
        *,
        currency: Optional[Currency] = None,
        source: str = "manual",
    ) -> Price:
        if price <= 0:
            raise ValueError("price must be positive")
        self._prices[symbol] = price
        if currency is not None:
            self._currencies[symbol] = Currency(currency)
        return self.get_price(symbol, asset_type)

    def get_price(self, symbol: str, asset_type: AssetType) -> Price:
        if symbol not in self._prices:
            raise PriceLookupError(f"No price for symbol {symbol}")
        return Price(
            symbol=symbol,
            asset_type=asset_type,
            price=float(self._prices[symbol]),
            currency=self._currencies.get(symbol, currency_for_asset_type(asset_type)),
            updated_at=self._updated_at or utc_now(),
            source="memory",
        )

    def get_prices(self, symbols: Sequence[str], asset_types: Mapping[str, AssetType]) -> Dict[str, Price]:
        return {
            symbol: self.get_price(symbol, asset_types[symbol])
            for symbol in symbols
            if symbol in self._prices
        }


def _mark_unpriced(holding: Holding, reason: str) -> None:
    holding.current_price = 0.0
    holding.current_price_twd = 0.0
    holding.market_value = 0.0
    holding.unrealized_pl = 0.0
    holding.unrealized_pl_pct = 0.0
    holding.price_source = PRICE_SOURCE_UNAVAILABLE
    holding.is_price_stale = True
    holding.price_stale_reason = reason


class HoldingService:
    """Join FIFO holdings with market prices into unrealized P&L."""

    def __init__(
        self,
        transactions: TransactionRepository,
        fifo: FIFOCalculator,
        prices: PriceOracle,
        exchange_rates: TwdConverter,
    ) -> None:
        self.transactions = transactions
        self.fifo = fifo
        self.prices = prices
        self.exchange_rates = exchange_rates

    def get_all_holdings(
        self, filters: Optional[HoldingFilters] = None
    ) -> Tuple[List[Holding], List[HoldingWarning]]:
        filters = filters or HoldingFilters()
        transactions = self.transactions.get_all(filters)
        logger.debug("Loaded %d transactions for holdings", len(transactions))
        if not transactions:
            return [], []

        holdings_map, warnings = self.fifo.calculate_all_holdings(transactions)
        if not holdings_map:
            return [], warnings

        symbols = sorted(holdings_map)
        asset_types = {symbol: holdings_map[symbol].asset_type for symbol in symbols}
        try:
            prices = self.prices.get_prices(symbols, asset_types)
        except PriceLookupError as exc:
            logger.warning("Failed to get prices, valuing holdings at zero: %s", exc)
            prices = {}

        holdings: List[Holding] = []
        for symbol in symbols:
            holding = holdings_map[symbol]
            self._apply_price(holding, prices.get(symbol))
            holdings.append(holding)
        return holdings, warnings

    def get_holding_by_symbol(self, symbol: str) -> Holding:
        transactions = self.transactions.get_all(HoldingFilters(symbol=symbol))
        if not transactions:
            raise HoldingNotFoundError(symbol)

        holding = self.fifo.calculate_holding(symbol, transactions)
        if holding is None:
            raise HoldingNotFoundError(symbol, reason="all sold")

        try:
            price: Optional[Price] = self.prices.get_price(symbol, holding.asset_type)
        except PriceLookupError as exc:
            logger.warning("No price for %s: %s", symbol, exc)
            price = None
        self._apply_price(holding, price)
        return holding

    def _apply_price(self, holding: Holding, price: Optional[Price]) -> None:
        if price is None or price.price <= 0:
            logger.warning("No valid price for %s", holding.symbol)
            _mark_unpriced(holding, "Price not available")
            return

        currency = Currency(price.currency)
        try:
            price_twd = self.exchange_rates.convert_to_twd(price.price, currency, price.updated_at.date())
        except AssetManagerError as exc:
            logger.error("Failed to convert %s price of %s to TWD: %s", currency.value, holding.symbol, exc)
            _mark_unpriced(holding, "Exchange rate not available")
            return

        holding.current_price = price.price
        holding.current_price_twd = price_twd
        holding.market_value = holding.quantity * price_twd
        holding.unrealized_pl = holding.market_value - holding.total_cost
        holding.unrealized_pl_pct = (
            holding.unrealized_pl / holding.total_cost * 100 if holding.total_cost else 0.0
        )
        holding.price_source = price.source
        holding.is_price_stale = price.is_stale
        holding.price_stale_reason = price.stale_reason


__all__ = [
    "TransactionRepository",
    "PriceOracle",
    "PriceStore",
    "InMemoryTransactionRepository",
    "InMemoryPriceOracle",
    "HoldingService",
    "PRICE_SOURCE_UNAVAILABLE",
]
