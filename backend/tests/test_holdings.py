"""Holdings valuation tests."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from asset_manager.errors import HoldingNotFoundError, InsufficientQuantityError, PriceLookupError
from asset_manager.holdings import (
    PRICE_SOURCE_UNAVAILABLE,
    HoldingService,
    InMemoryPriceOracle,
    InMemoryTransactionRepository,
)
from asset_manager.models import AssetType, Currency, HoldingFilters, Transaction, TransactionType

PRICED_AT = datetime(2024, 3, 1, 8, 0)


def build_transactions() -> list[Transaction]:
    return [
        Transaction(
            date=date(2024, 1, 2),
            asset_type=AssetType.US_STOCK,
            symbol="AAPL",
            name="Apple Inc.",
            transaction_type=TransactionType.BUY,
            quantity=10,
            price=150,
            currency=Currency.USD,
        ),
        Transaction(
            date=date(2024, 1, 2),
            asset_type=AssetType.TW_STOCK,
            symbol="2330",
            name="TSMC",
            transaction_type=TransactionType.BUY,
            quantity=10,
            price=500,
            currency=Currency.TWD,
        ),
    ]


class FailingPriceOracle:
    def get_price(self, symbol, asset_type):
        raise PriceLookupError("price feed offline")

    def get_prices(self, symbols, asset_types):
        raise PriceLookupError("price feed offline")


def _service(fifo, exchange_rates, transactions, prices) -> HoldingService:
    return HoldingService(InMemoryTransactionRepository(transactions), fifo, prices, exchange_rates)


def test_values_holdings_in_twd(fifo, exchange_rates):
    prices = InMemoryPriceOracle({"AAPL": 180.0, "2330": 600.0}, updated_at=PRICED_AT)
    service = _service(fifo, exchange_rates, build_transactions(), prices)

    holdings, warnings = service.get_all_holdings()

    assert warnings == []
    assert [h.symbol for h in holdings] == ["2330", "AAPL"]
    tsmc, apple = holdings

    assert tsmc.market_value == pytest.approx(6000)
    assert tsmc.unrealized_pl == pytest.approx(1000)
    assert tsmc.unrealized_pl_pct == pytest.approx(20)

    # Cost converted at the trade-date rate, price at the quote-date rate.
    assert apple.total_cost == pytest.approx(45000)
    assert apple.current_price == 180.0
    assert apple.current_price_twd == pytest.approx(180 * 31)
    assert apple.market_value == pytest.approx(10 * 180 * 31)
    assert apple.unrealized_pl == pytest.approx(10800)
    assert apple.unrealized_pl_pct == pytest.approx(24)
    assert apple.price_source == "memory"
    assert apple.is_price_stale is False


def test_missing_price_marks_holding_unavailable(fifo, exchange_rates):
    prices = InMemoryPriceOracle({"2330": 600.0}, updated_at=PRICED_AT)
    service = _service(fifo, exchange_rates, build_transactions(), prices)

    holdings, _ = service.get_all_holdings()
    apple = next(h for h in holdings if h.symbol == "AAPL")

    assert apple.market_value == 0
    assert apple.unrealized_pl == 0
    assert apple.price_source == PRICE_SOURCE_UNAVAILABLE
    assert apple.is_price_stale is True
    assert apple.price_stale_reason
    assert apple.total_cost == pytest.approx(45000)


def test_price_feed_failure_is_not_fatal(fifo, exchange_rates):
    service = _service(fifo, exchange_rates, build_transactions(), FailingPriceOracle())

    holdings, _ = service.get_all_holdings()

    assert len(holdings) == 2
    assert all(h.price_source == PRICE_SOURCE_UNAVAILABLE for h in holdings)


def test_zero_cost_position_has_zero_percentage(fifo, exchange_rates):
    gifted = Transaction(
        date=date(2024, 1, 2),
        asset_type=AssetType.TW_STOCK,
        symbol="0050",
        transaction_type=TransactionType.BUY,
        quantity=10,
        price=0,
        currency=Currency.TWD,
    )
    prices = InMemoryPriceOracle({"0050": 150.0}, updated_at=PRICED_AT)
    service = _service(fifo, exchange_rates, [gifted], prices)

    holding = service.get_holding_by_symbol("0050")

    assert holding.total_cost == 0
    assert holding.market_value == pytest.approx(1500)
    assert holding.unrealized_pl_pct == 0


def test_filters_by_asset_type(fifo, exchange_rates):
    prices = InMemoryPriceOracle({"AAPL": 180.0, "2330": 600.0}, updated_at=PRICED_AT)
    service = _service(fifo, exchange_rates, build_transactions(), prices)

    holdings, _ = service.get_all_holdings(HoldingFilters(asset_type=AssetType.US_STOCK))

    assert [h.symbol for h in holdings] == ["AAPL"]


def test_no_transactions_returns_empty(fifo, exchange_rates):
    service = _service(fifo, exchange_rates, [], InMemoryPriceOracle({}))

    assert service.get_all_holdings() == ([], [])


def test_oversold_symbol_reported_as_warning(fifo, exchange_rates):
    transactions = build_transactions() + [
        Transaction(
            date=date(2024, 2, 1),
            asset_type=AssetType.TW_STOCK,
            symbol="2330",
            transaction_type=TransactionType.SELL,
            quantity=15,
            price=550,
            currency=Currency.TWD,
        )
    ]
    prices = InMemoryPriceOracle({"AAPL": 180.0, "2330": 600.0}, updated_at=PRICED_AT)
    service = _service(fifo, exchange_rates, transactions, prices)

    holdings, warnings = service.get_all_holdings()

    assert [h.symbol for h in holdings] == ["AAPL"]
    assert [(w.symbol, w.missing) for w in warnings] == [("2330", 5)]

    with pytest.raises(InsufficientQuantityError):
        service.get_holding_by_symbol("2330")


def test_unknown_symbol_raises_not_found(fifo, exchange_rates):
    service = _service(fifo, exchange_rates, build_transactions(), InMemoryPriceOracle({}))

    with pytest.raises(HoldingNotFoundError):
        service.get_holding_by_symbol("MSFT")


def test_sold_out_symbol_raises_not_found(fifo, exchange_rates):
    transactions = build_transactions() + [
        Transaction(
            date=date(2024, 2, 1),
            asset_type=AssetType.US_STOCK,
            symbol="AAPL",
            transaction_type=TransactionType.SELL,
            quantity=10,
            price=170,
            currency=Currency.USD,
        )
    ]
    service = _service(fifo, exchange_rates, transactions, InMemoryPriceOracle({}))

    with pytest.raises(HoldingNotFoundError):
        service.get_holding_by_symbol("AAPL")


def test_single_holding_without_price_is_unavailable(fifo, exchange_rates):
    service = _service(fifo, exchange_rates, build_transactions(), InMemoryPriceOracle({}))

    holding = service.get_holding_by_symbol("2330")

    assert holding.quantity == 10
    assert holding.price_source == PRICE_SOURCE_UNAVAILABLE


def test_price_converted_from_its_quote_currency(fifo, exchange_rates):
    bought = Transaction(
        date=date(2024, 1, 2),
        asset_type=AssetType.CRYPTO,
        symbol="BTC",
        transaction_type=TransactionType.BUY,
        quantity=1,
        price=1_000_000,
        currency=Currency.TWD,
    )
    prices = InMemoryPriceOracle({}, updated_at=PRICED_AT)
    prices.set_price("BTC", AssetType.CRYPTO, 1_200_000.0, currency=Currency.TWD)
    service = _service(fifo, exchange_rates, [bought], prices)

    holding = service.get_holding_by_symbol("BTC")

    assert holding.current_price_twd == pytest.approx(1_200_000)
    assert holding.market_value == pytest.approx(1_200_000)
    assert holding.unrealized_pl == pytest.approx(200_000)


def test_set_price_rejects_non_positive():
    with pytest.raises(ValueError):
        InMemoryPriceOracle({}).set_price("2330", AssetType.TW_STOCK, 0)
