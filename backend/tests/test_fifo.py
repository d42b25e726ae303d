"""FIFO lot engine tests."""

from __future__ import annotations

import random
from datetime import date

import pytest

from asset_manager.errors import InsufficientQuantityError, RateNotFoundError
from asset_manager.models import AssetType, Currency, Transaction, TransactionType


def _tx(
    day: date,
    kind: TransactionType,
    quantity: float,
    price: float,
    *,
    symbol: str = "2330",
    asset_type: AssetType = AssetType.TW_STOCK,
    currency: Currency = Currency.TWD,
    **extra,
) -> Transaction:
    return Transaction(
        date=day,
        asset_type=asset_type,
        symbol=symbol,
        transaction_type=kind,
        quantity=quantity,
        price=price,
        currency=currency,
        **extra,
    )


BUY = TransactionType.BUY
SELL = TransactionType.SELL


def build_partial_sell_history() -> list[Transaction]:
    return [
        _tx(date(2024, 1, 2), BUY, 10, 100, id="t1"),
        _tx(date(2024, 1, 3), BUY, 10, 200, id="t2"),
        _tx(date(2024, 1, 4), SELL, 12, 250, id="t3"),
    ]


def test_partial_sell_consumes_oldest_lot_first(fifo):
    holding = fifo.calculate_holding("2330", build_partial_sell_history())

    assert holding is not None
    assert holding.quantity == 8
    assert holding.total_cost == 1600
    assert holding.avg_cost == 200
    assert len(holding.lots) == 1
    assert holding.lots[0].date == date(2024, 1, 3)
    assert holding.lots[0].original_quantity == 10


def test_cost_basis_of_partial_sell(fifo):
    history = build_partial_sell_history()
    sell = history[-1]

    assert fifo.calculate_cost_basis("2330", sell, history) == pytest.approx(1400)


def test_input_order_does_not_change_result(fifo):
    history = build_partial_sell_history() + [
        _tx(date(2024, 2, 1), BUY, 5, 300, id="t4"),
        _tx(date(2024, 2, 5), SELL, 3, 320, id="t5"),
    ]
    expected = fifo.calculate_holding("2330", history)

    shuffled = list(history)
    random.Random(7).shuffle(shuffled)
    result = fifo.calculate_holding("2330", list(reversed(shuffled)))

    assert result.quantity == pytest.approx(expected.quantity)
    assert result.total_cost == pytest.approx(expected.total_cost)
    assert [lot.date for lot in result.lots] == [lot.date for lot in expected.lots]


def test_lot_quantities_match_net_position(fifo):
    history = [
        _tx(date(2024, 1, 2), BUY, 3.5, 10),
        _tx(date(2024, 1, 5), BUY, 2.25, 12),
        _tx(date(2024, 1, 9), SELL, 4, 15),
        _tx(date(2024, 1, 11), BUY, 1, 11),
    ]
    holding = fifo.calculate_holding("2330", history)

    assert sum(lot.quantity for lot in holding.lots) == pytest.approx(3.5 + 2.25 - 4 + 1)
    assert holding.quantity == pytest.approx(2.75)


def test_full_liquidation_returns_none(fifo):
    history = [
        _tx(date(2024, 1, 2), BUY, 10, 100),
        _tx(date(2024, 1, 3), SELL, 4, 110),
        _tx(date(2024, 1, 4), SELL, 6, 120),
    ]

    assert fifo.calculate_holding("2330", history) is None


def test_unknown_symbol_returns_none(fifo):
    assert fifo.calculate_holding("0050", build_partial_sell_history()) is None


def test_same_day_buy_is_applied_before_sell(fifo):
    history = [
        _tx(date(2024, 1, 2), SELL, 5, 110),
        _tx(date(2024, 1, 2), BUY, 10, 100),
    ]
    holding = fifo.calculate_holding("2330", history)

    assert holding.quantity == 5
    assert holding.total_cost == 500


def test_oversell_raises_insufficient_quantity(fifo):
    history = [
        _tx(date(2024, 1, 2), BUY, 5, 100),
        _tx(date(2024, 1, 3), SELL, 10, 100),
    ]

    with pytest.raises(InsufficientQuantityError) as exc_info:
        fifo.calculate_holding("2330", history)

    err = exc_info.value
    assert err.symbol == "2330"
    assert err.required == 10
    assert err.available == 5
    assert err.missing == 5


def test_portfolio_downgrades_oversell_to_warning(fifo):
    history = [
        _tx(date(2024, 1, 2), BUY, 5, 100, symbol="0050"),
        _tx(date(2024, 1, 3), SELL, 10, 100, symbol="0050"),
        _tx(date(2024, 1, 2), BUY, 10, 500, symbol="2330"),
    ]

    holdings, warnings = fifo.calculate_all_holdings(history)

    assert list(holdings) == ["2330"]
    assert len(warnings) == 1
    warning = warnings[0]
    assert warning.symbol == "0050"
    assert warning.code == "insufficient_quantity"
    assert (warning.required, warning.available, warning.missing) == (10, 5, 5)


def test_fee_is_capitalised_and_tax_ignored(fifo):
    history = [_tx(date(2024, 1, 2), BUY, 10, 100, fee=10.0, tax=3.0)]
    holding = fifo.calculate_holding("2330", history)

    assert holding.total_cost == 1010
    assert holding.avg_cost == pytest.approx(101)


def test_dividends_and_fees_do_not_touch_lots(fifo):
    history = [
        _tx(date(2024, 1, 2), BUY, 10, 100),
        _tx(date(2024, 1, 3), TransactionType.DIVIDEND, 0, 0, amount=50.0),
        _tx(date(2024, 1, 4), TransactionType.FEE, 0, 0, amount=20.0),
    ]
    holding = fifo.calculate_holding("2330", history)

    assert holding.quantity == 10
    assert holding.total_cost == 1000


def test_usd_buy_converted_at_trade_date_rate(fifo):
    history = [
        _tx(
            date(2024, 1, 2),
            BUY,
            10,
            150,
            symbol="AAPL",
            asset_type=AssetType.US_STOCK,
            currency=Currency.USD,
            fee=5.0,
        ),
        _tx(
            date(2024, 3, 1),
            BUY,
            10,
            160,
            symbol="AAPL",
            asset_type=AssetType.US_STOCK,
            currency=Currency.USD,
        ),
    ]
    holding = fifo.calculate_holding("AAPL", history)

    assert holding.currency == Currency.USD
    assert holding.total_cost_original == pytest.approx(3105)
    assert holding.total_cost == pytest.approx(1505 * 30 + 1600 * 31)
    assert holding.avg_cost == pytest.approx(holding.total_cost / 20)
    assert [lot.exchange_rate for lot in holding.lots] == [30.0, 31.0]


def test_missing_rate_propagates(fifo):
    history = [
        _tx(
            date(2023, 12, 1),
            BUY,
            1,
            40000,
            symbol="BTC",
            asset_type=AssetType.CRYPTO,
            currency=Currency.USD,
        )
    ]

    with pytest.raises(RateNotFoundError):
        fifo.calculate_all_holdings(history)


def test_cost_basis_rejects_non_sell(fifo):
    history = build_partial_sell_history()

    with pytest.raises(ValueError):
        fifo.calculate_cost_basis("2330", history[0], history)


def test_cost_basis_rejects_symbol_mismatch(fifo):
    history = build_partial_sell_history()

    with pytest.raises(ValueError):
        fifo.calculate_cost_basis("0050", history[-1], history)


def test_lot_costs_add_up_to_total_cost(fifo):
    history = [
        _tx(date(2024, 1, 2), BUY, 4, 100, fee=8.0),
        _tx(date(2024, 1, 5), BUY, 6, 130),
        _tx(date(2024, 1, 9), SELL, 5, 150),
        _tx(date(2024, 1, 11), BUY, 2, 90, fee=1.5),
    ]
    holding = fifo.calculate_holding("2330", history)

    assert sum(lot.quantity * lot.unit_cost for lot in holding.lots) == pytest.approx(holding.total_cost)
    assert sum(lot.quantity for lot in holding.lots) == pytest.approx(holding.quantity)
    assert holding.total_cost == pytest.approx(5 * 130 + 2 * 90 + 1.5)


def test_mixed_currency_lots_restated_in_holding_currency(fifo):
    history = [
        _tx(
            date(2024, 1, 2),
            BUY,
            1,
            100,
            symbol="BTC",
            asset_type=AssetType.CRYPTO,
            currency=Currency.USD,
        ),
        _tx(
            date(2024, 3, 1),
            BUY,
            1,
            3100,
            symbol="BTC",
            asset_type=AssetType.CRYPTO,
            currency=Currency.TWD,
        ),
    ]
    holding = fifo.calculate_holding("BTC", history)

    assert holding.currency == Currency.USD
    assert holding.total_cost == pytest.approx(3000 + 3100)
    assert holding.total_cost_original == pytest.approx(200)
    assert holding.avg_cost_original == pytest.approx(100)


def test_last_updated_is_timezone_aware(fifo):
    holding = fifo.calculate_holding("2330", build_partial_sell_history())

    assert holding.last_updated.tzinfo is not None
