"""FIFO lot engine turning a transaction history into open holdings."""
from __future__ import annotations

import logging
from collections import deque
from datetime import date
from typing import Deque, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from .errors import InsufficientQuantityError
from .models import (
    REPORTING_CURRENCY,
    AssetType,
    CostLot,
    Currency,
    Holding,
    HoldingWarning,
    Transaction,
    TransactionType,
    currency_for_asset_type,
    utc_now,
)

logger = logging.getLogger(__name__)

# Quantities closer than this are treated as equal when lots are consumed.
QUANTITY_EPSILON = 1e-9

_KIND_ORDER = {
    TransactionType.BUY: 0,
    TransactionType.SELL: 1,
    TransactionType.DIVIDEND: 2,
    TransactionType.FEE: 3,
}


class RateProvider(Protocol):
    def get_rate(self, from_currency: Currency, to_currency: Currency, on: date) -> float:
        ...


def _replay_order(tx: Transaction) -> tuple:
    return (tx.date, _KIND_ORDER.get(tx.transaction_type, 9), tx.price, tx.quantity, tx.id or "")


def _group_by_symbol(transactions: Iterable[Transaction]) -> Dict[str, List[Transaction]]:
    grouped: Dict[str, List[Transaction]] = {}
    for tx in transactions:
        grouped.setdefault(tx.symbol, []).append(tx)
    return grouped


class FIFOCalculator:
    """Replay transactions per symbol into first-in, first-out cost lots."""

    def __init__(self, exchange_rates: RateProvider) -> None:
        self.exchange_rates = exchange_rates

    def calculate_holding(self, symbol: str, transactions: Sequence[Transaction]) -> Optional[Holding]:
        """Return the open holding for ``symbol`` or ``None`` when nothing is held.

        Raises :class:`InsufficientQuantityError` when a sell exceeds the open lots.
        """

        symbol_transactions = sorted(
            (tx for tx in transactions if tx.symbol == symbol), key=_replay_order
        )
        if not symbol_transactions:
            return None

        lots: Deque[CostLot] = deque()
        name = ""
        asset_type = symbol_transactions[0].asset_type
        for tx in symbol_transactions:
            name = tx.name or name
            asset_type = tx.asset_type
            if tx.transaction_type == TransactionType.BUY:
                lot = self._open_lot(tx)
                if lot is not None:
                    lots.append(lot)
            elif tx.transaction_type == TransactionType.SELL:
                self._consume_lots(symbol, tx.quantity, lots)
            # Dividends and standalone fees leave the lots untouched.

        if not lots:
            return None
        return self._build_holding(symbol, name, asset_type, list(lots))

    def calculate_all_holdings(
        self, transactions: Sequence[Transaction]
    ) -> Tuple[Dict[str, Holding], List[HoldingWarning]]:
        """Compute holdings for every symbol, downgrading shortfalls to warnings."""

        holdings: Dict[str, Holding] = {}
        warnings: List[HoldingWarning] = []
        grouped = _group_by_symbol(transactions)
        for symbol in sorted(grouped):
            try:
                holding = self.calculate_holding(symbol, grouped[symbol])
            except InsufficientQuantityError as exc:
                logger.warning("Skipping %s: %s", symbol, exc)
                warnings.append(
                    HoldingWarning(
                        symbol=symbol,
                        required=exc.required,
                        available=exc.available,
                        missing=exc.missing,
                        message=str(exc),
                    )
                )
                continue
            except Exception:
                logger.error("Failed to calculate holding for %s", symbol)
                raise
            if holding is not None:
                holdings[symbol] = holding
        return holdings, warnings

    def calculate_cost_basis(
        self,
        symbol: str,
        sell_transaction: Transaction,
        transactions: Sequence[Transaction],
    ) -> float:
        """Return the reporting-currency cost consumed by ``sell_transaction``."""

        if sell_transaction.transaction_type != TransactionType.SELL:
            raise ValueError("transaction is not a sell transaction")
        if sell_transaction.symbol != symbol:
            raise ValueError(
                f"transaction symbol {sell_transaction.symbol} does not match requested symbol {symbol}"
            )

        prior = sorted(
            (tx for tx in transactions if tx.symbol == symbol and tx.date < sell_transaction.date),
            key=_replay_order,
        )
        lots: Deque[CostLot] = deque()
        for tx in prior:
            if tx.transaction_type == TransactionType.BUY:
                lot = self._open_lot(tx)
                if lot is not None:
                    lots.append(lot)
            elif tx.transaction_type == TransactionType.SELL:
                self._consume_lots(symbol, tx.quantity, lots)
        return self._consume_lots(symbol, sell_transaction.quantity, lots)

    def _open_lot(self, tx: Transaction) -> Optional[CostLot]:
        if tx.quantity <= 0:
            logger.debug("Ignoring zero-quantity buy of %s on %s", tx.symbol, tx.date)
            return None
        # Fee is folded into the cost basis; tax is not.
        total_cost_original = tx.price * tx.quantity + (tx.fee or 0.0)
        rate = self.exchange_rates.get_rate(tx.currency, REPORTING_CURRENCY, tx.date)
        total_cost = total_cost_original * rate
        return CostLot(
            date=tx.date,
            quantity=tx.quantity,
            unit_cost=total_cost / tx.quantity,
            unit_cost_original=total_cost_original / tx.quantity,
            original_quantity=tx.quantity,
            currency=Currency(tx.currency),
            exchange_rate=rate,
        )

    def _consume_lots(self, symbol: str, quantity: float, lots: Deque[CostLot]) -> float:
        """Remove ``quantity`` from the oldest lots and return the cost released."""

        available = sum(lot.quantity for lot in lots)
        remaining = quantity
        cost_removed = 0.0
        while remaining > QUANTITY_EPSILON and lots:
            lot = lots[0]
            if lot.quantity <= remaining + QUANTITY_EPSILON:
                cost_removed += lot.quantity * lot.unit_cost
                remaining -= lot.quantity
                lots.popleft()
            else:
                cost_removed += remaining * lot.unit_cost
                lot.quantity -= remaining
                remaining = 0.0
        if remaining > QUANTITY_EPSILON:
            raise InsufficientQuantityError(symbol, required=quantity, available=available)
        return cost_removed

    def _build_holding(
        self, symbol: str, name: str, asset_type: AssetType, lots: List[CostLot]
    ) -> Holding:
        currency = currency_for_asset_type(asset_type)
        quantity = sum(lot.quantity for lot in lots)
        total_cost = sum(lot.cost_total for lot in lots)
        total_cost_original = sum(self._cost_in(currency, lot) for lot in lots)
        return Holding(
            symbol=symbol,
            name=name,
            asset_type=asset_type,
            quantity=quantity,
            avg_cost=total_cost / quantity,
            avg_cost_original=total_cost_original / quantity,
            total_cost=total_cost,
            total_cost_original=total_cost_original,
            currency=currency,
            last_updated=utc_now(),
            lots=lots,
        )

    def _cost_in(self, currency: Currency, lot: CostLot) -> float:
        # Lots bought in another currency are restated at the lot date rate.
        if lot.currency == currency:
            return lot.cost_total_original
        return lot.cost_total_original * self.exchange_rates.get_rate(lot.currency, currency, lot.date)


__all__ = ["FIFOCalculator", "RateProvider", "QUANTITY_EPSILON"]
