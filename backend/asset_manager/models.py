"""Domain models used by the holdings and rebalancing pipeline."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import List, Optional


class AssetType(str, enum.Enum):
    CASH = "cash"
    TW_STOCK = "tw-stock"
    US_STOCK = "us-stock"
    CRYPTO = "crypto"


class TransactionType(str, enum.Enum):
    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"
    FEE = "fee"


class Currency(str, enum.Enum):
    TWD = "TWD"
    USD = "USD"


REPORTING_CURRENCY = Currency.TWD


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# Asset classes that take part in allocation targets.
REBALANCE_ASSET_TYPES = (AssetType.TW_STOCK, AssetType.US_STOCK, AssetType.CRYPTO)


def currency_for_asset_type(asset_type: AssetType) -> Currency:
    """Return the currency market prices for ``asset_type`` are quoted in."""

    if asset_type in (AssetType.US_STOCK, AssetType.CRYPTO):
        return Currency.USD
    return Currency.TWD


@dataclass(frozen=True)
class Transaction:
    """A recorded trade or cash event for one symbol."""

    date: date
    asset_type: AssetType
    symbol: str
    transaction_type: TransactionType
    quantity: float
    price: float
    currency: Currency
    name: str = ""
    amount: float = 0.0
    fee: Optional[float] = None
    tax: Optional[float] = None
    id: Optional[str] = None
    note: Optional[str] = None


@dataclass
class CostLot:
    """An unconsumed slice of a historical buy."""

    date: date
    quantity: float
    unit_cost: float
    unit_cost_original: float
    original_quantity: float
    currency: Currency
    exchange_rate: float

    @property
    def cost_total(self) -> float:
        return self.quantity * self.unit_cost

    @property
    def cost_total_original(self) -> float:
        return self.quantity * self.unit_cost_original


@dataclass
class Holding:
    """Point-in-time view of an open position, valued in the reporting currency."""

    symbol: str
    name: str
    asset_type: AssetType
    quantity: float
    avg_cost: float
    avg_cost_original: float
    total_cost: float
    total_cost_original: float
    currency: Currency
    current_price: float = 0.0
    current_price_twd: float = 0.0
    market_value: float = 0.0
    unrealized_pl: float = 0.0
    unrealized_pl_pct: float = 0.0
    last_updated: datetime = field(default_factory=utc_now)
    price_source: Optional[str] = None
    is_price_stale: bool = False
    price_stale_reason: Optional[str] = None
    lots: List[CostLot] = field(default_factory=list, repr=False)


@dataclass(frozen=True)
class Price:
    """Current market price of a symbol in its native currency."""

    symbol: str
    asset_type: AssetType
    price: float
    currency: Currency
    updated_at: datetime
    source: str = "api"
    is_stale: bool = False
    stale_reason: Optional[str] = None


@dataclass(frozen=True)
class ExchangeRate:
    from_currency: Currency
    to_currency: Currency
    rate: float
    date: date


@dataclass(frozen=True)
class HoldingFilters:
    asset_type: Optional[AssetType] = None
    symbol: Optional[str] = None


@dataclass(frozen=True)
class HoldingWarning:
    """Per-symbol data problem reported next to a successful portfolio result."""

    symbol: str
    required: float
    available: float
    missing: float
    message: str
    code: str = "insufficient_quantity"


@dataclass(frozen=True)
class AllocationSettings:
    """Target allocation percentages per asset class plus the drift tolerance."""

    tw_stock: float
    us_stock: float
    crypto: float
    rebalance_threshold: float

    def target_for(self, asset_type: AssetType) -> float:
        targets = {
            AssetType.TW_STOCK: self.tw_stock,
            AssetType.US_STOCK: self.us_stock,
            AssetType.CRYPTO: self.crypto,
        }
        return targets.get(asset_type, 0.0)


@dataclass
class AssetTypeDeviation:
    asset_type: AssetType
    target_percent: float
    current_percent: float
    deviation: float
    deviation_abs: float
    exceeds_threshold: bool
    current_value: float
    target_value: float


@dataclass(frozen=True)
class RebalanceSuggestion:
    asset_type: AssetType
    action: str
    amount: float
    reason: str


@dataclass
class RebalanceCheck:
    needs_rebalance: bool
    threshold: float
    deviations: List[AssetTypeDeviation] = field(default_factory=list)
    suggestions: List[RebalanceSuggestion] = field(default_factory=list)
    current_total: float = 0.0
    warnings: List[HoldingWarning] = field(default_factory=list)


__all__ = [
    "AssetType",
    "TransactionType",
    "Currency",
    "REPORTING_CURRENCY",
    "REBALANCE_ASSET_TYPES",
    "currency_for_asset_type",
    "utc_now",
    "Transaction",
    "CostLot",
    "Holding",
    "Price",
    "ExchangeRate",
    "HoldingFilters",
    "HoldingWarning",
    "AllocationSettings",
    "AssetTypeDeviation",
    "RebalanceSuggestion",
    "RebalanceCheck",
]
