"""Pydantic schema exports."""

from .exchange_rates import ExchangeRateSchema
from .holdings import HoldingListResponse, HoldingSchema, HoldingWarningSchema
from .prices import PriceSchema, PriceUpdateRequest
from .rebalance import AssetTypeDeviationSchema, RebalanceCheckSchema, RebalanceSuggestionSchema

__all__ = [
    "AssetTypeDeviationSchema",
    "ExchangeRateSchema",
    "HoldingListResponse",
    "HoldingSchema",
    "HoldingWarningSchema",
    "PriceSchema",
    "PriceUpdateRequest",
    "RebalanceCheckSchema",
    "RebalanceSuggestionSchema",
]
