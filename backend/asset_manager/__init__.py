"""Core package for FIFO holdings, valuation and rebalancing."""

from .fifo import FIFOCalculator
from .fx import ExchangeRateService, InMemoryRateCache, InMemoryRateHistory
from .holdings import HoldingService, InMemoryPriceOracle, InMemoryTransactionRepository
from .models import Holding, RebalanceCheck, Transaction
from .rebalance import RebalanceService, StaticAllocationSource

__all__ = [
    "Transaction",
    "Holding",
    "RebalanceCheck",
    "ExchangeRateService",
    "InMemoryRateCache",
    "InMemoryRateHistory",
    "FIFOCalculator",
    "HoldingService",
    "InMemoryPriceOracle",
    "InMemoryTransactionRepository",
    "RebalanceService",
    "StaticAllocationSource",
]
