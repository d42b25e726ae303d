"""SQLAlchemy implementations of the core's collaborator contracts."""

from .exchange_rates import SqlRateHistory
from .prices import SqlPriceOracle
from .transactions import SqlTransactionRepository

__all__ = ["SqlPriceOracle", "SqlRateHistory", "SqlTransactionRepository"]
