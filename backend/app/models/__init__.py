"""Database model exports."""

from .exchange_rate import ExchangeRateRecord
from .price import PriceRecord
from .transaction import TransactionRecord

__all__ = ["ExchangeRateRecord", "PriceRecord", "TransactionRecord"]
