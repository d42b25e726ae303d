"""Upstream data providers."""

from .taiwan_bank import TaiwanBankClient

__all__ = ["TaiwanBankClient"]
