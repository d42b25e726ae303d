"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .exchange_rates import router as exchange_rates_router
from .holdings import router as holdings_router
from .prices import router as prices_router
from .rebalance import router as rebalance_router

api_router = APIRouter()
api_router.include_router(holdings_router, prefix="/holdings", tags=["holdings"])
api_router.include_router(rebalance_router, prefix="/rebalance", tags=["rebalance"])
api_router.include_router(prices_router, prefix="/prices", tags=["prices"])
api_router.include_router(exchange_rates_router, prefix="/exchange-rates", tags=["exchange-rates"])

__all__ = ["api_router"]
