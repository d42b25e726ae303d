"""Exchange-rate lookup and refresh endpoints."""

from __future__ import annotations

import datetime as dt
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_container
from app.container import ServiceContainer
from app.schemas import ExchangeRateSchema
from asset_manager.errors import RateFetchError, RateNotFoundError, UnsupportedPairError
from asset_manager.models import Currency

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{from_currency}/{to_currency}", response_model=ExchangeRateSchema)
def get_exchange_rate(
    from_currency: str,
    to_currency: str,
    date: dt.date | None = Query(default=None, description="Rate date, defaults to today"),
    container: ServiceContainer = Depends(get_container),
) -> ExchangeRateSchema:
    on = date or container.exchange_rates.today()
    from_code = from_currency.strip().upper()
    to_code = to_currency.strip().upper()
    try:
        rate = container.exchange_rates.get_rate(from_code, to_code, on)
    except UnsupportedPairError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RateNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ExchangeRateSchema(
        from_currency=Currency(from_code),
        to_currency=Currency(to_code),
        date=on,
        rate=rate,
    )


@router.post("/refresh", response_model=ExchangeRateSchema)
def refresh_exchange_rate(container: ServiceContainer = Depends(get_container)) -> ExchangeRateSchema:
    try:
        stored = container.exchange_rates.refresh_today_rate()
    except RateFetchError as exc:
        logger.error("Exchange rate refresh failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return ExchangeRateSchema.model_validate(stored)
