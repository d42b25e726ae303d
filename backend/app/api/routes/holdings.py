"""Holdings endpoints backed by the FIFO holdings service."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_container
from app.container import ServiceContainer
from app.schemas import HoldingListResponse, HoldingSchema, HoldingWarningSchema
from asset_manager.errors import HoldingNotFoundError, InsufficientQuantityError, RateNotFoundError
from asset_manager.models import AssetType, HoldingFilters, HoldingWarning

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=HoldingListResponse)
def list_holdings(
    asset_type: AssetType | None = Query(default=None, description="Restrict to one asset class"),
    symbol: str | None = Query(default=None, max_length=32),
    container: ServiceContainer = Depends(get_container),
) -> HoldingListResponse:
    filters = HoldingFilters(asset_type=asset_type, symbol=symbol or None)
    try:
        holdings, warnings = container.holdings.get_all_holdings(filters)
    except RateNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return HoldingListResponse(
        data=[HoldingSchema.model_validate(holding) for holding in holdings],
        warnings=[HoldingWarningSchema.model_validate(warning) for warning in warnings],
    )


@router.get("/{symbol}", response_model=HoldingSchema)
def get_holding(symbol: str, container: ServiceContainer = Depends(get_container)) -> HoldingSchema:
    try:
        holding = container.holdings.get_holding_by_symbol(symbol)
    except HoldingNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InsufficientQuantityError as exc:
        warning = HoldingWarning(
            symbol=exc.symbol,
            required=exc.required,
            available=exc.available,
            missing=exc.missing,
            message=str(exc),
        )
        logger.warning("Holding %s has inconsistent history: %s", symbol, exc)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=asdict(warning)) from exc
    except RateNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return HoldingSchema.model_validate(holding)
