"""Manually recorded market prices."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_container
from app.container import ServiceContainer
from app.schemas import PriceSchema, PriceUpdateRequest
from asset_manager.errors import PriceLookupError
from asset_manager.models import AssetType

router = APIRouter()


@router.get("/{symbol}", response_model=PriceSchema)
def get_price(
    symbol: str,
    asset_type: AssetType = Query(...),
    container: ServiceContainer = Depends(get_container),
) -> PriceSchema:
    try:
        price = container.prices.get_price(symbol, asset_type)
    except PriceLookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return PriceSchema.model_validate(price)


@router.put("/{symbol}", response_model=PriceSchema)
def put_price(
    symbol: str,
    payload: PriceUpdateRequest,
    container: ServiceContainer = Depends(get_container),
) -> PriceSchema:
    price = container.prices.set_price(
        symbol,
        payload.asset_type,
        payload.price,
        currency=payload.currency,
    )
    return PriceSchema.model_validate(price)
