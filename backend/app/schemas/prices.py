"""Pydantic schemas for recorded market prices."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from asset_manager.models import AssetType, Currency


class PriceUpdateRequest(BaseModel):
    asset_type: AssetType = Field(..., examples=["us-stock"])
    price: float = Field(..., gt=0)
    currency: Currency | None = Field(
        default=None, description="Quote currency, defaults to the asset class currency"
    )


class PriceSchema(BaseModel):
    symbol: str
    asset_type: AssetType
    price: float
    currency: Currency
    updated_at: datetime
    source: str
    is_stale: bool = False
    stale_reason: str | None = None

    class Config:
        from_attributes = True
