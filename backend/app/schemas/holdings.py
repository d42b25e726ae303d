"""Pydantic schemas for holdings responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from asset_manager.models import AssetType, Currency


class HoldingWarningSchema(BaseModel):
    code: str
    symbol: str
    required: float
    available: float
    missing: float
    message: str

    class Config:
        from_attributes = True


class HoldingSchema(BaseModel):
    symbol: str
    name: str
    asset_type: AssetType
    quantity: float
    avg_cost: float
    avg_cost_original: float
    total_cost: float
    total_cost_original: float
    currency: Currency
    current_price: float
    current_price_twd: float
    market_value: float
    unrealized_pl: float
    unrealized_pl_pct: float
    last_updated: datetime
    price_source: str | None = None
    is_price_stale: bool = False
    price_stale_reason: str | None = None

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "symbol": "AAPL",
                "name": "Apple Inc.",
                "asset_type": "us-stock",
                "quantity": 10,
                "avg_cost": 4650.0,
                "avg_cost_original": 150.0,
                "total_cost": 46500.0,
                "total_cost_original": 1500.0,
                "currency": "USD",
                "current_price": 180.0,
                "current_price_twd": 5760.0,
                "market_value": 57600.0,
                "unrealized_pl": 11100.0,
                "unrealized_pl_pct": 23.87,
                "last_updated": "2024-06-01T08:00:00",
                "price_source": "api",
                "is_price_stale": False,
                "price_stale_reason": None,
            }
        }


class HoldingListResponse(BaseModel):
    data: list[HoldingSchema]
    warnings: list[HoldingWarningSchema] = []
