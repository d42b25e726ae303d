"""Pydantic schemas for exchange-rate endpoints."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field

from asset_manager.models import Currency


class ExchangeRateSchema(BaseModel):
    from_currency: Currency = Field(..., examples=["USD"])
    to_currency: Currency = Field(..., examples=["TWD"])
    date: dt.date
    rate: float

    class Config:
        from_attributes = True
