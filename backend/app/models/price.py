"""Latest known market price per symbol."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import DateTime, Enum, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from asset_manager.models import AssetType, Currency, utc_now


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class PriceRecord(Base):
    __tablename__ = "price"

    symbol: Mapped[str] = mapped_column(String(20), primary_key=True)
    asset_type: Mapped[AssetType] = mapped_column(
        Enum(AssetType, name="price_asset_type", values_callable=_enum_values)
    )
    price: Mapped[float] = mapped_column(Float)
    currency: Mapped[Currency] = mapped_column(
        Enum(Currency, name="price_currency", values_callable=_enum_values)
    )
    source: Mapped[str] = mapped_column(String(32), default="manual")
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


__all__ = ["PriceRecord"]
