"""Persisted exchange-rate history."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import Date, DateTime, Float, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from asset_manager.models import utc_now


class ExchangeRateRecord(Base):
    __tablename__ = "exchange_rate"
    __table_args__ = (
        UniqueConstraint("date", "from_currency", "to_currency", name="uq_exchange_rate_date_pair"),
        Index("ix_exchange_rate_pair", "from_currency", "to_currency", "date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date)
    from_currency: Mapped[str] = mapped_column(String(3))
    to_currency: Mapped[str] = mapped_column(String(3))
    rate: Mapped[float] = mapped_column(Float)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


__all__ = ["ExchangeRateRecord"]
