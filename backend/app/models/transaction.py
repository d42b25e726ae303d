"""Recorded portfolio transactions."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import Date, DateTime, Enum, Float, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from asset_manager.models import AssetType, Currency, TransactionType, utc_now


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class TransactionRecord(Base):
    __tablename__ = "transaction"
    __table_args__ = (
        Index("ix_transaction_symbol_date", "symbol", "date"),
        Index("ix_transaction_asset_type", "asset_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    asset_type: Mapped[AssetType] = mapped_column(
        Enum(AssetType, name="asset_type", values_callable=_enum_values)
    )
    symbol: Mapped[str] = mapped_column(String(20))
    name: Mapped[str] = mapped_column(String(128), default="")
    transaction_type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, name="transaction_type", values_callable=_enum_values)
    )
    quantity: Mapped[float] = mapped_column(Float)
    price: Mapped[float] = mapped_column(Float)
    amount: Mapped[float] = mapped_column(Float, default=0)
    fee: Mapped[float | None] = mapped_column(Float, nullable=True)
    tax: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[Currency] = mapped_column(
        Enum(Currency, name="currency", values_callable=_enum_values)
    )
    note: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


__all__ = ["TransactionRecord"]
