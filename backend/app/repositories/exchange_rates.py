"""SQLAlchemy-backed exchange-rate history."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from app.models import ExchangeRateRecord
from asset_manager.models import Currency, ExchangeRate


def _to_domain(record: ExchangeRateRecord) -> ExchangeRate:
    return ExchangeRate(
        from_currency=Currency(record.from_currency),
        to_currency=Currency(record.to_currency),
        rate=record.rate,
        date=record.date,
    )


class SqlRateHistory:
    """Rate history stored in the ``exchange_rate`` table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_by_date(self, from_currency: Currency, to_currency: Currency, on: dt.date) -> ExchangeRate | None:
        stmt = select(ExchangeRateRecord).where(
            ExchangeRateRecord.from_currency == Currency(from_currency).value,
            ExchangeRateRecord.to_currency == Currency(to_currency).value,
            ExchangeRateRecord.date == on,
        )
        with self._session_factory() as session:
            record = session.execute(stmt).scalars().first()
            return _to_domain(record) if record is not None else None

    def get_latest_before(
        self, from_currency: Currency, to_currency: Currency, on: dt.date
    ) -> ExchangeRate | None:
        stmt = (
            select(ExchangeRateRecord)
            .where(
                ExchangeRateRecord.from_currency == Currency(from_currency).value,
                ExchangeRateRecord.to_currency == Currency(to_currency).value,
                ExchangeRateRecord.date < on,
            )
            .order_by(ExchangeRateRecord.date.desc())
            .limit(1)
        )
        with self._session_factory() as session:
            record = session.execute(stmt).scalars().first()
            return _to_domain(record) if record is not None else None

    def upsert(self, rate: ExchangeRate) -> ExchangeRate:
        from_ccy = Currency(rate.from_currency).value
        to_ccy = Currency(rate.to_currency).value
        with self._session_factory() as session:
            record = (
                session.execute(
                    select(ExchangeRateRecord).where(
                        ExchangeRateRecord.from_currency == from_ccy,
                        ExchangeRateRecord.to_currency == to_ccy,
                        ExchangeRateRecord.date == rate.date,
                    )
                )
                .scalars()
                .first()
            )
            if record is None:
                record = ExchangeRateRecord(
                    date=rate.date, from_currency=from_ccy, to_currency=to_ccy, rate=rate.rate
                )
                session.add(record)
            else:
                record.rate = rate.rate
            session.commit()
            return _to_domain(record)


__all__ = ["SqlRateHistory"]
