"""Price table used as the service's price oracle."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from app.models import PriceRecord
from asset_manager.errors import PriceLookupError
from asset_manager.models import AssetType, Currency, Price, currency_for_asset_type, utc_now

logger = logging.getLogger(__name__)


def _as_utc(value: dt.datetime) -> dt.datetime:
    # sqlite hands back naive datetimes even for timezone-aware columns
    return value if value.tzinfo is not None else value.replace(tzinfo=dt.timezone.utc)


class SqlPriceOracle:
    """Serve prices recorded in the ``price`` table.

    Quotes older than ``stale_after`` are still returned but flagged stale, so
    holdings keep a valuation while callers can see it needs refreshing.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        stale_after: dt.timedelta | None = None,
        clock=utc_now,
    ) -> None:
        self._session_factory = session_factory
        self.stale_after = stale_after
        self._clock = clock

    def get_price(self, symbol: str, asset_type: AssetType) -> Price:
        with self._session_factory() as session:
            record = session.get(PriceRecord, symbol)
            if record is None:
                raise PriceLookupError(f"No price recorded for symbol {symbol}")
            return self._to_domain(record, asset_type)

    def get_prices(self, symbols: Sequence[str], asset_types: Mapping[str, AssetType]) -> dict[str, Price]:
        if not symbols:
            return {}
        stmt = select(PriceRecord).where(PriceRecord.symbol.in_(list(symbols)))
        with self._session_factory() as session:
            records = session.execute(stmt).scalars().all()
            prices = {
                record.symbol: self._to_domain(record, asset_types.get(record.symbol, record.asset_type))
                for record in records
            }
        missing = sorted(set(symbols) - set(prices))
        if missing:
            logger.debug("No recorded price for %s", ", ".join(missing))
        return prices

    def set_price(
        self,
        symbol: str,
        asset_type: AssetType,
        price: float,
        *,
        currency: Currency | None = None,
        source: str = "manual",
    ) -> Price:
        """Record the latest price for ``symbol``, replacing any earlier quote."""

        if price <= 0:
            raise ValueError("price must be positive")
        currency = Currency(currency) if currency is not None else currency_for_asset_type(asset_type)
        now = self._clock()
        with self._session_factory() as session:
            record = session.get(PriceRecord, symbol)
            if record is None:
                record = PriceRecord(symbol=symbol)
                session.add(record)
            record.asset_type = asset_type
            record.price = price
            record.currency = currency
            record.source = source
            record.updated_at = now
            session.commit()
            logger.info("Recorded %s price for %s: %.4f", currency.value, symbol, price)
            return self._to_domain(record, asset_type)

    def _to_domain(self, record: PriceRecord, asset_type: AssetType) -> Price:
        updated_at = _as_utc(record.updated_at)
        is_stale = False
        stale_reason = None
        if self.stale_after is not None and self._clock() - updated_at > self.stale_after:
            is_stale = True
            stale_reason = f"Price last updated {updated_at.isoformat()}"
        return Price(
            symbol=record.symbol,
            asset_type=asset_type,
            price=record.price,
            currency=Currency(record.currency),
            updated_at=updated_at,
            source=record.source,
            is_stale=is_stale,
            stale_reason=stale_reason,
        )


__all__ = ["SqlPriceOracle"]
