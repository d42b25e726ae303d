"""FX conversion helpers.

Rates are resolved through a cache, the persisted rate history, a live refresh
for today's date and finally the most recent rate known before the requested
date. Only the canonical USD -> TWD direction is ever stored; TWD -> USD is
derived as its reciprocal.
"""
from __future__ import annotations

import logging
import threading
import time
from datetime import date
from typing import Callable, Dict, Optional, Protocol, Tuple

from .errors import RateFetchError, RateNotFoundError, UnsupportedPairError
from .models import Currency, ExchangeRate, REPORTING_CURRENCY

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 24 * 60 * 60

_CANONICAL_PAIR = (Currency.USD, Currency.TWD)


class RateCache(Protocol):
    """Key/value store for resolved rates."""

    def get(self, key: str) -> Optional[float]:
        ...

    def set(self, key: str, value: float, ttl_seconds: int) -> None:
        ...


class RateHistory(Protocol):
    """Persisted exchange-rate time series."""

    def get_by_date(self, from_currency: Currency, to_currency: Currency, on: date) -> Optional[ExchangeRate]:
        ...

    def get_latest_before(
        self, from_currency: Currency, to_currency: Currency, on: date
    ) -> Optional[ExchangeRate]:
        ...

    def upsert(self, rate: ExchangeRate) -> ExchangeRate:
        ...


class LiveRateSource(Protocol):
    """Upstream that quotes the current USD -> TWD rate."""

    def fetch_usd_twd(self) -> float:
        ...


class InMemoryRateCache:
    """Process-local TTL cache; safe to share between request threads."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[float, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[float]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: float, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)


class InMemoryRateHistory:
    """Simple rate history for tests and standalone use."""

    def __init__(self, rates: Optional[Dict[Tuple[date, Currency, Currency], float]] = None) -> None:
        self._rates: Dict[Tuple[date, Currency, Currency], float] = dict(rates or {})

    def get_by_date(self, from_currency: Currency, to_currency: Currency, on: date) -> Optional[ExchangeRate]:
        rate = self._rates.get((on, from_currency, to_currency))
        if rate is None:
            return None
        return ExchangeRate(from_currency, to_currency, rate, on)

    def get_latest_before(
        self, from_currency: Currency, to_currency: Currency, on: date
    ) -> Optional[ExchangeRate]:
        candidates = [
            d
            for (d, from_ccy, to_ccy) in self._rates
            if from_ccy == from_currency and to_ccy == to_currency and d < on
        ]
        if not candidates:
            return None
        latest = max(candidates)
        return ExchangeRate(from_currency, to_currency, self._rates[(latest, from_currency, to_currency)], latest)

    def upsert(self, rate: ExchangeRate) -> ExchangeRate:
        self._rates[(rate.date, rate.from_currency, rate.to_currency)] = rate.rate
        return rate


def is_supported_pair(from_currency: Currency, to_currency: Currency) -> bool:
    return {from_currency, to_currency} == set(_CANONICAL_PAIR)


def _code(currency) -> str:
    return str(getattr(currency, "value", currency))


def _cache_key(on: date) -> str:
    from_ccy, to_ccy = _CANONICAL_PAIR
    return f"exchange_rate:{from_ccy.value}:{to_ccy.value}:{on.isoformat()}"


class ExchangeRateService:
    """Currency conversion oracle backed by cache, history and a live source."""

    def __init__(
        self,
        history: RateHistory,
        *,
        cache: Optional[RateCache] = None,
        live_source: Optional[LiveRateSource] = None,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.history = history
        self.cache = cache
        self.live_source = live_source
        self.cache_ttl_seconds = cache_ttl_seconds
        self._today = today

    def get_rate(self, from_currency: Currency, to_currency: Currency, on: date) -> float:
        """Return the conversion rate from ``from_currency`` to ``to_currency`` on ``on``."""

        try:
            from_currency = Currency(from_currency)
            to_currency = Currency(to_currency)
        except ValueError as exc:
            raise UnsupportedPairError(_code(from_currency), _code(to_currency)) from exc
        if from_currency == to_currency:
            return 1.0
        if not is_supported_pair(from_currency, to_currency):
            raise UnsupportedPairError(from_currency.value, to_currency.value)

        rate = self._resolve_canonical_rate(on)
        if rate is None:
            raise RateNotFoundError(from_currency.value, to_currency.value, on)
        if (from_currency, to_currency) != _CANONICAL_PAIR:
            return 1.0 / rate
        return rate

    def today(self) -> date:
        return self._today()

    def get_today_rate(self, from_currency: Currency, to_currency: Currency) -> float:
        return self.get_rate(from_currency, to_currency, self._today())

    def refresh_today_rate(self) -> ExchangeRate:
        """Fetch today's USD/TWD rate from the live source and persist it."""

        if self.live_source is None:
            raise RateFetchError("No live exchange-rate source configured")
        today = self._today()
        fetched = self.live_source.fetch_usd_twd()
        stored = self.history.upsert(ExchangeRate(_CANONICAL_PAIR[0], _CANONICAL_PAIR[1], fetched, today))
        self._cache_set(today, stored.rate)
        logger.info("Refreshed USD/TWD rate for %s: %.4f", today.isoformat(), stored.rate)
        return stored

    def convert_to_twd(self, amount: float, currency: Currency, on: date) -> float:
        """Convert ``amount`` in ``currency`` to the reporting currency."""

        if Currency(currency) == REPORTING_CURRENCY:
            return amount
        return amount * self.get_rate(currency, REPORTING_CURRENCY, on)

    def _resolve_canonical_rate(self, on: date) -> Optional[float]:
        from_ccy, to_ccy = _CANONICAL_PAIR

        cached = self._cache_get(on)
        if cached is not None:
            logger.debug("Exchange rate cache hit for %s: %.4f", on.isoformat(), cached)
            return cached

        record = self.history.get_by_date(from_ccy, to_ccy, on)
        if record is not None:
            self._cache_set(on, record.rate)
            return record.rate

        if on == self._today() and self.live_source is not None:
            try:
                self.refresh_today_rate()
            except RateFetchError as exc:
                logger.warning("Live USD/TWD refresh failed, falling back to history: %s", exc)
            else:
                record = self.history.get_by_date(from_ccy, to_ccy, on)
                if record is not None:
                    return record.rate

        previous = self.history.get_latest_before(from_ccy, to_ccy, on)
        if previous is not None:
            logger.info(
                "Using last known USD/TWD rate %.4f from %s for %s",
                previous.rate,
                previous.date.isoformat(),
                on.isoformat(),
            )
            return previous.rate
        return None

    def _cache_get(self, on: date) -> Optional[float]:
        if self.cache is None:
            return None
        return self.cache.get(_cache_key(on))

    def _cache_set(self, on: date, rate: float) -> None:
        if self.cache is not None:
            self.cache.set(_cache_key(on), rate, self.cache_ttl_seconds)


__all__ = [
    "DEFAULT_CACHE_TTL_SECONDS",
    "RateCache",
    "RateHistory",
    "LiveRateSource",
    "InMemoryRateCache",
    "InMemoryRateHistory",
    "ExchangeRateService",
    "is_supported_pair",
]
