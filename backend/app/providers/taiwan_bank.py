"""Client for the Bank of Taiwan daily exchange-rate CSV."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass

import httpx

from asset_manager.errors import RateFetchError

DEFAULT_RATE_URL = "https://rate.bot.com.tw/xrt/flcsv/0/day"


@dataclass(frozen=True)
class TaiwanBankRate:
    currency: str
    cash_buy: float
    cash_sell: float
    spot_buy: float
    spot_sell: float
    updated: str


def _parse_rate(raw: str) -> float:
    value = raw.strip().replace(",", "")
    if value in ("", "-"):
        return 0.0
    try:
        return float(value)
    except ValueError:
        return 0.0


def parse_rate_table(text: str) -> dict[str, TaiwanBankRate]:
    """Parse the bank's CSV body into rates keyed by currency code.

    The first row is a header. Data rows are
    ``date, currency, cash buy, cash sell, spot buy, spot sell``; shorter rows are skipped.
    """

    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    if next(reader, None) is None:
        raise RateFetchError("Taiwan Bank rate table is empty")

    rates: dict[str, TaiwanBankRate] = {}
    for row in reader:
        if len(row) < 6:
            continue
        currency = row[1].strip()
        rates[currency] = TaiwanBankRate(
            currency=currency,
            cash_buy=_parse_rate(row[2]),
            cash_sell=_parse_rate(row[3]),
            spot_buy=_parse_rate(row[4]),
            spot_sell=_parse_rate(row[5]),
            updated=row[0].strip(),
        )
    return rates


class TaiwanBankClient:
    """Fetch the current USD/TWD quote published by the Bank of Taiwan."""

    def __init__(
        self,
        url: str = DEFAULT_RATE_URL,
        *,
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._client = client

    def get_exchange_rates(self) -> dict[str, TaiwanBankRate]:
        try:
            if self._client is not None:
                response = self._client.get(self.url, timeout=self.timeout_seconds)
            else:
                with httpx.Client(timeout=self.timeout_seconds) as client:
                    response = client.get(self.url)
        except httpx.HTTPError as exc:
            raise RateFetchError(f"Failed to reach Taiwan Bank: {exc}") from exc

        if response.status_code != 200:
            raise RateFetchError(f"Taiwan Bank returned unexpected status code {response.status_code}")
        try:
            return parse_rate_table(response.text)
        except csv.Error as exc:
            raise RateFetchError(f"Taiwan Bank returned an unreadable rate table: {exc}") from exc

    def fetch_usd_twd(self) -> float:
        """Return the USD spot selling rate, falling back to the cash selling rate."""

        rates = self.get_exchange_rates()
        usd = rates.get("USD")
        if usd is None:
            raise RateFetchError("USD rate not found in Taiwan Bank table")
        if usd.spot_sell > 0:
            return usd.spot_sell
        if usd.cash_sell > 0:
            return usd.cash_sell
        raise RateFetchError("No valid USD rate in Taiwan Bank table")


__all__ = ["DEFAULT_RATE_URL", "TaiwanBankClient", "TaiwanBankRate", "parse_rate_table"]
