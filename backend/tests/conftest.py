import asyncio
import inspect
import pathlib
import sys
from datetime import date

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from asset_manager.fifo import FIFOCalculator  # noqa: E402
from asset_manager.fx import ExchangeRateService, InMemoryRateCache, InMemoryRateHistory  # noqa: E402
from asset_manager.models import Currency  # noqa: E402

TODAY = date(2024, 6, 3)

USD_TWD_RATES = {
    date(2024, 1, 2): 30.0,
    date(2024, 3, 1): 31.0,
    date(2024, 5, 2): 32.0,
}


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            loop.run_until_complete(test_function(**pyfuncitem.funcargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


@pytest.fixture
def rate_history() -> InMemoryRateHistory:
    return InMemoryRateHistory(
        {(day, Currency.USD, Currency.TWD): rate for day, rate in USD_TWD_RATES.items()}
    )


@pytest.fixture
def rate_cache() -> InMemoryRateCache:
    return InMemoryRateCache()


@pytest.fixture
def exchange_rates(rate_history: InMemoryRateHistory, rate_cache: InMemoryRateCache) -> ExchangeRateService:
    return ExchangeRateService(rate_history, cache=rate_cache, today=lambda: TODAY)


@pytest.fixture
def fifo(exchange_rates: ExchangeRateService) -> FIFOCalculator:
    return FIFOCalculator(exchange_rates)
