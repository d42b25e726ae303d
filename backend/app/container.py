"""Explicit wiring of the core services for the running application."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import Engine

from app.config import AppSettings
from app.db.init import init_database
from app.db.session import create_db_engine, create_session_factory
from app.providers.taiwan_bank import TaiwanBankClient
from app.repositories import SqlPriceOracle, SqlRateHistory, SqlTransactionRepository
from app.services.allocation import SettingsAllocationSource
from asset_manager.fifo import FIFOCalculator
from asset_manager.fx import ExchangeRateService, InMemoryRateCache, LiveRateSource
from asset_manager.holdings import HoldingService, PriceStore, TransactionRepository
from asset_manager.rebalance import RebalanceService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: AppSettings
    engine: Engine
    exchange_rates: ExchangeRateService
    prices: PriceStore
    fifo: FIFOCalculator
    holdings: HoldingService
    rebalance: RebalanceService


def build_container(
    settings: AppSettings,
    *,
    engine: Engine | None = None,
    transaction_repository: TransactionRepository | None = None,
    price_oracle: PriceStore | None = None,
    live_source: LiveRateSource | None = None,
) -> ServiceContainer:
    """Construct every service once, sharing a single rate cache and engine.

    Collaborators not supplied fall back to the SQL repositories, the SQL price
    table and the Bank of Taiwan client.
    """

    if engine is None:
        engine = create_db_engine(settings.database_url)
    init_database(engine)
    session_factory = create_session_factory(engine)

    if live_source is None:
        live_source = TaiwanBankClient(
            settings.taiwan_bank_rate_url,
            timeout_seconds=settings.taiwan_bank_timeout_seconds,
        )
    exchange_rates = ExchangeRateService(
        SqlRateHistory(session_factory),
        cache=InMemoryRateCache(),
        live_source=live_source,
        cache_ttl_seconds=settings.exchange_rate_cache_ttl_seconds,
    )
    if price_oracle is None:
        price_oracle = SqlPriceOracle(
            session_factory,
            stale_after=timedelta(hours=settings.price_stale_after_hours),
        )
    if transaction_repository is None:
        transaction_repository = SqlTransactionRepository(session_factory)

    fifo = FIFOCalculator(exchange_rates)
    holdings = HoldingService(transaction_repository, fifo, price_oracle, exchange_rates)
    rebalance = RebalanceService(SettingsAllocationSource(settings), holdings)
    logger.info("Service container ready: %s", settings.dict_for_logging())
    return ServiceContainer(
        settings=settings,
        engine=engine,
        exchange_rates=exchange_rates,
        prices=price_oracle,
        fifo=fifo,
        holdings=holdings,
        rebalance=rebalance,
    )


__all__ = ["ServiceContainer", "build_container"]
