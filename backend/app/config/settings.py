"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from app.providers.taiwan_bank import DEFAULT_RATE_URL
from asset_manager.models import AllocationSettings

DEFAULT_REPORTING_CURRENCY = "TWD"
DEFAULT_TAIWAN_BANK_RATE_URL = DEFAULT_RATE_URL


class AppSettings(BaseSettings):
    """Configuration options for the asset manager service."""

    app_name: str = Field(default="Asset Manager")
    log_level: str = Field(default="INFO")
    reporting_currency: str = Field(default=DEFAULT_REPORTING_CURRENCY)

    database_url: str = Field(
        default="sqlite:///./asset_manager.db",
        description="SQLAlchemy database URL.",
    )

    exchange_rate_cache_ttl_seconds: int = Field(default=24 * 60 * 60, gt=0)
    taiwan_bank_rate_url: str = Field(default=DEFAULT_TAIWAN_BANK_RATE_URL)
    taiwan_bank_timeout_seconds: float = Field(default=10.0, gt=0)

    price_stale_after_hours: float = Field(
        default=24.0,
        gt=0,
        description="Recorded prices older than this are served but flagged stale.",
    )

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="asset-manager")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    target_allocation_tw_stock: float = Field(default=40.0, ge=0, le=100)
    target_allocation_us_stock: float = Field(default=40.0, ge=0, le=100)
    target_allocation_crypto: float = Field(default=20.0, ge=0, le=100)
    rebalance_threshold: float = Field(
        default=5.0,
        ge=0,
        description="Maximum tolerated drift in percentage points before suggesting trades.",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @model_validator(mode="after")
    def _check_allocation_total(self) -> "AppSettings":
        total = self.target_allocation_tw_stock + self.target_allocation_us_stock + self.target_allocation_crypto
        if abs(total - 100) > 0.01:
            raise ValueError(f"allocation percentages must sum to 100, got {total:.2f}")
        return self

    def allocation(self) -> AllocationSettings:
        return AllocationSettings(
            tw_stock=self.target_allocation_tw_stock,
            us_stock=self.target_allocation_us_stock,
            crypto=self.target_allocation_crypto,
            rebalance_threshold=self.rebalance_threshold,
        )

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"database_url"}
        return {k: ("***" if k in hidden else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_REPORTING_CURRENCY",
    "DEFAULT_TAIWAN_BANK_RATE_URL",
    "get_settings",
]
