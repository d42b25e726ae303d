"""Allocation targets sourced from application settings."""

from __future__ import annotations

from app.config import AppSettings
from asset_manager.models import AllocationSettings


class SettingsAllocationSource:
    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings

    def get_allocation(self) -> AllocationSettings:
        return self.settings.allocation()


__all__ = ["SettingsAllocationSource"]
