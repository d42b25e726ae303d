"""Application-level services wired around the core."""

from .allocation import SettingsAllocationSource

__all__ = ["SettingsAllocationSource"]
