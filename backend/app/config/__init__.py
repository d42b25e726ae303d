"""Configuration package for the asset manager service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
