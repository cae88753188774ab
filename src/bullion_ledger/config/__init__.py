"""Configuration module for Bullion Ledger."""

from bullion_ledger.config.logging import configure_logging
from bullion_ledger.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "configure_logging"]
