"""Configuration for sieledger."""

from sieledger.config.settings import Settings, get_settings
from sieledger.config.logging import configure_logging, get_logger

__all__ = ["Settings", "get_settings", "configure_logging", "get_logger"]
