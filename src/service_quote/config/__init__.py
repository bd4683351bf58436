"""Configuration module for the service quote engine."""

from service_quote.config.logging import configure_logging
from service_quote.config.settings import FlatSettings, get_settings

__all__ = ["FlatSettings", "get_settings", "configure_logging"]
