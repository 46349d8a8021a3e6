"""
Config helpers for keyword harvesting.
"""

from app.scraping.config.loader import get_harvest_settings, load_visibility_patterns
from app.scraping.config.models import (
    ApiFieldPaths,
    HarvestMode,
    HarvestSettings,
    NetworkIdleSettings,
)

__all__ = [
    "ApiFieldPaths",
    "HarvestMode",
    "HarvestSettings",
    "NetworkIdleSettings",
    "get_harvest_settings",
    "load_visibility_patterns",
]
