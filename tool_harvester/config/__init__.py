"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import FetchSettings, HarvestConfig, ScrapingSource, SourceType

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "FetchSettings",
    "HarvestConfig",
    "ScrapingSource",
    "SourceType",
]
