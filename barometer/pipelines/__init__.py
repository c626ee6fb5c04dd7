"""Per-feed fetch/normalize/cache pipelines."""

from .alerts import AlertPipeline
from .base import CachedPipeline, FailurePolicy
from .market import MarketPipeline
from .weather import WeatherPipeline

__all__ = [
    "AlertPipeline",
    "CachedPipeline",
    "FailurePolicy",
    "MarketPipeline",
    "WeatherPipeline",
]
