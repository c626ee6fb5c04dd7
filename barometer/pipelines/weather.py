"""Weather pipeline: fetch the forecast for the configured location, map, cache.

Unlike the alert and market pipelines this one propagates failures: a missing
forecast is shown as unavailable rather than masked by a default.
"""
from __future__ import annotations

from barometer.cache_store import CacheStore
from barometer.config import Settings
from barometer.data_sources import FeedSource, parse_forecast_points
from barometer.domain import ForecastResult
from barometer.pipelines.base import CachedPipeline, FailurePolicy
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="pipelines/weather")


class WeatherPipeline(CachedPipeline[ForecastResult]):
    """Serves the `ForecastResult`; raises on transport, protocol or payload failure."""

    cache_key = "weather_forecast"
    failure_policy = FailurePolicy.PROPAGATE

    def __init__(self, source: FeedSource, cache: CacheStore, settings: Settings) -> None:
        super().__init__(cache, ttl_seconds=settings.weather_cache_seconds)
        self.source = source
        self.location = settings.weather_location

    def get_forecast(self) -> ForecastResult:
        return self.get()

    def _produce(self) -> ForecastResult:
        payload = self.source.fetch_forecast()
        points = parse_forecast_points(payload)
        logger.info("Forecast fetched", extra={"location": self.location, "points": len(points)})
        return ForecastResult(location=self.location, forecasts=points)
