"""Factory helpers for binding the live feed clients to settings at startup."""

from __future__ import annotations

from functools import partial

from barometer import config
from barometer.data_sources.base import CallableFeedSource, FeedSource
from barometer.data_sources.oref_client import fetch_alert_feed
from barometer.data_sources.openweather_client import fetch_forecast
from barometer.data_sources.polymarket_client import fetch_event
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


def build_feed_source(settings: config.Settings) -> FeedSource:
    """Bind each live client to its configured URL, parameters and timeout."""
    timeout = settings.http_timeout_seconds
    if not settings.openweather_api_key:
        logger.warning("BAROMETER_OPENWEATHER_API_KEY is not set; forecast requests will be rejected upstream")
    logger.info(
        "Using live feed sources",
        extra={"slug": settings.polymarket_slug, "timeout": timeout},
    )
    return CallableFeedSource(
        alerts=partial(fetch_alert_feed, settings.alert_feed_url, timeout=timeout),
        market_event=partial(
            fetch_event,
            settings.polymarket_slug,
            url=settings.polymarket_events_url,
            timeout=timeout,
        ),
        forecast=partial(
            fetch_forecast,
            settings.weather_latitude,
            settings.weather_longitude,
            api_key=settings.openweather_api_key,
            count=settings.weather_forecast_count,
            url=settings.openweather_url,
            timeout=timeout,
        ),
    )
