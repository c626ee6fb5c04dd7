"""Upstream feed clients and the source abstraction the pipelines depend on."""

from .base import CallableFeedSource, FeedSource
from .factory import build_feed_source
from .oref_client import AlertFeedResponse, fetch_alert_feed
from .openweather_client import fetch_forecast, parse_forecast_points
from .polymarket_client import fetch_event

__all__ = [
    "build_feed_source",
    "FeedSource",
    "CallableFeedSource",
    "AlertFeedResponse",
    "fetch_alert_feed",
    "fetch_event",
    "fetch_forecast",
    "parse_forecast_points",
]
