"""Interfaces and helpers for upstream feed sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol

from barometer.data_sources.oref_client import AlertFeedResponse


class FeedSource(Protocol):
    """Interface for anything that can provide the three raw feeds."""

    def fetch_alerts(self) -> AlertFeedResponse:
        """Return the raw civil-alert feed answer."""
        ...

    def fetch_market_event(self) -> Any:
        """Return the decoded prediction-market event payload."""
        ...

    def fetch_forecast(self) -> Mapping[str, Any]:
        """Return the decoded weather-forecast payload."""
        ...


@dataclass
class CallableFeedSource(FeedSource):
    """Wrap three zero-argument callables so they can be swapped in tests."""

    alerts: Callable[[], AlertFeedResponse]
    market_event: Callable[[], Any]
    forecast: Callable[[], Mapping[str, Any]]

    def fetch_alerts(self) -> AlertFeedResponse:
        """Delegate to the configured alert-feed callable."""
        return self.alerts()

    def fetch_market_event(self) -> Any:
        """Delegate to the configured market-event callable."""
        return self.market_event()

    def fetch_forecast(self) -> Mapping[str, Any]:
        """Delegate to the configured forecast callable."""
        return self.forecast()
