"""Prediction-market pipeline: fetch the event, pick one sub-market, price it, cache.

Fails safe: any failure yields a degraded snapshot with zero percentages, and a
well-formed event without a usable sub-market is a valid "no data" result.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Callable, Optional

from barometer.cache_store import CacheStore
from barometer.config import Settings
from barometer.data_sources import FeedSource
from barometer.domain import MarketSnapshot
from barometer.market_selection import (
    as_float,
    detect_big_trade,
    parse_outcome_prices,
    select_sub_market,
    sub_markets_of,
)
from barometer.pipelines.base import CachedPipeline, FailurePolicy
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="pipelines/market")

UNAVAILABLE_SUFFIX = " (Service Unavailable)"


class MarketPipeline(CachedPipeline[MarketSnapshot]):
    """Serves the current `MarketSnapshot`; never raises."""

    cache_key = "market_snapshot"
    failure_policy = FailurePolicy.FAIL_SAFE

    def __init__(
        self,
        source: FeedSource,
        cache: CacheStore,
        settings: Settings,
        *,
        now: Optional[Callable[[], dt.datetime]] = None,
    ) -> None:
        super().__init__(cache, ttl_seconds=settings.polymarket_cache_seconds)
        self.source = source
        self.settings = settings
        self._now = now or (lambda: dt.datetime.now(dt.timezone.utc))

    def get_market_snapshot(self) -> MarketSnapshot:
        return self.get()

    def _produce(self) -> MarketSnapshot:
        payload = self.source.fetch_market_event()
        snapshot = self.build_snapshot(payload)
        if not snapshot.has_data:
            logger.warning(
                "Could not derive market prices from event",
                extra={"slug": self.settings.polymarket_slug},
            )
        else:
            logger.info(
                "Market snapshot built",
                extra={
                    "yes_percent": snapshot.yes_percent,
                    "no_percent": snapshot.no_percent,
                    "big_trade_detected": snapshot.big_trade_detected,
                },
            )
        return snapshot

    def build_snapshot(self, payload: Any) -> MarketSnapshot:
        """Turn a Gamma `/events` payload into a snapshot; absent data gives zeros."""
        settings = self.settings
        snapshot = MarketSnapshot(market_title=settings.polymarket_title, slug=settings.polymarket_slug)

        if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
            logger.warning("Gamma returned no event for slug", extra={"slug": settings.polymarket_slug})
            return snapshot

        event = payload[0]
        snapshot.market_title = event.get("title") or settings.polymarket_title
        snapshot.volume = as_float(event.get("volume")) or 0.0

        markets = sub_markets_of(event)
        chosen = select_sub_market(
            markets,
            strategy=settings.market_selection,
            target_date=settings.market_target_date,
            now=self._now(),
        )
        if chosen is None:
            logger.warning(
                "No open sub-market qualifies",
                extra={"slug": settings.polymarket_slug, "sub_markets": len(markets)},
            )
            return snapshot

        if chosen.question:
            snapshot.market_title = chosen.question
        if chosen.volume_num is not None:
            snapshot.volume = chosen.volume_num

        prices = parse_outcome_prices(chosen.outcome_prices)
        if prices is not None:
            yes, no = prices
            snapshot.yes_percent = yes * 100
            snapshot.no_percent = no * 100

        snapshot.big_trade_detected = detect_big_trade(
            chosen,
            hourly_volume_threshold=settings.big_trade_volume_threshold,
            price_move_threshold=settings.big_trade_price_move,
        )
        return snapshot

    def _fallback(self) -> MarketSnapshot:
        return MarketSnapshot(
            market_title=f"{self.settings.polymarket_title}{UNAVAILABLE_SUFFIX}",
            slug=self.settings.polymarket_slug,
        )
