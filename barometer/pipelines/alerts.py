"""Civil-alert pipeline: fetch, classify, cache.

Fails safe: an outage or an unreadable feed must never manufacture a false
major alert, so every failure ends in `Safe` with `has_any_alert=False`.
"""
from __future__ import annotations

from barometer.alert_classifier import build_alert_status, is_empty_body, parse_alert_payload
from barometer.cache_store import CacheStore
from barometer.config import Settings
from barometer.data_sources import FeedSource
from barometer.domain import AlertStatus, Severity
from barometer.pipelines.base import CachedPipeline, FailurePolicy
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="pipelines/alerts")


class AlertPipeline(CachedPipeline[AlertStatus]):
    """Serves the current `AlertStatus`; never raises."""

    cache_key = "alert_status"
    failure_policy = FailurePolicy.FAIL_SAFE

    def __init__(self, source: FeedSource, cache: CacheStore, settings: Settings) -> None:
        super().__init__(cache, ttl_seconds=settings.alert_cache_seconds)
        self.source = source
        self.major_regions = dict(settings.major_regions)
        self.translations = settings.translation_table()

    def get_alert_status(self) -> AlertStatus:
        return self.get()

    def _produce(self) -> AlertStatus:
        resp = self.source.fetch_alerts()

        if not resp.ok:
            logger.warning("Alert feed returned non-success status; treating as no alerts",
                           extra={"status_code": resp.status_code})
            return AlertStatus(severity=Severity.SAFE, has_any_alert=False)

        if is_empty_body(resp.body):
            status = AlertStatus(severity=Severity.SAFE, has_any_alert=False)
        else:
            outcome = parse_alert_payload(resp.body)
            status = build_alert_status(outcome, self.major_regions, self.translations)

        logger.info(
            "Alert status classified",
            extra={
                "severity": status.severity.value,
                "active_cities": len(status.active_cities),
                "matched_major_cities": status.matched_major_cities,
            },
        )
        return status

    def _fallback(self) -> AlertStatus:
        return AlertStatus(severity=Severity.SAFE, has_any_alert=False)
