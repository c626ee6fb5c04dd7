"""Helper for fetching the Home Front Command civil-alert feed."""
from __future__ import annotations

from dataclasses import dataclass

import requests

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="oref_client")

session = requests.Session()

# The feed rejects requests that do not look like they come from its own site.
OREF_HEADERS = {
    "Accept": "application/json",
    "Accept-Language": "he-IL,he;q=0.9,en-US;q=0.8,en;q=0.7",
    "Referer": "https://www.oref.org.il/",
    "X-Requested-With": "XMLHttpRequest",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}


@dataclass
class AlertFeedResponse:
    """Raw alert feed answer; the body is decoded but not parsed."""
    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def fetch_alert_feed(url: str, *, timeout: float = 10) -> AlertFeedResponse:
    """Fetch the alert feed body.

    Non-success status codes are returned rather than raised: the caller
    treats them as "no alerts". Transport errors propagate.
    """
    resp = session.get(url, headers=OREF_HEADERS, timeout=timeout)
    # The feed is served as UTF-8 (often with a BOM) but rarely declares it.
    resp.encoding = "utf-8"
    logger.debug("Fetched alert feed", extra={"status_code": resp.status_code, "bytes": len(resp.content or b"")})
    return AlertFeedResponse(status_code=resp.status_code, body=resp.text or "")
