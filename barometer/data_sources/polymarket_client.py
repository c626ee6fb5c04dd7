"""Helper for fetching prediction-market events from the Polymarket Gamma API."""
from __future__ import annotations

from typing import Any

import requests

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="polymarket_client")

session = requests.Session()

GAMMA_EVENTS_URL = "https://gamma-api.polymarket.com/events"


def fetch_event(slug: str, *, url: str = GAMMA_EVENTS_URL, timeout: float = 10) -> Any:
    """Fetch the event identified by `slug` with all of its sub-markets.

    Gamma answers with a JSON array that holds the matching event (or nothing).
    """
    resp = session.get(url, params={"slug": slug}, headers={"Accept": "application/json"}, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()
    logger.debug(
        "Fetched Gamma event",
        extra={"slug": slug, "events": len(data) if isinstance(data, list) else None},
    )
    return data
