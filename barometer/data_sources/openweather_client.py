"""Helper for fetching the OpenWeatherMap 3-hourly forecast."""
from __future__ import annotations

import datetime as dt
from typing import Any, List, Mapping, Optional

import requests

from barometer.domain import ForecastPoint
from barometer.errors import FeedPayloadError
from utils.logging_utils import get_tagged_logger, mask_url_secrets
logger = get_tagged_logger(__name__, tag="openweather_client")

session = requests.Session()

OPENWEATHER_FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"

DEFAULT_DESCRIPTION = "Unknown"
DEFAULT_ICON = "01d"


def fetch_forecast(
    latitude: float,
    longitude: float,
    *,
    api_key: Optional[str],
    count: int = 8,
    units: str = "metric",
    url: str = OPENWEATHER_FORECAST_URL,
    timeout: float = 10,
) -> Mapping[str, Any]:
    """Fetch the raw forecast payload for the given coordinates."""
    params = {
        "lat": latitude,
        "lon": longitude,
        "units": units,
        "cnt": count,
    }
    if api_key:
        params["appid"] = api_key

    resp = session.get(url, params=params, timeout=timeout)
    if not resp.ok:
        logger.warning(
            "OpenWeatherMap returned an error status",
            extra={"status_code": resp.status_code, "url": mask_url_secrets(resp.url or url)},
        )
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, dict):
        raise FeedPayloadError("openweather", f"expected a JSON object, got {type(data).__name__}")
    return data


def _number(section: Any, key: str) -> float:
    """Numeric field of a nested section, 0 when the section or field is absent."""
    if not isinstance(section, dict):
        return 0.0
    value = section.get(key)
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        raise FeedPayloadError("openweather", f"non-numeric {key!r}: {value!r}") from None


def parse_forecast_points(payload: Mapping[str, Any]) -> List[ForecastPoint]:
    """Map each forecast entry to a `ForecastPoint`, keeping upstream order."""
    items = payload.get("list")
    if items is None:
        return []
    if not isinstance(items, list):
        raise FeedPayloadError("openweather", "'list' is not an array")

    out: List[ForecastPoint] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict) or item.get("dt") is None:
            raise FeedPayloadError("openweather", f"forecast entry {i} has no 'dt'")
        try:
            timestamp = dt.datetime.fromtimestamp(int(item["dt"]), tz=dt.timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError):
            raise FeedPayloadError("openweather", f"forecast entry {i} has invalid 'dt': {item['dt']!r}") from None

        main = item.get("main")
        weather = item.get("weather")
        first = weather[0] if isinstance(weather, list) and weather and isinstance(weather[0], dict) else {}

        out.append(
            ForecastPoint(
                timestamp=timestamp,
                temperature=_number(main, "temp"),
                feels_like=_number(main, "feels_like"),
                humidity=_number(main, "humidity"),
                wind_speed=_number(item.get("wind"), "speed"),
                description=first.get("description") or DEFAULT_DESCRIPTION,
                icon=first.get("icon") or DEFAULT_ICON,
            )
        )
    return out
