"""Normalized entities served by the feed pipelines.

These models are the stable contract between the pipelines and the HTTP layer.
Each carries `cached_at` (when the owning pipeline built it) and
`is_from_cache` (False when freshly built, True on copies served from cache).
No interpretation logic lives here.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, computed_field


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling."""

    model_config = ConfigDict(extra="forbid")


class Severity(str, Enum):
    """Civil-alert classification."""
    SAFE = "Safe"
    ALERT = "Alert"
    MAJOR_ALERT = "MajorAlert"


class ForecastPoint(_StrictBaseModel):
    """One forecast time slot."""
    timestamp: datetime
    temperature: float = 0.0
    feels_like: float = 0.0
    humidity: float = 0.0
    wind_speed: float = 0.0
    description: str = "Unknown"
    icon: str = "01d"


class ForecastResult(_StrictBaseModel):
    """Forecast for the configured location, in upstream chronological order."""
    location: str
    forecasts: List[ForecastPoint] = Field(default_factory=list)
    cached_at: datetime = Field(default_factory=utc_now)
    is_from_cache: bool = False


class CityObservation(_StrictBaseModel):
    """A city named in an active alert."""
    raw: str
    normalized: str
    display: str


class AlertStatus(_StrictBaseModel):
    """Severity classification of the current civil-alert feed."""
    severity: Severity = Severity.SAFE
    has_any_alert: bool = False
    active_cities: List[CityObservation] = Field(default_factory=list)
    matched_major_cities: List[str] = Field(default_factory=list)
    cached_at: datetime = Field(default_factory=utc_now)
    is_from_cache: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_major_alert(self) -> bool:
        return self.severity is Severity.MAJOR_ALERT


class MarketSnapshot(_StrictBaseModel):
    """Yes/no probabilities of the selected sub-market of a prediction-market event."""
    market_title: str
    slug: str = ""
    yes_percent: float = 0.0
    no_percent: float = 0.0
    volume: float = 0.0
    big_trade_detected: bool = False
    cached_at: datetime = Field(default_factory=utc_now)
    is_from_cache: bool = False

    @property
    def has_data(self) -> bool:
        """False when both percentages are zero, the "no usable data" signal."""
        return not (self.yes_percent == 0 and self.no_percent == 0)
