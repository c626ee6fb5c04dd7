"""Application configuration pulled from environment variables via pydantic."""
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class MarketSelection(str, Enum):
    """Strategy used to pick one sub-market out of a prediction-market event."""
    TARGET_DATE = "target_date"
    NEAREST_END_DATE = "nearest_end_date"


DEFAULT_MAJOR_REGIONS = {
    "תל אביב": "Tel Aviv",
    "ירושלים": "Jerusalem",
    "חיפה": "Haifa",
}

DEFAULT_CITY_TRANSLATIONS = {
    "תל אביב - מרכז העיר": "Tel Aviv - City Center",
    "תל אביב - יפו": "Tel Aviv - Jaffa",
    "תל אביב - דרום": "Tel Aviv - South",
    "תל אביב - צפון": "Tel Aviv - North",
    "ירושלים - מרכז": "Jerusalem - Center",
    "ירושלים - דרום": "Jerusalem - South",
    "ירושלים - מזרח": "Jerusalem - East",
    "חיפה - מרכז הכרמל": "Haifa - Carmel Center",
    "חיפה - קריות": "Haifa - Krayot",
}


class Settings(BaseSettings):
    """Environment-driven, immutable configuration for the Barometer service."""
    model_config = SettingsConfigDict(env_prefix="BAROMETER_", extra="ignore", frozen=True)

    # civil-alert feed
    alert_feed_url: str = "https://www.oref.org.il/WarningMessages/alert/alerts.json"
    alert_cache_seconds: int = Field(default=15, gt=0)
    major_regions: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_MAJOR_REGIONS))
    city_translations: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CITY_TRANSLATIONS))

    # prediction-market feed
    polymarket_events_url: str = "https://gamma-api.polymarket.com/events"
    polymarket_slug: str = "us-strikes-iran-by"
    polymarket_title: str = "US Strikes Iran"
    polymarket_cache_seconds: int = Field(default=300, gt=0)
    market_selection: MarketSelection = MarketSelection.TARGET_DATE
    market_target_date: str = ""
    big_trade_volume_threshold: float = Field(default=20000.0, gt=0)  # USD per hour
    big_trade_price_move: float = Field(default=0.01, gt=0, le=1)

    # weather feed
    openweather_url: str = "https://api.openweathermap.org/data/2.5/forecast"
    openweather_api_key: str | None = None
    weather_latitude: float = Field(default=35.6892, ge=-90, le=90)
    weather_longitude: float = Field(default=51.3890, ge=-180, le=180)
    weather_location: str = "Tehran, Iran"
    weather_forecast_count: int = Field(default=8, ge=1, le=40)
    weather_cache_seconds: int = Field(default=3600, gt=0)

    http_timeout_seconds: float = Field(default=10.0, gt=0)
    log_level: str = "INFO"

    @field_validator("alert_feed_url", "polymarket_events_url", "openweather_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize URLs so query strings are appended cleanly."""
        return str(v).rstrip("/")

    @field_validator("major_regions", mode="after")
    @classmethod
    def require_three_regions(cls, v: dict[str, str]) -> dict[str, str]:
        """The MajorAlert rule is defined over exactly three named regions."""
        names = [name.strip() for name in v]
        if len(names) != 3:
            raise ValueError(f"major_regions must name exactly 3 regions, got {len(names)}")
        if any(not name for name in names):
            raise ValueError("major_regions contains a blank region name")
        return {name.strip(): (display or name).strip() for name, display in v.items()}

    @field_validator("market_target_date", mode="after")
    @classmethod
    def strip_target_date(cls, v: str) -> str:
        return v.strip()

    def translation_table(self) -> dict[str, str]:
        """Raw-name to display-name table used for active city display names."""
        return {**self.city_translations, **self.major_regions}


def load_settings() -> Settings:
    """Build settings once at startup; invalid values raise immediately."""
    settings = Settings()
    logger.info(
        "Loaded settings",
        extra={
            "market_selection": settings.market_selection.value,
            "weather_configured": settings.openweather_api_key is not None,
        },
    )
    return settings


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {Settings().model_dump_json(indent=4, exclude={'openweather_api_key'})}")
