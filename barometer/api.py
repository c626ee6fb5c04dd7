"""HTTP API exposing the three feed pipelines."""

from dataclasses import dataclass

from fastapi import APIRouter, Depends, HTTPException, Request, status

from .domain import AlertStatus, ForecastResult, MarketSnapshot
from .pipelines import AlertPipeline, MarketPipeline, WeatherPipeline
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/api")


@dataclass
class Pipelines:
    """The pipeline instances built once at startup and shared by all requests."""
    alerts: AlertPipeline
    market: MarketPipeline
    weather: WeatherPipeline


def get_pipelines(request: Request) -> Pipelines:
    """FastAPI dependency returning the pipelines stored on the application state."""
    return request.app.state.pipelines


router = APIRouter()


@router.get("/alerts", response_model=AlertStatus)
def get_alerts(pipelines: Pipelines = Depends(get_pipelines)):
    """Current civil-alert classification; fail-safe, always 200."""
    return pipelines.alerts.get_alert_status()


@router.get("/polymarket", response_model=MarketSnapshot)
def get_polymarket(pipelines: Pipelines = Depends(get_pipelines)):
    """Current prediction-market snapshot; degraded but 200 on upstream failure."""
    return pipelines.market.get_market_snapshot()


@router.get("/weather", response_model=ForecastResult)
def get_weather(pipelines: Pipelines = Depends(get_pipelines)):
    """Forecast for the configured location; 503 when the upstream fetch fails."""
    try:
        return pipelines.weather.get_forecast()
    except Exception as exc:
        logger.error("Error fetching weather data", extra={"error": repr(exc)})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "Service Degraded", "message": "Weather service temporarily unavailable"},
        )
