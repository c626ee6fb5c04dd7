"""FastAPI application setup and dependency wiring for Barometer."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import Pipelines, router as api_router
from .cache_store import CacheStore, InMemoryCacheStore
from .config import Settings, load_settings
from .data_sources import FeedSource, build_feed_source
from .pipelines import AlertPipeline, MarketPipeline, WeatherPipeline
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/main")


def build_pipelines(settings: Settings, source: FeedSource, cache: CacheStore) -> Pipelines:
    """Create the three pipelines over one shared cache store."""
    return Pipelines(
        alerts=AlertPipeline(source, cache, settings),
        market=MarketPipeline(source, cache, settings),
        weather=WeatherPipeline(source, cache, settings),
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    source: Optional[FeedSource] = None,
    cache: Optional[CacheStore] = None,
) -> FastAPI:
    """Build the application; tests pass a fake `source` and their own `cache`."""
    settings = settings or load_settings()
    source = source or build_feed_source(settings)
    if cache is None:
        cache = InMemoryCacheStore()

    app = FastAPI(title="Barometer")
    app.state.settings = settings
    app.state.cache = cache
    app.state.pipelines = build_pipelines(settings, source, cache)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix="/api")
    logger.info("Barometer application created")
    return app
