"""FastAPI application entry point for the place details proxy."""

import logging
import sys
from datetime import datetime, timedelta
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings
from errors import register_error_handlers
from services.cache import PlaceCache
from services.coordinator import PlaceDetailsCoordinator
from services.freshness import FreshnessPolicy, utcnow
from services.places_client import PlaceFetcher, PlacesClient
from services.refresher import BackgroundRefresher

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app(
    app_settings: Settings | None = None,
    fetcher: PlaceFetcher | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> FastAPI:
    app_settings = app_settings or settings
    # Fatal: refuse to start without credentials, allow-list, origin and field mask
    app_settings.require()

    app = FastAPI(title="Places Proxy API", version="1.0.0")

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_methods=["GET"],
        allow_headers=["Content-Type", "Authorization"],
        **app_settings.origin.cors_kwargs(),
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if app_settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    owns_fetcher = fetcher is None
    if fetcher is None:
        fetcher = PlacesClient(
            api_key=app_settings.google_maps_api_key,
            field_mask=app_settings.field_mask,
            base_url=app_settings.places_base_url,
            timeout=app_settings.upstream_timeout_seconds,
        )

    policy = FreshnessPolicy(
        ttl=timedelta(seconds=app_settings.cache_ttl_seconds),
        close_lead=timedelta(seconds=app_settings.close_lead_seconds),
    )
    coordinator = PlaceDetailsCoordinator(PlaceCache(), fetcher, policy=policy, clock=clock)
    refresher = BackgroundRefresher(
        coordinator,
        app_settings.allowed_place_ids,
        interval_seconds=app_settings.refresh_interval_seconds,
    )

    app.state.settings = app_settings
    app.state.coordinator = coordinator
    app.state.refresher = refresher

    from routes.health import router as health_router
    from routes.places import router as places_router

    app.include_router(health_router)
    app.include_router(places_router)

    @app.on_event("startup")
    async def _start_refresher() -> None:
        logger.info(
            "Places proxy ready: %d allowed places, ttl=%ss",
            len(app_settings.allowed_place_ids),
            app_settings.cache_ttl_seconds,
        )
        refresher.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await refresher.stop()
        if owns_fetcher:
            await fetcher.aclose()

    return app


app = create_app()
