"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Friendly greeting for uptime checks."""
    return "hi :)"


@router.get("/ready")
async def ready(request: Request) -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "places-proxy", "commit": request.app.state.settings.git_sha}


@router.get("/health")
async def health(request: Request) -> dict:
    """Cache health: how many places are cached and how many are being served stale.

    Does not call the Places API, so it is safe to poll.
    """
    cache = request.app.state.coordinator.cache
    stale = [key for key in cache.keys() if cache.get(key).last_error]
    return {
        "status": "degraded" if stale else "ok",
        "service": "places-proxy",
        "commit": request.app.state.settings.git_sha,
        "cached_places": len(cache),
        "stale_places": stale,
        "background_refresh": request.app.state.refresher.running,
    }
