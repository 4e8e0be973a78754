"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Required configuration is missing or malformed. Fatal at startup."""


class PlacesAPIError(Exception):
    """The Places API round trip failed (transport, HTTP status or empty body)."""


class PlaceProxyError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class ForbiddenPlaceError(PlaceProxyError):
    def __init__(self):
        super().__init__("Forbidden: Invalid or missing placeId", status_code=403)


class UpstreamFetchError(PlaceProxyError):
    """Upstream fetch failed and there is no cached copy to fall back to."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(PlaceProxyError)
    async def handle_proxy_error(_request: Request, exc: PlaceProxyError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
