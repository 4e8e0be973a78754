"""Place details route — allow-list check, then the cached coordinator."""

import logging

from fastapi import APIRouter, Query, Request

from errors import ForbiddenPlaceError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/details")
async def place_details(request: Request, place_id: str | None = Query(None, alias="placeId")) -> dict:
    """Details for one allow-listed place, served from cache when fresh."""
    settings = request.app.state.settings
    if not settings.is_allowed(place_id):
        logger.info("Rejected placeId %r", place_id)
        raise ForbiddenPlaceError()

    result = await request.app.state.coordinator.get(place_id)

    body = {**result.payload, "lastUpdated": result.fetched_at.isoformat()}
    if result.error:
        body["error"] = result.error
    return body
