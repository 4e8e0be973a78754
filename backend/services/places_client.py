"""Google Places API (New) client — place details by id.

Endpoint pattern:
    GET https://places.googleapis.com/v1/places/{place_id}

Auth:
    X-Goog-Api-Key header. The X-Goog-FieldMask header limits which fields
    come back, which is the only shaping applied to the payload.
"""

import logging
from typing import Any, Protocol

import httpx

from errors import PlacesAPIError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://places.googleapis.com/v1"


class PlaceFetcher(Protocol):
    async def fetch(self, place_id: str) -> dict[str, Any]: ...


class PlacesClient:
    def __init__(
        self,
        api_key: str,
        field_mask: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "X-Goog-Api-Key": api_key,
                "X-Goog-FieldMask": field_mask,
            },
        )

    async def fetch(self, place_id: str) -> dict[str, Any]:
        """Fetch details for one place. Raises PlacesAPIError on any failure."""
        logger.info("Fetching place details for %s", place_id)
        try:
            resp = await self._client.get(f"/places/{place_id}")
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.error("Places API error for %s: %s", place_id, message)
            raise PlacesAPIError(message) from e
        except httpx.HTTPError as e:
            logger.error("Places API request failed for %s: %s", place_id, e)
            raise PlacesAPIError(f"Places API request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise PlacesAPIError("No response from Places API") from e
        if not data or not isinstance(data, dict):
            raise PlacesAPIError("No response from Places API")
        return data

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a Google API error body."""
    try:
        body = response.json()
        message = body["error"]["message"]
    except (ValueError, KeyError, TypeError):
        message = None
    if message:
        return f"Places API returned {response.status_code}: {message}"
    return f"Places API returned {response.status_code}"
