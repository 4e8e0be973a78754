"""Freshness policy for cached place details.

Decides whether a cached entry can be served as-is or must be refreshed.
Two rules apply:

- Age: entries older than the TTL are refreshed.
- Opening hours: Places payloads carry ``nextOpenTime`` / ``nextCloseTime``
  inside ``currentOpeningHours`` (or ``regularOpeningHours``). Once one of
  those boundaries is reached, derived fields such as ``openNow`` are about to
  flip, so the entry is refreshed even if it is young. Closing times are
  compared with a lead so the refresh happens slightly before the boundary.

The policy never reads the clock; callers pass ``now`` in.
"""

import enum
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from services.cache import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=1)
DEFAULT_CLOSE_LEAD = timedelta(minutes=15)

OPENING_HOURS_FIELDS = ("currentOpeningHours", "regularOpeningHours")


class Decision(enum.Enum):
    FRESH = "fresh"
    REFRESH = "refresh"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp from the Places API. Returns None if unusable."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Ignoring unparseable timestamp %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def state_change_times(payload: dict[str, Any]) -> tuple[datetime | None, datetime | None]:
    """Return (next_open, next_close) from the first opening-hours block that has them."""
    for field in OPENING_HOURS_FIELDS:
        hours = payload.get(field)
        if not isinstance(hours, dict):
            continue
        next_open = parse_timestamp(hours.get("nextOpenTime"))
        next_close = parse_timestamp(hours.get("nextCloseTime"))
        if next_open or next_close:
            return next_open, next_close
    return None, None


class FreshnessPolicy:
    """TTL plus opening-hours boundary rule.

    Inside the close-lead window upstream keeps reporting the same
    ``nextCloseTime``, so every request in that window refetches until the
    place has closed and the next boundary comes back. Only overlapping
    requests are merged by the coordinator's single-flight.
    """

    def __init__(self, ttl: timedelta = DEFAULT_TTL, close_lead: timedelta = DEFAULT_CLOSE_LEAD):
        self.ttl = ttl
        self.close_lead = close_lead

    def decide(self, entry: CacheEntry | None, now: datetime) -> Decision:
        if entry is None:
            return Decision.REFRESH

        if now - entry.fetched_at >= self.ttl:
            return Decision.REFRESH

        if self.boundary_crossed(entry.payload, now):
            return Decision.REFRESH

        return Decision.FRESH

    def boundary_crossed(self, payload: dict[str, Any], now: datetime) -> bool:
        next_open, next_close = state_change_times(payload)
        if next_close is not None and now >= next_close - self.close_lead:
            return True
        if next_open is not None and now >= next_open:
            return True
        return False
