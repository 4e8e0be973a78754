"""Place details coordinator — cache, freshness policy and upstream fetches.

This is the only place that writes to the cache. Outcomes of ``get``:

- FRESH entry: served from the cache, upstream untouched.
- REFRESH and the fetch succeeds: cache overwritten, new payload served.
- REFRESH and the fetch fails with a cached copy: stale payload served with
  ``error`` set; ``fetched_at`` is left alone so the next request retries.
- REFRESH and the fetch fails with nothing cached: UpstreamFetchError.

Concurrent refreshes of the same key share one in-flight fetch
(single-flight), so a burst of requests for a stale place costs one upstream
call and every waiter sees the same outcome.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from errors import UpstreamFetchError
from services.cache import CacheEntry, CachedResult, PlaceCache
from services.freshness import Decision, FreshnessPolicy, utcnow
from services.places_client import PlaceFetcher

logger = logging.getLogger(__name__)


class PlaceDetailsCoordinator:
    def __init__(
        self,
        cache: PlaceCache,
        fetcher: PlaceFetcher,
        policy: FreshnessPolicy | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.cache = cache
        self.fetcher = fetcher
        self.policy = policy or FreshnessPolicy()
        self._clock = clock
        self._inflight: dict[str, asyncio.Task] = {}

    async def get(self, key: str) -> CachedResult:
        entry = self.cache.get(key)
        now = self._clock()

        if self.policy.decide(entry, now) is Decision.FRESH:
            logger.debug("Serving %s from cache.", key)
            return CachedResult.from_entry(entry)

        return await self._refresh(key, now)

    async def refresh(self, key: str) -> CachedResult:
        """Invalidate and refetch, bypassing the freshness policy."""
        return await self._refresh(key, self._clock())

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    async def _refresh(self, key: str, now: datetime) -> CachedResult:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(key, now))
            self._inflight[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        else:
            logger.debug("Joining in-flight fetch for %s", key)
        # Waiters being cancelled must not cancel the shared fetch
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _fetch_and_store(self, key: str, now: datetime) -> CachedResult:
        try:
            payload = await self.fetcher.fetch(key)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.error("Error fetching place details for %s: %s", key, message)

            # Read after the await: another writer may have stored an entry meanwhile
            previous = self.cache.get(key)
            if previous is None:
                raise UpstreamFetchError(message) from e

            stale = replace(previous, last_error=message)
            self.cache.set(key, stale)
            logger.warning("Serving stale data for %s from %s.", key, stale.fetched_at.isoformat())
            return CachedResult.from_entry(stale, error=message)

        entry = CacheEntry(key=key, payload=payload, fetched_at=now)
        self.cache.set(key, entry)
        logger.debug("Serving fresh data for %s from Places API.", key)
        return CachedResult.from_entry(entry)
