"""Optional periodic refresh of every allow-listed place.

Goes through the coordinator's refresh path, so scheduled refreshes share
the same cache writes and in-flight fetches as user requests.
"""

import asyncio
import logging

from errors import UpstreamFetchError
from services.coordinator import PlaceDetailsCoordinator

logger = logging.getLogger(__name__)


class BackgroundRefresher:
    def __init__(self, coordinator: PlaceDetailsCoordinator, place_ids: list[str], interval_seconds: float):
        self.coordinator = coordinator
        self.place_ids = list(place_ids)
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0 and bool(self.place_ids)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> dict[str, str]:
        """Refresh every place once. Returns {place_id: "ok" | "stale" | "failed"}."""
        outcome: dict[str, str] = {}
        for place_id in self.place_ids:
            try:
                result = await self.coordinator.refresh(place_id)
            except UpstreamFetchError as e:
                logger.warning("Scheduled refresh failed for %s: %s", place_id, e)
                outcome[place_id] = "failed"
                continue
            outcome[place_id] = "stale" if result.error else "ok"
        logger.info("Scheduled refresh finished: %s", outcome)
        return outcome

    def start(self) -> None:
        if not self.enabled:
            logger.info("Background refresh disabled")
            return
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        logger.info("Background refresh every %ss for %d places", self.interval_seconds, len(self.place_ids))
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except Exception:
                logger.exception("Scheduled refresh pass crashed")
