"""Shared test fixtures and fake collaborators."""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

# app.py builds the default application at import time
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-key")
os.environ.setdefault("ALLOWED_PLACE_IDS", "place-a,place-b")
os.environ.setdefault("ORIGIN", "https://example.com")
os.environ.setdefault("FIELD_MASK", "id,displayName,currentOpeningHours")

T0 = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class ManualClock:
    """Clock whose time only moves when the test says so."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeFetcher:
    """Records calls and replays queued payloads or exceptions."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[str] = []
        self.gate = None

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    async def fetch(self, place_id: str) -> dict[str, Any]:
        self.calls.append(place_id)
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return dict(response)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()
