"""In-memory place cache. No Redis needed.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
a place may be fetched twice (once per worker). This is acceptable for this
project's scale — the allow-list keeps the number of keys small.
"""

import copy
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    key: str
    payload: dict[str, Any]
    fetched_at: datetime
    last_error: str | None = None


@dataclass(frozen=True)
class CachedResult:
    """Snapshot handed to callers; never aliases the stored payload."""

    payload: dict[str, Any]
    fetched_at: datetime
    error: str | None = None

    @classmethod
    def from_entry(cls, entry: CacheEntry, error: str | None = None) -> "CachedResult":
        return cls(payload=copy.deepcopy(entry.payload), fetched_at=entry.fetched_at, error=error)


class PlaceCache:
    """Keyed container holding at most one entry per place. No TTL logic."""

    def __init__(self):
        self._store: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        return self._store.get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        self._store[key] = entry

    def keys(self) -> list[str]:
        return list(self._store)

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)
