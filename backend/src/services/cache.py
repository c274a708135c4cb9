from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, Sequence, TypeVar

from models import FilterState, Place


T = TypeVar("T")

DEFAULT_TTL_SEC = 60.0
IDEA_KEY_PLACES = 10


@dataclass
class CacheEntry(Generic[T]):
    timestamp: float
    value: T


class TTLCache(Generic[T]):
    """Session-scoped cache with a fixed time-to-live and lazy eviction.

    There is no size bound and no background sweep: an expired entry is
    removed the next time its key is looked up.
    """

    def __init__(self, ttl_sec: float = DEFAULT_TTL_SEC, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_sec = float(ttl_sec)
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl_sec:
            self._entries.pop(key, None)
            return None
        return entry.value

    def put(self, key: str, value: T) -> None:
        self._entries[key] = CacheEntry(timestamp=self._clock(), value=value)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def place_cache_key(lat: float, lng: float, radius_m: float, place_type: str) -> str:
    # ~100 m buckets so GPS jitter does not fragment the cache
    return f"{round(lat, 3) + 0.0:.3f},{round(lng, 3) + 0.0:.3f}:{int(round(radius_m))}:{place_type}"


def idea_cache_key(places: Sequence[Place], filters: FilterState) -> str:
    payload = {
        "placeIds": [p.id for p in list(places)[:IDEA_KEY_PLACES]],
        "filters": filters.to_dict(),
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))
