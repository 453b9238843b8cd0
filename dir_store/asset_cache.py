"""Bounded, expiring in-memory cache for decoded asset blobs."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Callable, Hashable

from .conf import CACHE_CAPACITY
from .log import store_log


class Expiry(Enum):
    """How long a cached blob stays resolvable."""

    SHORT = 5 * 60
    MEDIUM = 60 * 60
    LONG = 24 * 60 * 60
    NEVER = None

    @property
    def seconds(self) -> float | None:
        return self.value


Duration = Expiry | timedelta | float | int


def _to_seconds(duration: Duration) -> float | None:
    if isinstance(duration, Expiry):
        return duration.seconds
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


@dataclass
class _Entry:
    blob: Any
    expires_at: float | None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class AssetCache:
    """Key -> blob cache holding at most ``capacity`` entries.

    A side-cache only: a miss just means the caller reads from disk.
    When full, expired entries are purged first, then the oldest inserted
    entry is evicted.  Safe to share between threads.
    """

    def __init__(
        self,
        capacity: int = CACHE_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._clock = clock
        self._entries: OrderedDict[Hashable, _Entry] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def put(self, key: Hashable, blob: Any, expiry: Duration = Expiry.SHORT) -> None:
        seconds = _to_seconds(expiry)
        with self._lock:
            now = self._clock()
            expires_at = None if seconds is None else now + seconds
            self._entries.pop(key, None)
            if len(self._entries) >= self._capacity:
                self._purge_locked(now)
            while len(self._entries) >= self._capacity:
                evicted, _ = self._entries.popitem(last=False)
                store_log(f"Cache full, evicted {evicted}")
            self._entries[key] = _Entry(blob=blob, expires_at=expires_at)

    def get(self, key: Hashable) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expired(self._clock()):
                del self._entries[key]
                return None
            return entry.blob

    def remove(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were dropped."""
        with self._lock:
            return self._purge_locked(self._clock())

    def _purge_locked(self, now: float) -> int:
        stale = [k for k, e in self._entries.items() if e.expired(now)]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.expired(self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
