"""Keyed result store with TTL eviction."""

import hashlib
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

ValueT = TypeVar("ValueT")


@dataclass
class CacheEntry(Generic[ValueT]):
    value: ValueT
    created_at: float


class ResultCache(Generic[ValueT]):
    """Maps a content hash to a result for ``ttl`` seconds.

    Expired entries are dropped when read, on every ``set`` and by
    ``clear_expired``, so the store never holds more than the entries
    written within the last ``ttl`` seconds. Safe to share between threads.
    """

    def __init__(self, ttl: float = 3600.0, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry[ValueT]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key_for(content: str) -> str:
        """SHA-256 hex digest of ``content``."""
        return hashlib.sha256(content.encode("utf-8")).hexdigest()

    def _expired(self, entry: CacheEntry[ValueT], now: float) -> bool:
        return now - entry.created_at > self._ttl

    def _purge(self, now: float) -> int:
        # caller holds the lock
        stale = [key for key, entry in self._entries.items() if self._expired(entry, now)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def get(self, key: str) -> Optional[ValueT]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: ValueT) -> None:
        with self._lock:
            now = self._clock()
            self._purge(now)
            self._entries[key] = CacheEntry(value=value, created_at=now)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            return self._purge(self._clock())

    def stats(self) -> dict:
        with self._lock:
            return {
                "size": len(self._entries),
                "entries": [key[:8] + "..." for key in self._entries],
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
