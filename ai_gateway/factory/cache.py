"""Bounded, time-limited cache of constructed provider adapters."""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional

from ..config.constants import DEFAULT_CACHE_MAX_AGE_SECONDS, DEFAULT_CACHE_MAX_SIZE
from ..providers.base import ProviderAdapter


@dataclass
class CachedProviderEntry:
    adapter: ProviderAdapter
    last_accessed: float


class ProviderCache:
    """
    Adapter cache with a size bound and an idle expiry.

    An entry not accessed for ``max_age`` seconds is dropped on its next
    lookup. Inserting into a full cache evicts the least recently accessed
    entry. All operations are serialized by one lock, so concurrent lookups
    for the same key construct the adapter once.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_CACHE_MAX_SIZE,
        max_age: float = DEFAULT_CACHE_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_size = max_size
        self.max_age = max_age
        self._clock = clock
        self._entries: Dict[Hashable, CachedProviderEntry] = {}
        self._lock = threading.Lock()

    def _lookup(self, key: Hashable, now: float) -> Optional[ProviderAdapter]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if now - entry.last_accessed >= self.max_age:
            del self._entries[key]
            return None
        entry.last_accessed = now
        return entry.adapter

    def _insert(self, key: Hashable, adapter: ProviderAdapter, now: float) -> None:
        if key not in self._entries and len(self._entries) >= self.max_size:
            oldest = min(self._entries, key=lambda k: self._entries[k].last_accessed)
            del self._entries[oldest]
        self._entries[key] = CachedProviderEntry(adapter=adapter, last_accessed=now)

    def get(self, key: Hashable) -> Optional[ProviderAdapter]:
        with self._lock:
            return self._lookup(key, self._clock())

    def put(self, key: Hashable, adapter: ProviderAdapter) -> None:
        with self._lock:
            self._insert(key, adapter, self._clock())

    def get_or_create(self, key: Hashable, build: Callable[[], ProviderAdapter]) -> ProviderAdapter:
        """Return the live entry for ``key`` or build, insert and return a new one."""
        with self._lock:
            now = self._clock()
            adapter = self._lookup(key, now)
            if adapter is None:
                adapter = build()
                self._insert(key, adapter, now)
            return adapter

    def remove(self, key: Hashable) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> List[Hashable]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries
