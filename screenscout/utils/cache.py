"""Thread-safe in-memory TTL cache for TMDB catalog listings.

One instance is constructed by the app factory and injected into the
catalog service. Entries are never evicted: a read simply ignores an
entry older than the TTL, and the next refresh overwrites it. Keys come
from a small fixed space of catalog queries, so the map stays small.

Usage:
    cache = TTLCache(ttl_seconds=300)
    cache.set("top-rated-movies:page=2", movies)
    result = cache.get("top-rated-movies:page=2")  # movies, or None if stale
"""
from __future__ import annotations

import threading
import time
from typing import Any, Callable


class TTLCache:
    """Thread-safe in-memory cache with TTL-gated reads.

    Attributes:
        _store: Dict mapping cache keys to (stored_at, value) tuples.
        _ttl: Time-to-live in seconds for cached entries.
        _clock: Monotonic time source, replaceable in tests.
        _lock: Threading lock for thread-safe access.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: How long entries stay fresh (default: 5 min).
            clock: Callable returning the current time in seconds.
        """
        self._store: dict[str, tuple[float, Any]] = {}
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: str) -> Any | None:
        """Get a value from the cache.

        Args:
            key: Cache key to look up.

        Returns:
            Cached value if present and younger than the TTL, otherwise None.
        """
        with self._lock:
            entry = self._store.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at < self._ttl:
            return value
        return None

    def set(self, key: str, value: Any) -> None:
        """Store a value, overwriting any previous entry for the key.

        Args:
            key: Cache key.
            value: Value to cache.
        """
        with self._lock:
            self._store[key] = (self._clock(), value)

    def clear(self) -> None:
        """Remove all entries from the cache."""
        with self._lock:
            self._store.clear()

    @property
    def size(self) -> int:
        """Return the current number of entries (including stale ones)."""
        return len(self._store)

    @staticmethod
    def make_key(prefix: str, **kwargs: Any) -> str:
        """Generate a deterministic cache key from a query name and parameters.

        Args:
            prefix: Logical query name (e.g., "top-rated-movies").
            **kwargs: Paging parameters to include in the key.

        Returns:
            Deterministic string key.

        Example:
            >>> TTLCache.make_key("top-rated-movies", page=2)
            'top-rated-movies:page=2'
        """
        if not kwargs:
            return prefix
        sorted_params = "&".join(f"{k}={v}" for k, v in sorted(kwargs.items()) if v is not None)
        return f"{prefix}:{sorted_params}" if sorted_params else prefix
