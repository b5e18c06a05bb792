"""
cache_service.py — In-process TTL cache
Keyed by SHA-256 of the caller's input. Entries expire after their TTL and
the oldest entry is evicted once max_entries is reached. One instance per
concern (flashcards, AI availability), owned by whoever uses it.
"""

import hashlib
import time


class TTLCache:
    """In-memory cache with TTL, size-bounded eviction and hit tracking."""

    def __init__(self, default_ttl: int = 3600, max_entries: int = 256, clock=time.monotonic):
        # key → {value, timestamp, ttl, hit_count}; dicts keep insertion order
        self._cache: dict[str, dict] = {}
        self._hits: int = 0
        self._misses: int = 0
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock

    # ------------------------------------------------------------------
    @staticmethod
    def key_for(*parts: str) -> str:
        """SHA-256 of concatenated inputs."""
        raw = "||".join(parts)
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    # ------------------------------------------------------------------
    def get(self, key: str):
        """Return the cached value or None on miss / expiry."""
        entry = self._cache.get(key)
        if entry is None:
            self._misses += 1
            return None

        age = self._clock() - entry["timestamp"]
        if age > entry["ttl"]:
            del self._cache[key]
            self._misses += 1
            return None

        entry["hit_count"] += 1
        self._hits += 1
        return entry["value"]

    # ------------------------------------------------------------------
    def set(self, key: str, value, ttl_seconds: int | None = None):
        """Store a value with a TTL (seconds). ttl_seconds=0 → don't cache."""
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0 or self.max_entries <= 0:
            return

        self._cache.pop(key, None)
        if len(self._cache) >= self.max_entries:
            self.clear_expired()
        while len(self._cache) >= self.max_entries:
            oldest = next(iter(self._cache))
            del self._cache[oldest]

        self._cache[key] = {
            "value": value,
            "timestamp": self._clock(),
            "ttl": ttl,
            "hit_count": 0,
        }

    # ------------------------------------------------------------------
    def invalidate(self, key: str):
        self._cache.pop(key, None)

    def clear(self):
        self._cache.clear()

    # ------------------------------------------------------------------
    def clear_expired(self):
        """Evict all entries past their TTL."""
        now = self._clock()
        expired = [
            k for k, v in self._cache.items()
            if now - v["timestamp"] > v["ttl"]
        ]
        for k in expired:
            del self._cache[k]

    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._cache)

    def get_stats(self) -> dict:
        """Cache statistics: entries and hit rate."""
        total_lookups = self._hits + self._misses
        return {
            "total_entries": len(self._cache),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total_lookups, 4) if total_lookups else 0.0,
        }
