"""Caching service for external lookups."""

import hashlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class ResponseCache:
    """Time-boxed cache for search and weather results.

    Entries are evicted lazily when read after they expire; nothing sweeps in
    the background. When full, the least recently read entry goes first.
    """

    def __init__(self, ttl_seconds: float = 300, max_size: int = 500):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self.cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.expired = 0

    @staticmethod
    def create_key(namespace: str, query: str) -> str:
        """Namespaced key; queries differing only in case or spacing collide."""
        normalized = " ".join(str(query).split()).lower()
        digest = hashlib.sha1(normalized.encode("utf-8")).hexdigest()
        return f"{namespace}:{digest}"

    def get(self, key: str) -> Optional[Any]:
        entry = self.cache.get(key)
        if entry is None:
            self.misses += 1
            return None

        if time.time() >= entry.expires_at:
            del self.cache[key]
            self.expired += 1
            self.misses += 1
            logger.debug(f"Cache entry expired: {key}")
            return None

        self.cache.move_to_end(key)
        self.hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """Store a value; ttl_seconds overrides the cache default for this entry."""
        if key not in self.cache and len(self.cache) >= self.max_size:
            self.cache.popitem(last=False)

        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self.cache[key] = CacheEntry(value=value, expires_at=time.time() + ttl)
        self.cache.move_to_end(key)

    def evict(self, key: str) -> None:
        self.cache.pop(key, None)

    def clear(self) -> None:
        self.cache.clear()
        self.hits = 0
        self.misses = 0
        self.expired = 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        total_requests = self.hits + self.misses
        return {
            "size": len(self.cache),
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "expired": self.expired,
            "hit_rate": self.hits / total_requests if total_requests > 0 else 0,
            "ttl_seconds": self.ttl_seconds,
        }
