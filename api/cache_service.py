#!/usr/bin/env python3
"""
Compile result cache for the API server.

Results are keyed by the content hash of the submitted document, so
resubmitting an unchanged workflow from the editor's live preview returns
the stored result instead of compiling again.
"""

import time
from collections import OrderedDict
from typing import Dict, Any, Optional, Tuple

from core.config import settings
from core.logging_config import get_logger

logger = get_logger(__name__)

CacheKey = Tuple[str, bool]


class CompileCache:
    """In-process TTL cache of formatted compile results, bounded in size"""

    def __init__(self, ttl_seconds: Optional[int] = None, max_entries: Optional[int] = None):
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.compile_cache_ttl
        self._max_entries = max_entries if max_entries is not None else settings.compile_cache_max_entries
        self._entries: "OrderedDict[CacheKey, Tuple[float, Dict[str, Any]]]" = OrderedDict()
        self._hits = 0
        self._misses = 0

    def get(self, content_hash: str, include_source: bool) -> Optional[Dict[str, Any]]:
        """Get a cached result, dropping it when expired"""
        key = (content_hash, include_source)
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        stored_at, result = entry
        if self._ttl and time.time() - stored_at > self._ttl:
            del self._entries[key]
            self._misses += 1
            logger.debug(f"Compile cache entry expired: {content_hash[:12]}")
            return None

        self._entries.move_to_end(key)
        self._hits += 1
        return result

    def put(self, content_hash: str, include_source: bool, result: Dict[str, Any]):
        """Store a result, evicting the least recently used entry when full"""
        if self._max_entries <= 0:
            return
        key = (content_hash, include_source)
        self._entries[key] = (time.time(), result)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Compile cache evicted: {evicted[0][:12]}")

    def clear(self) -> int:
        """Clear the cache and return the number of dropped entries"""
        count = len(self._entries)
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        logger.info(f"Compile cache cleared ({count} entries)")
        return count

    def get_cache_status(self) -> Dict[str, Any]:
        """Get cache status information"""
        return {
            "entries": len(self._entries),
            "max_entries": self._max_entries,
            "ttl_seconds": self._ttl,
            "hits": self._hits,
            "misses": self._misses,
        }


# Global cache instance
compile_cache = CompileCache()


def get_compile_cache() -> CompileCache:
    """Get the global compile cache instance"""
    return compile_cache
