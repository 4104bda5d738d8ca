"""
Tests for the compile result cache.
"""
import pytest
from unittest.mock import patch

from api.cache_service import CompileCache


@pytest.mark.unit
@pytest.mark.api
class TestCompileCache:
    """TTL and size bounds."""

    def test_get_and_put(self):
        cache = CompileCache(ttl_seconds=60, max_entries=4)
        assert cache.get("abc", False) is None
        cache.put("abc", False, {"success": True})
        assert cache.get("abc", False) == {"success": True}
        assert cache.get("abc", True) is None
        assert cache.get_cache_status()["hits"] == 1
        assert cache.get_cache_status()["misses"] == 2

    def test_entries_expire(self):
        cache = CompileCache(ttl_seconds=10, max_entries=4)
        with patch("api.cache_service.time.time", return_value=1000.0):
            cache.put("abc", False, {"success": True})
        with patch("api.cache_service.time.time", return_value=1011.0):
            assert cache.get("abc", False) is None
        assert cache.get_cache_status()["entries"] == 0

    def test_least_recently_used_is_evicted(self):
        cache = CompileCache(ttl_seconds=60, max_entries=2)
        cache.put("a", False, {"n": 1})
        cache.put("b", False, {"n": 2})
        cache.get("a", False)
        cache.put("c", False, {"n": 3})
        assert cache.get("b", False) is None
        assert cache.get("a", False) == {"n": 1}
        assert cache.get("c", False) == {"n": 3}

    def test_zero_size_disables_cache(self):
        cache = CompileCache(ttl_seconds=60, max_entries=0)
        cache.put("a", False, {"n": 1})
        assert cache.get("a", False) is None

    def test_clear(self):
        cache = CompileCache(ttl_seconds=60, max_entries=2)
        cache.put("a", False, {"n": 1})
        assert cache.clear() == 1
        assert cache.get_cache_status()["entries"] == 0
