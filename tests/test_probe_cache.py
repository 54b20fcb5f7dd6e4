"""Tests for the session caches and the filesystem probes."""

import asyncio

from depresolve.cache import MISSING, KeyedCache, ProbeCache
from depresolve.probe import CachedFileSystem, LocalFileSystem


class TestKeyedCache:
    def test_lookup_miss_then_hit(self):
        """Test a cache miss followed by a hit."""
        cache = KeyedCache("test")
        assert cache.lookup("/a/b") is MISSING
        cache.store("/a/b", True)
        assert cache.lookup("/a/./b") is True
        assert (cache.stats.hits, cache.stats.misses) == (1, 1)

    def test_store_is_write_once(self):
        """Test that the first stored value wins."""
        cache = KeyedCache("test")
        assert cache.store("/a", "first") == "first"
        assert cache.store("/a", "second") == "first"
        assert len(cache) == 1

    def test_none_is_a_cached_value(self):
        """Test that None is cached like any value."""
        cache = KeyedCache("test")
        cache.store("/missing", None)
        assert cache.lookup("/missing") is None
        assert "/missing" in cache

    def test_clear(self):
        """Test clearing a cache."""
        cache = KeyedCache("test")
        cache.store("/a", 1)
        cache.clear()
        assert len(cache) == 0
        assert cache.stats.hits == 0


class TestLocalFileSystem:
    def test_existence(self, tree):
        """Test file and directory existence checks."""
        root = tree({"pkg/a.js": "module.exports = 1;"})
        fs = LocalFileSystem()
        assert asyncio.run(fs.exist_file(root / "pkg" / "a.js"))
        assert not asyncio.run(fs.exist_file(root / "pkg"))
        assert asyncio.run(fs.exist_dir(root / "pkg"))
        assert not asyncio.run(fs.exist_dir(root / "pkg" / "a.js"))

    def test_read_missing_or_directory_is_none(self, tree):
        """Test that reading a missing file or a directory gives None."""
        root = tree({"pkg/a.js": "x"})
        fs = LocalFileSystem()
        assert asyncio.run(fs.read_file(root / "pkg" / "a.js")) == "x"
        assert asyncio.run(fs.read_file(root / "pkg" / "missing.js")) is None
        assert asyncio.run(fs.read_file(root / "pkg")) is None


class TestCachedFileSystem:
    def test_repeated_probes_hit_the_cache(self, tree, counting_fs):
        """Test that repeated probes are served from the cache."""
        root = tree({"a.js": "x"})
        fs = CachedFileSystem(counting_fs)

        async def probe_twice():
            for _ in range(2):
                assert await fs.exist_file(root / "a.js")
                assert not await fs.exist_dir(root / "a.js")
                assert await fs.read_file(root / "missing.js") is None

        asyncio.run(probe_twice())
        assert len(counting_fs.calls) == 3

    def test_shared_cache_between_probes(self, tree, counting_fs):
        """Test sharing one cache between probes."""
        root = tree({"a.js": "x"})
        cache = ProbeCache()
        asyncio.run(CachedFileSystem(counting_fs, cache).exist_file(root / "a.js"))
        asyncio.run(CachedFileSystem(counting_fs, cache).exist_file(root / "a.js"))
        assert counting_fs.calls == [("exist_file", str(root / "a.js"))]
        assert cache.stats()["exist_file"] == {"entries": 1, "hits": 1, "misses": 1}
