"""Concurrent resolution over one shared session."""

import asyncio
import os

import pytest

from depresolve.cjs import require
from depresolve.probe import CachedFileSystem

PROJECT = {
    "package.json": {"name": "app", "imports": {"#util": "./src/util.js"}},
    "src/a.js": "",
    "src/b.js": "",
    "src/util.js": "",
    "node_modules/lodash/package.json": {"main": "lodash.js"},
    "node_modules/lodash/lodash.js": "",
    "node_modules/esm/package.json": {"type": "module", "exports": {".": "./index.js"}},
    "node_modules/esm/index.js": "",
}

SPECIFIERS = ["lodash", "./b", "#util", "esm", "fs"]


@pytest.fixture
def session(tree, make_context, counting_fs):
    root = tree(PROJECT)
    fs = CachedFileSystem(counting_fs)
    return root, fs, make_context(fs=fs)


def touched(counting_fs, kind):
    return {os.path.normpath(path) for call, path in counting_fs.calls if call == kind}


class TestConcurrentRequire:
    def test_identical_requests_agree(self, session):
        """Test that identical in-flight requests produce the same result."""
        root, _, context = session
        referrer = root / "src" / "a.js"

        async def run():
            return await asyncio.gather(*(require("lodash", referrer, context) for _ in range(16)))

        results = asyncio.run(run())
        assert all(result == results[0] for result in results)
        assert results[0].path == root / "node_modules" / "lodash" / "lodash.js"

    def test_mixed_requests_match_sequential_results(self, session, make_context):
        """Test that interleaved resolutions match one-at-a-time resolution."""
        root, _, context = session
        referrer = root / "src" / "a.js"

        async def run_concurrently():
            return await asyncio.gather(*(require(spec, referrer, context) for spec in SPECIFIERS * 4))

        async def run_sequentially(fresh):
            return [await require(spec, referrer, fresh) for spec in SPECIFIERS]

        concurrent = asyncio.run(run_concurrently())
        sequential = asyncio.run(run_sequentially(make_context()))
        assert concurrent == sequential * 4

    def test_cache_holds_one_entry_per_key(self, session, counting_fs):
        """Test that racing lookups leave one correct cache entry per location."""
        root, fs, context = session
        referrer = root / "src" / "a.js"

        async def run():
            await asyncio.gather(*(require(spec, referrer, context) for spec in SPECIFIERS * 8))

        asyncio.run(run())
        assert len(fs.cache.files) == len(touched(counting_fs, "exist_file"))
        assert len(fs.cache.dirs) == len(touched(counting_fs, "exist_dir"))
        assert len(fs.cache.contents) == len(touched(counting_fs, "read_file"))
        for path in touched(counting_fs, "exist_file"):
            assert fs.cache.files.lookup(path) is os.path.isfile(path)
        for path in touched(counting_fs, "exist_dir"):
            assert fs.cache.dirs.lookup(path) is os.path.isdir(path)

    def test_warm_session_does_not_touch_disk(self, session, counting_fs):
        """Test that repeating a finished batch never reaches the disk."""
        root, _, context = session
        referrer = root / "src" / "a.js"

        async def run():
            return await asyncio.gather(*(require(spec, referrer, context) for spec in SPECIFIERS))

        first = asyncio.run(run())
        seen = len(counting_fs.calls)
        second = asyncio.run(run())
        assert first == second
        assert len(counting_fs.calls) == seen
