"""Shared fixtures: on-disk package trees, counting probes and contexts."""

import json

import pytest

from depresolve.constants import Platform
from depresolve.context import ResolutionContext
from depresolve.manifest import ManifestReader
from depresolve.probe import CachedFileSystem, FileSystemProbe, LocalFileSystem
from depresolve.strategy import LocalStrategy


class CountingFileSystem(FileSystemProbe):
    """Local probe recording every call that reaches the disk."""

    def __init__(self):
        self._inner = LocalFileSystem()
        self.calls = []

    async def exist_file(self, path):
        self.calls.append(("exist_file", str(path)))
        return await self._inner.exist_file(path)

    async def exist_dir(self, path):
        self.calls.append(("exist_dir", str(path)))
        return await self._inner.exist_dir(path)

    async def read_file(self, path):
        self.calls.append(("read_file", str(path)))
        return await self._inner.read_file(path)


@pytest.fixture
def tree(tmp_path):
    """Write ``{relative path: content}`` under ``tmp_path``; dicts are dumped as JSON."""

    def _write(files):
        for relative, content in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, (dict, list)):
                content = json.dumps(content)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def counting_fs():
    return CountingFileSystem()


@pytest.fixture
def make_context(tmp_path):
    """Factory for contexts rooted at ``tmp_path`` with ``tmp_path/node_modules``."""

    def _make(
        fs=None,
        conditions=("require", "node"),
        main_fields=("main",),
        platform=Platform.NODE,
        hook=None,
        root=None,
        max_depth=64,
    ):
        fs = fs if fs is not None else CachedFileSystem()
        base = root if root is not None else tmp_path
        return ResolutionContext(
            fs=fs,
            manifests=ManifestReader(fs),
            strategy=LocalStrategy(base / "node_modules"),
            conditions=tuple(conditions),
            main_fields=tuple(main_fields),
            platform=platform,
            hook=hook,
            max_depth=max_depth,
        )

    return _make
