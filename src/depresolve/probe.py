"""Filesystem probe: existence checks and text reads over absolute locations.

Higher layers receive a :class:`FileSystemProbe` by injection and never touch
the filesystem directly.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

from depresolve.cache import MISSING, ProbeCache
from depresolve.common.logging_utils import extra_context, is_debug_enabled
from depresolve.common.paths import PathLike

logger = logging.getLogger(__name__)


class FileSystemProbe:
    """Interface of the probe collaborator."""

    async def exist_file(self, path: PathLike) -> bool:
        """Whether ``path`` is an existing regular file."""
        raise NotImplementedError

    async def exist_dir(self, path: PathLike) -> bool:
        """Whether ``path`` is an existing directory."""
        raise NotImplementedError

    async def read_file(self, path: PathLike) -> Optional[str]:
        """Text content of ``path``; ``None`` if missing or a directory."""
        raise NotImplementedError


def _read_text(path: PathLike) -> Optional[str]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return handle.read()
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return None


class LocalFileSystem(FileSystemProbe):
    """Probe backed by the local disk, off-loading blocking calls to threads."""

    async def exist_file(self, path: PathLike) -> bool:
        return await asyncio.to_thread(os.path.isfile, path)

    async def exist_dir(self, path: PathLike) -> bool:
        return await asyncio.to_thread(os.path.isdir, path)

    async def read_file(self, path: PathLike) -> Optional[str]:
        return await asyncio.to_thread(_read_text, path)


class CachedFileSystem(FileSystemProbe):
    """Memoizing wrapper around another probe.

    A race between two in-flight probes of one key at worst duplicates the
    inner call; both store the same value.
    """

    def __init__(self, inner: Optional[FileSystemProbe] = None, cache: Optional[ProbeCache] = None):
        self._inner = inner or LocalFileSystem()
        self.cache = cache or ProbeCache()

    async def exist_file(self, path: PathLike) -> bool:
        cached = self.cache.files.lookup(path)
        if cached is not MISSING:
            return cached
        result = await self._inner.exist_file(path)
        return self.cache.files.store(path, result)

    async def exist_dir(self, path: PathLike) -> bool:
        cached = self.cache.dirs.lookup(path)
        if cached is not MISSING:
            return cached
        result = await self._inner.exist_dir(path)
        return self.cache.dirs.store(path, result)

    async def read_file(self, path: PathLike) -> Optional[str]:
        cached = self.cache.contents.lookup(path)
        if cached is not MISSING:
            if is_debug_enabled(logger):
                logger.debug(
                    "Probe cache hit",
                    extra=extra_context(event="cache_hit", component="probe",
                                        action="read_file", target=str(Path(path))),
                )
            return cached
        result = await self._inner.read_file(path)
        return self.cache.contents.store(path, result)
