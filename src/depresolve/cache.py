"""Session caches for filesystem probes and parsed manifests.

Entries are write-once per key and never expire: the filesystem is assumed
stable for the lifetime of a resolution session. Construct one set of caches
per session and inject it; nothing here is a module-level global.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

from depresolve.common.paths import PathLike, canonical_key

T = TypeVar("T")

_MISSING = object()


@dataclass
class CacheStats:
    """Hit/miss counters of a single cache."""

    hits: int = 0
    misses: int = 0


class KeyedCache(Generic[T]):
    """Dict-backed cache keyed by canonical absolute location."""

    def __init__(self, name: str):
        self.name = name
        self._entries: Dict[str, T] = {}
        self.stats = CacheStats()

    def lookup(self, location: PathLike) -> Any:
        """Return the cached value or the module sentinel ``MISSING``."""
        value = self._entries.get(canonical_key(location), _MISSING)
        if value is _MISSING:
            self.stats.misses += 1
        else:
            self.stats.hits += 1
        return value

    def store(self, location: PathLike, value: T) -> T:
        """Store ``value`` unless the key is already populated.

        Returns the value that ends up cached, so two racing writers agree.
        """
        key = canonical_key(location)
        if key in self._entries:
            return self._entries[key]
        self._entries[key] = value
        return value

    def __contains__(self, location: PathLike) -> bool:
        return canonical_key(location) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Drop every entry. Only meant for tests and explicit session resets."""
        self._entries.clear()
        self.stats = CacheStats()


MISSING = _MISSING


@dataclass
class ProbeCache:
    """Existence and content caches used by :class:`CachedFileSystem`."""

    files: KeyedCache[bool] = field(default_factory=lambda: KeyedCache("exist_file"))
    dirs: KeyedCache[bool] = field(default_factory=lambda: KeyedCache("exist_dir"))
    contents: KeyedCache[Optional[str]] = field(default_factory=lambda: KeyedCache("read_file"))

    def stats(self) -> Dict[str, Dict[str, int]]:
        """Summarize hit/miss counters per cache."""
        return {
            cache.name: {"entries": len(cache), "hits": cache.stats.hits, "misses": cache.stats.misses}
            for cache in (self.files, self.dirs, self.contents)
        }


class ManifestCache(KeyedCache[Any]):
    """Parsed ``package.json`` objects keyed by package root.

    ``None`` is cached as well, recording that a directory has no manifest.
    """

    def __init__(self) -> None:
        super().__init__("manifest")
