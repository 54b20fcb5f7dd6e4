"""package.json reading and the immutable manifest model."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from depresolve.cache import MISSING, ManifestCache
from depresolve.common.logging_utils import extra_context, is_debug_enabled
from depresolve.common.paths import PathLike
from depresolve.constants import Constants
from depresolve.errors import InvalidManifest
from depresolve.probe import FileSystemProbe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageManifest:
    """Parsed package.json. Values keep their JSON shape."""

    name: Optional[str] = None
    version: Optional[str] = None
    main: Any = None
    module: Any = None
    browser: Any = None
    exports: Any = None
    imports: Any = None
    type: Optional[str] = None
    side_effects: Any = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PackageManifest":
        """Build a manifest from the decoded JSON object."""
        name = data.get("name")
        version = data.get("version")
        pkg_type = data.get("type")
        return cls(
            name=name if isinstance(name, str) else None,
            version=version if isinstance(version, str) else None,
            main=data.get("main"),
            module=data.get("module"),
            browser=data.get("browser"),
            exports=data.get("exports"),
            imports=data.get("imports"),
            type=pkg_type if isinstance(pkg_type, str) else None,
            side_effects=data.get("sideEffects"),
            raw=MappingProxyType(dict(data)),
        )

    def get(self, key: str) -> Any:
        """Raw value of any top-level field (used for configurable main fields)."""
        return self.raw.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self.raw

    @property
    def is_module(self) -> bool:
        """Whether the package scope declares ``"type": "module"``."""
        return self.type == "module"

    @property
    def browser_map(self) -> Optional[Mapping[str, Any]]:
        """The ``browser`` field when it is an object, else ``None``."""
        return self.browser if isinstance(self.browser, dict) else None


def manifest_path(package_root: PathLike) -> Path:
    """Location of the package.json inside ``package_root``."""
    return Path(package_root) / Constants.PACKAGE_JSON_FILE


class ManifestReader:
    """Reads and caches manifests by package root.

    ``read`` returns ``None`` when there is no package.json and raises
    :class:`InvalidManifest` when there is one that cannot be parsed.
    """

    def __init__(self, fs: FileSystemProbe, cache: Optional[ManifestCache] = None):
        self._fs = fs
        self.cache = cache if cache is not None else ManifestCache()

    async def read(self, package_root: PathLike) -> Optional[PackageManifest]:
        cached = self.cache.lookup(package_root)
        if cached is not MISSING:
            return cached

        location = manifest_path(package_root)
        content = await self._fs.read_file(location)
        if content is None:
            return self.cache.store(package_root, None)

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise InvalidManifest(
                f'Invalid package config "{location}": {exc}', package_root=Path(package_root)
            ) from exc
        if not isinstance(data, dict):
            raise InvalidManifest(
                f'Invalid package config "{location}": expected a JSON object',
                package_root=Path(package_root),
            )

        manifest = PackageManifest.from_dict(data)
        if is_debug_enabled(logger):
            logger.debug(
                "Manifest parsed",
                extra=extra_context(event="manifest_read", component="manifest",
                                    target=str(location), outcome=manifest.name),
            )
        return self.cache.store(package_root, manifest)


@dataclass(frozen=True)
class PackageScope:
    """A package root together with its manifest."""

    root: Path
    manifest: PackageManifest

    @property
    def manifest_path(self) -> Path:
        """Location of the scope's package.json."""
        return manifest_path(self.root)
