"""Package location strategies: where a package named ``name`` lives on disk."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Optional

import semantic_version

from depresolve.common.logging_utils import extra_context, is_debug_enabled
from depresolve.common.paths import PathLike, canonical_key, get_parents
from depresolve.constants import Constants
from depresolve.errors import InvalidModuleSpecifier
from depresolve.probe import FileSystemProbe

logger = logging.getLogger(__name__)


class PackageLocationStrategy(ABC):
    """Abstract capability producing candidate package roots.

    ``package_candidates`` returns a fresh lazy iterator per call; consumers
    stop at the first candidate that exists.
    """

    @property
    @abstractmethod
    def root(self) -> Path:
        """Resolution boundary of this strategy."""

    @abstractmethod
    def package_candidates(
        self,
        name: str,
        *,
        version: Optional[str] = None,
        referrer: Optional[PathLike] = None,
        is_dependency: bool = False,
    ) -> Iterator[Path]:
        """Yield candidate roots for package ``name``, best first."""

    async def find_package(
        self,
        name: str,
        fs: FileSystemProbe,
        *,
        version: Optional[str] = None,
        referrer: Optional[PathLike] = None,
        is_dependency: bool = False,
    ) -> Optional[Path]:
        """First candidate root that exists as a directory, or ``None``."""
        for candidate in self.package_candidates(
            name, version=version, referrer=referrer, is_dependency=is_dependency
        ):
            found = await fs.exist_dir(candidate)
            if is_debug_enabled(logger):
                logger.debug(
                    "Probed package candidate",
                    extra=extra_context(event="strategy_probe", component="strategy",
                                        target=name, outcome=found, candidate=str(candidate)),
                )
            if found:
                return candidate
        return None


class GlobalStrategy(PackageLocationStrategy):
    """Content-addressed store laid out as ``<cache>/npm/<registry>/<name>/<version>``."""

    def __init__(self, cache_dir: PathLike, registry_host: str = Constants.REGISTRY_HOST_NPM):
        self.cache_dir = Path(canonical_key(cache_dir))
        self.registry_host = registry_host
        self._root = self.cache_dir / "npm" / registry_host

    @property
    def root(self) -> Path:
        return self._root

    def package_root(self, name: str, version: str) -> Path:
        """Deterministic location of ``name@version`` in the store.

        Raises:
            InvalidModuleSpecifier: if ``version`` is not an exact semver version.
        """
        if not semantic_version.validate(version):
            raise InvalidModuleSpecifier(
                f'Invalid version "{version}" for package "{name}"', specifier=f"{name}@{version}"
            )
        return self._root.joinpath(*name.split("/"), version)

    def package_candidates(
        self,
        name: str,
        *,
        version: Optional[str] = None,
        referrer: Optional[PathLike] = None,
        is_dependency: bool = False,
    ) -> Iterator[Path]:
        # The store is keyed by exact version; without one there is nothing to look up.
        if version is None:
            return iter(())
        return iter((self.package_root(name, version),))

    def __repr__(self) -> str:
        return f"GlobalStrategy(root={str(self._root)!r})"


class LocalStrategy(PackageLocationStrategy):
    """A project ``node_modules`` tree; the project root is its parent directory."""

    def __init__(self, node_modules_dir: PathLike):
        self.node_modules_dir = Path(canonical_key(node_modules_dir))
        self._root = self.node_modules_dir.parent

    @property
    def root(self) -> Path:
        return self._root

    def package_candidates(
        self,
        name: str,
        *,
        version: Optional[str] = None,
        referrer: Optional[PathLike] = None,
        is_dependency: bool = False,
    ) -> Iterator[Path]:
        """Candidates for ``name``.

        Top-level imports look only in the configured ``node_modules``. A
        dependency's import walks the referrer's ancestors up to the project
        root, nearest first, skipping directories named ``node_modules``.
        """
        if not is_dependency or referrer is None:
            yield self.node_modules_dir.joinpath(*name.split("/"))
            return
        for parent in get_parents(referrer, self._root):
            if parent.name == Constants.NODE_MODULES_DIR:
                continue
            yield parent.joinpath(Constants.NODE_MODULES_DIR, *name.split("/"))

    def __repr__(self) -> str:
        return f"LocalStrategy(node_modules_dir={os.fspath(self.node_modules_dir)!r})"
