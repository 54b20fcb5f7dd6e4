"""LOAD_NODE_MODULES, LOAD_PACKAGE_EXPORTS and LOAD_PACKAGE_SELF."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from depresolve.cjs.loaders import load_as_directory, load_as_file
from depresolve.common.logging_utils import extra_context, is_debug_enabled
from depresolve.common.paths import join_path
from depresolve.constants import Msg
from depresolve.context import ResolutionContext
from depresolve.errors import ExplicitlyExcluded, NotFound
from depresolve.esm import package_exports_resolve, resolve_esm_match
from depresolve.format import find_closest
from depresolve.manifest import PackageManifest
from depresolve.models import ResolveResult

logger = logging.getLogger(__name__)


async def _exports_match(
    package_root: Path,
    manifest: PackageManifest,
    subpath: str,
    context: ResolutionContext,
) -> ResolveResult:
    try:
        match = package_exports_resolve(package_root, subpath, manifest.exports, context.conditions)
    except ExplicitlyExcluded as exc:
        raise ExplicitlyExcluded(
            str(exc), specifier=context.specifier, path=str(join_path(package_root, subpath))
        ) from exc
    if match is None:
        raise NotFound(
            Msg.NOT_EXPORTED.format(subpath=subpath, package=package_root),
            specifier=context.specifier,
        )
    return await resolve_esm_match(match, context)


async def load_package_exports(
    package_root: Path, subpath: str, context: ResolutionContext
) -> Optional[ResolveResult]:
    """LOAD_PACKAGE_EXPORTS.

    Returns ``None`` when the package declares no ``exports``. Once it does,
    the exports map is authoritative and a miss raises :class:`NotFound`.
    """
    manifest = await context.manifests.read(package_root)
    if manifest is None or manifest.exports is None:
        return None
    return await _exports_match(package_root, manifest, subpath, context)


async def load_package_self(
    name: str, subpath: str, context: ResolutionContext
) -> Optional[ResolveResult]:
    """LOAD_PACKAGE_SELF: a package importing itself by name through its ``exports``."""
    if context.referrer is None:
        return None
    scope = await find_closest(context.referrer, context)
    if scope is None or scope.manifest.exports is None:
        return None
    if scope.manifest.name != name:
        return None
    return await _exports_match(scope.root, scope.manifest, subpath, context)


async def load_node_modules(
    name: str,
    subpath: str,
    context: ResolutionContext,
    version: Optional[str] = None,
) -> Optional[ResolveResult]:
    """LOAD_NODE_MODULES over the strategy's candidate package roots.

    Candidates are consumed lazily; the first package that yields a result
    wins and later candidates are never probed.
    """
    candidates = context.strategy.package_candidates(
        name,
        version=version,
        referrer=context.referrer,
        is_dependency=context.is_dependency,
    )
    for package_root in candidates:
        if not await context.fs.exist_dir(package_root):
            continue
        if is_debug_enabled(logger):
            logger.debug(
                "Package candidate found",
                extra=extra_context(event="package_candidate", component="cjs",
                                    target=name, outcome=str(package_root)),
            )
        result = await load_package_exports(package_root, subpath, context)
        if result is not None:
            return result
        target = join_path(package_root, subpath)
        result = await load_as_file(target, context)
        if result is None:
            result = await load_as_directory(target, context)
        if result is not None:
            return result
    return None
