"""LOAD_AS_FILE, LOAD_INDEX and LOAD_AS_DIRECTORY.

Each loader returns ``None`` when nothing matched so the caller can move on
to its next strategy. Only a main field that names a missing entry is fatal.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from depresolve.common.logging_utils import extra_context, is_debug_enabled
from depresolve.common.paths import concat_path, join_path
from depresolve.constants import Constants
from depresolve.context import ResolutionContext, run_hook
from depresolve.errors import ExplicitlyExcluded, NotFound
from depresolve.format import file_format
from depresolve.manifest import PackageManifest, manifest_path
from depresolve.models import ResolveResult

logger = logging.getLogger(__name__)


async def _load_existing(path: Path, context: ResolutionContext) -> Optional[ResolveResult]:
    if await context.fs.exist_file(path):
        return ResolveResult.from_path(path, await file_format(path, context))
    return None


async def load_as_file(path: Path, context: ResolutionContext) -> Optional[ResolveResult]:
    """LOAD_AS_FILE: ``path`` itself, then ``path`` + ``.js``/``.json``/``.node``."""
    result = await _load_existing(path, context)
    if result is not None:
        return result
    for ext in Constants.DEFAULT_EXTENSIONS:
        result = await _load_existing(concat_path(path, ext), context)
        if result is not None:
            return result
    return None


async def load_index(directory: Path, context: ResolutionContext) -> Optional[ResolveResult]:
    """LOAD_INDEX: ``index.js``, ``index.json`` then ``index.node`` inside ``directory``."""
    for name in Constants.INDEX_FILES:
        result = await _load_existing(directory / name, context)
        if result is not None:
            return result
    return None


def resolve_fields(manifest: PackageManifest, fields: Iterable[str]) -> Optional[str]:
    """First non-empty string among ``fields`` of ``manifest``, ``./``-prefixed."""
    for name in fields:
        value = manifest.get(name)
        if isinstance(value, str) and value:
            return value if value.startswith(".") else "./" + value
    return None


async def load_as_directory(directory: Path, context: ResolutionContext) -> Optional[ResolveResult]:
    """LOAD_AS_DIRECTORY.

    Once a main field yields a value the directory is committed to it: a
    missing entry raises instead of falling back to ``index.js``.

    Raises:
        NotFound: the main field's entry does not exist.
        ExplicitlyExcluded: the resolution hook disabled the main entry.
    """
    manifest = await context.manifests.read(directory)
    if manifest is not None:
        value = resolve_fields(manifest, context.main_fields)
        if value is not None:
            if is_debug_enabled(logger):
                logger.debug(
                    "Main field selected",
                    extra=extra_context(event="main_field", component="cjs",
                                        target=str(directory), outcome=value),
                )
            pjson = manifest_path(directory)
            outcome = await run_hook(value, pjson, context)
            if outcome is False:
                raise ExplicitlyExcluded(
                    f'Main entry "{value}" of "{directory}" is disabled',
                    specifier=context.specifier, path=str(join_path(directory, value)),
                )
            if isinstance(outcome, str):
                # circular: require is built on these loaders
                from depresolve.cjs.require import require  # pylint: disable=import-outside-toplevel
                return await require(outcome, pjson, context.without_hook())

            entry = outcome if isinstance(outcome, Path) else join_path(directory, value)
            result = await load_as_file(entry, context)
            if result is None:
                result = await load_index(entry, context)
            if result is not None:
                return result
            raise NotFound.for_specifier(context.specifier or value, context.referrer)

    return await load_index(directory, context)


async def load_as(path: Path, context: ResolutionContext) -> ResolveResult:
    """LOAD_AS_FILE then LOAD_AS_DIRECTORY, raising when neither matches."""
    result = await load_as_file(path, context)
    if result is None:
        result = await load_as_directory(path, context)
    if result is None:
        raise NotFound.for_specifier(context.specifier or str(path), context.referrer)
    return result
