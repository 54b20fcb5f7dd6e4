"""Module format detection by extension and enclosing package scope."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from depresolve.common.logging_utils import extra_context, is_debug_enabled
from depresolve.common.paths import PathLike, get_parents
from depresolve.constants import Constants, Format
from depresolve.context import ResolutionContext
from depresolve.manifest import PackageManifest, PackageScope

logger = logging.getLogger(__name__)

_EXTENSION_FORMATS = {
    ".json": Format.JSON,
    ".wasm": Format.WASM,
    ".cjs": Format.COMMONJS,
    ".mjs": Format.MODULE,
}

_MEDIA_TYPE_FORMATS = {
    "Cjs": Format.COMMONJS,
    "Cts": Format.COMMONJS,
    "Dcts": Format.COMMONJS,
    "Mjs": Format.MODULE,
    "Mts": Format.MODULE,
    "Dmts": Format.MODULE,
    "JavaScript": Format.MODULE,
    "JSX": Format.MODULE,
    "TypeScript": Format.MODULE,
    "TSX": Format.MODULE,
    "Dts": Format.MODULE,
    "Json": Format.JSON,
    "Wasm": Format.WASM,
}

_FORMAT_MEDIA_TYPES = {
    Format.COMMONJS: "Cjs",
    Format.MODULE: "Mjs",
    Format.JSON: "Json",
    Format.WASM: "Wasm",
}

UNKNOWN_MEDIA_TYPE = "Unknown"


def format_from_ext(path: PathLike) -> Optional[Format]:
    """Format implied by the extension alone, or ``None`` when it takes a scope lookup."""
    return _EXTENSION_FORMATS.get(os.path.splitext(os.fspath(path))[1])


def format_from_manifest(manifest: Optional[PackageManifest]) -> Format:
    """``module`` for a ``"type": "module"`` scope, ``commonjs`` otherwise."""
    if manifest is not None and manifest.is_module:
        return Format.MODULE
    return Format.COMMONJS


async def find_closest(path: PathLike, context: ResolutionContext) -> Optional[PackageScope]:
    """Nearest package scope enclosing ``path``.

    The walk starts at the directory holding ``path``, never goes above the
    resolution root and gives up on reaching a ``node_modules`` directory.
    """
    for directory in get_parents(path, context.root):
        if directory.name == Constants.NODE_MODULES_DIR:
            return None
        manifest = await context.manifests.read(directory)
        if manifest is not None:
            return PackageScope(root=directory, manifest=manifest)
    return None


async def lookup_package_scope(path: PathLike, context: ResolutionContext) -> Optional[Path]:
    """Root directory of the nearest package scope of ``path``."""
    scope = await find_closest(path, context)
    return scope.root if scope is not None else None


async def file_format(path: PathLike, context: ResolutionContext) -> Format:
    """Detect the module format of an existing file.

    Args:
        path: Resolved file location.
        context: Resolution context providing the manifest reader and root.

    Returns:
        The extension's format, else the one of the enclosing package scope.
    """
    by_ext = format_from_ext(path)
    if by_ext is not None:
        return by_ext

    scope = await find_closest(path, context)
    detected = format_from_manifest(scope.manifest if scope else None)
    if is_debug_enabled(logger):
        logger.debug(
            "Format detected from package scope",
            extra=extra_context(
                event="format_detect",
                component="format",
                target=os.fspath(path),
                outcome=detected.value,
                scope=str(scope.root) if scope else None,
            ),
        )
    return detected


def media_type_to_format(media_type: Optional[str]) -> Optional[Format]:
    """Map a dependency-graph media type to a module format."""
    if media_type is None:
        return None
    return _MEDIA_TYPE_FORMATS.get(media_type)


def format_to_media_type(fmt: Optional[Format]) -> str:
    """Map a module format to a dependency-graph media type."""
    if fmt is None:
        return UNKNOWN_MEDIA_TYPE
    return _FORMAT_MEDIA_TYPES.get(fmt, UNKNOWN_MEDIA_TYPE)
