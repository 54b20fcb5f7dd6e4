"""LOAD_PACKAGE_IMPORTS for ``#``-prefixed specifiers."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from depresolve.constants import Msg
from depresolve.context import ResolutionContext
from depresolve.errors import ExplicitlyExcluded, NotFound
from depresolve.esm import package_imports_resolve, resolve_esm_match
from depresolve.format import find_closest
from depresolve.models import ResolveResult


async def load_package_imports(specifier: str, context: ResolutionContext) -> Optional[ResolveResult]:
    """Resolve ``specifier`` through the nearest scope's ``imports`` map.

    Returns ``None`` when there is no scope or it declares no ``imports``.
    A bare package target is resolved as a package import from the scope.

    Raises:
        NotFound: the scope declares ``imports`` but none matches.
        InvalidModuleSpecifier: for ``#`` and ``#/`` specifiers.
    """
    if context.referrer is None:
        return None
    scope = await find_closest(context.referrer, context)
    if scope is None or scope.manifest.imports is None:
        return None

    try:
        match = package_imports_resolve(specifier, scope.root, scope.manifest.imports, context.conditions)
    except ExplicitlyExcluded as exc:
        # bare specifiers name the disabled module directly
        raise ExplicitlyExcluded(str(exc), specifier=specifier, path=specifier) from exc
    if match is None:
        raise NotFound(
            Msg.IMPORT_NOT_DEFINED.format(specifier=specifier, package=scope.manifest_path),
            specifier=specifier,
        )
    if isinstance(match, Path):
        return await resolve_esm_match(match, context)

    # circular: require dispatches back into this module
    from depresolve.cjs.require import require  # pylint: disable=import-outside-toplevel
    return await require(match, scope.manifest_path, context)
