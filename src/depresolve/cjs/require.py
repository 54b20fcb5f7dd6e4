"""The CommonJS ``require`` entry point."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from depresolve.cjs.imports import load_package_imports
from depresolve.cjs.loaders import load_as
from depresolve.cjs.node_modules import load_node_modules, load_package_self
from depresolve.common.logging_utils import Timer, extra_context, is_debug_enabled
from depresolve.common.paths import PathLike, resolve_relative
from depresolve.context import HookOutcome, ResolutionContext, run_hook
from depresolve.errors import ExplicitlyExcluded, InvalidModuleSpecifier, NotFound
from depresolve.models import ResolveResult, SpecifierKind
from depresolve.specifiers import classify_specifier, is_builtin, parse_npm_pkg

logger = logging.getLogger(__name__)


def excluded(specifier: str, referrer: Path) -> ExplicitlyExcluded:
    """Error for a disabled module; relative specifiers carry their absolute path."""
    kind = classify_specifier(specifier)
    path = str(resolve_relative(specifier, referrer)) if kind is SpecifierKind.RELATIVE else specifier
    return ExplicitlyExcluded(f'Module "{specifier}" is disabled', specifier=specifier, path=path)


async def _follow(outcome: HookOutcome, specifier: str, referrer: Path,
                  context: ResolutionContext) -> Optional[ResolveResult]:
    """Continue resolution from a hook's answer; ``None`` when it had none."""
    if outcome is None:
        return None
    if outcome is False:
        raise excluded(specifier, referrer)
    if isinstance(outcome, Path):
        return await load_as(outcome, context)
    if isinstance(outcome, str):
        return await require(outcome, referrer, context.without_hook())
    return None


async def _require(specifier: str, referrer: Path, context: ResolutionContext) -> ResolveResult:
    kind = classify_specifier(specifier)

    if kind is SpecifierKind.SCHEME and not is_builtin(specifier):
        raise InvalidModuleSpecifier(
            f'Specifier "{specifier}" carries a scheme and must be resolved through the dependency graph',
            specifier=specifier,
        )

    if kind is SpecifierKind.SUBPATH_IMPORT:
        result = await load_package_imports(specifier, context)
        if result is None:
            raise NotFound.for_specifier(specifier, referrer)
        return result

    mapped = await _follow(await run_hook(specifier, referrer, context), specifier, referrer, context)
    if mapped is not None:
        return mapped

    if kind in (SpecifierKind.BUILTIN, SpecifierKind.SCHEME):
        return ResolveResult.builtin(specifier)

    if kind is SpecifierKind.RELATIVE:
        return await load_as(resolve_relative(specifier, referrer), context)

    package = parse_npm_pkg(specifier)
    result = await load_package_self(package.name, package.subpath, context)
    if result is None:
        result = await load_node_modules(package.name, package.subpath, context)
    if result is None:
        raise NotFound.for_specifier(specifier, referrer)
    return result


async def require(specifier: str, referrer: PathLike, context: ResolutionContext) -> ResolveResult:
    """Resolve ``specifier`` from the file ``referrer`` with the CommonJS algorithm.

    Args:
        specifier: Builtin, relative, ``#`` import or bare package specifier.
        referrer: Absolute location of the requiring file.
        context: Resolution context; its ``specifier``/``referrer`` are replaced.

    Returns:
        A verified :class:`ResolveResult`; builtins come back as ``node:`` markers.

    Raises:
        NotFound: nothing resolved.
        ExplicitlyExcluded: a mapping disabled the module.
        InvalidManifest: a consulted package.json is unusable.
        InvalidModuleSpecifier: the specifier is malformed.
    """
    referrer = Path(referrer)
    context = context.evolve(specifier=specifier, referrer=referrer)
    with Timer() as timer:
        result = await _require(specifier, referrer, context)
    if is_debug_enabled(logger):
        logger.debug(
            "require resolved",
            extra=extra_context(event="require", component="cjs", target=specifier,
                                outcome=result.url, duration_ms=timer.duration_ms()),
        )
    return result
