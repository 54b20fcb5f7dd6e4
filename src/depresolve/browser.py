"""The package.json ``browser`` field remapping layer.

Keys of an object-valued ``browser`` field are relative to the package root.
A value of ``false`` disables the module; a string value replaces it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional, Union

from depresolve.common.logging_utils import extra_context, is_debug_enabled
from depresolve.common.paths import is_subpath, join_path, resolve_relative, to_posix
from depresolve.constants import Constants
from depresolve.context import HookOutcome, ResolutionContext
from depresolve.errors import InvalidManifest
from depresolve.format import find_closest
from depresolve.specifiers import is_like_path

logger = logging.getLogger(__name__)

BrowserValue = Union[str, bool]


def browser_candidates(specifier: str) -> Iterator[str]:
    """Yield the map keys to probe for ``specifier``, best match first.

    The literal and ``./``-prefixed forms come before any extension-suffixed
    form, so an exact key always outranks a suffixed one.
    """
    bases = [specifier]
    if not specifier.startswith("./"):
        bases.append("./" + specifier)
    yield from bases
    for ext in Constants.BROWSER_EXTENSIONS:
        for base in bases:
            yield base + ext


def validate_browser_value(value: Any) -> bool:
    """Whether ``value`` is usable as a browser map value (a string or ``false``)."""
    return isinstance(value, str) or value is False


def map_browser(specifier: str, browser: Mapping[str, Any]) -> Optional[BrowserValue]:
    """Look ``specifier`` up in a browser map.

    Returns:
        The mapped string, ``False`` for a disabled module, or ``None`` when
        no key matches.

    Raises:
        InvalidManifest: if the matching key maps to anything else.
    """
    for key in browser_candidates(specifier):
        if key not in browser:
            continue
        value = browser[key]
        if not validate_browser_value(value):
            raise InvalidManifest(
                f'Invalid "browser" mapping for "{key}": expected a string or false, '
                f"got {type(value).__name__}",
                specifier=specifier,
            )
        return value
    return None


def _map_key(specifier: str, referrer: Path, package_root: Path) -> Optional[str]:
    if not is_like_path(specifier):
        return specifier
    location = resolve_relative(specifier, referrer)
    if not is_subpath(package_root, location):
        return None
    relative = to_posix(os.path.relpath(location, package_root))
    return "./" + relative if relative != "." else "."


async def browser_hook(specifier: str, referrer: Path, context: ResolutionContext) -> HookOutcome:
    """Resolution hook applying the nearest scope's ``browser`` map.

    Relative specifiers are rebased onto the package root before lookup.
    Mapped relative values come back as absolute paths, bare values as
    specifiers to resolve again.
    """
    scope = await find_closest(referrer, context)
    if scope is None:
        return None
    browser = scope.manifest.browser_map
    if browser is None:
        return None

    key = _map_key(specifier, referrer, scope.root)
    if key is None:
        return None
    value = map_browser(key, browser)
    if value is None:
        return None

    if is_debug_enabled(logger):
        logger.debug(
            "Browser map applied",
            extra=extra_context(event="browser_map", component="browser",
                                target=specifier, outcome=str(value), scope=str(scope.root)),
        )
    if value is False:
        return False
    if is_like_path(value):
        return join_path(scope.root, value)
    return value
