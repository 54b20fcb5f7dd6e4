"""Conditional ``exports``/``imports`` map resolution.

Implements PACKAGE_EXPORTS_RESOLVE, PACKAGE_IMPORTS_RESOLVE and their shared
target walk from the Node.js ESM resolution algorithm. Everything here is
pure: no filesystem access happens until :func:`resolve_esm_match`.

A resolved target is either an absolute :class:`~pathlib.Path` inside the
package, or, for ``imports`` only, a bare specifier string that the caller
resolves as a package import.
"""

from __future__ import annotations

import functools
import re
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

from depresolve.common.paths import is_subpath, join_path
from depresolve.errors import (
    ExplicitlyExcluded,
    InvalidManifest,
    InvalidModuleSpecifier,
    InvalidPackageTarget,
)

Target = Union[Path, str]

_INVALID_SEGMENT = re.compile(
    r"(^|\\|/)("
    r"(\.|%2e)(\.|%2e)?"
    r"|(n|%6e|%4e)(o|%6f|%4f)(d|%64|%44)(e|%65|%45)(_|%5f)"
    r"(m|%6d|%4d)(o|%6f|%4f)(d|%64|%44)(u|%75|%55)(l|%6c|%4c)(e|%65|%45)(s|%73|%53)"
    r")?(\\|/|$)",
    re.IGNORECASE,
)
_ARRAY_INDEX = re.compile(r"^(0|[1-9][0-9]*)$")
_URL_LIKE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_MISSING = object()


def pattern_key_compare(key_a: str, key_b: str) -> int:
    """PATTERN_KEY_COMPARE: order pattern keys from most to least specific."""
    base_a = key_a.find("*") + 1
    base_b = key_b.find("*") + 1
    if base_a > base_b:
        return -1
    if base_b > base_a:
        return 1
    if "*" not in key_a:
        return 1
    if "*" not in key_b:
        return -1
    if len(key_a) > len(key_b):
        return -1
    if len(key_b) > len(key_a):
        return 1
    return 0


def _is_conditions_object(value: Any) -> bool:
    return isinstance(value, dict)


def _has_invalid_segment(value: str) -> bool:
    return _INVALID_SEGMENT.search(value) is not None


def _check_condition_keys(target: Mapping[str, Any], package_root: Path) -> None:
    for key in target:
        if _ARRAY_INDEX.match(key):
            raise InvalidManifest(
                f'Invalid package config "{package_root}": "exports" cannot contain numeric property keys',
                package_root=package_root,
            )


def _resolve_string_target(
    package_root: Path,
    target: str,
    pattern_match: Optional[str],
    is_imports: bool,
) -> Target:
    if not target.startswith("./"):
        if not is_imports or target.startswith(("../", "/", "#")) or _URL_LIKE.match(target):
            raise InvalidPackageTarget(
                f'Invalid "{"imports" if is_imports else "exports"}" target "{target}" '
                f'defined in the package config "{package_root}"',
                package_root=package_root,
            )
        if pattern_match is not None:
            return target.replace("*", pattern_match)
        return target

    if _has_invalid_segment(target[2:]):
        raise InvalidPackageTarget(
            f'Invalid target "{target}" defined in the package config "{package_root}"',
            package_root=package_root,
        )

    if pattern_match is not None:
        if _has_invalid_segment(pattern_match):
            raise InvalidModuleSpecifier(
                f'Invalid pattern match "{pattern_match}" for target "{target}" '
                f'in the package config "{package_root}"',
                specifier=pattern_match,
            )
        target = target.replace("*", pattern_match)

    resolved = join_path(package_root, target)
    if not is_subpath(package_root, resolved):
        raise InvalidPackageTarget(
            f'Target "{target}" escapes the package "{package_root}"',
            package_root=package_root,
        )
    return resolved


def package_target_resolve(
    package_root: Path,
    target: Any,
    pattern_match: Optional[str],
    is_imports: bool,
    conditions: Iterable[str],
) -> Optional[Target]:
    """PACKAGE_TARGET_RESOLVE.

    Returns ``None`` when no condition of a conditional object applies.

    Raises:
        ExplicitlyExcluded: the matching target is ``null`` (or an empty array).
        InvalidPackageTarget: the target has an unusable shape or escapes the package.
        InvalidManifest: a conditions object has numeric keys.
    """
    conditions = tuple(conditions)

    if isinstance(target, str):
        return _resolve_string_target(package_root, target, pattern_match, is_imports)

    if _is_conditions_object(target):
        _check_condition_keys(target, package_root)
        for key, value in target.items():
            if key == "default" or key in conditions:
                resolved = package_target_resolve(
                    package_root, value, pattern_match, is_imports, conditions
                )
                if resolved is None:
                    continue
                return resolved
        return None

    if isinstance(target, list):
        if not target:
            raise ExplicitlyExcluded(
                f'Target is an empty array in the package config "{package_root}"'
            )
        last_error: Optional[InvalidPackageTarget] = None
        for value in target:
            try:
                resolved = package_target_resolve(
                    package_root, value, pattern_match, is_imports, conditions
                )
            except InvalidPackageTarget as exc:
                last_error = exc
                continue
            if resolved is None:
                continue
            return resolved
        if last_error is not None:
            raise last_error
        return None

    if target is None:
        raise ExplicitlyExcluded(
            f'Target is null in the package config "{package_root}"'
        )

    raise InvalidPackageTarget(
        f'Invalid target of type {type(target).__name__} in the package config "{package_root}"',
        package_root=package_root,
    )


def _expansion_keys(match_obj: Mapping[str, Any]) -> List[str]:
    keys = [key for key in match_obj if key.count("*") == 1]
    return sorted(keys, key=functools.cmp_to_key(pattern_key_compare))


def package_imports_exports_resolve(
    match_key: str,
    match_obj: Mapping[str, Any],
    package_root: Path,
    is_imports: bool,
    conditions: Iterable[str],
) -> Optional[Target]:
    """PACKAGE_IMPORTS_EXPORTS_RESOLVE over a subpath (or ``#``) map.

    A literal key wins over any pattern; among patterns the one with the
    longest prefix before ``*`` wins.
    """
    if match_key in match_obj and "*" not in match_key:
        return package_target_resolve(
            package_root, match_obj[match_key], None, is_imports, conditions
        )

    for expansion_key in _expansion_keys(match_obj):
        pattern_base, _, pattern_trailer = expansion_key.partition("*")
        if not match_key.startswith(pattern_base) or match_key == pattern_base:
            continue
        if pattern_trailer and not (
            match_key.endswith(pattern_trailer) and len(match_key) >= len(expansion_key)
        ):
            continue
        pattern_match = match_key[len(pattern_base):len(match_key) - len(pattern_trailer)]
        return package_target_resolve(
            package_root, match_obj[expansion_key], pattern_match, is_imports, conditions
        )
    return None


def _is_subpath_map(exports: Mapping[str, Any], package_root: Path) -> bool:
    dotted = [key.startswith(".") for key in exports]
    if any(dotted) and not all(dotted):
        raise InvalidManifest(
            f'Invalid package config "{package_root}": "exports" cannot contain some keys '
            'starting with "." and some not',
            package_root=package_root,
        )
    return bool(dotted) and all(dotted)


def package_exports_resolve(
    package_root: Path,
    subpath: str,
    exports: Any,
    conditions: Iterable[str],
) -> Optional[Path]:
    """PACKAGE_EXPORTS_RESOLVE.

    Args:
        package_root: Directory holding the package.json.
        subpath: ``.``-prefixed subpath requested from the package.
        exports: The manifest's ``exports`` value.
        conditions: Ordered active conditions.

    Returns:
        The target location, or ``None`` when the subpath is not exported.
    """
    subpath_map = isinstance(exports, dict) and _is_subpath_map(exports, package_root)

    if subpath == ".":
        main_export: Any = _MISSING
        if not subpath_map:
            main_export = exports
        elif "." in exports:
            main_export = exports["."]
        if main_export is _MISSING:
            return None
        return package_target_resolve(package_root, main_export, None, False, conditions)

    if not subpath_map:
        return None
    return package_imports_exports_resolve(subpath, exports, package_root, False, conditions)


def package_imports_resolve(
    specifier: str,
    package_root: Path,
    imports: Any,
    conditions: Iterable[str],
) -> Optional[Target]:
    """PACKAGE_IMPORTS_RESOLVE against an already located package scope.

    Raises:
        InvalidModuleSpecifier: for ``#`` and ``#/``-prefixed specifiers.
    """
    if specifier == "#" or specifier.startswith("#/"):
        raise InvalidModuleSpecifier(
            f'Invalid module specifier "{specifier}": "#" and "#/" are not valid import specifiers',
            specifier=specifier,
        )
    if not isinstance(imports, dict):
        return None
    return package_imports_exports_resolve(specifier, imports, package_root, True, conditions)

