"""Build options: platform, resolution conditions and main fields."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple, Union

from depresolve.constants import Constants, Platform


def normalize_platform(platform: Union[Platform, str, None]) -> Platform:
    """The given platform, ``browser`` when unset.

    Raises:
        ValueError: for an unknown platform name.
    """
    if platform is None:
        return Constants.DEFAULT_PLATFORM
    return Platform(platform)


def resolve_kind(kind: Optional[str]) -> Optional[str]:
    """Condition implied by the bundler's import kind."""
    if kind in ("import-statement", "dynamic-import", "entry-point"):
        return "import"
    if kind == "require-call":
        return "require"
    return None


def resolve_platform(platform: Platform) -> Optional[str]:
    """Condition implied by the platform; none for ``neutral``."""
    if platform is Platform.BROWSER:
        return "browser"
    if platform is Platform.NODE:
        return "node"
    return None


def resolve_conditions(
    conditions: Optional[Iterable[str]] = None,
    kind: Optional[str] = None,
    platform: Union[Platform, str, None] = None,
) -> Tuple[str, ...]:
    """Ordered, de-duplicated condition set.

    User conditions come first, then the import-kind and platform
    conditions. ``module`` is added only when the user supplied none.
    """
    ordered = []
    for condition in conditions or ():
        if condition not in ordered:
            ordered.append(condition)
    for implied in (resolve_kind(kind), resolve_platform(normalize_platform(platform))):
        if implied is not None and implied not in ordered:
            ordered.append(implied)
    if conditions is None and "module" not in ordered:
        ordered.append("module")
    return tuple(ordered)


def resolve_main_fields(
    main_fields: Optional[Iterable[str]] = None,
    platform: Union[Platform, str, None] = None,
) -> Tuple[str, ...]:
    """User main fields if given, else the platform defaults."""
    if main_fields is not None:
        return tuple(main_fields)
    return Constants.DEFAULT_MAIN_FIELDS[normalize_platform(platform)]
