"""Evaluation of the package.json ``sideEffects`` declaration."""

from __future__ import annotations

import posixpath
from typing import Any, List, Optional, Union

from wcmatch import glob

from depresolve.common.paths import PathLike, to_posix

SideEffects = Union[bool, List[str]]

# ``*`` stays within one segment, ``**`` crosses segments, ``{a,b}`` expands.
_GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE


def validate_side_effects(value: Any) -> bool:
    """Whether ``value`` is a boolean or a list of glob strings."""
    if isinstance(value, bool):
        return True
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _anchor(pattern: str, package_root: str) -> str:
    if pattern.startswith("./"):
        pattern = pattern[2:]
    return posixpath.normpath(posixpath.join(package_root, pattern.lstrip("/")))


def normalize_side_effects(side_effects: SideEffects, package_root: PathLike) -> SideEffects:
    """Anchor every glob of ``side_effects`` at ``package_root``."""
    if isinstance(side_effects, bool):
        return side_effects
    root = glob.escape(to_posix(package_root))
    return [_anchor(pattern, root) for pattern in side_effects]


def match_side_effects(side_effects: SideEffects, path: PathLike) -> bool:
    """Whether ``path`` has side effects under the normalized declaration."""
    if isinstance(side_effects, bool):
        return side_effects
    if not side_effects:
        return False
    return glob.globmatch(to_posix(path), side_effects, flags=_GLOB_FLAGS)


def resolve_side_effects(value: Any, package_root: PathLike, path: PathLike) -> Optional[bool]:
    """Side-effects flag of ``path``; ``None`` when the declaration is absent or unusable."""
    if not validate_side_effects(value):
        return None
    return match_side_effects(normalize_side_effects(value, package_root), path)
