"""Path helpers used by every resolver layer."""

from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import Iterator, Union

PathLike = Union[str, "os.PathLike[str]"]


def canonical_key(path: PathLike) -> str:
    """Canonical cache key for an absolute location."""
    return os.path.normpath(os.fspath(path))


def join_path(base: PathLike, *parts: str) -> Path:
    """Join package-relative parts onto ``base`` and normalize ``.``/``..``.

    Leading slashes in ``parts`` are treated as relative to ``base`` the way
    URL joining of package.json values behaves.
    """
    joined = os.fspath(base)
    for part in parts:
        joined = os.path.join(joined, part.replace("\\", "/").lstrip("/"))
    return Path(os.path.normpath(joined))


def concat_path(path: PathLike, suffix: str) -> Path:
    """Append ``suffix`` to the last path segment (``a/b`` + ``.js``)."""
    return Path(os.fspath(path) + suffix)


def resolve_relative(specifier: str, referrer: PathLike) -> Path:
    """Resolve ``./x``, ``../x`` or ``/x`` against the referrer file."""
    if specifier.startswith("/"):
        return Path(os.path.normpath(specifier))
    base = os.path.dirname(os.fspath(referrer))
    return Path(os.path.normpath(os.path.join(base, specifier)))


def is_subpath(parent: PathLike, child: PathLike) -> bool:
    """Whether ``child`` equals or lies inside ``parent``."""
    parent_path = Path(canonical_key(parent))
    child_path = Path(canonical_key(child))
    return child_path == parent_path or parent_path in child_path.parents


def get_parents(path: PathLike, root: PathLike) -> Iterator[Path]:
    """Yield ancestors of ``path``, nearest first, up to and including ``root``.

    Nothing is yielded when ``path`` is ``root`` itself or lies outside it.
    The returned generator is single-use.
    """
    current = Path(canonical_key(path))
    boundary = Path(canonical_key(root))
    if not is_subpath(boundary, current):
        return
    while current != boundary:
        parent = current.parent
        if parent == current:
            return
        yield parent
        current = parent


def to_posix(path: PathLike) -> str:
    """Render a path with forward slashes for glob and map-key matching."""
    return posixpath.normpath(os.fspath(path).replace(os.sep, "/"))
