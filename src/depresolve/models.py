"""Data models shared by the resolvers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from depresolve.constants import Constants, Format


class SpecifierKind(Enum):
    """Classification of an import specifier."""

    RELATIVE = "relative"
    BARE = "bare"
    BUILTIN = "builtin"
    SUBPATH_IMPORT = "subpath-import"
    SCHEME = "scheme"


@dataclass(frozen=True)
class PackageName:
    """A bare specifier split into package name and ``.``-prefixed subpath."""

    name: str
    subpath: str


@dataclass(frozen=True)
class ResolveResult:
    """Outcome of a successful resolution.

    ``url`` is a ``file://`` URL of an entity the resolver verified, or a
    ``node:`` marker for builtins, or the graph specifier of a remote module.
    """

    url: str
    format: Optional[Format]
    side_effects: Optional[bool] = None
    media_type: Optional[str] = None
    local: Optional[Path] = None

    @classmethod
    def from_path(cls, path: Path, format: Optional[Format]) -> "ResolveResult":  # pylint: disable=redefined-builtin
        """Build a result for a file on disk."""
        return cls(url=Path(path).as_uri(), format=format)

    @classmethod
    def builtin(cls, module_name: str) -> "ResolveResult":
        """Build the external-reference marker for a Node builtin."""
        if module_name.startswith(Constants.NODE_SCHEME):
            module_name = module_name[len(Constants.NODE_SCHEME):]
        return cls(url=f"{Constants.NODE_SCHEME}{module_name}", format=Format.BUILTIN)

    @property
    def is_builtin(self) -> bool:
        """Whether this result points at a Node builtin."""
        return self.url.startswith(Constants.NODE_SCHEME)

    @property
    def path(self) -> Optional[Path]:
        """Filesystem path of the result, when there is one."""
        if self.local is not None:
            return self.local
        parsed = urlparse(self.url)
        if parsed.scheme != "file":
            return None
        return Path(unquote(parsed.path))

    def with_side_effects(self, side_effects: Optional[bool]) -> "ResolveResult":
        """Return a copy carrying the given side-effects flag."""
        return replace(self, side_effects=side_effects)
