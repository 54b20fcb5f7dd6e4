"""Exception taxonomy for module resolution.

Sub-resolvers return ``None`` when the next strategy should be tried and
raise one of these only for terminal conditions.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from depresolve.constants import Msg


class ResolutionError(Exception):
    """Base class for every resolution failure."""

    def __init__(self, message: str, *, specifier: Optional[str] = None):
        super().__init__(message)
        self.specifier = specifier


class NotFound(ResolutionError):
    """No candidate resolved."""

    @classmethod
    def for_specifier(cls, specifier: str, referrer: Optional[object] = None) -> "NotFound":
        """Build the standard "Cannot find module" error."""
        if referrer is None:
            message = Msg.NOT_FOUND.format(specifier=specifier)
        else:
            message = Msg.NOT_FOUND_FROM.format(specifier=specifier, referrer=referrer)
        return cls(message, specifier=specifier)


class BuiltinModuleNotAllowed(NotFound):
    """A Node builtin was requested for a platform without Node builtins."""


class InvalidManifest(ResolutionError):
    """A package.json exists but cannot be used as written."""

    def __init__(self, message: str, *, specifier: Optional[str] = None,
                 package_root: Optional[Path] = None):
        super().__init__(message, specifier=specifier)
        self.package_root = package_root


class InvalidPackageTarget(InvalidManifest):
    """An exports/imports target has the wrong shape."""


class InvalidModuleSpecifier(ResolutionError):
    """The specifier itself is malformed."""


class ExplicitlyExcluded(ResolutionError):
    """A mapping deliberately resolves to nothing (``null`` / ``false``).

    The host should emit an empty module for ``path`` instead of failing.
    """

    def __init__(self, message: str, *, specifier: Optional[str] = None,
                 path: Optional[str] = None):
        super().__init__(message, specifier=specifier)
        self.path = path if path is not None else specifier


class UnsupportedModuleKind(ResolutionError):
    """The module graph entry kind is not handled by this resolver."""


class DependencyGraphError(ResolutionError):
    """The dependency graph itself reports a failure."""


class RecursionLimitExceeded(ResolutionError):
    """Cross-package resolution went too deep or looped."""
