"""Specifier classification and bare-specifier parsing."""

from __future__ import annotations

from depresolve.constants import Constants
from depresolve.errors import InvalidModuleSpecifier
from depresolve.models import PackageName, SpecifierKind


def is_builtin(specifier: str) -> bool:
    """Mirror of ``node:module.isBuiltin``."""
    if specifier.startswith(Constants.NODE_SCHEME):
        name = specifier[len(Constants.NODE_SCHEME):]
        return name in Constants.NODE_BUILTIN_MODULES or name in Constants.NODE_SCHEME_ONLY_MODULES
    return specifier in Constants.NODE_BUILTIN_MODULES


def is_like_path(specifier: str) -> bool:
    """Whether the specifier is ``./``, ``../`` or ``/`` prefixed."""
    return specifier.startswith(("./", "../", "/"))


def has_scheme(specifier: str) -> bool:
    """Whether the specifier carries a scheme handled by the graph collaborator."""
    return specifier.startswith(Constants.SCHEME_PREFIXES)


def classify_specifier(specifier: str) -> SpecifierKind:
    """Classify a specifier into exactly one :class:`SpecifierKind`."""
    if has_scheme(specifier):
        return SpecifierKind.SCHEME
    if specifier.startswith("#"):
        return SpecifierKind.SUBPATH_IMPORT
    if is_like_path(specifier):
        return SpecifierKind.RELATIVE
    if is_builtin(specifier):
        return SpecifierKind.BUILTIN
    return SpecifierKind.BARE


def _second_index_of(value: str, needle: str) -> int:
    first = value.find(needle)
    if first == -1:
        return -1
    return value.find(needle, first + 1)


def parse_npm_pkg(specifier: str) -> PackageName:
    """Split ``name[/sub]`` or ``@scope/name[/sub]`` into name and subpath.

    Raises:
        InvalidModuleSpecifier: for empty names, scopes without a name, or
            names Node refuses (leading ``.``, ``\\`` or ``%``).
    """
    if specifier.startswith("@"):
        if "/" not in specifier:
            raise InvalidModuleSpecifier(
                f'Invalid module specifier "{specifier}": scoped package without a name',
                specifier=specifier,
            )
        index = _second_index_of(specifier, "/")
    else:
        index = specifier.find("/")
    name = specifier if index == -1 else specifier[:index]
    if not name or name.startswith(".") or "\\" in name or "%" in name:
        raise InvalidModuleSpecifier(
            f'Invalid module specifier "{specifier}"', specifier=specifier
        )
    return PackageName(name=name, subpath=f".{specifier[len(name):]}")


def parse_npm_subpath(specifier: str, name: str, version: str) -> str:
    """Extract the ``.``-prefixed subpath of an ``npm:/name@version/sub`` specifier."""
    body = specifier[len(Constants.NPM_SCHEME):] if specifier.startswith(Constants.NPM_SCHEME) else specifier
    body = body.lstrip("/")
    prefix = f"{name}@{version}"
    if not body.startswith(prefix):
        return "."
    return f".{body[len(prefix):]}"


def npm_specifier(name: str, version: str, subpath: str = ".") -> str:
    """Build the canonical ``npm:/name@version[/sub]`` specifier."""
    return f"{Constants.NPM_SCHEME}/{name}@{version}{subpath[1:]}"
