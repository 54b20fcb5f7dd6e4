"""Dependency-graph data model.

The graph is produced by an external collaborator (``deno info --json``
shaped): a module list, a redirect map and an npm package registry keyed by
package key (``name@version`` plus an optional ``_peer`` suffix).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import semantic_version

from depresolve.constants import Msg
from depresolve.errors import DependencyGraphError, NotFound
from depresolve.graph_schema import validate_graph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dependency:
    """One import of an ES module as recorded by the graph."""

    specifier: str
    code_specifier: Optional[str] = None
    code_error: Optional[str] = None
    npm_package: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Dependency":
        code = data.get("code") or {}
        return cls(
            specifier=data["specifier"],
            code_specifier=code.get("specifier"),
            code_error=code.get("error"),
            npm_package=data.get("npmPackage"),
        )


@dataclass(frozen=True)
class EsModule:
    specifier: str
    local: Optional[str] = None
    media_type: str = "Unknown"
    dependencies: Tuple[Dependency, ...] = ()
    kind: str = "esm"


@dataclass(frozen=True)
class AssertedModule:
    specifier: str
    local: Optional[str] = None
    media_type: str = "Unknown"
    kind: str = "asserted"


@dataclass(frozen=True)
class NpmModule:
    specifier: str
    npm_package: str
    kind: str = "npm"


@dataclass(frozen=True)
class NodeModule:
    specifier: str
    module_name: str
    kind: str = "node"


@dataclass(frozen=True)
class ErrorEntry:
    specifier: str
    error: str
    kind: str = "error"


@dataclass(frozen=True)
class UnsupportedModule:
    """Entry of a kind this resolver does not know."""

    specifier: str
    kind: str
    raw: Mapping[str, Any] = field(default_factory=dict)


ModuleEntry = Union[EsModule, AssertedModule, NpmModule, NodeModule, ErrorEntry, UnsupportedModule]


@dataclass(frozen=True)
class NpmPackage:
    key: str
    name: str
    version: str
    dependencies: Tuple[str, ...] = ()


def parse_package_key(key: str) -> Tuple[str, str]:
    """Split ``name@version[_peer...]`` into name and exact version.

    Raises:
        DependencyGraphError: when the key has no valid semver version.
    """
    at = key.find("@", 1 if key.startswith("@") else 0)
    if at <= 0:
        raise DependencyGraphError(f'Invalid npm package key "{key}"', specifier=key)
    name = key[:at]
    version = key[at + 1:].split("_", 1)[0]
    if not semantic_version.validate(version):
        raise DependencyGraphError(
            f'Invalid version "{version}" in npm package key "{key}"', specifier=key
        )
    return name, version


def parse_module_entry(data: Mapping[str, Any]) -> ModuleEntry:
    """Build the typed entry for one element of the graph's ``modules`` list."""
    specifier = data["specifier"]
    if "error" in data:
        return ErrorEntry(specifier=specifier, error=str(data["error"]))

    kind = data.get("kind")
    if kind == "esm":
        return EsModule(
            specifier=specifier,
            local=data.get("local"),
            media_type=data.get("mediaType", "Unknown"),
            dependencies=tuple(Dependency.from_dict(dep) for dep in data.get("dependencies") or ()),
        )
    if kind == "asserted":
        return AssertedModule(
            specifier=specifier, local=data.get("local"), media_type=data.get("mediaType", "Unknown")
        )
    if kind == "npm":
        return NpmModule(specifier=specifier, npm_package=data["npmPackage"])
    if kind == "node":
        return NodeModule(specifier=specifier, module_name=data["moduleName"])
    return UnsupportedModule(specifier=specifier, kind=str(kind), raw=dict(data))


class ModuleGraph:
    """Read-only view over a dependency graph."""

    def __init__(
        self,
        modules: List[ModuleEntry],
        redirects: Optional[Mapping[str, str]] = None,
        npm_packages: Optional[Mapping[str, NpmPackage]] = None,
        roots: Optional[List[str]] = None,
    ):
        self.modules: Dict[str, ModuleEntry] = {module.specifier: module for module in modules}
        self.redirects: Dict[str, str] = dict(redirects or {})
        self.npm_packages: Dict[str, NpmPackage] = dict(npm_packages or {})
        self.roots: List[str] = list(roots or [])

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModuleGraph":
        packages = {}
        for key, value in (data.get("npmPackages") or {}).items():
            name, version = value.get("name"), value.get("version")
            if not name or not version:
                # fall back to the parts of the package key
                name, version = parse_package_key(key)
            packages[key] = NpmPackage(
                key=key,
                name=name,
                version=version,
                dependencies=tuple(value.get("dependencies") or ()),
            )
        return cls(
            modules=[parse_module_entry(entry) for entry in data.get("modules") or ()],
            redirects=data.get("redirects") or {},
            npm_packages=packages,
            roots=data.get("roots") or [],
        )

    @classmethod
    def from_json(cls, text: str) -> "ModuleGraph":
        """Parse the collaborator's JSON output.

        Raises:
            DependencyGraphError: on malformed JSON or entries missing required keys.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DependencyGraphError(f"Invalid dependency graph JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise DependencyGraphError("Invalid dependency graph: expected a JSON object")
        validate_graph(data)
        try:
            return cls.from_dict(data)
        except (KeyError, TypeError, AttributeError) as exc:
            raise DependencyGraphError(f"Invalid dependency graph entry: {exc!r}") from exc

    def follow_redirects(self, specifier: str) -> str:
        """Final specifier after following the redirect chain."""
        seen = set()
        while specifier in self.redirects and specifier not in seen:
            seen.add(specifier)
            specifier = self.redirects[specifier]
        return specifier

    def find_module(self, specifier: str) -> Optional[ModuleEntry]:
        return self.modules.get(self.follow_redirects(specifier))

    def npm_package(self, key: str) -> NpmPackage:
        """Registry entry for ``key``.

        Raises:
            DependencyGraphError: when the graph has no such package.
        """
        package = self.npm_packages.get(key)
        if package is None:
            raise DependencyGraphError(Msg.NPM_PACKAGE_NOT_FOUND.format(key=key), specifier=key)
        return package

    def package_dependencies(self, package: NpmPackage) -> List[NpmPackage]:
        """Registry entries of the declared dependencies of ``package`` present in the graph."""
        return [self.npm_packages[key] for key in package.dependencies if key in self.npm_packages]

    @staticmethod
    def find_dependency(module: EsModule, specifier: str) -> Dependency:
        """The dependency of ``module`` imported as ``specifier``.

        Raises:
            NotFound: when ``module`` does not import ``specifier``.
        """
        for dependency in module.dependencies:
            if dependency.specifier == specifier:
                return dependency
        raise NotFound(Msg.DEPENDENCY_NOT_FOUND.format(specifier=specifier), specifier=specifier)

    def dependency_target(self, dependency: Dependency) -> Optional[ModuleEntry]:
        """Module entry a dependency resolves to.

        npm dependencies become a synthetic npm module entry addressed by the
        redirected code specifier.
        """
        if dependency.code_error is not None:
            return ErrorEntry(specifier=dependency.specifier, error=dependency.code_error)
        if dependency.code_specifier is None:
            return None
        if dependency.npm_package:
            return NpmModule(
                specifier=self.follow_redirects(dependency.code_specifier),
                npm_package=dependency.npm_package,
            )
        return self.find_module(dependency.code_specifier)
