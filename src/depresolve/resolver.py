"""Module Resolver: dispatch over dependency-graph entries.

Every public coroutine returns a verified :class:`ResolveResult` or raises a
:class:`~depresolve.errors.ResolutionError`. This is the only layer that
turns an exhausted fallback chain into :class:`NotFound`.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import replace
from pathlib import Path
from typing import Awaitable, Callable, Iterable, NoReturn, Optional, Union

from depresolve.browser import browser_hook
from depresolve.cjs import load_as, load_as_directory, load_as_file, load_package_exports, load_package_imports
from depresolve.cjs import require as cjs_require
from depresolve.cjs.require import excluded
from depresolve.common.logging_utils import Timer, extra_context, is_debug_enabled
from depresolve.common.paths import PathLike, join_path, resolve_relative
from depresolve.constants import Constants, Msg, Platform
from depresolve.context import ResolutionContext, run_hook
from depresolve.errors import (
    BuiltinModuleNotAllowed,
    DependencyGraphError,
    ExplicitlyExcluded,
    InvalidModuleSpecifier,
    NotFound,
    ResolutionError,
    UnsupportedModuleKind,
)
from depresolve.format import format_to_media_type, media_type_to_format
from depresolve.graph import (
    AssertedModule,
    EsModule,
    ErrorEntry,
    ModuleEntry,
    ModuleGraph,
    NodeModule,
    NpmModule,
    NpmPackage,
    UnsupportedModule,
)
from depresolve.manifest import ManifestReader, PackageManifest, manifest_path
from depresolve.models import ResolveResult, SpecifierKind
from depresolve.options import normalize_platform, resolve_conditions, resolve_main_fields
from depresolve.probe import CachedFileSystem, FileSystemProbe
from depresolve.side_effects import resolve_side_effects
from depresolve.specifiers import classify_specifier, is_builtin, npm_specifier, parse_npm_pkg, parse_npm_subpath
from depresolve.strategy import PackageLocationStrategy

logger = logging.getLogger(__name__)

# Produces a dependency graph rooted at the given specifier.
GraphProvider = Callable[[str], Awaitable[ModuleGraph]]


def _kind_error(kind: str, specifier: Optional[str]) -> UnsupportedModuleKind:
    return UnsupportedModuleKind(Msg.UNSUPPORTED_KIND.format(kind=kind, specifier=specifier), specifier=specifier)


def _assert_never(entry: NoReturn) -> NoReturn:
    raise _kind_error(getattr(entry, "kind", type(entry).__name__), getattr(entry, "specifier", None))


class ModuleResolver:
    """Resolve graph modules and their dependencies to files on disk.

    Args:
        strategy: Where npm packages live.
        graph: Dependency graph of the current build; empty when omitted.
        fs: Filesystem probe; a fresh cached local probe when omitted.
        manifests: Manifest reader sharing the session caches.
        platform: Target platform, ``browser`` by default.
        conditions: User conditions; ``None`` enables the default ``module`` condition.
        main_fields: User main fields; ``None`` uses the platform defaults.
        graph_provider: Fetches a broader graph for packages missing from
            the declared dependencies (optional peer dependencies).
        max_depth: Bound on cross-package fallback recursion.
    """

    def __init__(
        self,
        strategy: PackageLocationStrategy,
        graph: Optional[ModuleGraph] = None,
        *,
        fs: Optional[FileSystemProbe] = None,
        manifests: Optional[ManifestReader] = None,
        platform: Union[Platform, str, None] = None,
        conditions: Optional[Iterable[str]] = None,
        main_fields: Optional[Iterable[str]] = None,
        graph_provider: Optional[GraphProvider] = None,
        max_depth: int = Constants.MAX_RESOLUTION_DEPTH,
    ):
        self.strategy = strategy
        self.graph = graph if graph is not None else ModuleGraph([])
        self.fs = fs if fs is not None else CachedFileSystem()
        self.manifests = manifests if manifests is not None else ManifestReader(self.fs)
        self.platform = normalize_platform(platform)
        self.user_conditions = tuple(conditions) if conditions is not None else None
        self.main_fields = resolve_main_fields(main_fields, self.platform)
        self.graph_provider = graph_provider
        self.max_depth = max_depth

    def context(self, kind: Optional[str] = None) -> ResolutionContext:
        """Fresh top-level context for an import of the given bundler ``kind``."""
        return ResolutionContext(
            fs=self.fs,
            manifests=self.manifests,
            strategy=self.strategy,
            conditions=resolve_conditions(self.user_conditions, kind, self.platform),
            main_fields=self.main_fields,
            platform=self.platform,
            hook=browser_hook if self.platform is Platform.BROWSER else None,
            is_dependency=False,
            max_depth=self.max_depth,
        )

    def with_graph(self, graph: ModuleGraph) -> "ModuleResolver":
        """Resolver over ``graph`` sharing this one's caches and options."""
        clone = copy.copy(self)
        clone.graph = graph
        return clone

    def with_options(
        self,
        conditions: Optional[Iterable[str]] = None,
        main_fields: Optional[Iterable[str]] = None,
    ) -> "ModuleResolver":
        """Resolver with per-call condition or main-field overrides, sharing caches."""
        clone = copy.copy(self)
        if conditions is not None:
            clone.user_conditions = tuple(conditions)
        if main_fields is not None:
            clone.main_fields = tuple(main_fields)
        return clone

    # Public entry points

    async def resolve(
        self,
        specifier: str,
        importer: Optional[str] = None,
        referrer: Optional[PathLike] = None,
        kind: Optional[str] = None,
    ) -> ResolveResult:
        """Resolve a graph root (no ``importer``) or a dependency of ``importer``.

        Args:
            specifier: Graph specifier, or the import specifier written in ``importer``.
            importer: Graph specifier of the importing module.
            referrer: Local path of the importing file; derived from the graph when omitted.
            kind: Bundler import kind, selecting ``import``/``require`` conditions.
        """
        context = self.context(kind)
        with Timer() as timer:
            try:
                if importer is None:
                    result = await self.resolve_entry(self.graph.find_module(specifier), specifier, context)
                else:
                    module = self.graph.find_module(importer)
                    if module is None:
                        raise NotFound.for_specifier(importer)
                    result = await self.resolve_dependency(module, specifier, referrer, context)
            except ExplicitlyExcluded:
                raise
            except ResolutionError as exc:
                logger.debug(
                    "Resolution failed",
                    extra=extra_context(event="resolve", component="resolver", target=specifier,
                                        outcome=type(exc).__name__, duration_ms=timer.duration_ms()),
                )
                raise
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved",
                extra=extra_context(event="resolve", component="resolver", target=specifier,
                                    outcome=result.url, duration_ms=timer.duration_ms()),
            )
        return result

    async def require(self, specifier: str, referrer: PathLike, kind: Optional[str] = "require-call") -> ResolveResult:
        """Plain CommonJS resolution from a file, without a dependency graph."""
        context = self.context(kind).evolve(is_dependency=True)
        return await cjs_require(specifier, referrer, context)

    # Module entries

    async def resolve_entry(
        self, entry: Optional[ModuleEntry], specifier: str, context: ResolutionContext
    ) -> ResolveResult:
        """Resolve a graph entry that may be missing or carry an error."""
        if entry is None:
            raise NotFound.for_specifier(specifier)
        if isinstance(entry, ErrorEntry):
            raise DependencyGraphError(entry.error, specifier=entry.specifier)
        return await self.resolve_module(entry, context)

    async def resolve_module(self, module: ModuleEntry, context: ResolutionContext) -> ResolveResult:
        """Dispatch on the module kind."""
        if isinstance(module, (EsModule, AssertedModule)):
            return self._local_module(module)
        if isinstance(module, NodeModule):
            return self._node_module(module)
        if isinstance(module, NpmModule):
            return await self.resolve_npm_module(module, context)
        if isinstance(module, ErrorEntry):
            raise DependencyGraphError(module.error, specifier=module.specifier)
        if isinstance(module, UnsupportedModule):
            raise _kind_error(module.kind, module.specifier)
        _assert_never(module)

    def _local_module(self, module: Union[EsModule, AssertedModule]) -> ResolveResult:
        if module.local is None and isinstance(module, AssertedModule):
            raise NotFound.for_specifier(module.specifier)
        return ResolveResult(
            url=module.specifier,
            format=media_type_to_format(module.media_type),
            media_type=module.media_type,
            local=Path(module.local) if module.local else None,
        )

    def _node_module(self, module: NodeModule) -> ResolveResult:
        if self.platform is not Platform.NODE:
            raise BuiltinModuleNotAllowed(
                Msg.BUILTIN_NODE_MODULE.format(specifier=module.module_name),
                specifier=module.specifier,
            )
        return ResolveResult.builtin(module.module_name)

    async def _package_root(self, package: NpmPackage, context: ResolutionContext) -> Path:
        root = await self.strategy.find_package(
            package.name,
            self.fs,
            version=package.version,
            referrer=context.referrer,
            is_dependency=context.referrer is not None,
        )
        if root is None:
            raise NotFound.for_specifier(npm_specifier(package.name, package.version), context.referrer)
        return root

    def _finish(self, result: ResolveResult, manifest: Optional[PackageManifest],
                package_root: Path) -> ResolveResult:
        result = replace(result, media_type=format_to_media_type(result.format))
        if result.is_builtin or result.path is None or manifest is None:
            return result
        return result.with_side_effects(resolve_side_effects(manifest.side_effects, package_root, result.path))

    async def resolve_npm_module(self, module: NpmModule, context: ResolutionContext) -> ResolveResult:
        """Resolve ``npm:/name@version[/sub]`` inside its package root."""
        package = self.graph.npm_package(module.npm_package)
        subpath = parse_npm_subpath(module.specifier, package.name, package.version)
        package_root = await self._package_root(package, context)
        manifest = await self.manifests.read(package_root)
        local = context.evolve(specifier=module.specifier, referrer=manifest_path(package_root),
                               is_dependency=True)

        result = None
        if manifest is not None and manifest.exports is not None:
            result = await load_package_exports(package_root, subpath, local)
        else:
            target = join_path(package_root, subpath)
            result = await load_as_file(target, local)
            if result is None:
                result = await load_as_directory(target, local)
        if result is None:
            raise NotFound.for_specifier(module.specifier)
        return self._finish(result, manifest, package_root)

    # Dependencies

    async def resolve_dependency(
        self,
        module: ModuleEntry,
        specifier: str,
        referrer: Optional[PathLike],
        context: ResolutionContext,
    ) -> ResolveResult:
        """Resolve ``specifier`` as imported by ``module``."""
        if isinstance(module, EsModule):
            dependency = self.graph.find_dependency(module, specifier)
            target = self.graph.dependency_target(dependency)
            return await self.resolve_entry(target, specifier, context)
        if isinstance(module, NpmModule):
            if referrer is None:
                owner = await self.resolve_npm_module(module, context)
                referrer = owner.path
            return await self.resolve_npm_dependency(module, specifier, Path(referrer), context)
        if isinstance(module, (AssertedModule, NodeModule, ErrorEntry, UnsupportedModule)):
            raise UnsupportedModuleKind(
                f'Module "{module.specifier}" of kind "{module.kind}" has no dependencies',
                specifier=specifier,
            )
        _assert_never(module)

    async def resolve_npm_dependency(
        self,
        module: NpmModule,
        specifier: str,
        referrer: Path,
        context: ResolutionContext,
    ) -> ResolveResult:
        """Resolve an import written inside an npm package file ``referrer``."""
        package = self.graph.npm_package(module.npm_package)
        local = context.evolve(specifier=specifier, referrer=referrer, is_dependency=True)
        package_root = await self._package_root(package, local)
        manifest = await self.manifests.read(package_root)

        outcome = await run_hook(specifier, referrer, local)
        if outcome is False:
            raise excluded(specifier, referrer)
        if isinstance(outcome, Path):
            return self._finish(await load_as(outcome, local), manifest, package_root)
        if isinstance(outcome, str):
            specifier = outcome
            local = local.evolve(specifier=specifier, hook=None)

        kind = classify_specifier(specifier)
        if kind is SpecifierKind.BUILTIN or (kind is SpecifierKind.SCHEME and is_builtin(specifier)):
            return self._finish(ResolveResult.builtin(specifier), manifest, package_root)
        if kind is SpecifierKind.SCHEME:
            raise InvalidModuleSpecifier(
                f'Specifier "{specifier}" carries a scheme and must be resolved through the dependency graph',
                specifier=specifier,
            )
        if kind is SpecifierKind.RELATIVE:
            result = await load_as(resolve_relative(specifier, referrer), local)
            return self._finish(result, manifest, package_root)
        if kind is SpecifierKind.SUBPATH_IMPORT:
            result = await load_package_imports(specifier, local)
            if result is None:
                raise NotFound.for_specifier(specifier, referrer)
            return self._finish(result, manifest, package_root)

        name_subpath = parse_npm_pkg(specifier)
        if name_subpath.name == package.name:
            child = NpmModule(
                specifier=npm_specifier(package.name, package.version, name_subpath.subpath),
                npm_package=package.key,
            )
            return await self.resolve_npm_module(child, local)

        for dependency in self.graph.package_dependencies(package):
            if dependency.name == name_subpath.name:
                child = NpmModule(
                    specifier=npm_specifier(dependency.name, dependency.version, name_subpath.subpath),
                    npm_package=dependency.key,
                )
                return await self.resolve_npm_module(child, local.descend(child.specifier))

        # Not a declared dependency: typically an optional peer. Let a broader
        # graph pick the version.
        return await self._resolve_undeclared(specifier, referrer, local)

    async def _resolve_undeclared(self, specifier: str, referrer: Path, context: ResolutionContext) -> ResolveResult:
        npm_spec = f"{Constants.NPM_SCHEME}/{specifier}"
        context = context.descend(npm_spec)
        logger.info(
            "Resolving undeclared dependency through the graph",
            extra=extra_context(event="peer_fallback", component="resolver", target=npm_spec),
        )
        resolver = self
        if self.graph_provider is not None:
            resolver = self.with_graph(await self.graph_provider(npm_spec))
        entry = resolver.graph.find_module(npm_spec)
        if entry is None:
            raise NotFound.for_specifier(specifier, referrer)
        return await resolver.resolve_entry(entry, npm_spec, context)
