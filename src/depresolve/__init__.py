"""Node.js CommonJS/ESM module resolution for bundlers."""

from depresolve.adapter import HookResult, ResolveArgs, ResolverHook
from depresolve.cjs import require
from depresolve.config import ResolverConfig, load_config
from depresolve.constants import Format, Platform, StrategyType
from depresolve.errors import (
    BuiltinModuleNotAllowed,
    DependencyGraphError,
    ExplicitlyExcluded,
    InvalidManifest,
    InvalidModuleSpecifier,
    InvalidPackageTarget,
    NotFound,
    RecursionLimitExceeded,
    ResolutionError,
    UnsupportedModuleKind,
)
from depresolve.graph import ModuleGraph
from depresolve.models import ResolveResult
from depresolve.probe import CachedFileSystem, FileSystemProbe, LocalFileSystem
from depresolve.resolver import ModuleResolver
from depresolve.strategy import GlobalStrategy, LocalStrategy, PackageLocationStrategy

__version__ = "0.1.0"

__all__ = [
    "BuiltinModuleNotAllowed",
    "CachedFileSystem",
    "DependencyGraphError",
    "ExplicitlyExcluded",
    "FileSystemProbe",
    "Format",
    "GlobalStrategy",
    "HookResult",
    "InvalidManifest",
    "InvalidModuleSpecifier",
    "InvalidPackageTarget",
    "LocalFileSystem",
    "LocalStrategy",
    "ModuleGraph",
    "ModuleResolver",
    "NotFound",
    "PackageLocationStrategy",
    "Platform",
    "RecursionLimitExceeded",
    "ResolutionError",
    "ResolveArgs",
    "ResolveResult",
    "ResolverConfig",
    "ResolverHook",
    "StrategyType",
    "load_config",
    "require",
]
