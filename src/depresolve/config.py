"""Runtime configuration.

Values are layered, highest precedence first: CLI arguments, ``DEPRESOLVE_*``
environment variables, a YAML file, then built-in defaults.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from depresolve.constants import Constants, Platform, StrategyType
from depresolve.graph import ModuleGraph
from depresolve.probe import FileSystemProbe
from depresolve.resolver import GraphProvider, ModuleResolver
from depresolve.strategy import GlobalStrategy, LocalStrategy, PackageLocationStrategy

logger = logging.getLogger(__name__)

_ENV_FIELDS = {
    "platform": "DEPRESOLVE_PLATFORM",
    "conditions": "DEPRESOLVE_CONDITIONS",
    "main_fields": "DEPRESOLVE_MAIN_FIELDS",
    "strategy": "DEPRESOLVE_STRATEGY",
    "cache_dir": Constants.ENV_CACHE_DIR,
    "registry_host": "DEPRESOLVE_REGISTRY_HOST",
    "node_modules_dir": "DEPRESOLVE_NODE_MODULES_DIR",
    "max_depth": "DEPRESOLVE_MAX_DEPTH",
    "log_level": Constants.ENV_LOG_LEVEL,
    "log_file": Constants.ENV_LOG_FILE,
}
_LIST_FIELDS = frozenset({"conditions", "main_fields"})


class ConfigError(ValueError):
    """Configuration file or value is unusable."""


def default_cache_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """``DENO_DIR`` when set, else the per-user cache directory."""
    environ = os.environ if environ is None else environ
    deno_dir = environ.get(Constants.ENV_DENO_DIR)
    if deno_dir:
        return Path(deno_dir)
    return Path.home() / ".cache" / "deno"


@dataclass
class ResolverConfig:
    """Options that shape a resolution session."""

    platform: Platform = Constants.DEFAULT_PLATFORM
    conditions: Optional[List[str]] = None
    main_fields: Optional[List[str]] = None
    strategy: StrategyType = StrategyType.LOCAL
    cache_dir: Optional[str] = None
    registry_host: str = Constants.REGISTRY_HOST_NPM
    node_modules_dir: Optional[str] = None
    max_depth: int = Constants.MAX_RESOLUTION_DEPTH
    log_level: Optional[str] = None
    log_file: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ResolverConfig":
        """Build a config from loosely typed values (YAML, env, CLI)."""
        return cls().merged(data)

    def merged(self, overrides: Mapping[str, Any]) -> "ResolverConfig":
        """Copy with every non-``None`` value of ``overrides`` applied.

        Raises:
            ConfigError: on unknown keys or values of the wrong shape.
        """
        known = {f.name for f in fields(self)}
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            if key not in known:
                raise ConfigError(f"Unknown configuration key: {key}")
            changes[key] = _coerce(key, value)
        return replace(self, **changes)

    def build_strategy(self) -> PackageLocationStrategy:
        """Package location strategy selected by ``strategy``."""
        if self.strategy is StrategyType.GLOBAL:
            cache_dir = Path(self.cache_dir) if self.cache_dir else default_cache_dir()
            return GlobalStrategy(cache_dir.resolve(), self.registry_host)
        node_modules = (
            Path(self.node_modules_dir)
            if self.node_modules_dir
            else Path.cwd() / Constants.NODE_MODULES_DIR
        )
        return LocalStrategy(node_modules.resolve())

    def build_resolver(
        self,
        graph: Optional[ModuleGraph] = None,
        fs: Optional[FileSystemProbe] = None,
        graph_provider: Optional[GraphProvider] = None,
    ) -> ModuleResolver:
        """Resolver configured from this object."""
        return ModuleResolver(
            self.build_strategy(),
            graph,
            fs=fs,
            platform=self.platform,
            conditions=self.conditions,
            main_fields=self.main_fields,
            graph_provider=graph_provider,
            max_depth=self.max_depth,
        )


def _coerce(key: str, value: Any) -> Any:
    try:
        if key == "platform":
            return Platform(str(value).lower())
        if key == "strategy":
            return StrategyType(str(value).lower())
        if key == "max_depth":
            depth = int(value)
            if depth < 0:
                raise ValueError("must not be negative")
            return depth
    except ValueError as exc:
        raise ConfigError(f"Invalid value for {key}: {value!r} ({exc})") from exc
    if key in _LIST_FIELDS:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
            return list(value)
        raise ConfigError(f"Invalid value for {key}: expected a list of strings")
    return str(value)


def load_yaml_config(config_path: str) -> Dict[str, Any]:
    """Read the ``resolver`` section (or the whole document) of a YAML file.

    Raises:
        ConfigError: if the file is missing or not a YAML mapping.
    """
    if not os.path.isfile(config_path):
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        with open(config_path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config {config_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must be a mapping")
    section = data.get("resolver", data)
    if not isinstance(section, dict):
        raise ConfigError(f'Config {config_path}: "resolver" must be a mapping')
    return section


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Configuration values present in the environment."""
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for key, name in _ENV_FIELDS.items():
        raw = environ.get(name)
        if raw:
            values[key] = raw
    return values


def load_config(
    config_path: Optional[str] = None,
    cli_overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ResolverConfig:
    """Layer defaults, YAML, environment and CLI values into one config."""
    environ = os.environ if environ is None else environ
    config = ResolverConfig()
    path = config_path or environ.get(Constants.ENV_CONFIG)
    if path:
        config = config.merged(load_yaml_config(path))
        logger.debug("Loaded config file %s", path)
    config = config.merged(env_overrides(environ))
    if cli_overrides:
        config = config.merged(cli_overrides)
    return config
