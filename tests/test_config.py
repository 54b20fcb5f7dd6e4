"""Tests for configuration loading and precedence."""

from pathlib import Path

import pytest

from depresolve.config import (
    ConfigError,
    ResolverConfig,
    default_cache_dir,
    env_overrides,
    load_config,
    load_yaml_config,
)
from depresolve.constants import Platform, StrategyType
from depresolve.strategy import GlobalStrategy, LocalStrategy


class TestResolverConfig:
    def test_defaults(self):
        """Test the default configuration."""
        config = ResolverConfig()
        assert config.platform is Platform.BROWSER
        assert config.strategy is StrategyType.LOCAL
        assert config.conditions is None
        assert config.max_depth == 64

    def test_coercion(self):
        """Test coercion of string values into typed settings."""
        config = ResolverConfig.from_mapping({
            "platform": "NODE",
            "strategy": "global",
            "conditions": "worker, deno",
            "main_fields": ["module", "main"],
            "max_depth": "8",
        })
        assert config.platform is Platform.NODE
        assert config.strategy is StrategyType.GLOBAL
        assert config.conditions == ["worker", "deno"]
        assert config.main_fields == ["module", "main"]
        assert config.max_depth == 8

    def test_none_values_are_ignored(self):
        """Test that None overrides keep the current value."""
        config = ResolverConfig(platform=Platform.NODE).merged({"platform": None})
        assert config.platform is Platform.NODE

    @pytest.mark.parametrize(
        "overrides",
        [
            {"unknown": 1},
            {"platform": "deno"},
            {"strategy": "remote"},
            {"max_depth": -1},
            {"max_depth": "deep"},
            {"conditions": [1, 2]},
        ],
    )
    def test_invalid_values(self, overrides):
        """Test that invalid settings raise ConfigError."""
        with pytest.raises(ConfigError):
            ResolverConfig().merged(overrides)


class TestBuild:
    def test_local_strategy(self, tmp_path):
        """Test building the local strategy."""
        config = ResolverConfig(node_modules_dir=str(tmp_path / "node_modules"))
        strategy = config.build_strategy()
        assert isinstance(strategy, LocalStrategy)
        assert strategy.root == tmp_path.resolve()

    def test_global_strategy(self, tmp_path):
        """Test building the global strategy."""
        config = ResolverConfig(strategy=StrategyType.GLOBAL, cache_dir=str(tmp_path))
        strategy = config.build_strategy()
        assert isinstance(strategy, GlobalStrategy)
        assert strategy.root == tmp_path.resolve() / "npm" / "registry.npmjs.org"

    def test_resolver(self, tmp_path):
        """Test building a resolver from the configuration."""
        config = ResolverConfig(platform=Platform.NODE, max_depth=3, node_modules_dir=str(tmp_path))
        resolver = config.build_resolver()
        assert resolver.platform is Platform.NODE
        assert resolver.max_depth == 3
        assert resolver.main_fields == ("main", "module")


class TestYaml:
    def test_resolver_section(self, tmp_path):
        """Test reading the resolver section of a YAML file."""
        path = tmp_path / "depresolve.yml"
        path.write_text("resolver:\n  platform: node\n  conditions: [worker]\n", encoding="utf-8")
        assert load_yaml_config(str(path)) == {"platform": "node", "conditions": ["worker"]}

    def test_whole_document(self, tmp_path):
        """Test reading a YAML file without a resolver section."""
        path = tmp_path / "depresolve.yml"
        path.write_text("max_depth: 5\n", encoding="utf-8")
        assert load_yaml_config(str(path)) == {"max_depth": 5}

    def test_empty_document(self, tmp_path):
        """Test that an empty YAML file gives no settings."""
        path = tmp_path / "depresolve.yml"
        path.write_text("", encoding="utf-8")
        assert load_yaml_config(str(path)) == {}

    def test_missing_file(self, tmp_path):
        """Test that a missing YAML file raises ConfigError."""
        with pytest.raises(ConfigError):
            load_yaml_config(str(tmp_path / "nope.yml"))

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML raises ConfigError."""
        path = tmp_path / "depresolve.yml"
        path.write_text("platform: [node\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_yaml_config(str(path))

    def test_not_a_mapping(self, tmp_path):
        """Test that a non-mapping YAML document raises ConfigError."""
        path = tmp_path / "depresolve.yml"
        path.write_text("- node\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_yaml_config(str(path))


class TestPrecedence:
    def test_cli_over_env_over_yaml(self, tmp_path):
        """Test that CLI beats environment beats YAML."""
        path = tmp_path / "depresolve.yml"
        path.write_text("platform: node\nmax_depth: 5\nstrategy: global\n", encoding="utf-8")
        environ = {"DEPRESOLVE_PLATFORM": "neutral", "DEPRESOLVE_MAX_DEPTH": "7"}
        config = load_config(str(path), {"platform": "browser", "max_depth": None}, environ)
        assert config.platform is Platform.BROWSER
        assert config.max_depth == 7
        assert config.strategy is StrategyType.GLOBAL

    def test_config_path_from_environment(self, tmp_path):
        """Test taking the configuration path from the environment."""
        path = tmp_path / "depresolve.yml"
        path.write_text("platform: node\n", encoding="utf-8")
        config = load_config(environ={"DEPRESOLVE_CONFIG": str(path)})
        assert config.platform is Platform.NODE

    def test_env_overrides_skip_empty_values(self):
        """Test that empty environment values are ignored."""
        assert env_overrides({"DEPRESOLVE_PLATFORM": "node", "DEPRESOLVE_STRATEGY": ""}) == {"platform": "node"}


def test_default_cache_dir():
    """Test the default package store location."""
    assert default_cache_dir({"DENO_DIR": "/opt/deno"}) == Path("/opt/deno")
    assert default_cache_dir({}) == Path.home() / ".cache" / "deno"
