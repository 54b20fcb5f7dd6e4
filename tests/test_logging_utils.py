"""Tests for the logging helpers and the shared result model."""

import logging
from pathlib import Path

import pytest

from depresolve.common.logging_utils import Timer, configure_logging, extra_context, is_debug_enabled
from depresolve.constants import Format
from depresolve.models import ResolveResult


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestConfigureLogging:
    def test_file_handler(self, tmp_path, restore_root_logger):
        """Test logging to a file at debug level."""
        log_file = tmp_path / "depresolve.log"
        configure_logging("debug", str(log_file))
        assert restore_root_logger.level == logging.DEBUG
        logging.getLogger("depresolve.test").debug("hello")
        for handler in restore_root_logger.handlers:
            handler.flush()
        assert "[DEBUG] hello" in log_file.read_text(encoding="utf-8")

    def test_level_from_environment(self, monkeypatch, restore_root_logger):
        """Test taking the log level from the environment."""
        monkeypatch.setenv("DEPRESOLVE_LOG_LEVEL", "warning")
        monkeypatch.delenv("DEPRESOLVE_LOG_FILE", raising=False)
        configure_logging()
        assert restore_root_logger.level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, monkeypatch, restore_root_logger):
        """Test that an unknown level falls back to INFO."""
        monkeypatch.delenv("DEPRESOLVE_LOG_LEVEL", raising=False)
        monkeypatch.delenv("DEPRESOLVE_LOG_FILE", raising=False)
        configure_logging("chatty")
        assert restore_root_logger.level == logging.INFO


def test_is_debug_enabled():
    """Test debug level detection."""
    logger = logging.getLogger("depresolve.test.debug")
    logger.setLevel(logging.DEBUG)
    assert is_debug_enabled(logger)
    logger.setLevel(logging.INFO)
    assert not is_debug_enabled(logger)


def test_extra_context_drops_none():
    """Test that None values are dropped from log context."""
    assert extra_context(event="resolve", target=None, outcome=0) == {"event": "resolve", "outcome": 0}


def test_timer():
    """Test the duration timer."""
    with Timer() as timer:
        pass
    assert timer.duration_ms() >= 0


class TestResolveResult:
    def test_builtin_marker(self):
        """Test that builtin markers are normalized to node:."""
        assert ResolveResult.builtin("node:fs") == ResolveResult.builtin("fs")
        assert ResolveResult.builtin("fs").format is Format.BUILTIN

    def test_path_round_trip(self):
        """Test that a path survives the file URL round trip."""
        result = ResolveResult.from_path(Path("/pkg/dir with space/a.js"), Format.COMMONJS)
        assert result.url == "file:///pkg/dir%20with%20space/a.js"
        assert result.path == Path("/pkg/dir with space/a.js")

    def test_local_overrides_url(self):
        """Test that a local copy takes precedence over the URL."""
        result = ResolveResult(url="file:///app/main.ts", format=Format.MODULE, local=Path("/cache/main.ts"))
        assert result.path == Path("/cache/main.ts")

    def test_with_side_effects(self):
        """Test attaching a side-effects flag."""
        result = ResolveResult.from_path(Path("/a.js"), Format.COMMONJS).with_side_effects(True)
        assert result.side_effects is True
