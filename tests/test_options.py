"""Tests for platform, condition and main-field options."""

import pytest

from depresolve.constants import Platform
from depresolve.options import (
    normalize_platform,
    resolve_conditions,
    resolve_kind,
    resolve_main_fields,
    resolve_platform,
)


class TestConditions:
    def test_defaults_add_module(self):
        """Test that default conditions include module."""
        assert resolve_conditions(None, "import-statement", "browser") == ("import", "browser", "module")

    def test_user_conditions_come_first_and_drop_module(self):
        """Test that user conditions come first and drop module."""
        assert resolve_conditions(["worker", "worker"], "require-call", Platform.NODE) == (
            "worker", "require", "node",
        )

    def test_neutral_without_kind(self):
        """Test that neutral without a kind has no conditions."""
        assert resolve_conditions([], None, "neutral") == ()

    @pytest.mark.parametrize(
        "kind, expected",
        [
            ("import-statement", "import"),
            ("dynamic-import", "import"),
            ("entry-point", "import"),
            ("require-call", "require"),
            ("require-resolve", None),
            (None, None),
        ],
    )
    def test_kind(self, kind, expected):
        """Test mapping import kinds to conditions."""
        assert resolve_kind(kind) == expected

    def test_platform(self):
        """Test the platform condition."""
        assert resolve_platform(Platform.NEUTRAL) is None
        assert resolve_platform(Platform.NODE) == "node"


class TestPlatformAndMainFields:
    def test_default_platform(self):
        """Test that the default platform is browser."""
        assert normalize_platform(None) is Platform.BROWSER

    def test_unknown_platform(self):
        """Test that an unknown platform is rejected."""
        with pytest.raises(ValueError):
            normalize_platform("deno")

    def test_platform_main_fields(self):
        """Test the default main fields per platform."""
        assert resolve_main_fields(None, "browser") == ("browser", "module", "main")
        assert resolve_main_fields(None, "node") == ("main", "module")
        assert resolve_main_fields(None, "neutral") == ()

    def test_user_main_fields(self):
        """Test that user main fields replace the defaults."""
        assert resolve_main_fields(["module"], "node") == ("module",)
