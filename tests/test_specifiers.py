"""Tests for specifier classification and npm specifier parsing."""

import pytest

from depresolve.errors import InvalidModuleSpecifier
from depresolve.models import SpecifierKind
from depresolve.specifiers import (
    classify_specifier,
    is_builtin,
    npm_specifier,
    parse_npm_pkg,
    parse_npm_subpath,
)


@pytest.mark.parametrize(
    "specifier, kind",
    [
        ("./a.js", SpecifierKind.RELATIVE),
        ("../a", SpecifierKind.RELATIVE),
        ("/abs/a.js", SpecifierKind.RELATIVE),
        ("#internal", SpecifierKind.SUBPATH_IMPORT),
        ("fs", SpecifierKind.BUILTIN),
        ("fs/promises", SpecifierKind.BUILTIN),
        ("node:fs", SpecifierKind.SCHEME),
        ("npm:/preact@10.5.0", SpecifierKind.SCHEME),
        ("https://deno.land/x/mod.ts", SpecifierKind.SCHEME),
        ("lodash", SpecifierKind.BARE),
        ("@scope/pkg/sub", SpecifierKind.BARE),
    ],
)
def test_classify_specifier(specifier, kind):
    """Test specifier classification."""
    assert classify_specifier(specifier) is kind


class TestIsBuiltin:
    def test_plain_and_prefixed(self):
        """Test builtins with and without the node: prefix."""
        assert is_builtin("path")
        assert is_builtin("node:path")

    def test_scheme_only_modules(self):
        """Test builtins only reachable through node:."""
        assert not is_builtin("test")
        assert is_builtin("node:test")

    def test_package_is_not_builtin(self):
        """Test that a package name is not a builtin."""
        assert not is_builtin("lodash")


class TestParseNpmPkg:
    def test_plain_name(self):
        """Test parsing a plain package name."""
        parsed = parse_npm_pkg("lodash")
        assert (parsed.name, parsed.subpath) == ("lodash", ".")

    def test_name_with_subpath(self):
        """Test parsing a package name with a subpath."""
        parsed = parse_npm_pkg("lodash/fp/map")
        assert (parsed.name, parsed.subpath) == ("lodash", "./fp/map")

    def test_scoped_name(self):
        """Test parsing a scoped package name."""
        parsed = parse_npm_pkg("@babel/core/lib/index.js")
        assert (parsed.name, parsed.subpath) == ("@babel/core", "./lib/index.js")

    @pytest.mark.parametrize("specifier", ["@scope", ".hidden", "bad%20name", ""])
    def test_invalid_names(self, specifier):
        """Test that invalid package names are rejected."""
        with pytest.raises(InvalidModuleSpecifier):
            parse_npm_pkg(specifier)


class TestNpmSpecifier:
    def test_subpath_of_npm_specifier(self):
        """Test extracting the subpath of an npm specifier."""
        assert parse_npm_subpath("npm:/preact@10.5.0/hooks", "preact", "10.5.0") == "./hooks"
        assert parse_npm_subpath("npm:/preact@10.5.0", "preact", "10.5.0") == "."

    def test_unversioned_specifier_is_package_root(self):
        """Test that an unversioned npm specifier is the package root."""
        assert parse_npm_subpath("npm:/preact", "preact", "10.5.0") == "."

    def test_build(self):
        """Test building npm specifiers."""
        assert npm_specifier("preact", "10.5.0", "./hooks") == "npm:/preact@10.5.0/hooks"
        assert npm_specifier("@scope/pkg", "1.0.0") == "npm:/@scope/pkg@1.0.0"
