"""Tests for the package.json ``browser`` map."""

import asyncio

import pytest

from depresolve.browser import browser_candidates, browser_hook, map_browser
from depresolve.cjs import require
from depresolve.constants import Platform
from depresolve.errors import ExplicitlyExcluded, InvalidManifest

BROWSER_PACKAGE = {
    "package.json": {
        "name": "pkg",
        "browser": {
            "./a.js": False,
            "./lib/node.js": "./lib/browser.js",
            "fs": False,
            "events": "events-polyfill",
        },
    },
    "index.js": "",
    "a.js": "",
    "lib/node.js": "",
    "lib/browser.js": "",
    "lib/util.js": "",
}


class TestMapBrowser:
    def test_candidates_order(self):
        """Test that literal keys are tried before extension-suffixed ones."""
        assert list(browser_candidates("foo")) == [
            "foo", "./foo",
            "foo.js", "./foo.js",
            "foo.json", "./foo.json",
            "foo.node", "./foo.node",
        ]

    def test_exact_key_beats_suffixed_key(self):
        """Test that an exact key outranks a suffixed key."""
        assert map_browser("./a", {"./a": "./b.js", "./a.js": "./c.js"}) == "./b.js"

    def test_suffixed_key(self):
        """Test lookup through an extension-suffixed key."""
        assert map_browser("./a", {"./a.js": False}) is False

    def test_no_match(self):
        """Test that an unmapped specifier yields no answer."""
        assert map_browser("./z", {"./a.js": False}) is None

    def test_invalid_value(self):
        """Test that a non-string, non-false value is rejected."""
        with pytest.raises(InvalidManifest):
            map_browser("x", {"x": 1})


class TestBrowserHook:
    @pytest.fixture
    def setup(self, tree, make_context):
        root = tree(BROWSER_PACKAGE)
        return root, make_context(platform=Platform.BROWSER, hook=browser_hook)

    def test_disabled_relative(self, setup):
        """Test that relative specifiers of a disabled file are disabled."""
        root, context = setup
        assert asyncio.run(browser_hook("./a.js", root / "index.js", context)) is False
        assert asyncio.run(browser_hook("./a", root / "index.js", context)) is False

    def test_relative_replacement_is_rebased(self, setup):
        """Test that a relative replacement is rebased onto the package root."""
        root, context = setup
        outcome = asyncio.run(browser_hook("./node.js", root / "lib" / "util.js", context))
        assert outcome == root / "lib" / "browser.js"

    def test_bare_values(self, setup):
        """Test disabled, replaced and unmapped bare specifiers."""
        root, context = setup
        assert asyncio.run(browser_hook("fs", root / "index.js", context)) is False
        assert asyncio.run(browser_hook("events", root / "index.js", context)) == "events-polyfill"
        assert asyncio.run(browser_hook("lodash", root / "index.js", context)) is None

    def test_require_of_disabled_file(self, setup):
        """Test that requiring a disabled file reports its absolute path."""
        root, context = setup
        with pytest.raises(ExplicitlyExcluded) as excinfo:
            asyncio.run(require("./a.js", root / "index.js", context))
        assert excinfo.value.path == str(root / "a.js")

    def test_disabled_file_is_never_probed(self, setup, make_context, counting_fs):
        """Test that a disabled file is never looked up on disk."""
        root, _ = setup
        context = make_context(fs=counting_fs, platform=Platform.BROWSER, hook=browser_hook)
        with pytest.raises(ExplicitlyExcluded):
            asyncio.run(require("./a", root / "index.js", context))
        assert not [call for call in counting_fs.calls if call[0] == "exist_file"]

    def test_require_follows_replacement(self, setup):
        """Test that require loads the replacement file."""
        root, context = setup
        result = asyncio.run(require("./lib/node.js", root / "index.js", context))
        assert result.path == root / "lib" / "browser.js"

    def test_require_follows_bare_replacement(self, tree, setup):
        """Test that require resolves a bare replacement as a package."""
        root, context = setup
        tree({"node_modules/events-polyfill/index.js": ""})
        result = asyncio.run(require("events", root / "index.js", context))
        assert result.path == root / "node_modules" / "events-polyfill" / "index.js"
