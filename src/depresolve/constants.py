"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    RESOLUTION_ERROR = 4


class Format(str, Enum):
    """Module formats a resolved file can be loaded as."""

    COMMONJS = "commonjs"
    MODULE = "module"
    JSON = "json"
    WASM = "wasm"
    BUILTIN = "builtin"


class Platform(str, Enum):
    """Target platforms understood by the bundler."""

    BROWSER = "browser"
    NODE = "node"
    NEUTRAL = "neutral"


class StrategyType(str, Enum):
    """Package location strategies."""

    GLOBAL = "global"
    LOCAL = "local"


class Namespace(str, Enum):
    """Namespaces attached to hook results."""

    FILE = "file"
    DISABLED = "(disabled)"
    EXTERNAL = "external"
    REMOTE = "remote"


class Msg:  # pylint: disable=too-few-public-methods
    """Message templates, formatted with ``str.format``."""

    NOT_FOUND = 'Cannot find module "{specifier}"'
    NOT_FOUND_FROM = 'Cannot find module "{specifier}" from "{referrer}"'
    DEPENDENCY_NOT_FOUND = 'Cannot find dependency of "{specifier}"'
    NPM_PACKAGE_NOT_FOUND = 'npm package "{key}" is not part of the dependency graph'
    BUILTIN_NODE_MODULE = (
        'The package "{specifier}" wasn\'t found on the file system but is built into node. '
        "Are you trying to bundle for node? You can use \"platform: 'node'\" to do that, "
        "which will remove this error."
    )
    NOT_EXPORTED = 'Package subpath "{subpath}" is not defined by "exports" in "{package}"'
    IMPORT_NOT_DEFINED = 'Package import specifier "{specifier}" is not defined in "{package}"'
    UNSUPPORTED_KIND = 'Module kind "{kind}" of "{specifier}" is not supported'
    RECURSION_LIMIT = 'Resolution of "{specifier}" exceeded the maximum depth of {depth}'
    RECURSION_CYCLE = 'Resolution of "{specifier}" re-entered itself'


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PACKAGE_JSON_FILE = "package.json"
    NODE_MODULES_DIR = "node_modules"
    REGISTRY_HOST_NPM = "registry.npmjs.org"
    NPM_SCHEME = "npm:"
    NODE_SCHEME = "node:"
    SCHEME_PREFIXES = ("npm:", "jsr:", "http:", "https:", "data:", "node:", "file:")
    DEFAULT_EXTENSIONS = (".js", ".json", ".node")
    INDEX_FILES = ("index.js", "index.json", "index.node")
    BROWSER_EXTENSIONS = (".js", ".json", ".node")
    DEFAULT_PLATFORM = Platform.BROWSER
    DEFAULT_MAIN_FIELDS = {
        Platform.BROWSER: ("browser", "module", "main"),
        Platform.NODE: ("main", "module"),
        Platform.NEUTRAL: (),
    }
    MAX_RESOLUTION_DEPTH = 64
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "DEPRESOLVE_LOG_LEVEL"
    ENV_LOG_FILE = "DEPRESOLVE_LOG_FILE"
    ENV_CONFIG = "DEPRESOLVE_CONFIG"
    ENV_CACHE_DIR = "DEPRESOLVE_CACHE_DIR"
    ENV_DENO_DIR = "DENO_DIR"

    # Mirrors node:module builtinModules (Node 22).
    NODE_BUILTIN_MODULES = frozenset({
        "_http_agent", "_http_client", "_http_common", "_http_incoming",
        "_http_outgoing", "_http_server", "_stream_duplex", "_stream_passthrough",
        "_stream_readable", "_stream_transform", "_stream_wrap", "_stream_writable",
        "_tls_common", "_tls_wrap", "assert", "assert/strict", "async_hooks",
        "buffer", "child_process", "cluster", "console", "constants", "crypto",
        "dgram", "diagnostics_channel", "dns", "dns/promises", "domain", "events",
        "fs", "fs/promises", "http", "http2", "https", "inspector",
        "inspector/promises", "module", "net", "os", "path", "path/posix",
        "path/win32", "perf_hooks", "process", "punycode", "querystring",
        "readline", "readline/promises", "repl", "stream", "stream/consumers",
        "stream/promises", "stream/web", "string_decoder", "sys", "timers",
        "timers/promises", "tls", "trace_events", "tty", "url", "util",
        "util/types", "v8", "vm", "wasi", "worker_threads", "zlib",
    })
    # Only reachable with the node: scheme.
    NODE_SCHEME_ONLY_MODULES = frozenset({"sea", "sqlite", "test", "test/reporters"})
