"""CommonJS resolution algorithm."""

from depresolve.cjs.imports import load_package_imports
from depresolve.cjs.loaders import load_as, load_as_directory, load_as_file, load_index, resolve_fields
from depresolve.cjs.node_modules import load_node_modules, load_package_exports, load_package_self
from depresolve.cjs.require import require

__all__ = [
    "load_as",
    "load_as_directory",
    "load_as_file",
    "load_index",
    "load_node_modules",
    "load_package_exports",
    "load_package_imports",
    "load_package_self",
    "require",
    "resolve_fields",
]
