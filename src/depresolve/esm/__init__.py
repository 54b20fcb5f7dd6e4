"""ESM ``exports``/``imports`` resolver."""

from depresolve.esm.exports import (
    package_exports_resolve,
    package_imports_exports_resolve,
    package_imports_resolve,
    package_target_resolve,
    pattern_key_compare,
)
from depresolve.esm.match import resolve_esm_match

__all__ = [
    "package_exports_resolve",
    "package_imports_exports_resolve",
    "package_imports_resolve",
    "package_target_resolve",
    "pattern_key_compare",
    "resolve_esm_match",
]
