"""JSON Schema for dependency-graph documents.

Validation runs before the graph is turned into typed entries so that a
malformed document fails with the location of the first problem.
"""

from __future__ import annotations

from typing import Any, Dict

from jsonschema import Draft7Validator

from depresolve.errors import DependencyGraphError

_DEPENDENCY = {
    "type": "object",
    "required": ["specifier"],
    "properties": {
        "specifier": {"type": "string"},
        "code": {
            "type": "object",
            "properties": {
                "specifier": {"type": "string"},
                "error": {"type": "string"},
            },
        },
        "npmPackage": {"type": "string"},
    },
}

_MODULE = {
    "type": "object",
    "required": ["specifier"],
    "properties": {
        "specifier": {"type": "string"},
        "kind": {"type": "string"},
        "error": {"type": "string"},
        "local": {"type": ["string", "null"]},
        "mediaType": {"type": "string"},
        "npmPackage": {"type": "string"},
        "moduleName": {"type": "string"},
        "dependencies": {"type": "array", "items": _DEPENDENCY},
    },
    "allOf": [
        {
            "if": {"properties": {"kind": {"const": "npm"}}, "required": ["kind"]},
            "then": {"required": ["npmPackage"]},
        },
        {
            "if": {"properties": {"kind": {"const": "node"}}, "required": ["kind"]},
            "then": {"required": ["moduleName"]},
        },
    ],
}

GRAPH_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "roots": {"type": "array", "items": {"type": "string"}},
        "modules": {"type": "array", "items": _MODULE},
        "redirects": {"type": "object", "additionalProperties": {"type": "string"}},
        "npmPackages": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "version": {"type": "string"},
                    "dependencies": {"type": "array", "items": {"type": "string"}},
                },
            },
        },
    },
}

_VALIDATOR = Draft7Validator(GRAPH_SCHEMA)


def validate_graph(data: Any) -> None:
    """Validate a decoded graph document.

    Raises:
        DependencyGraphError: naming the path of the first violation.
    """
    errors = sorted(_VALIDATOR.iter_errors(data), key=lambda e: [str(part) for part in e.path])
    if errors:
        first = errors[0]
        path = "/".join(str(part) for part in first.path)
        raise DependencyGraphError(f"Invalid dependency graph at '{path}': {first.message}")
