"""Structured content validation using JSON Schema."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

import jsonschema

# Keywords a truncated prefix of a conforming document can still violate.
_PREFIX_UNSAFE_KEYWORDS = ("required", "minItems", "minLength", "minProperties")


def validate_content(schema: dict[str, Any], content: Any) -> list[str]:
    """Validate a content tree against a JSON schema.

    Returns a list of validation error messages (empty if valid).
    """
    try:
        jsonschema.validate(instance=content, schema=schema)
        return []
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "(root)"
        return [f"{path}: {e.message}"]
    except jsonschema.SchemaError as e:
        return [f"Invalid schema: {e.message}"]


def relax_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``schema`` that accepts prefixes of conforming documents."""
    return _relax(deepcopy(schema))


def _relax(node: Any) -> Any:
    if isinstance(node, dict):
        for keyword in _PREFIX_UNSAFE_KEYWORDS:
            # "required" is also a legal property name inside "properties"
            if keyword in node and not isinstance(node[keyword], dict):
                del node[keyword]
        for value in node.values():
            _relax(value)
    elif isinstance(node, list):
        for item in node:
            _relax(item)
    return node
