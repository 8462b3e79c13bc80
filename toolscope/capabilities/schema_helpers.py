"""JSON-schema fragments for capability input schemas."""

from __future__ import annotations

from typing import Any, Dict


def string_param(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description}


def int_param(description: str) -> Dict[str, Any]:
    return {"type": "integer", "description": description}


def bool_param(description: str) -> Dict[str, Any]:
    return {"type": "boolean", "description": description}


def enum_param(description: str, *values: str) -> Dict[str, Any]:
    return {"type": "string", "description": description, "enum": list(values)}


def object_schema(properties: Dict[str, Any], *required: str) -> Dict[str, Any]:
    """Build an object schema; ``required`` is omitted when empty."""
    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = list(required)
    return schema
