"""Builder for JSON Schema describing action-based tool inputs."""

from __future__ import annotations

import json
from typing import Any


class SchemaBuilder:
    """Collects parameters and renders a JSON Schema with a required ``action`` enum."""

    def __init__(self, *actions: str) -> None:
        self._actions: list[str] = list(actions)
        self._properties: dict[str, dict[str, Any]] = {}
        self._required: list[str] = []

    def _add(self, name: str, required: bool, prop: dict[str, Any]) -> SchemaBuilder:
        self._properties[name] = prop
        if required:
            self._required.append(name)
        return self

    def string(self, name: str, description: str, required: bool) -> SchemaBuilder:
        """Add a string parameter."""
        return self._add(name, required, {"type": "string", "description": description})

    def number(self, name: str, description: str, required: bool) -> SchemaBuilder:
        """Add a number parameter."""
        return self._add(name, required, {"type": "number", "description": description})

    def bool(self, name: str, description: str, required: bool) -> SchemaBuilder:
        """Add a boolean parameter."""
        return self._add(name, required, {"type": "boolean", "description": description})

    def enum(self, name: str, description: str, required: bool, *values: str) -> SchemaBuilder:
        """Add a string parameter restricted to *values*."""
        return self._add(
            name,
            required,
            {"type": "string", "enum": list(values) or None, "description": description},
        )

    def object(self, name: str, description: str, required: bool) -> SchemaBuilder:
        """Add an object parameter."""
        return self._add(name, required, {"type": "object", "description": description})

    def build(self) -> bytes:
        """Return the complete schema as compact JSON bytes."""
        properties: dict[str, Any] = {
            "action": {
                "type": "string",
                "enum": list(self._actions) or None,
                "description": "Action to perform: " + ", ".join(self._actions),
            }
        }
        properties.update(self._properties)
        schema = {
            "type": "object",
            "properties": properties,
            "required": ["action", *self._required],
        }
        text = json.dumps(schema, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        for char, escape in _HTML_ESCAPES:
            text = text.replace(char, escape)
        return text.encode("utf-8")


_HTML_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def new_schema(*actions: str) -> SchemaBuilder:
    """Start a schema whose ``action`` field accepts the given action names."""
    return SchemaBuilder(*actions)