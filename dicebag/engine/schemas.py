"""
JSON schemas for roll requests.

Requests arriving over HTTP are validated against these before they reach
the roller. Schemas are factory functions returning plain dicts, so callers
can extend a copy without touching the shared definition.
"""

from typing import Any, Dict

import jsonschema

from .formatter import STYLES


def roll_request_schema() -> Dict[str, Any]:
    """Request to roll a single command."""
    return {
        "type": "object",
        "properties": {
            "command": {
                "type": "string",
                "minLength": 1,
                "description": "Roll command, e.g. '(3d20b2 + 11) ^ (d4 * 2) / 2d100w ! fireball'"
            },
            "style": {
                "type": "string",
                "enum": list(STYLES),
                "description": "Breakdown style",
                "default": "markdown"
            }
        },
        "required": ["command"],
        "additionalProperties": False
    }


def batch_roll_request_schema() -> Dict[str, Any]:
    """Request to evaluate one command several times."""
    return {
        "type": "object",
        "properties": {
            "command": {
                "type": "string",
                "minLength": 1,
                "description": "Roll command"
            },
            "count": {
                "type": "integer",
                "minimum": 2,
                "description": "Number of evaluations"
            }
        },
        "required": ["command", "count"],
        "additionalProperties": False
    }


def rpn_request_schema() -> Dict[str, Any]:
    """Request to show the postfix form of an expression."""
    return {
        "type": "object",
        "properties": {
            "command": {
                "type": "string",
                "minLength": 1,
                "description": "Expression to convert"
            }
        },
        "required": ["command"],
        "additionalProperties": False
    }


def validate_request(data: Any, schema: Dict[str, Any]) -> None:
    """
    Validate request data against a schema.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, schema)


__all__ = [
    'roll_request_schema', 'batch_roll_request_schema', 'rpn_request_schema',
    'validate_request',
]
