"""
Exception types raised by the schema engine.

Provides typed exceptions for engine-level failures:
- SchemaError when a type expression cannot be turned into a token tree.
- DecodeError when a Michelson value does not fit the schema (execute path).
- EncodeError when a typed value does not fit the schema (encode path).

Notes:
    - All three derive from EngineError so callers can catch the engine as a whole.
    - This module uses only the Python standard library and has no side effects.

Examples:
    >>> from mcodec.engine.errors import EngineError, DecodeError
    >>> issubclass(DecodeError, EngineError)
    True
"""

from __future__ import annotations

__all__ = [
    "EngineError",
    "SchemaError",
    "DecodeError",
    "EncodeError",
]


class EngineError(ValueError):
    """Base class for schema engine failures."""


class SchemaError(EngineError):
    """Unsupported or malformed Michelson type expression."""


class DecodeError(EngineError):
    """Michelson value does not match the shape the schema describes."""


class EncodeError(EngineError):
    """Typed value does not match the shape the schema describes."""
