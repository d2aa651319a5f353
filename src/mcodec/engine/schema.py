"""
Schema facade over the token tree.

Provides the two engine capabilities consumed by the value bridge:
- ``execute``: Michelson value tree -> typed value.
- ``encode``: typed value -> Michelson value tree.

Notes:
    - A ``storage``/``parameter`` wrapper around the type expression is unwrapped.
    - The engine is the source of truth for type errors; it raises
      DecodeError/EncodeError on shape mismatch and SchemaError on
      unsupported type expressions.
    - Zero-IO; stdlib-only.

Examples:
    >>> from mcodec.engine.schema import Schema
    >>> s = Schema({"prim": "option", "args": [{"prim": "int"}]})
    >>> s.encode(None)
    {'prim': 'None'}
    >>> s.execute({"prim": "Some", "args": [{"int": "7"}]})
    7
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .errors import SchemaError
from .tokens import Token, create_token

__all__ = [
    "Schema",
    "SchemaEngine",
]

_WRAPPERS = ("storage", "parameter")


def _unwrap_root(expr: Any) -> Any:
    if isinstance(expr, Mapping) and expr.get("prim") in _WRAPPERS:
        args = expr.get("args") or []
        if len(args) != 1:
            raise SchemaError(f"{expr['prim']} expects 1 arg, got {len(args)}")
        return args[0]
    return expr


class Schema:
    """
    Typed view over a Michelson type expression.

    Args:
        expr (Any): Micheline type expression, as parsed JSON.

    Raises:
        SchemaError: If the root expression is malformed or unsupported.
    """

    def __init__(self, expr: Any) -> None:
        self.expr = _unwrap_root(expr)
        self.root: Token = create_token(self.expr, 0)

    def execute(self, michelson: Any) -> Any:
        """Decode a Michelson value tree into a typed value."""
        return self.root.execute(michelson)

    def encode(self, value: Any) -> Any:
        """Encode a typed value into a Michelson value tree."""
        return self.root.encode(value)


class SchemaEngine:
    """
    Stateless engine exposing ``execute``/``encode`` keyed by a schema expression.

    A fresh Schema is built for each call, so the engine can be shared freely.
    """

    def execute(self, schema: Any, michelson: Any) -> Any:
        return Schema(schema).execute(michelson)

    def encode(self, schema: Any, value: Any) -> Any:
        return Schema(schema).encode(value)
