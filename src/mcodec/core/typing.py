"""
Lightweight typing aliases used across the bridge and the line service.

Notes:
    - Intended for annotations only; no runtime logic, zero-IO.
    - ``CanonicalValue`` and ``MichelsonTree`` are both JSON-shaped; the names
      document which side of the bridge a value belongs to.

Examples:
    >>> from mcodec.core.typing import CanonicalValue, MichelsonTree
    >>> def unit() -> MichelsonTree:
    ...     return {"prim": "Unit"}
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

__all__ = [
    "JsonDict",
    "CanonicalValue",
    "MichelsonTree",
    "SchemaExpr",
    "Pass",
]

# Convenient JSON-like mapping alias. Kept intentionally broad for serde boundaries.
JsonDict = dict[str, Any]

# JSON-facing value exchanged with line-service callers.
CanonicalValue = Any

# Micheline value tree exchanged with the schema engine.
MichelsonTree = Any

# Micheline type expression.
SchemaExpr = Any

# One step of the bridge pipeline.
Pass = Callable[[Any], Any]
