"""
Core exception types raised by the value bridge helpers.

Provides typed exceptions for core-domain failures:
- CodecError as the base for errors raised by mcodec.core itself.
- WrapError when a canonical value cannot be unwrapped into (or built from)
  a Python native value.

Notes:
    - The encode/decode pipelines raise nothing of their own; schema/value
      mismatches surface as mcodec.engine.errors.EngineError and propagate.
    - This module uses only the Python standard library and has no side effects.

Examples:
    >>> from mcodec.core.errors import WrapError
    >>> from mcodec.core.wrapped import unwrap_int
    >>> try:
    ...     unwrap_int("forty-two")
    ... except WrapError as e:
    ...     msg = str(e)
    >>> "decimal" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "CodecError",
    "WrapError",
]


class CodecError(ValueError):
    """Base class for mcodec.core failures."""


class WrapError(CodecError):
    """Native value <-> canonical value conversion failure."""
