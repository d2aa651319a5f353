"""
Lightweight JSON serialization/deserialization utilities.

Provides `json_loads` as a thin wrapper around the stdlib `json` module, the
single-line wire encoder used by the line protocol, and the canonical
(sorted-key) encoder used wherever a value must have one stable text form.
This module is zero-IO.

Notes:
    - Wire JSON keeps insertion order and UTF-8 text as-is, and never contains
      a raw newline (json escapes newlines inside strings).
    - Canonical JSON: sort_keys=True, separators=(",", ":"), ensure_ascii=False.
    - No side effects; stdlib-only.
"""

from __future__ import annotations

import json
from typing import Any

__all__ = [
    "json_loads",
    "json_dumps_wire",
    "json_dumps_canonical",
]


def json_loads(s: str | bytes) -> Any:
    """
    Deserialize a JSON document to Python objects using the stdlib json module.

    Args:
        s (str | bytes): JSON text to parse.

    Returns:
        Any: Decoded Python object (dict, list, str, int, float, bool, or None).

    Raises:
        ValueError: If ``s`` is not valid JSON (json.JSONDecodeError).
    """
    return json.loads(s)


def json_dumps_wire(obj: Any) -> str:
    """
    Serialize an object to a compact, single-line JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: JSON text with compact separators and ensure_ascii=False.
    """
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.

    Notes:
        This function assumes the input is JSON-serializable and does not perform
        coercion of unsupported types.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
