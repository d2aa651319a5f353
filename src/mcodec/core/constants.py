"""
mcodec core wire constants and IO-facing defaults.

Defines the request kinds and framing defaults consumed by
the line service. This module is zero-IO and uses only the Python standard
library.

Notes:
    - mcodec.io.config sources its defaults from here; change them here, not there.
    - The marker keys of the canonical form live in mcodec.core.sentinels.
"""

from __future__ import annotations

__all__ = [
    "KIND_ENCODE",
    "KIND_DECODE",
    "REQUEST_KINDS",
    "MAX_MESSAGE_BYTES",
    "READ_CHUNK_SIZE",
]

# Operation kinds carried in request content.
KIND_ENCODE: str = "Encode"
KIND_DECODE: str = "Decode"
REQUEST_KINDS: frozenset[str] = frozenset({KIND_ENCODE, KIND_DECODE})

# Largest partial (not yet newline-terminated) message the framer will buffer.
MAX_MESSAGE_BYTES: int = 16 * 1024 * 1024

# Bytes requested from the input stream per read.
READ_CHUNK_SIZE: int = 64 * 1024
