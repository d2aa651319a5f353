"""
mcodec.io — Line service for the mcodec value bridge.

## Responsibilities
- Serve newline-delimited JSON Encode/Decode requests over stdin/stdout.
- Keep the fatal/recoverable boundary: framing, output and unknown-kind errors
  stop the service; every other per-request failure becomes an Error response.
- Provide a subprocess client and a command line entry point.

## Public API
- ServiceSettings — runtime configuration (env > TOML > defaults).
- LineFramer — NDJSON framing over byte chunks.
- Dispatcher — one framed message in, one Response out.
- LineService — asyncio service loop returning an exit code.
- CodecClient — async client that spawns and talks to the service.

## Import DAG discipline
- Depends on stdlib, pydantic, python-dotenv (cli only) and mcodec.core / mcodec.engine.
- mcodec.core and mcodec.engine MUST NOT import this package.

## Examples
```python
import asyncio
from mcodec.io import CodecClient

async def main():
    async with CodecClient() as client:  # doctest: +SKIP
        tree = await client.encode({"__unit__": None}, {"prim": "unit"})
        return await client.decode(tree, {"prim": "unit"})
```

## Notes
- stdout carries protocol lines only; logs go to stderr.
- Response order is arrival order in "sequential" mode and completion order in
  "concurrent" mode.
"""

from __future__ import annotations

from .client import CodecClient
from .config import ServiceSettings
from .dispatch import Dispatcher, handle_request
from .errors import (
    ClientError,
    FramingError,
    IdMismatchError,
    MalformedRequestError,
    OutputError,
    ServiceClosedError,
    ServiceDecodeError,
    ServiceEncodeError,
    ServiceError,
    UnknownKindError,
)
from .framing import LineFramer
from .protocol import Request, Response
from .server import LineService, ServiceState, serve

__all__ = [
    "ServiceSettings",
    "LineFramer",
    "Dispatcher",
    "handle_request",
    "LineService",
    "ServiceState",
    "serve",
    "CodecClient",
    "Request",
    "Response",
    "ServiceError",
    "FramingError",
    "OutputError",
    "UnknownKindError",
    "MalformedRequestError",
    "ClientError",
    "IdMismatchError",
    "ServiceClosedError",
    "ServiceEncodeError",
    "ServiceDecodeError",
]
