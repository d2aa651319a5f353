"""
Async client for the line service.

CodecClient spawns ``python -m mcodec.io.cli serve`` as a subprocess and talks
NDJSON over its stdin/stdout.

Responsibilities
- Allocate increasing integer request ids.
- Match each response to its request by id.
- Turn Error responses into ServiceEncodeError / ServiceDecodeError.

Notes
- Round trips are serialized with a lock, so responses arrive in request order.
- A service that exits (or closes stdout) mid-request raises ServiceClosedError;
  callers restart by opening a new client.
- The subprocess inherits stderr, so service logs stay visible.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import Any

from pydantic import ValidationError

from mcodec.core.constants import KIND_DECODE, KIND_ENCODE, MAX_MESSAGE_BYTES
from mcodec.core.serde import json_loads
from mcodec.core.typing import CanonicalValue, MichelsonTree, SchemaExpr

from .errors import (
    ClientError,
    IdMismatchError,
    ServiceClosedError,
    ServiceDecodeError,
    ServiceEncodeError,
)
from .protocol import ErrorContent, Request, Response

logger = logging.getLogger(__name__)

__all__ = ["CodecClient", "DEFAULT_COMMAND"]

DEFAULT_COMMAND: tuple[str, ...] = (sys.executable, "-m", "mcodec.io.cli", "serve", "--no-env")


class CodecClient:
    """
    Client for a line service subprocess.

    Args:
        command (Sequence[str] | None): Command line that starts the service;
            DEFAULT_COMMAND when None.
        env (Mapping[str, str] | None): Environment for the subprocess; inherited when None.
        limit (int): Largest response line accepted, in bytes.

    Examples:
        >>> async def main():  # doctest: +SKIP
        ...     async with CodecClient() as client:
        ...         return await client.decode({"int": "7"}, {"prim": "int"})
        >>> asyncio.run(main())  # doctest: +SKIP
        '7'
    """

    def __init__(
        self,
        command: Sequence[str] | None = None,
        *,
        env: Mapping[str, str] | None = None,
        limit: int = MAX_MESSAGE_BYTES,
    ) -> None:
        self.command = tuple(command) if command is not None else DEFAULT_COMMAND
        self.env = dict(env) if env is not None else None
        self.limit = limit
        self._proc: asyncio.subprocess.Process | None = None
        self._lock = asyncio.Lock()
        self._next_id = 0

    async def __aenter__(self) -> CodecClient:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def start(self) -> None:
        """Spawn the service subprocess."""
        if self._proc is not None:
            return
        self._proc = await asyncio.create_subprocess_exec(
            *self.command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            env=self.env,
            limit=self.limit,
        )
        logger.debug("started line service pid=%s", self._proc.pid)

    async def close(self) -> int | None:
        """Close the service's stdin and wait for it to exit; returns its exit code."""
        proc, self._proc = self._proc, None
        if proc is None:
            return None
        if proc.stdin is not None and not proc.stdin.is_closing():
            proc.stdin.close()
        code = await proc.wait()
        logger.debug("line service pid=%s exited with %s", proc.pid, code)
        return code

    async def encode(self, data: CanonicalValue, schema: SchemaExpr) -> MichelsonTree:
        """
        Encode a canonical value under ``schema``.

        Raises:
            ServiceEncodeError: If the service answers with an Error status.
        """
        response = await self.request(
            {"kind": KIND_ENCODE, "schema": schema, "data": data}
        )
        if isinstance(response.content, ErrorContent):
            raise ServiceEncodeError(response.content.error)
        return response.content.value

    async def decode(self, michelson: MichelsonTree, schema: SchemaExpr) -> CanonicalValue:
        """
        Decode a Michelson value tree under ``schema``.

        Raises:
            ServiceDecodeError: If the service answers with an Error status.
        """
        response = await self.request(
            {"kind": KIND_DECODE, "schema": schema, "michelson": michelson}
        )
        if isinstance(response.content, ErrorContent):
            raise ServiceDecodeError(response.content.error)
        return response.content.value

    async def request(self, content: dict[str, Any]) -> Response:
        """
        Send one request and wait for its response.

        Raises:
            ServiceClosedError: If the service is not running or stops before answering.
            IdMismatchError: If the response carries another id.
            pydantic.ValidationError: If ``content`` is not Encode or Decode content.
        """
        async with self._lock:
            proc = self._proc
            if proc is None or proc.stdin is None or proc.stdout is None:
                raise ServiceClosedError("line service is not running")
            self._next_id += 1
            req_id = self._next_id
            line = Request(id=req_id, content=content).to_line()
            try:
                proc.stdin.write(line.encode("utf-8"))
                await proc.stdin.drain()
                raw = await proc.stdout.readline()
            except (BrokenPipeError, ConnectionResetError) as exc:
                raise ServiceClosedError(f"line service closed its pipes: {exc}") from exc
            if not raw:
                raise ServiceClosedError(
                    f"line service exited before answering request {req_id}"
                )
            try:
                response = Response.model_validate(json_loads(raw))
            except (ValueError, ValidationError) as exc:
                raise ClientError(f"unreadable response line: {exc}") from exc
            if response.id != req_id:
                raise IdMismatchError(req_id, response.id)
            return response
