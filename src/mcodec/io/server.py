"""
Asyncio line service over byte streams (stdin/stdout by default).

State machine
    IDLE --message framed--> DISPATCHING --response written--> IDLE
    any fatal error (framing, output, unknown kind) --> TERMINATED
    end of input --> TERMINATED

Dispatch modes
- "sequential": each framed request runs to completion and its response is
  written before the next one starts; responses follow arrival order.
- "concurrent": each framed request becomes a task; responses are written in
  completion order. A fatal error raised inside a task stops the service.
  On any fatal error no new message is accepted, but requests already
  dispatched run to completion and get their responses first.

Notes
- ``run`` returns an exit code (0 on clean end of input, 1 after a fatal
  error) and leaves process exit to the caller.
- The output stream is flushed after every response.
- Logs go through the module logger; stdout carries only protocol lines.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import sys
from collections.abc import AsyncIterator
from typing import BinaryIO

from .config import ServiceSettings
from .dispatch import Dispatcher
from .errors import OutputError, ServiceError
from .framing import LineFramer
from .protocol import Response

logger = logging.getLogger(__name__)

__all__ = ["ServiceState", "LineService", "serve"]


class ServiceState(str, enum.Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    TERMINATED = "terminated"


class LineService:
    """
    Serve NDJSON requests from a byte source to a byte sink.

    Args:
        settings (ServiceSettings | None): Runtime settings; defaults when None.
        dispatcher (Dispatcher | None): Request dispatcher; one built from
            ``settings.error_detail`` when None.

    Examples:
        >>> import asyncio, io
        >>> async def demo(line: bytes) -> bytes:
        ...     reader = asyncio.StreamReader()
        ...     reader.feed_data(line)
        ...     reader.feed_eof()
        ...     out = io.BytesIO()
        ...     await LineService().run(reader, out)
        ...     return out.getvalue()
        >>> req = b'{"id":1,"content":{"kind":"Decode","schema":{"prim":"int"},"michelson":{"int":"7"}}}\\n'
        >>> asyncio.run(demo(req))
        b'{"id":1,"content":{"status":"Success","value":"7"}}\\n'
    """

    def __init__(
        self, settings: ServiceSettings | None = None, dispatcher: Dispatcher | None = None
    ) -> None:
        self.settings = settings or ServiceSettings()
        self.dispatcher = dispatcher or Dispatcher(error_detail=self.settings.error_detail)
        self.state = ServiceState.IDLE
        self._tasks: set[asyncio.Task[None]] = set()
        self._fatal: BaseException | None = None

    async def run(
        self, source: asyncio.StreamReader | None = None, sink: BinaryIO | None = None
    ) -> int:
        """
        Serve until end of input or a fatal error.

        Args:
            source (asyncio.StreamReader | None): Request bytes; stdin when None.
            sink (BinaryIO | None): Response bytes; ``sys.stdout.buffer`` when None.

        Returns:
            int: 0 on clean end of input, 1 after a fatal error.
        """
        sink = sink if sink is not None else sys.stdout.buffer
        framer = LineFramer(self.settings.max_message_bytes)
        self.state = ServiceState.IDLE
        self._fatal = None
        try:
            async for chunk in self._chunks(source):
                for segment in framer.segments(chunk):
                    await self._accept(framer.parse(segment), sink)
                self._raise_fatal()
            framer.close()
            await self._drain()
        except ServiceError as exc:
            logger.error("line service terminated: %s", exc, exc_info=exc)
            await self._finish_pending()
            self.state = ServiceState.TERMINATED
            return 1
        self.state = ServiceState.TERMINATED
        logger.debug("end of input; line service stopped")
        return 0

    async def _accept(self, message: object, sink: BinaryIO) -> None:
        self._raise_fatal()
        if self.settings.dispatch_mode == "concurrent":
            task = asyncio.create_task(self._serve_one(message, sink))
            self._tasks.add(task)
            task.add_done_callback(self._task_done)
        else:
            await self._serve_one(message, sink)

    async def _serve_one(self, message: object, sink: BinaryIO) -> None:
        self.state = ServiceState.DISPATCHING
        response = await self.dispatcher.handle(message)
        self._write(sink, response)
        if not self._tasks or self.settings.dispatch_mode == "sequential":
            self.state = ServiceState.IDLE

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if not self._tasks and self.state is ServiceState.DISPATCHING:
            self.state = ServiceState.IDLE
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None and self._fatal is None:
            self._fatal = exc

    def _raise_fatal(self) -> None:
        if self._fatal is not None:
            raise self._fatal

    async def _drain(self) -> None:
        await self._finish_pending()
        self._raise_fatal()

    async def _finish_pending(self) -> None:
        # already dispatched requests still run to completion and are answered
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @staticmethod
    def _write(sink: BinaryIO, response: Response) -> None:
        try:
            sink.write(response.to_line().encode("utf-8"))
            sink.flush()
        except (OSError, ValueError) as exc:
            raise OutputError(f"failed to write response: {exc}") from exc

    async def _chunks(self, source: asyncio.StreamReader | None) -> AsyncIterator[bytes]:
        size = self.settings.read_chunk_size
        if source is None:
            source = await _stdin_reader()
        if source is not None:
            while chunk := await source.read(size):
                yield chunk
            return
        # stdin is a regular file: fall back to blocking reads in a worker thread.
        loop = asyncio.get_running_loop()
        stdin = sys.stdin.buffer
        while chunk := await loop.run_in_executor(None, stdin.read1, size):
            yield chunk


async def _stdin_reader() -> asyncio.StreamReader | None:
    """Attach a StreamReader to stdin, or return None when stdin is not a pipe/tty."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=2**31 - 1)
    protocol = asyncio.StreamReaderProtocol(reader)
    try:
        await loop.connect_read_pipe(lambda: protocol, sys.stdin.buffer)
    except (ValueError, OSError):
        return None
    return reader


def serve(settings: ServiceSettings | None = None) -> int:
    """Run the line service on stdin/stdout and return its exit code."""
    return asyncio.run(LineService(settings).run())
