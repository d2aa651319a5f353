"""
Newline-delimited JSON framing for the line service.

LineFramer turns arbitrary byte chunks into parsed JSON messages. It is purely
synchronous: ``feed`` never blocks and never suspends.

Rules
- Input must be UTF-8. Multi-byte sequences split across chunks are handled by
  an incremental decoder.
- Every newline-terminated segment is one message; text after the last newline
  is kept as the partial message for the next chunk.
- Blank (whitespace-only) segments are skipped.
- A segment that is not valid JSON, non-UTF-8 input, or a partial message
  larger than ``max_message_bytes`` raises FramingError.

Notes
- Parsed messages are returned as-is; shape checks belong to dispatch.
"""

from __future__ import annotations

import codecs
import logging
from typing import Any

from mcodec.core.constants import MAX_MESSAGE_BYTES
from mcodec.core.serde import json_loads

from .errors import FramingError

logger = logging.getLogger(__name__)

__all__ = ["LineFramer"]


class LineFramer:
    """
    Incremental NDJSON splitter.

    Args:
        max_message_bytes (int): Largest pending partial message, in UTF-8 bytes.

    Examples:
        >>> f = LineFramer()
        >>> f.feed(b'{"id": 1}\\n{"id"')
        [{'id': 1}]
        >>> f.feed(b': 2}\\n')
        [{'id': 2}]
    """

    def __init__(self, max_message_bytes: int = MAX_MESSAGE_BYTES) -> None:
        self.max_message_bytes = max_message_bytes
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Partial message text not yet terminated by a newline."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[Any]:
        """
        Consume a chunk of bytes and return the messages it completes.

        Raises:
            FramingError: On non-UTF-8 input, invalid JSON, or an oversized partial message.
        """
        return [self.parse(segment) for segment in self.segments(chunk)]

    def segments(self, chunk: bytes) -> list[str]:
        """
        Consume a chunk of bytes and return the non-blank lines it completes, unparsed.

        Raises:
            FramingError: On non-UTF-8 input or an oversized partial message.
        """
        try:
            text = self._decoder.decode(chunk)
        except UnicodeDecodeError as exc:
            raise FramingError(f"input is not valid UTF-8: {exc}") from exc

        self._buffer += text
        complete: list[str] = []
        if "\n" in self._buffer:
            *complete, self._buffer = self._buffer.split("\n")
        self._check_pending()
        return [segment for segment in complete if segment.strip()]

    def parse(self, segment: str) -> Any:
        """
        Parse one complete line.

        Raises:
            FramingError: If ``segment`` is not valid JSON.
        """
        try:
            message = json_loads(segment)
        except ValueError as exc:
            raise FramingError(f"malformed JSON line: {exc}") from exc
        logger.debug("framed message of %d chars", len(segment))
        return message

    def close(self) -> None:
        """
        Signal end of input.

        Raises:
            FramingError: If the stream ended inside a multi-byte character or
                with an unterminated message.
        """
        try:
            self._buffer += self._decoder.decode(b"", final=True)
        except UnicodeDecodeError as exc:
            raise FramingError(f"input ended inside a UTF-8 sequence: {exc}") from exc
        if self._buffer.strip():
            raise FramingError(
                f"input ended with an unterminated message ({len(self._buffer)} chars)"
            )
        self._buffer = ""

    def _check_pending(self) -> None:
        # A char is at most 4 UTF-8 bytes; only encode when the bound may be crossed.
        if len(self._buffer) * 4 <= self.max_message_bytes:
            return
        size = len(self._buffer.encode("utf-8"))
        if size > self.max_message_bytes:
            raise FramingError(
                f"partial message of {size} bytes exceeds max_message_bytes={self.max_message_bytes}"
            )
