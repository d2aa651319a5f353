"""
Custom exceptions for the mcodec.io module.

Purpose
- Provide service-layer error types that map onto the fatal/recoverable split of
  the line protocol.
- Keep mcodec.engine as the source of truth for schema/value mismatches
  (EngineError) and mcodec.core for wrapping errors (CodecError).

Fatal (the service stops and returns a non-zero exit code)
  - FramingError: malformed JSON line, non-UTF-8 input, oversized partial message.
  - OutputError: a response could not be written.
  - UnknownKindError: request content names an operation kind other than Encode/Decode.

Recoverable (rendered into an Error response for the request)
  - MalformedRequestError: request/content is not an object or lacks required fields.

Client side (mcodec.io.client)
  - IdMismatchError, ServiceClosedError, ServiceEncodeError, ServiceDecodeError.

Notes
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """
    Base class for line service errors in mcodec.io.

    Notes:
        Use this as a catch-all for service-layer failures, distinct from engine errors.
    """


class FramingError(ServiceError):
    """Raised when the input stream cannot be split into JSON messages."""


class OutputError(ServiceError):
    """Raised when a response line cannot be written to the output stream."""


class UnknownKindError(ServiceError):
    """Raised when request content carries an unrecognized operation kind."""

    def __init__(self, kind: Any) -> None:
        super().__init__(f"invalid content.kind: {kind!r}")
        self.kind = kind


class MalformedRequestError(ServiceError):
    """Raised when a request does not have the {id, content} shape."""


class ClientError(ServiceError):
    """Base class for failures observed by CodecClient."""


class IdMismatchError(ClientError):
    """Raised when a response id does not match the pending request id."""

    def __init__(self, expected: Any, got: Any) -> None:
        super().__init__(f"response id {got!r} does not match request id {expected!r}")
        self.expected = expected
        self.got = got


class ServiceClosedError(ClientError):
    """Raised when the service process stops before answering."""


class ServiceEncodeError(ClientError):
    """Raised when the service answers an Encode request with an Error status."""


class ServiceDecodeError(ClientError):
    """Raised when the service answers a Decode request with an Error status."""
