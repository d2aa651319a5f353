"""
Request dispatch: one framed message in, one Response out.

Responsibilities
- Route Encode/Decode content to the value bridge.
- Convert every per-request failure into an Error response carrying the
  request id, so the service keeps serving.
- Raise UnknownKindError (fatal) for content naming another operation kind.

Error rendering
- "summary": ``"<ExceptionType>: <message>"``.
- "traceback": the full formatted traceback.

Notes
- A message without an ``id`` is answered with ``id: null``.
- Bridge calls are synchronous; ``handle`` is a coroutine so the server can run
  it as a task.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

from mcodec.core.bridge import Engine, decode_to_canonical, encode_from_canonical
from mcodec.core.constants import REQUEST_KINDS

from .config import ErrorDetail
from .errors import MalformedRequestError, UnknownKindError
from .protocol import (
    DecodeContent,
    EncodeContent,
    ErrorContent,
    Response,
    SuccessContent,
    parse_content,
)

logger = logging.getLogger(__name__)

__all__ = ["Dispatcher", "render_error", "handle_request"]


def render_error(exc: BaseException, detail: ErrorDetail = "summary") -> str:
    """
    Render an exception for the ``error`` field of an Error response.

    Examples:
        >>> render_error(ValueError("bad"))
        'ValueError: bad'
    """
    if detail == "traceback":
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip()
    return f"{type(exc).__name__}: {exc}"


class Dispatcher:
    """
    Dispatch framed messages to the value bridge.

    Args:
        engine (Engine | None): Schema engine passed to the bridge; the bridge
            default when None.
        error_detail (Literal["summary","traceback"]): Error rendering mode.
    """

    def __init__(self, engine: Engine | None = None, error_detail: ErrorDetail = "summary") -> None:
        self.engine = engine
        self.error_detail = error_detail

    async def handle(self, message: Any) -> Response:
        """
        Answer one framed message.

        Raises:
            UnknownKindError: If the content is an object whose ``kind`` is not
                Encode or Decode.
        """
        req_id = message.get("id") if isinstance(message, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, dict):
            kind = content.get("kind")
            if not isinstance(kind, str) or kind not in REQUEST_KINDS:
                raise UnknownKindError(kind)

        try:
            if not isinstance(message, dict):
                raise MalformedRequestError(
                    f"request must be a JSON object, got {type(message).__name__}"
                )
            if not isinstance(content, dict):
                raise MalformedRequestError("request content must be a JSON object")
            value = self._run(parse_content(content))
            return Response(id=req_id, content=SuccessContent(value=value))
        except Exception as exc:
            logger.warning("request %r failed: %s: %s", req_id, type(exc).__name__, exc)
            return Response(
                id=req_id, content=ErrorContent(error=render_error(exc, self.error_detail))
            )

    def _run(self, content: EncodeContent | DecodeContent) -> Any:
        if isinstance(content, EncodeContent):
            return encode_from_canonical(content.schema_.to_json(), content.data, engine=self.engine)
        return decode_to_canonical(
            content.schema_.to_json(), content.michelson.to_json(), engine=self.engine
        )


async def handle_request(message: Any) -> Response:
    """Dispatch ``message`` with a default Dispatcher."""
    return await Dispatcher().handle(message)
