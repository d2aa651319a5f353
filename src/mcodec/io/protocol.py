"""
Pydantic v2 models for the line protocol.

Requests
    {"id": <id>, "content": {"kind": "Encode", "schema": <type expr>, "data": <canonical>}}
    {"id": <id>, "content": {"kind": "Decode", "schema": <type expr>, "michelson": <tree>}}

Responses
    {"id": <id>, "content": {"status": "Success", "value": <tree or canonical>}}
    {"id": <id>, "content": {"status": "Error", "error": "<rendered failure>"}}

Responsibilities
- Validate request content per kind (discriminated on ``kind``); schemas and
  value trees must be well-formed Micheline.
- Guarantee response values are JSON data (pydantic JsonValue) before they are written.
- Render a response as exactly one line of wire JSON.

Style
- Extra request fields are ignored; response models forbid extras.
- ``schema`` is declared through an alias because BaseModel reserves the name.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, JsonValue, TypeAdapter

from mcodec.core.micheline import Micheline
from mcodec.core.serde import json_dumps_wire

__all__ = [
    "EncodeContent",
    "DecodeContent",
    "RequestContent",
    "Request",
    "SuccessContent",
    "ErrorContent",
    "ResponseContent",
    "Response",
    "parse_content",
]


class EncodeContent(BaseModel):
    """
    Content of an Encode request.

    Attributes:
        kind (Literal["Encode"]): Operation kind.
        schema_ (Micheline): Michelson type expression (wire name ``schema``).
        data (JsonValue): Canonical value to encode; ``null`` is a valid value.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    kind: Literal["Encode"]
    schema_: Micheline = Field(alias="schema")
    data: JsonValue


class DecodeContent(BaseModel):
    """
    Content of a Decode request.

    Attributes:
        kind (Literal["Decode"]): Operation kind.
        schema_ (Micheline): Michelson type expression (wire name ``schema``).
        michelson (Micheline): Michelson value tree to decode.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    kind: Literal["Decode"]
    schema_: Micheline = Field(alias="schema")
    michelson: Micheline


RequestContent = Annotated[Union[EncodeContent, DecodeContent], Field(discriminator="kind")]

_CONTENT_ADAPTER: TypeAdapter[EncodeContent | DecodeContent] = TypeAdapter(RequestContent)


def parse_content(raw: Any) -> EncodeContent | DecodeContent:
    """
    Validate raw request content.

    Raises:
        pydantic.ValidationError: If the kind is not Encode/Decode or fields are missing.
    """
    return _CONTENT_ADAPTER.validate_python(raw)


class Request(BaseModel):
    """
    Request envelope as written by clients.

    Examples:
        >>> content = {"kind": "Decode", "schema": {"prim": "unit"}, "michelson": {"prim": "Unit"}}
        >>> Request(id=1, content=content).to_line()
        '{"id":1,"content":{"kind":"Decode","schema":{"prim":"unit"},"michelson":{"prim":"Unit"}}}\\n'
    """

    model_config = ConfigDict(extra="ignore")

    id: JsonValue
    content: RequestContent

    def to_line(self) -> str:
        """Render as one newline-terminated line of wire JSON, ``schema`` under its wire name."""
        data = self.model_dump(mode="json", by_alias=True, exclude_defaults=True)
        return json_dumps_wire(data) + "\n"


class SuccessContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Literal["Success"] = "Success"
    value: JsonValue


class ErrorContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Literal["Error"] = "Error"
    error: str


ResponseContent = Annotated[Union[SuccessContent, ErrorContent], Field(discriminator="status")]


class Response(BaseModel):
    """
    Response envelope, correlated to its request by ``id``.

    Examples:
        >>> Response(id=1, content=SuccessContent(value={"prim": "Unit"})).to_line()
        '{"id":1,"content":{"status":"Success","value":{"prim":"Unit"}}}\\n'
    """

    model_config = ConfigDict(extra="forbid")

    id: JsonValue
    content: ResponseContent

    def to_line(self) -> str:
        """Render as one newline-terminated line of wire JSON."""
        return json_dumps_wire(self.model_dump(mode="json")) + "\n"
