"""
Typed Micheline trees (JSON syntax).

A Micheline node is exactly one of:

| Node    | JSON shape                                        |
|---------|---------------------------------------------------|
| int     | ``{"int": "<decimal>"}``                          |
| string  | ``{"string": "<text>"}``                          |
| bytes   | ``{"bytes": "<hex>"}``                            |
| prim    | ``{"prim": "<name>", "args": [...], "annots": [...]}`` |
| seq     | ``[<node>, ...]``                                 |

Both type expressions (schemas) and value trees use this grammar.

Notes
- Nodes forbid extra fields, so each JSON object matches one node kind.
- ``to_json`` omits empty ``args``/``annots``.
- Numbers stay decimal strings; nothing here goes through floats.

Examples
--------
>>> node = parse_micheline({"prim": "Pair", "args": [{"int": "1"}, []]})
>>> node.to_json()
{'prim': 'Pair', 'args': [{'int': '1'}, []]}
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel

from .typing import MichelsonTree

__all__ = [
    "MichelineInt",
    "MichelineString",
    "MichelineBytes",
    "MichelinePrim",
    "Micheline",
    "parse_micheline",
]


class MichelineInt(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    int_: str = Field(alias="int", pattern=r"^-?[0-9]+$")


class MichelineString(BaseModel):
    model_config = ConfigDict(extra="forbid")

    string: str


class MichelineBytes(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    bytes_: str = Field(alias="bytes", pattern=r"^([0-9a-fA-F]{2})*$")


class MichelinePrim(BaseModel):
    """
    Primitive application: a type (``pair``, ``map``) or a data constructor
    (``Pair``, ``Left``, ``Unit``), with optional arguments and annotations.
    """

    model_config = ConfigDict(extra="forbid")

    prim: str
    args: list[Micheline] = []
    annots: list[str] = []


class Micheline(RootModel):
    """
    Any Micheline node, sequences included.

    Examples:
        >>> Micheline.model_validate([{"int": "1"}, {"string": "a"}]).to_json()
        [{'int': '1'}, {'string': 'a'}]
    """

    root: Union[MichelineInt, MichelineString, MichelineBytes, MichelinePrim, list[Micheline]]

    def to_json(self) -> MichelsonTree:
        """Plain JSON form, as the schema engine consumes it."""
        return self.model_dump(mode="json", by_alias=True, exclude_defaults=True)


MichelinePrim.model_rebuild()
Micheline.model_rebuild()


def parse_micheline(raw: Any) -> Micheline:
    """
    Validate a JSON value as a Micheline tree.

    Raises:
        pydantic.ValidationError: If ``raw`` is not a well-formed Micheline node.
    """
    return Micheline.model_validate(raw)
