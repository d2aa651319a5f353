"""
Value bridge: canonical JSON values <-> Michelson value trees.

Wraps the schema engine's execute/encode capabilities with the ordered passes
from mcodec.core.passes.

Responsibilities
- decode_to_canonical: Michelson tree -> engine typed value -> canonical value.
- encode_from_canonical: canonical value -> engine typed value -> Michelson tree.
- Fix the pass order (DECODE_PASSES / ENCODE_PASSES).

Ordering constraints
- Decode: the unit pass runs before the enum pass, because enum detection
  compares a field's value with the canonical unit sentinel. Map passes run
  before the number pass so numbers inside map payloads are reached by plain
  dict recursion.
- Encode: the enum pass already emits UNIT, so the unit pass after it is a
  no-op on those leaves. Map passes run last.

Notes
- Inputs are deep-copied and never mutated.
- No error is raised here; engine failures (EngineError) propagate unchanged.
- Zero-IO.

Examples
--------
>>> from mcodec.core.bridge import decode_to_canonical, encode_from_canonical
>>> sch = {"prim": "map", "args": [{"prim": "string"}, {"prim": "int"}]}
>>> encode_from_canonical(sch, {"MichelsonMap": {"field": "1"}})
[{'prim': 'Elt', 'args': [{'string': 'field'}, {'int': '1'}]}]
>>> decode_to_canonical(sch, [{"prim": "Elt", "args": [{"string": "field"}, {"int": "1"}]}])
{'MichelsonMap': {'field': '1'}}
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from functools import reduce
from typing import Any, Protocol

from ..engine.schema import SchemaEngine
from . import passes
from .typing import CanonicalValue, MichelsonTree, Pass, SchemaExpr

__all__ = [
    "Engine",
    "DEFAULT_ENGINE",
    "DECODE_PASSES",
    "ENCODE_PASSES",
    "transform",
    "decode_to_canonical",
    "encode_from_canonical",
]


class Engine(Protocol):
    """Capabilities the bridge needs from a schema engine."""

    def execute(self, schema: SchemaExpr, michelson: MichelsonTree) -> Any: ...

    def encode(self, schema: SchemaExpr, value: Any) -> MichelsonTree: ...


DEFAULT_ENGINE: Engine = SchemaEngine()

DECODE_PASSES: tuple[Pass, ...] = (
    passes.decode_top_map,
    passes.decode_maps,
    passes.decode_numbers,
    passes.decode_unit,
    passes.decode_enum,
)

ENCODE_PASSES: tuple[Pass, ...] = (
    passes.encode_enum,
    passes.encode_unit,
    passes.encode_maps,
    passes.encode_top_map,
)


def transform(funs: Iterable[Pass], init: Any) -> Any:
    """Apply ``funs`` to ``init`` in order."""
    return reduce(lambda acc, f: f(acc), funs, init)


def decode_to_canonical(
    schema: SchemaExpr, michelson: MichelsonTree, *, engine: Engine | None = None
) -> CanonicalValue:
    """
    Decode a Michelson value tree into its canonical JSON form.

    Args:
        schema (SchemaExpr): Michelson type expression.
        michelson (MichelsonTree): Value tree matching ``schema``.
        engine (Engine | None): Schema engine; DEFAULT_ENGINE when None.

    Returns:
        CanonicalValue: JSON-shaped value with numbers as decimal strings and
        map/unit/enum sentinels.

    Raises:
        mcodec.engine.errors.EngineError: If the engine rejects the schema or the tree.
    """
    engine = engine or DEFAULT_ENGINE
    raw = engine.execute(schema, copy.deepcopy(michelson))
    return transform(DECODE_PASSES, raw)


def encode_from_canonical(
    schema: SchemaExpr, value: CanonicalValue, *, engine: Engine | None = None
) -> MichelsonTree:
    """
    Encode a canonical JSON value into a Michelson value tree.

    Args:
        schema (SchemaExpr): Michelson type expression.
        value (CanonicalValue): Canonical value, assumed (not checked) to fit ``schema``.
        engine (Engine | None): Schema engine; DEFAULT_ENGINE when None.

    Returns:
        MichelsonTree: The engine's encoding, returned verbatim.

    Raises:
        mcodec.engine.errors.EngineError: If the engine rejects the schema or the value.
    """
    engine = engine or DEFAULT_ENGINE
    typed = transform(ENCODE_PASSES, copy.deepcopy(value))
    return engine.encode(schema, typed)
