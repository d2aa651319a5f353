"""
mcodec.engine — Michelson schema engine (typed values <-> Michelson value trees).

## Responsibilities
- Interpret Michelson type expressions (pair, or, option, unit, bool, int/nat/mutez,
  string-like leaves, bytes, timestamp, list, set, map, big_map).
- Execute Michelson value trees into typed values and encode typed values back.
- Provide the distinguished engine values: UNIT and MichelsonMap.

## Public API
- Schema / SchemaEngine — the execute/encode capabilities.
- UNIT, MichelsonMap — engine-side value types.
- EngineError, SchemaError, DecodeError, EncodeError — failure types.

## Import DAG discipline
- stdlib-only; imports nothing else from mcodec.
- mcodec.core builds the canonical JSON pipeline on top of this package.

## Examples
```python
from mcodec.engine import Schema, UNIT
sch = Schema({"prim": "or", "args": [{"prim": "unit", "annots": ["%on"]},
                                     {"prim": "unit", "annots": ["%off"]}]})
sch.encode({"on": UNIT})  # {'prim': 'Left', 'args': [{'prim': 'Unit'}]}
```
"""

from __future__ import annotations

from .errors import DecodeError, EncodeError, EngineError, SchemaError
from .schema import Schema, SchemaEngine
from .values import UNIT, MichelsonMap

__all__ = [
    "Schema",
    "SchemaEngine",
    "UNIT",
    "MichelsonMap",
    "EngineError",
    "SchemaError",
    "DecodeError",
    "EncodeError",
]
