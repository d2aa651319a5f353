"""
Core package for mcodec: the value bridge between canonical JSON values and
Michelson value trees (sentinels, passes, pipelines, serde, wrapping, errors).

## Contracts (single source of truth)
- Sentinels — reserved canonical shapes for maps, unit and enums; casing rule.
- Passes — pure structural rewrites, one concern each.
- Bridge — the ordered decode/encode pipelines around the schema engine.
- Serde — wire and canonical JSON text forms.
- Wrapped — Python natives <-> canonical values.
- Micheline — typed Micheline trees validated at the protocol boundary.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO.
- Round-trip law: decode_to_canonical(S, encode_from_canonical(S, V)) == V for
  every canonical V consistent with schema S.
- Only top-level fields (or the value itself) are map-converted.

## Downstream usage
- mcodec.io — the line service dispatches Encode/Decode requests to the bridge
  and writes canonical values back with the wire serializer.

## Examples
```python
from mcodec.core import decode_to_canonical, encode_from_canonical
sch = {"prim": "or", "args": [{"prim": "unit", "annots": ["%aaA"]},
                              {"prim": "unit", "annots": ["%ccC"]}]}
encode_from_canonical(sch, {"__enum__": "AaA"})          # {'prim': 'Left', 'args': [{'prim': 'Unit'}]}
decode_to_canonical(sch, {"prim": "Left", "args": [{"prim": "Unit"}]})  # {'__enum__': 'AaA'}
```
"""

from __future__ import annotations

from .bridge import DECODE_PASSES, ENCODE_PASSES, decode_to_canonical, encode_from_canonical
from .errors import CodecError, WrapError
from .micheline import Micheline, parse_micheline
from .sentinels import ENUM_KEY, MAP_KEY, UNIT_KEY, enum_sentinel, map_sentinel, unit_json

__all__ = [
    "decode_to_canonical",
    "encode_from_canonical",
    "DECODE_PASSES",
    "ENCODE_PASSES",
    "MAP_KEY",
    "UNIT_KEY",
    "ENUM_KEY",
    "unit_json",
    "map_sentinel",
    "enum_sentinel",
    "CodecError",
    "WrapError",
    "Micheline",
    "parse_micheline",
]
