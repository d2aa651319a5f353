"""
Structural passes of the value bridge.

Each pass is a pure function ``value -> value``: it returns a new structure and
never mutates its argument. Record field order and sequence order are kept.

Decode passes (engine typed value -> canonical), in pipeline order:
1. decode_top_map   — the whole value is a MichelsonMap -> map sentinel.
2. decode_maps      — direct fields that are MichelsonMaps -> map sentinels.
3. decode_numbers   — every int anywhere -> base-10 string.
4. decode_unit      — every UNIT anywhere -> canonical unit sentinel.
5. decode_enum      — every ``{name: <unit sentinel>}`` -> enum sentinel ``Name``.

Encode passes (canonical -> engine typed value), in pipeline order:
1. encode_enum      — every enum sentinel ``Name`` -> ``{name: UNIT}``.
2. encode_unit      — every canonical unit sentinel -> UNIT.
3. encode_maps      — direct fields that are map sentinels -> MichelsonMaps.
4. encode_top_map   — the whole value is a map sentinel -> MichelsonMap.

Notes
- Map passes look one level deep only; maps nested further inside records are
  left to the engine as-is.
- Keys of a map decoded under a composite key type (pair, or, option, bool)
  get the number, unit and enum rewrites and are then written as canonical
  JSON text; encode parses them back and undoes the unit and enum rewrites.
- decode_numbers skips booleans (``bool`` is an ``int`` subclass in Python).
- Zero-IO.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ..engine.values import UNIT, MichelsonMap
from .sentinels import (
    ENUM_KEY,
    MAP_KEY,
    enum_sentinel,
    first_to_lower,
    first_to_upper,
    is_encoded_enum,
    is_enum_sentinel,
    is_map_sentinel,
    is_unit_sentinel,
    map_key_str,
    map_sentinel,
    unit_json,
)

__all__ = [
    "deep_transform",
    "shallow_transform",
    "decode_top_map",
    "decode_maps",
    "decode_numbers",
    "decode_unit",
    "decode_enum",
    "encode_enum",
    "encode_unit",
    "encode_maps",
    "encode_top_map",
]

Matcher = Callable[[Any], bool]
Rewrite = Callable[[Any], Any]


def deep_transform(data: Any, matcher: Matcher, rewrite: Rewrite) -> Any:
    """
    Rewrite every node matching ``matcher``, descending into lists and dicts.

    A matched node is replaced by ``rewrite(node)`` and not descended into.

    Args:
        data (Any): Value to transform.
        matcher (Callable[[Any], bool]): Node predicate.
        rewrite (Callable[[Any], Any]): Replacement for matched nodes.

    Returns:
        Any: New value; ``data`` is left untouched.

    Examples:
        >>> deep_transform({"a": [1, {"b": 2}]}, lambda x: x == 2, lambda x: "two")
        {'a': [1, {'b': 'two'}]}
    """
    if matcher(data):
        return rewrite(data)
    if isinstance(data, list):
        return [deep_transform(v, matcher, rewrite) for v in data]
    if isinstance(data, dict):
        return {k: deep_transform(v, matcher, rewrite) for k, v in data.items()}
    return data


def shallow_transform(data: Any, matcher: Matcher, rewrite: Rewrite) -> Any:
    """
    Rewrite the direct fields (or elements) of ``data`` that match ``matcher``.

    Examples:
        >>> shallow_transform({"a": 1, "b": {"c": 1}}, lambda x: x == 1, str)
        {'a': '1', 'b': {'c': 1}}
    """
    if isinstance(data, dict):
        return {k: rewrite(v) if matcher(v) else v for k, v in data.items()}
    if isinstance(data, list):
        return [rewrite(v) if matcher(v) else v for v in data]
    return data


# ---------------------------------------------------------------------------
# Maps
# ---------------------------------------------------------------------------


def _canonical_key(key: Any) -> Any:
    return decode_enum(decode_unit(decode_numbers(key)))


def _typed_key(key: Any) -> Any:
    return encode_unit(encode_enum(key))


def _decode_map(m: MichelsonMap) -> dict[str, Any]:
    if m.json_keys:
        # composite keys: same rewrites as values, then JSON text
        entries = {map_key_str(_canonical_key(k), as_json=True): v for k, v in m.items()}
        return map_sentinel(entries)
    return map_sentinel({map_key_str(k): v for k, v in m.items()})


def _encode_map(sentinel: dict[str, Any]) -> MichelsonMap:
    return MichelsonMap.from_literal(sentinel[MAP_KEY], key_reviver=_typed_key)


def decode_top_map(data: Any) -> Any:
    return _decode_map(data) if MichelsonMap.is_michelson_map(data) else data


def decode_maps(data: Any) -> Any:
    return shallow_transform(data, MichelsonMap.is_michelson_map, _decode_map)


def encode_maps(data: Any) -> Any:
    return shallow_transform(data, is_map_sentinel, _encode_map)


def encode_top_map(data: Any) -> Any:
    return _encode_map(data) if is_map_sentinel(data) else data


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def _is_number(x: Any) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


def decode_numbers(data: Any) -> Any:
    return deep_transform(data, _is_number, lambda n: str(n))


# ---------------------------------------------------------------------------
# Unit
# ---------------------------------------------------------------------------


def decode_unit(data: Any) -> Any:
    return deep_transform(data, lambda x: x is UNIT, lambda _: unit_json())


def encode_unit(data: Any) -> Any:
    return deep_transform(data, is_unit_sentinel, lambda _: UNIT)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


def decode_enum(data: Any) -> Any:
    return deep_transform(
        data, is_encoded_enum, lambda d: enum_sentinel(first_to_upper(next(iter(d))))
    )


def encode_enum(data: Any) -> Any:
    return deep_transform(data, is_enum_sentinel, lambda d: {first_to_lower(d[ENUM_KEY]): UNIT})
