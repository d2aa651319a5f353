"""
Python natives <-> canonical values.

Callers that hold ordinary Python data (ints, enums, dataclasses, pydantic
models) use these helpers to build canonical values for the line service and
to read typed fields back out of its responses.

Wrapping rules (``to_wrapped``)
- None, bool, str -> unchanged
- int -> decimal string
- enum.Enum member -> enum sentinel carrying the member name
- UNIT -> canonical unit sentinel
- MichelsonMap -> map sentinel (keys in map-key string form)
- bytes -> hex string
- datetime -> ISO-8601 UTC string with millisecond precision
- dict / dataclass / pydantic model -> record of wrapped fields
- list / tuple / set / frozenset -> list of wrapped elements
- float and anything else -> WrapError

Notes
- Zero-IO; stdlib + pydantic only.
- The unwrap_* helpers validate the canonical shape and raise WrapError.

Examples
--------
>>> import enum
>>> class State(enum.Enum):
...     Genesis = 0
>>> to_wrapped({"state": State.Genesis, "count": 3})
{'state': {'__enum__': 'Genesis'}, 'count': '3'}
>>> unwrap_enum(State, {"__enum__": "Genesis"}) is State.Genesis
True
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel

from ..engine.values import UNIT, MichelsonMap
from .errors import WrapError
from .sentinels import (
    ENUM_KEY,
    MAP_KEY,
    enum_sentinel,
    is_enum_sentinel,
    is_map_sentinel,
    is_unit_sentinel,
    map_key_str,
    map_sentinel,
    unit_json,
)
from .typing import CanonicalValue

__all__ = [
    "to_wrapped",
    "unwrap_int",
    "unwrap_enum",
    "unwrap_map",
    "unwrap_unit",
]

E = TypeVar("E", bound=enum.Enum)


def to_wrapped(obj: Any) -> CanonicalValue:
    """
    Convert a Python native value into its canonical form.

    Args:
        obj (Any): Value to convert (see module docstring for the rules).

    Returns:
        CanonicalValue: JSON-shaped canonical value.

    Raises:
        WrapError: If ``obj`` (or a nested value) has no canonical form.
    """
    if obj is None or isinstance(obj, (bool, str)):
        return obj
    if isinstance(obj, enum.Enum):
        return enum_sentinel(obj.name)
    if isinstance(obj, int):
        return str(obj)
    if obj is UNIT:
        return unit_json()
    if isinstance(obj, MichelsonMap):
        entries = {
            map_key_str(to_wrapped(k), as_json=obj.json_keys): to_wrapped(v)
            for k, v in obj.items()
        }
        return map_sentinel(entries)
    if isinstance(obj, (bytes, bytearray)):
        return bytes(obj).hex()
    if isinstance(obj, datetime):
        dt = obj if obj.tzinfo is not None else obj.replace(tzinfo=timezone.utc)
        dt = dt.astimezone(timezone.utc)
        return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{dt.microsecond // 1000:03d}Z"
    if isinstance(obj, BaseModel):
        return to_wrapped(dict(obj))
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_wrapped(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Mapping):
        return {str(k): to_wrapped(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_wrapped(v) for v in obj]
    raise WrapError(f"no canonical form for {type(obj).__name__}: {obj!r}")


def unwrap_int(value: CanonicalValue) -> int:
    """Parse a canonical decimal-string number."""
    if isinstance(value, str):
        try:
            return int(value, 10)
        except ValueError:
            pass
    raise WrapError(f"expected a decimal number string, got {value!r}")


def unwrap_enum(enum_cls: type[E], value: CanonicalValue) -> E:
    """Look up the member of ``enum_cls`` named by an enum sentinel."""
    if not is_enum_sentinel(value):
        raise WrapError(f"expected an enum sentinel, got {value!r}")
    try:
        return enum_cls[value[ENUM_KEY]]
    except KeyError as exc:
        raise WrapError(f"{enum_cls.__name__} has no member {value[ENUM_KEY]!r}") from exc


def unwrap_map(value: CanonicalValue) -> dict[str, Any]:
    """Return the payload of a map sentinel (a plain dict keyed by strings)."""
    if not is_map_sentinel(value):
        raise WrapError(f"expected a map sentinel, got {value!r}")
    return dict(value[MAP_KEY])


def unwrap_unit(value: CanonicalValue) -> None:
    if not is_unit_sentinel(value):
        raise WrapError(f"expected the unit sentinel, got {value!r}")
