"""
Sentinel shapes of the canonical value form.

The canonical form is plain JSON plus three reserved single-field objects:

| Sentinel | Shape                                 | Stands for                          |
|----------|---------------------------------------|-------------------------------------|
| map      | ``{"MichelsonMap": {key: value, ...}}`` | ``map`` / ``big_map`` values        |
| unit     | ``{"__unit__": null}``                 | the ``Unit`` value                   |
| enum     | ``{"__enum__": "Variant"}``            | a zero-argument ``or`` branch        |

Responsibilities
- Own the marker keys and the predicates/constructors for each sentinel.
- Own the variant-name casing rule: only the first character changes case.
- Own the string form of map keys used by the map sentinel.

Notes
- Zero-IO; stdlib-only.
- Constructors always return fresh dicts; callers may mutate them freely.

Examples
--------
>>> from mcodec.core.sentinels import enum_sentinel, is_enum_sentinel, first_to_lower
>>> is_enum_sentinel(enum_sentinel("Genesis"))
True
>>> first_to_lower("AaA")
'aaA'
"""

from __future__ import annotations

from typing import Any, Final

from .serde import json_dumps_canonical
from .typing import JsonDict

__all__ = [
    "MAP_KEY",
    "UNIT_KEY",
    "ENUM_KEY",
    "unit_json",
    "map_sentinel",
    "enum_sentinel",
    "is_unit_sentinel",
    "is_map_sentinel",
    "is_enum_sentinel",
    "is_encoded_enum",
    "first_to_lower",
    "first_to_upper",
    "map_key_str",
]

MAP_KEY: Final[str] = "MichelsonMap"
UNIT_KEY: Final[str] = "__unit__"
ENUM_KEY: Final[str] = "__enum__"


def _is_singleton(obj: Any) -> bool:
    return isinstance(obj, dict) and len(obj) == 1


def unit_json() -> JsonDict:
    """Return a fresh canonical unit sentinel ``{"__unit__": None}``."""
    return {UNIT_KEY: None}


def map_sentinel(entries: JsonDict) -> JsonDict:
    return {MAP_KEY: entries}


def enum_sentinel(variant: str) -> JsonDict:
    return {ENUM_KEY: variant}


def is_unit_sentinel(obj: Any) -> bool:
    """True iff ``obj`` deep-equals ``{"__unit__": None}``."""
    return _is_singleton(obj) and UNIT_KEY in obj and obj[UNIT_KEY] is None


def is_map_sentinel(obj: Any) -> bool:
    """True iff ``obj`` is a single-field ``MichelsonMap`` object with a mapping payload."""
    return _is_singleton(obj) and isinstance(obj.get(MAP_KEY), dict)


def is_enum_sentinel(obj: Any) -> bool:
    """True iff ``obj`` is a single-field ``__enum__`` object carrying a string."""
    return _is_singleton(obj) and isinstance(obj.get(ENUM_KEY), str)


def is_encoded_enum(obj: Any) -> bool:
    """
    True iff ``obj`` is a single-field object whose value is the canonical unit.

    This is how a zero-argument ``or`` branch looks once the unit pass has run:
    ``{"genesis": {"__unit__": None}}``.
    """
    return _is_singleton(obj) and is_unit_sentinel(next(iter(obj.values())))


def first_to_lower(s: str) -> str:
    """Lowercase the first character only: ``"AaA" -> "aaA"``."""
    return s[:1].lower() + s[1:]


def first_to_upper(s: str) -> str:
    """Uppercase the first character only: ``"aaA" -> "AaA"``."""
    return s[:1].upper() + s[1:]


def map_key_str(key: Any, *, as_json: bool = False) -> str:
    """
    String form of an engine map key.

    Args:
        key (Any): Key as produced by the engine, already in canonical form when
            it is a record or an option payload.
        as_json (bool): Always write canonical JSON text. Used for composite key
            types, so a string payload is quoted and stays distinct from ``null``.

    Returns:
        str: Strings as-is, ints in base 10, booleans as ``true``/``false``,
        anything else (records, options) as canonical JSON.

    Examples:
        >>> map_key_str("abc"), map_key_str("abc", as_json=True)
        ('abc', '"abc"')
    """
    if as_json:
        return json_dumps_canonical(key)
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, int):
        return str(key)
    return json_dumps_canonical(key)
