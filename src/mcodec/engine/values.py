"""
Engine-side value types that have no plain JSON counterpart.

Provides the two distinguished values the engine produces and accepts:
- UNIT, the singleton standing for Michelson's ``Unit``.
- MichelsonMap, the associative container used for ``map`` and ``big_map``.

Notes:
    - MichelsonMap keeps insertion order and compares keys with ``==``, so keys
      may be unhashable (records decoded from ``pair`` key types are dicts).
    - Equality between two maps ignores entry order and the key-text settings.
    - ``json_keys`` marks a decoded map whose key type is composite (pair, or,
      option, bool); its keys are written out as JSON text. ``key_reviver``
      post-processes such keys after they are parsed back on encode.
    - Zero-IO; stdlib-only.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, Final

__all__ = [
    "UNIT",
    "UnitType",
    "MichelsonMap",
]


class UnitType:
    """Type of the UNIT singleton. Always compare with ``is``."""

    _instance: UnitType | None = None

    def __new__(cls) -> UnitType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNIT"

    def __copy__(self) -> UnitType:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> UnitType:
        return self

    def __reduce__(self) -> str:
        return "UNIT"


UNIT: Final[UnitType] = UnitType()


class MichelsonMap:
    """
    Ordered key/value container for Michelson ``map`` and ``big_map`` values.

    Args:
        entries (Iterable[tuple[Any, Any]]): Initial key/value pairs. A later
            pair with an equal key replaces the earlier value in place.
        json_keys (bool): Keys come from a composite key type.
        key_reviver (Callable[[Any], Any] | None): Applied to each JSON-text key
            once parsed, before the key is encoded.

    Examples:
        >>> m = MichelsonMap.from_literal({"a": 1})
        >>> m.set("b", 2)
        >>> m.items()
        [('a', 1), ('b', 2)]
        >>> MichelsonMap.is_michelson_map(m)
        True
    """

    __slots__ = ("_entries", "json_keys", "key_reviver")
    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        entries: Iterable[tuple[Any, Any]] = (),
        *,
        json_keys: bool = False,
        key_reviver: Callable[[Any], Any] | None = None,
    ) -> None:
        self._entries: list[tuple[Any, Any]] = []
        self.json_keys = json_keys
        self.key_reviver = key_reviver
        for key, value in entries:
            self.set(key, value)

    @classmethod
    def from_literal(
        cls, mapping: Mapping[Any, Any], *, key_reviver: Callable[[Any], Any] | None = None
    ) -> MichelsonMap:
        """Build a map from a plain mapping, keeping its iteration order."""
        return cls(mapping.items(), key_reviver=key_reviver)

    @staticmethod
    def is_michelson_map(obj: Any) -> bool:
        return isinstance(obj, MichelsonMap)

    def _index(self, key: Any) -> int:
        for i, (k, _) in enumerate(self._entries):
            if k == key:
                return i
        return -1

    def set(self, key: Any, value: Any) -> None:
        i = self._index(key)
        if i < 0:
            self._entries.append((key, value))
        else:
            self._entries[i] = (key, value)

    def get(self, key: Any, default: Any = None) -> Any:
        i = self._index(key)
        return default if i < 0 else self._entries[i][1]

    def keys(self) -> list[Any]:
        return [k for k, _ in self._entries]

    def values(self) -> list[Any]:
        return [v for _, v in self._entries]

    def items(self) -> list[tuple[Any, Any]]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return self._index(key) >= 0

    def __iter__(self) -> Iterator[Any]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MichelsonMap):
            return NotImplemented
        if len(self) != len(other):
            return False
        return all(k in other and other.get(k) == v for k, v in self._entries)

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v!r}" for k, v in self._entries)
        return f"MichelsonMap({{{body}}})"
