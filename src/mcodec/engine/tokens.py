"""
Token tree for Michelson type expressions.

Each node of a type expression becomes a Token that knows how to turn a
Michelson value of that type into a typed Python value (``execute``) and back
(``encode``).

Responsibilities
- Map every supported type primitive to a Token subclass (see ``TOKEN_TYPES``).
- Name record/union fields after their annotations, or after their positional
  index within the enclosing flattened record/union when unannotated.
- Flatten unannotated nested ``pair`` nodes into the parent record and nested
  ``or`` nodes into the parent union.

Typed value shapes
- int/nat/mutez -> int; string-like -> str; bytes -> hex str; bool -> bool
- timestamp -> ISO-8601 UTC string with millisecond precision
- unit -> UNIT; option -> None or the inner value
- pair -> dict (flattened record); or -> single-field dict {branch: payload}
- list/set -> list; map/big_map -> MichelsonMap (a big_map id decodes to its string)

Notes
- Zero-IO; stdlib-only.
- Tokens are cheap and rebuilt per call; they hold no state besides the
  expression and their index.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, ClassVar

from .errors import DecodeError, EncodeError, SchemaError
from .values import UNIT, MichelsonMap

__all__ = [
    "Token",
    "PairToken",
    "OrToken",
    "OptionToken",
    "UnitToken",
    "BoolToken",
    "IntToken",
    "NatToken",
    "StringToken",
    "BytesToken",
    "TimestampToken",
    "ListToken",
    "SetToken",
    "MapToken",
    "BigMapToken",
    "TOKEN_TYPES",
    "create_token",
]

_DECIMAL_RE = re.compile(r"^-?[0-9]+$")
_HEX_RE = re.compile(r"^([0-9a-fA-F]{2})*$")


def _prim_args(value: Any, prims: tuple[str, ...]) -> tuple[str, list[Any]]:
    if not isinstance(value, Mapping) or value.get("prim") not in prims:
        expected = " or ".join(prims)
        raise DecodeError(f"expected {expected} but got {_short(value)}")
    args = value.get("args") or []
    if not isinstance(args, list):
        raise DecodeError(f"malformed args in {_short(value)}")
    return value["prim"], args


def _short(value: Any, limit: int = 120) -> str:
    try:
        text = json.dumps(value, separators=(",", ":"), default=repr)
    except (TypeError, ValueError):
        text = repr(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


class Token:
    """
    Base class for a node in the token tree.

    Attributes:
        expr (Mapping[str, Any]): Type expression of this node.
        idx (int): Positional index used as the field name when unannotated.
    """

    prims: ClassVar[tuple[str, ...]] = ()
    # string keys of this type are JSON text when they come from a canonical map
    json_keys: ClassVar[bool] = False

    def __init__(self, expr: Mapping[str, Any], idx: int) -> None:
        self.expr = expr
        self.idx = idx

    @property
    def prim(self) -> str:
        return str(self.expr["prim"])

    @property
    def args(self) -> list[Any]:
        return list(self.expr.get("args") or [])

    def has_annotations(self) -> bool:
        annots = self.expr.get("annots")
        return isinstance(annots, list) and len(annots) > 0

    def annot(self) -> str:
        """Field name of this node: first annotation without its sigil, else the index."""
        if self.has_annotations():
            name = str(self.expr["annots"][0])
            return re.sub(r"^[%:](_Liq_entry_)?", "", name)
        return str(self.idx)

    def execute(self, value: Any) -> Any:
        raise NotImplementedError

    def encode(self, value: Any) -> Any:
        raise NotImplementedError

    def sort_key(self, value: Any) -> Any:
        """Ordering key used to sort set elements and map keys before encoding."""
        return json.dumps(value, sort_keys=True, default=repr)


# ---------------------------------------------------------------------------
# Composite tokens
# ---------------------------------------------------------------------------


class PairToken(Token):
    """Record built from (possibly nested) ``pair`` nodes."""

    prims = ("pair",)
    json_keys = True

    def _child_exprs(self) -> tuple[Any, Any]:
        args = self.args
        if len(args) < 2:
            raise SchemaError(f"pair expects at least 2 args, got {len(args)}")
        if len(args) > 2:
            return args[0], {"prim": "pair", "args": args[1:]}
        return args[0], args[1]

    def _is_merged(self, token: Token) -> bool:
        return isinstance(token, PairToken) and not token.has_annotations()

    def children(self) -> tuple[Token, Token]:
        left_expr, right_expr = self._child_exprs()
        left = create_token(left_expr, self.idx)
        count = len(left.field_names()) if self._is_merged(left) else 1  # type: ignore[attr-defined]
        right = create_token(right_expr, self.idx + count)
        return left, right

    def field_names(self) -> list[str]:
        names: list[str] = []
        for child in self.children():
            if self._is_merged(child):
                names.extend(child.field_names())  # type: ignore[attr-defined]
            else:
                names.append(child.annot())
        return names

    @staticmethod
    def _value_args(value: Any) -> tuple[Any, Any]:
        if isinstance(value, list):
            value = {"prim": "Pair", "args": value}
        _, args = _prim_args(value, ("Pair",))
        if len(args) < 2:
            raise DecodeError(f"Pair expects at least 2 args, got {len(args)}")
        if len(args) > 2:
            return args[0], {"prim": "Pair", "args": args[1:]}
        return args[0], args[1]

    def execute(self, value: Any) -> dict[str, Any]:
        left_value, right_value = self._value_args(value)
        out: dict[str, Any] = {}
        for child, child_value in zip(self.children(), (left_value, right_value)):
            if self._is_merged(child):
                out.update(child.execute(child_value))
            else:
                out[child.annot()] = child.execute(child_value)
        return out

    def encode(self, value: Any) -> dict[str, Any]:
        if not isinstance(value, Mapping):
            raise EncodeError(f"pair expects a record, got {_short(value)}")
        encoded = []
        for child in self.children():
            if self._is_merged(child):
                encoded.append(child.encode(value))
                continue
            name = child.annot()
            if name not in value:
                if isinstance(child, OptionToken):
                    encoded.append(child.encode(None))
                    continue
                raise EncodeError(f"missing field {name!r} in {_short(value)}")
            encoded.append(child.encode(value[name]))
        return {"prim": "Pair", "args": encoded}


class OrToken(Token):
    """Tagged union built from (possibly nested) ``or`` nodes."""

    prims = ("or",)
    json_keys = True

    def children(self) -> tuple[Token, Token]:
        args = self.args
        if len(args) != 2:
            raise SchemaError(f"or expects 2 args, got {len(args)}")
        left = create_token(args[0], self.idx)
        count = len(left.field_names()) if isinstance(left, OrToken) else 1
        return left, create_token(args[1], self.idx + count)

    def field_names(self) -> list[str]:
        names: list[str] = []
        for child in self.children():
            if isinstance(child, OrToken):
                names.extend(child.field_names())
            else:
                names.append(child.annot())
        return names

    def execute(self, value: Any) -> dict[str, Any]:
        prim, args = _prim_args(value, ("Left", "Right"))
        if len(args) != 1:
            raise DecodeError(f"{prim} expects 1 arg, got {len(args)}")
        left, right = self.children()
        child = left if prim == "Left" else right
        if isinstance(child, OrToken):
            return child.execute(args[0])
        return {child.annot(): child.execute(args[0])}

    def _encode_branch(self, value: Mapping[str, Any], label: str) -> dict[str, Any] | None:
        left, right = self.children()
        for prim, child in (("Left", left), ("Right", right)):
            if not isinstance(child, OrToken) and child.annot() == label:
                return {"prim": prim, "args": [child.encode(value[label])]}
        for prim, child in (("Left", left), ("Right", right)):
            if isinstance(child, OrToken):
                nested = child._encode_branch(value, label)
                if nested is not None:
                    return {"prim": prim, "args": [nested]}
        return None

    def encode(self, value: Any) -> dict[str, Any]:
        if not isinstance(value, Mapping) or not value:
            raise EncodeError(f"or expects a single-field record, got {_short(value)}")
        label = str(next(iter(value)))
        encoded = self._encode_branch(value, label)
        if encoded is None:
            names = ", ".join(self.field_names())
            raise EncodeError(f"no branch named {label!r} (expected one of: {names})")
        return encoded


class OptionToken(Token):
    prims = ("option",)
    json_keys = True

    def inner(self) -> Token:
        args = self.args
        if len(args) != 1:
            raise SchemaError(f"option expects 1 arg, got {len(args)}")
        return create_token(args[0], self.idx)

    def execute(self, value: Any) -> Any:
        prim, args = _prim_args(value, ("None", "Some"))
        if prim == "None":
            return None
        if len(args) != 1:
            raise DecodeError(f"Some expects 1 arg, got {len(args)}")
        return self.inner().execute(args[0])

    def encode(self, value: Any) -> dict[str, Any]:
        if value is None:
            return {"prim": "None"}
        return {"prim": "Some", "args": [self.inner().encode(value)]}

    def sort_key(self, value: Any) -> Any:
        if value is None:
            return (0, "")
        return (1, self.inner().sort_key(value))


# ---------------------------------------------------------------------------
# Leaf tokens
# ---------------------------------------------------------------------------


class UnitToken(Token):
    prims = ("unit",)

    def execute(self, value: Any) -> Any:
        _prim_args(value, ("Unit",))
        return UNIT

    def encode(self, value: Any) -> dict[str, Any]:
        if value is UNIT or value is None:
            return {"prim": "Unit"}
        raise EncodeError(f"unit expects UNIT, got {_short(value)}")


class BoolToken(Token):
    prims = ("bool",)
    json_keys = True

    def execute(self, value: Any) -> bool:
        prim, _ = _prim_args(value, ("True", "False"))
        return prim == "True"

    def encode(self, value: Any) -> dict[str, Any]:
        if not isinstance(value, bool):
            raise EncodeError(f"bool expects a boolean, got {_short(value)}")
        return {"prim": "True" if value else "False"}

    def sort_key(self, value: Any) -> Any:
        return bool(value)


class IntToken(Token):
    prims = ("int",)
    minimum: ClassVar[int | None] = None

    def _check(self, n: int, error: type[Exception]) -> int:
        if self.minimum is not None and n < self.minimum:
            raise error(f"{self.prim} must be >= {self.minimum}, got {n}")
        return n

    def _coerce(self, value: Any) -> int:
        if isinstance(value, bool):
            raise EncodeError(f"{self.prim} expects a number, got a boolean")
        if isinstance(value, int):
            return value
        if isinstance(value, str) and _DECIMAL_RE.match(value.strip()):
            return int(value.strip())
        raise EncodeError(f"{self.prim} expects a decimal number, got {_short(value)}")

    def execute(self, value: Any) -> int:
        if not isinstance(value, Mapping) or "int" not in value:
            raise DecodeError(f"{self.prim} expects an int literal, got {_short(value)}")
        raw = value["int"]
        if not isinstance(raw, str) or not _DECIMAL_RE.match(raw):
            raise DecodeError(f"malformed int literal {raw!r}")
        return self._check(int(raw), DecodeError)

    def encode(self, value: Any) -> dict[str, str]:
        return {"int": str(self._check(self._coerce(value), EncodeError))}

    def sort_key(self, value: Any) -> Any:
        try:
            return self._coerce(value)
        except EncodeError:
            return 0


class NatToken(IntToken):
    prims = ("nat", "mutez")
    minimum = 0


class StringToken(Token):
    """Types carried as plain ``{"string": ...}`` literals."""

    prims = (
        "string",
        "address",
        "key",
        "key_hash",
        "signature",
        "chain_id",
        "contract",
    )

    def execute(self, value: Any) -> str:
        if isinstance(value, Mapping) and "string" in value and isinstance(value["string"], str):
            return value["string"]
        if isinstance(value, Mapping) and "bytes" in value:
            raise DecodeError(f"binary form of {self.prim} is not supported: {_short(value)}")
        raise DecodeError(f"{self.prim} expects a string literal, got {_short(value)}")

    def encode(self, value: Any) -> dict[str, str]:
        if not isinstance(value, str):
            raise EncodeError(f"{self.prim} expects a string, got {_short(value)}")
        return {"string": value}

    def sort_key(self, value: Any) -> Any:
        return str(value)


class BytesToken(Token):
    prims = ("bytes",)

    def execute(self, value: Any) -> str:
        if isinstance(value, Mapping) and isinstance(value.get("bytes"), str):
            return value["bytes"]
        raise DecodeError(f"bytes expects a bytes literal, got {_short(value)}")

    def encode(self, value: Any) -> dict[str, str]:
        if not isinstance(value, str):
            raise EncodeError(f"bytes expects a hex string, got {_short(value)}")
        hexstr = value[2:] if value.startswith("0x") else value
        if not _HEX_RE.match(hexstr):
            raise EncodeError(f"bytes expects a hex string, got {value!r}")
        return {"bytes": hexstr}

    def sort_key(self, value: Any) -> Any:
        return str(value)


def _format_timestamp(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{dt.microsecond // 1000:03d}Z"


class TimestampToken(Token):
    prims = ("timestamp",)

    def execute(self, value: Any) -> str:
        if isinstance(value, Mapping) and isinstance(value.get("string"), str):
            text = value["string"]
            try:
                dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError as exc:
                raise DecodeError(f"malformed timestamp {text!r}") from exc
            return _format_timestamp(dt)
        if isinstance(value, Mapping) and isinstance(value.get("int"), str):
            raw = value["int"]
            if not _DECIMAL_RE.match(raw):
                raise DecodeError(f"malformed timestamp {raw!r}")
            try:
                dt = datetime.fromtimestamp(int(raw), tz=timezone.utc)
            except (OverflowError, OSError, ValueError) as exc:
                raise DecodeError(f"timestamp out of range: {raw}") from exc
            return _format_timestamp(dt)
        raise DecodeError(f"timestamp expects a string or int literal, got {_short(value)}")

    def encode(self, value: Any) -> dict[str, str]:
        if isinstance(value, str):
            return {"string": value}
        if isinstance(value, int) and not isinstance(value, bool):
            return {"int": str(value)}
        raise EncodeError(f"timestamp expects a string or seconds, got {_short(value)}")

    def sort_key(self, value: Any) -> Any:
        return str(value)


# ---------------------------------------------------------------------------
# Collection tokens
# ---------------------------------------------------------------------------


class ListToken(Token):
    prims = ("list",)

    def element(self) -> Token:
        args = self.args
        if len(args) != 1:
            raise SchemaError(f"{self.prim} expects 1 arg, got {len(args)}")
        return create_token(args[0], 0)

    def execute(self, value: Any) -> list[Any]:
        if not isinstance(value, list):
            raise DecodeError(f"{self.prim} expects a sequence, got {_short(value)}")
        element = self.element()
        return [element.execute(v) for v in value]

    def _items(self, value: Any) -> list[Any]:
        if isinstance(value, (list, tuple, set, frozenset)):
            return list(value)
        raise EncodeError(f"{self.prim} expects a sequence, got {_short(value)}")

    def encode(self, value: Any) -> list[Any]:
        element = self.element()
        return [element.encode(v) for v in self._items(value)]


class SetToken(ListToken):
    prims = ("set",)

    def encode(self, value: Any) -> list[Any]:
        element = self.element()
        items = sorted(self._items(value), key=element.sort_key)
        return [element.encode(v) for v in items]


class MapToken(Token):
    prims = ("map",)

    def key_value(self) -> tuple[Token, Token]:
        args = self.args
        if len(args) != 2:
            raise SchemaError(f"{self.prim} expects 2 args, got {len(args)}")
        return create_token(args[0], 0), create_token(args[1], 0)

    def execute(self, value: Any) -> Any:
        if not isinstance(value, list):
            raise DecodeError(f"{self.prim} expects a sequence of Elt, got {_short(value)}")
        key_token, value_token = self.key_value()
        out = MichelsonMap(json_keys=key_token.json_keys)
        for elt in value:
            _, args = _prim_args(elt, ("Elt",))
            if len(args) != 2:
                raise DecodeError(f"Elt expects 2 args, got {len(args)}")
            out.set(key_token.execute(args[0]), value_token.execute(args[1]))
        return out

    def encode(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            value = MichelsonMap.from_literal(value)
        if not isinstance(value, MichelsonMap):
            raise EncodeError(f"{self.prim} expects a map, got {_short(value)}")
        key_token, value_token = self.key_value()
        entries = []
        for key, item in value.items():
            if isinstance(key, str) and key_token.json_keys:
                try:
                    key = json.loads(key)
                except ValueError as exc:
                    raise EncodeError(f"malformed {key_token.prim} map key {key!r}") from exc
                if value.key_reviver is not None:
                    key = value.key_reviver(key)
            entries.append((key, item))
        entries.sort(key=lambda kv: key_token.sort_key(kv[0]))
        return [
            {"prim": "Elt", "args": [key_token.encode(k), value_token.encode(v)]}
            for k, v in entries
        ]


class BigMapToken(MapToken):
    """``big_map``: a literal sequence of Elt, or an id referring to on-chain storage."""

    prims = ("big_map",)

    def execute(self, value: Any) -> Any:
        if isinstance(value, Mapping) and isinstance(value.get("int"), str):
            return value["int"]
        return super().execute(value)

    def encode(self, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return {"int": str(value)}
        if isinstance(value, str):
            if not _DECIMAL_RE.match(value):
                raise EncodeError(f"big_map id must be a decimal number, got {value!r}")
            return {"int": value}
        return super().encode(value)


TOKEN_TYPES: dict[str, type[Token]] = {
    prim: cls
    for cls in (
        PairToken,
        OrToken,
        OptionToken,
        UnitToken,
        BoolToken,
        IntToken,
        NatToken,
        StringToken,
        BytesToken,
        TimestampToken,
        ListToken,
        SetToken,
        MapToken,
        BigMapToken,
    )
    for prim in cls.prims
}


def create_token(expr: Any, idx: int) -> Token:
    """
    Build the token for a type expression node.

    Args:
        expr (Any): Micheline type expression (a ``{"prim": ...}`` mapping).
        idx (int): Positional index used to name the node when unannotated.

    Returns:
        Token: Token instance for ``expr``.

    Raises:
        SchemaError: If ``expr`` is not a type expression or its primitive is unsupported.
    """
    if not isinstance(expr, Mapping) or not isinstance(expr.get("prim"), str):
        raise SchemaError(f"expected a type expression, got {_short(expr)}")
    cls = TOKEN_TYPES.get(expr["prim"])
    if cls is None:
        raise SchemaError(f"unsupported type {expr['prim']!r}")
    return cls(expr, idx)
