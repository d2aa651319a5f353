from __future__ import annotations

import copy
import pickle

from mcodec.engine.values import UNIT, MichelsonMap, UnitType


def test_unit_is_a_singleton_across_copies() -> None:
    assert UnitType() is UNIT
    assert copy.copy(UNIT) is UNIT
    assert copy.deepcopy({"x": [UNIT]})["x"][0] is UNIT
    assert pickle.loads(pickle.dumps(UNIT)) is UNIT


def test_michelson_map_keeps_order_and_replaces_in_place() -> None:
    m = MichelsonMap([("b", 1), ("a", 2)])
    m.set("b", 3)
    assert m.keys() == ["b", "a"]
    assert m.items() == [("b", 3), ("a", 2)]
    assert m.get("missing", "dflt") == "dflt"
    assert "a" in m
    assert len(m) == 2
    assert list(m) == ["b", "a"]


def test_michelson_map_accepts_unhashable_keys() -> None:
    m = MichelsonMap()
    m.set({"0": 1, "1": "x"}, "v")
    assert m.get({"1": "x", "0": 1}) == "v"


def test_michelson_map_equality_ignores_order() -> None:
    a = MichelsonMap.from_literal({"x": 1, "y": 2})
    b = MichelsonMap.from_literal({"y": 2, "x": 1})
    assert a == b
    assert a != MichelsonMap.from_literal({"x": 1})
    assert a != {"x": 1, "y": 2}
    assert MichelsonMap.is_michelson_map(a)
    assert not MichelsonMap.is_michelson_map({"x": 1})


def _upper(key: str) -> str:
    return key.upper()


def test_key_text_settings_survive_copy_and_do_not_affect_equality() -> None:
    m = MichelsonMap([("k", 1)], json_keys=True, key_reviver=_upper)
    clone = copy.deepcopy(m)
    assert clone.json_keys is True
    assert clone.key_reviver is _upper
    assert clone == MichelsonMap.from_literal({"k": 1})
