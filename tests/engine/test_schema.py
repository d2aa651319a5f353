from __future__ import annotations

import pytest

from mcodec.engine import (
    UNIT,
    DecodeError,
    EncodeError,
    EngineError,
    MichelsonMap,
    Schema,
    SchemaEngine,
    SchemaError,
)


def _int(a: str | None = None) -> dict:
    return {"prim": "int", "annots": [a]} if a else {"prim": "int"}


def test_pair_with_annotations_is_a_record() -> None:
    s = Schema({"prim": "pair", "args": [_int("%a"), {"prim": "string", "annots": ["%b"]}]})
    tree = {"prim": "Pair", "args": [{"int": "1"}, {"string": "x"}]}
    assert s.execute(tree) == {"a": 1, "b": "x"}
    assert s.encode({"a": 1, "b": "x"}) == tree


def test_unannotated_fields_are_named_by_position() -> None:
    s = Schema({"prim": "pair", "args": [_int(), {"prim": "pair", "args": [_int(), _int()]}]})
    tree = {"prim": "Pair", "args": [{"int": "1"}, {"prim": "Pair", "args": [{"int": "2"}, {"int": "3"}]}]}
    assert s.execute(tree) == {"0": 1, "1": 2, "2": 3}
    assert s.encode({"0": 1, "1": 2, "2": 3}) == tree


def test_comb_pair_and_sequence_values() -> None:
    s = Schema({"prim": "pair", "args": [_int("%a"), _int("%b"), _int("%c")]})
    comb = {"prim": "Pair", "args": [{"int": "1"}, {"int": "2"}, {"int": "3"}]}
    nested = {"prim": "Pair", "args": [{"int": "1"}, {"prim": "Pair", "args": [{"int": "2"}, {"int": "3"}]}]}
    assert s.execute(comb) == {"a": 1, "b": 2, "c": 3}
    assert s.execute([{"int": "1"}, {"int": "2"}, {"int": "3"}]) == {"a": 1, "b": 2, "c": 3}
    assert s.encode({"a": 1, "b": 2, "c": 3}) == nested


def test_annotated_child_pair_stays_nested() -> None:
    s = Schema(
        {
            "prim": "pair",
            "args": [_int("%a"), {"prim": "pair", "args": [_int("%c"), _int("%d")], "annots": ["%b"]}],
        }
    )
    tree = {"prim": "Pair", "args": [{"int": "0"}, {"prim": "Pair", "args": [{"int": "2"}, {"int": "3"}]}]}
    assert s.execute(tree) == {"a": 0, "b": {"c": 2, "d": 3}}


def test_nested_or_is_flattened() -> None:
    s = Schema(
        {
            "prim": "or",
            "args": [
                {"prim": "or", "args": [_int("%decrement"), _int("%increment")]},
                {"prim": "unit", "annots": ["%reset"]},
            ],
        }
    )
    assert s.encode({"increment": 5}) == {
        "prim": "Left",
        "args": [{"prim": "Right", "args": [{"int": "5"}]}],
    }
    assert s.encode({"reset": UNIT}) == {"prim": "Right", "args": [{"prim": "Unit"}]}
    assert s.execute({"prim": "Left", "args": [{"prim": "Left", "args": [{"int": "1"}]}]}) == {
        "decrement": 1
    }
    assert s.root.field_names() == ["decrement", "increment", "reset"]


def test_or_rejects_unknown_branch() -> None:
    s = Schema({"prim": "or", "args": [_int("%a"), _int("%b")]})
    with pytest.raises(EncodeError, match="no branch named 'c'"):
        s.encode({"c": 1})


def test_option_and_missing_option_field() -> None:
    s = Schema({"prim": "pair", "args": [{"prim": "option", "args": [_int()], "annots": ["%a"]}, _int("%b")]})
    assert s.encode({"b": 1}) == {"prim": "Pair", "args": [{"prim": "None"}, {"int": "1"}]}
    assert s.execute({"prim": "Pair", "args": [{"prim": "Some", "args": [{"int": "4"}]}, {"int": "1"}]}) == {
        "a": 4,
        "b": 1,
    }


def test_missing_required_field_is_an_encode_error() -> None:
    s = Schema({"prim": "pair", "args": [_int("%a"), _int("%b")]})
    with pytest.raises(EncodeError, match="missing field 'b'"):
        s.encode({"a": 1})


def test_numbers() -> None:
    assert Schema(_int()).encode("-12") == {"int": "-12"}
    assert Schema(_int()).execute({"int": "123456789012345678901234567890"}) == 123456789012345678901234567890
    with pytest.raises(EncodeError):
        Schema({"prim": "nat"}).encode(-1)
    with pytest.raises(DecodeError):
        Schema({"prim": "mutez"}).execute({"int": "-1"})
    with pytest.raises(EncodeError):
        Schema(_int()).encode(True)
    with pytest.raises(EncodeError):
        Schema(_int()).encode("1.5")


def test_string_like_and_bytes() -> None:
    assert Schema({"prim": "address"}).execute({"string": "tz1abc"}) == "tz1abc"
    with pytest.raises(DecodeError, match="binary form"):
        Schema({"prim": "key_hash"}).execute({"bytes": "00ff"})
    assert Schema({"prim": "bytes"}).encode("0xCAFE") == {"bytes": "CAFE"}
    with pytest.raises(EncodeError):
        Schema({"prim": "bytes"}).encode("xyz")


def test_timestamp_forms() -> None:
    s = Schema({"prim": "timestamp"})
    assert s.execute({"string": "2022-09-23T00:00:00Z"}) == "2022-09-23T00:00:00.000Z"
    assert s.execute({"int": "0"}) == "1970-01-01T00:00:00.000Z"
    assert s.encode("2022-09-23T00:00:00.000Z") == {"string": "2022-09-23T00:00:00.000Z"}
    assert s.encode(60) == {"int": "60"}


def test_set_and_map_keys_are_sorted_on_encode() -> None:
    assert Schema({"prim": "set", "args": [_int()]}).encode([3, 1, 2]) == [
        {"int": "1"},
        {"int": "2"},
        {"int": "3"},
    ]
    m = MichelsonMap.from_literal({"b": 2, "a": 1})
    assert Schema({"prim": "map", "args": [{"prim": "string"}, _int()]}).encode(m) == [
        {"prim": "Elt", "args": [{"string": "a"}, {"int": "1"}]},
        {"prim": "Elt", "args": [{"string": "b"}, {"int": "2"}]},
    ]


def test_map_with_pair_keys_parses_json_string_keys() -> None:
    s = Schema({"prim": "map", "args": [{"prim": "pair", "args": [_int(), {"prim": "string"}]}, _int()]})
    m = MichelsonMap.from_literal({'{"0":1,"1":"x"}': 7})
    tree = [{"prim": "Elt", "args": [{"prim": "Pair", "args": [{"int": "1"}, {"string": "x"}]}, {"int": "7"}]}]
    assert s.encode(m) == tree
    assert s.execute(tree) == MichelsonMap([({"0": 1, "1": "x"}, 7)])


def test_big_map_id() -> None:
    s = Schema({"prim": "big_map", "args": [{"prim": "string"}, _int()]})
    assert s.execute({"int": "42"}) == "42"
    assert s.encode("42") == {"int": "42"}
    assert s.encode(MichelsonMap()) == []


def test_storage_wrapper_is_unwrapped() -> None:
    s = Schema({"prim": "storage", "args": [{"prim": "unit"}]})
    assert s.execute({"prim": "Unit"}) is UNIT
    assert s.encode(UNIT) == {"prim": "Unit"}


def test_schema_errors() -> None:
    with pytest.raises(SchemaError, match="unsupported type 'lambda'"):
        Schema({"prim": "lambda", "args": []})
    with pytest.raises(SchemaError):
        Schema("int")
    assert issubclass(SchemaError, EngineError)
    assert issubclass(EngineError, ValueError)


def test_shape_mismatch_is_a_decode_error() -> None:
    engine = SchemaEngine()
    with pytest.raises(DecodeError, match="expected Pair"):
        engine.execute({"prim": "pair", "args": [_int(), _int()]}, {"int": "1"})


def test_composite_key_maps_are_marked_and_revived() -> None:
    opt_key = {"prim": "map", "args": [{"prim": "option", "args": [{"prim": "nat"}]}, _int()]}
    s = Schema(opt_key)
    tree = [
        {"prim": "Elt", "args": [{"prim": "None"}, {"int": "0"}]},
        {"prim": "Elt", "args": [{"prim": "Some", "args": [{"int": "4"}]}, {"int": "1"}]},
    ]
    decoded = s.execute(tree)
    assert decoded.json_keys is True
    assert Schema({"prim": "map", "args": [{"prim": "string"}, _int()]}).execute([]).json_keys is False

    seen: list[object] = []

    def revive(key: object) -> object:
        seen.append(key)
        return key

    m = MichelsonMap.from_literal({'"4"': 1, "null": 0}, key_reviver=revive)
    assert s.encode(m) == tree
    assert seen == ["4", None]
