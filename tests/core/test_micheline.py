from __future__ import annotations

import pytest
from pydantic import ValidationError

from mcodec.core.micheline import (
    Micheline,
    MichelineBytes,
    MichelineInt,
    MichelinePrim,
    MichelineString,
    parse_micheline,
)

COUNTER_TYPE = {
    "prim": "or",
    "args": [
        {
            "prim": "or",
            "args": [
                {"prim": "int", "annots": ["%decrement"]},
                {"prim": "int", "annots": ["%increment"]},
            ],
        },
        {"prim": "unit", "annots": ["%reset"]},
    ],
}


def test_node_kinds() -> None:
    assert isinstance(parse_micheline({"int": "-12"}).root, MichelineInt)
    assert isinstance(parse_micheline({"string": "tz1"}).root, MichelineString)
    assert isinstance(parse_micheline({"bytes": "0a0B"}).root, MichelineBytes)
    assert isinstance(parse_micheline({"prim": "Unit"}).root, MichelinePrim)
    assert parse_micheline([]).root == []


def test_type_expression_roundtrips_to_json() -> None:
    node = parse_micheline(COUNTER_TYPE)
    assert isinstance(node.root, MichelinePrim)
    assert node.root.prim == "or"
    assert node.to_json() == COUNTER_TYPE


def test_value_tree_roundtrips_to_json() -> None:
    value = {"prim": "Left", "args": [{"prim": "Left", "args": [{"int": "1"}]}]}
    assert parse_micheline(value).to_json() == value
    seq = [{"prim": "Elt", "args": [{"string": "k"}, {"bytes": ""}]}]
    assert Micheline.model_validate(seq).to_json() == seq


def test_empty_args_and_annots_are_omitted() -> None:
    assert parse_micheline({"prim": "Unit", "args": [], "annots": []}).to_json() == {"prim": "Unit"}


@pytest.mark.parametrize(
    "raw",
    [
        {"int": 1},
        {"int": "0x10"},
        {"bytes": "f"},
        {"string": "a", "int": "1"},
        {"prim": "Pair", "args": {"int": "1"}},
        {"prim": "Some", "args": [{"nope": True}]},
        {"args": []},
        None,
        "Unit",
    ],
)
def test_malformed_nodes_are_rejected(raw: object) -> None:
    with pytest.raises(ValidationError):
        parse_micheline(raw)
