from __future__ import annotations

from typing import Any

import pytest


def _validator_info() -> dict[str, Any]:
    return {
        "prim": "pair",
        "args": [
            {
                "prim": "pair",
                "args": [
                    {"prim": "key_hash", "annots": ["%baking_account"]},
                    {"prim": "key", "annots": ["%public_key"]},
                ],
            },
            {"prim": "bytes", "annots": ["%tls_cert"]},
        ],
    }


@pytest.fixture
def register_schema() -> dict[str, Any]:
    return {
        "prim": "pair",
        "args": [
            {
                "prim": "pair",
                "args": [
                    {
                        "prim": "pair",
                        "args": [
                            {
                                "prim": "big_map",
                                "args": [
                                    {"prim": "key_hash"},
                                    {
                                        "prim": "list",
                                        "args": [
                                            {
                                                "prim": "pair",
                                                "args": [_validator_info(), {"prim": "timestamp"}],
                                            }
                                        ],
                                    },
                                ],
                                "annots": ["%old_validator_map"],
                            },
                            {
                                "prim": "set",
                                "args": [{"prim": "key_hash"}],
                                "annots": ["%old_validators"],
                            },
                        ],
                    },
                    {"prim": "address", "annots": ["%owner"]},
                    {
                        "prim": "or",
                        "args": [
                            {
                                "prim": "or",
                                "args": [
                                    {"prim": "unit", "annots": ["%genesis"]},
                                    {"prim": "unit", "annots": ["%open"]},
                                ],
                            },
                            {"prim": "unit", "annots": ["%sealed"]},
                        ],
                        "annots": ["%state"],
                    },
                ],
            },
            {
                "prim": "big_map",
                "args": [{"prim": "key_hash"}, _validator_info()],
                "annots": ["%validator_map"],
            },
            {"prim": "set", "args": [{"prim": "key_hash"}], "annots": ["%validators"]},
        ],
    }
