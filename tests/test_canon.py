from __future__ import annotations

import pytest

from assetgate.canon import compact_json
from assetgate.errors import AssetCorrupt, INTERNAL


PRETTY = b"""{
    "example_data": "My data",
    "number": 1234567890
}"""


def test_compact_strips_whitespace_between_tokens() -> None:
    assert compact_json(PRETTY) == b'{"example_data":"My data","number":1234567890}'


def test_compact_keeps_strings_numbers_and_key_order() -> None:
    raw = b'{\r\n\t"z" : [1, 2.50, 1e3, -0],\n  "a": "x  y\\" z",\n "u": "\\u00e9 caf\xc3\xa9"\n}\n'
    assert compact_json(raw) == b'{"z":[1,2.50,1e3,-0],"a":"x  y\\" z","u":"\\u00e9 caf\xc3\xa9"}'


def test_compact_keeps_duplicate_keys() -> None:
    assert compact_json(b'{"k": 1, "k": 2}') == b'{"k":1,"k":2}'


def test_compact_scalar_document() -> None:
    assert compact_json(b'  "a b"  ') == b'"a b"'


def test_compact_is_idempotent() -> None:
    once = compact_json(PRETTY)
    assert compact_json(once) == once


def test_formatting_variants_compact_identically() -> None:
    a = b'{"example_data":"My data","number":1234567890}'
    b = b'{ "example_data" :\n"My data",\n\n\t"number": 1234567890 }\n'
    assert compact_json(a) == compact_json(b)


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b'{"a": }',
        b'{"a": 1} {"b": 2}',
        b"NaN",
        b'{"n": Infinity}',
        b"\xff\xfe{}",
    ],
)
def test_malformed_asset_is_corrupt(raw: bytes) -> None:
    with pytest.raises(AssetCorrupt) as ei:
        compact_json(raw)
    assert ei.value.code == INTERNAL


def test_deeply_nested_asset_is_corrupt() -> None:
    with pytest.raises(AssetCorrupt):
        compact_json(b"[" * 100000 + b"]" * 100000)
