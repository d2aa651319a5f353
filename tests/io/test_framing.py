from __future__ import annotations

import pytest

from mcodec.io.errors import FramingError
from mcodec.io.framing import LineFramer


def test_complete_lines_and_partial_tail() -> None:
    f = LineFramer()
    assert f.feed(b'{"id":1}\n{"id":2}\n{"id"') == [{"id": 1}, {"id": 2}]
    assert f.pending == '{"id"'
    assert f.feed(b":3}") == []
    assert f.feed(b"\n") == [{"id": 3}]
    f.close()


def test_blank_lines_are_skipped() -> None:
    f = LineFramer()
    assert f.feed(b"\n  \n[1]\r\n\n") == [[1]]


def test_multibyte_character_split_across_chunks() -> None:
    f = LineFramer()
    data = '{"s":"é🙂"}\n'.encode()
    out = []
    for i in range(len(data)):
        out.extend(f.feed(data[i : i + 1]))
    assert out == [{"s": "é🙂"}]


def test_invalid_json_is_a_framing_error() -> None:
    f = LineFramer()
    with pytest.raises(FramingError, match="malformed JSON"):
        f.feed(b'{"id":1}\nnot json\n')


def test_non_utf8_is_a_framing_error() -> None:
    with pytest.raises(FramingError, match="UTF-8"):
        LineFramer().feed(b"\xff\xfe\n")


def test_oversized_partial_message() -> None:
    f = LineFramer(max_message_bytes=8)
    assert f.feed(b"[1]\n") == [[1]]
    with pytest.raises(FramingError, match="exceeds"):
        f.feed(b'"123456789')


def test_unterminated_message_at_close() -> None:
    f = LineFramer()
    f.feed(b'{"id":1}')
    with pytest.raises(FramingError, match="unterminated"):
        f.close()


def test_truncated_utf8_at_close() -> None:
    f = LineFramer()
    f.feed("é".encode()[:1])
    with pytest.raises(FramingError):
        f.close()
