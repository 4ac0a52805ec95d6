"""Tests for incremental JSON stream decoding."""

import json
from unittest.mock import MagicMock

import pytest

from sso_client.streaming import JsonStreamDecoder, iter_json_values


def _decode(*chunks: bytes) -> list:
    decoder = JsonStreamDecoder()
    items = []
    for chunk in chunks:
        items.extend(decoder.feed(chunk))
    items.extend(decoder.close())
    return items


def _response(*chunks: bytes):
    async def iter_any():
        for chunk in chunks:
            yield chunk

    response = MagicMock()
    response.content.iter_any = iter_any
    return response


class TestJsonStreamDecoder:
    def test_array_in_order(self):
        assert _decode(b"[1,2,3]") == [1, 2, 3]

    def test_array_split_across_chunks(self):
        assert _decode(b'[{"id": "u', b'1"}, {"id"', b': "u2"}]') == [{"id": "u1"}, {"id": "u2"}]

    def test_number_split_across_chunks(self):
        assert _decode(b"[12", b"34, 5]") == [1234, 5]

    def test_values_emitted_before_close(self):
        decoder = JsonStreamDecoder()

        assert decoder.feed(b'[{"a": 1}, {"b"') == [{"a": 1}]
        assert decoder.feed(b": 2}]") == [{"b": 2}]
        assert decoder.close() == []

    def test_newline_delimited(self):
        assert _decode(b'{"a": 1}\n{"a": 2}\n', b'{"a": 3}') == [{"a": 1}, {"a": 2}, {"a": 3}]

    def test_multibyte_utf8_split(self):
        data = json.dumps(["Zoë"], ensure_ascii=False).encode("utf-8")
        split = data.index("ë".encode("utf-8")) + 1

        assert _decode(data[:split], data[split:]) == ["Zoë"]

    def test_empty_body(self):
        assert _decode(b"") == []
        assert _decode(b"[]") == []

    def test_unterminated_array(self):
        with pytest.raises(json.JSONDecodeError):
            _decode(b"[1, 2")

    def test_missing_comma(self):
        with pytest.raises(json.JSONDecodeError):
            _decode(b"[1 2]")

    def test_trailing_comma(self):
        with pytest.raises(json.JSONDecodeError, match="Expecting value"):
            _decode(b'[{"id": "1"},]')

    def test_trailing_comma_split_across_chunks(self):
        with pytest.raises(json.JSONDecodeError):
            _decode(b'[{"id": "1"},', b" ]")

    def test_extra_data_after_array(self):
        with pytest.raises(json.JSONDecodeError):
            _decode(b"[1] 2")

    def test_invalid_value(self):
        with pytest.raises(json.JSONDecodeError):
            _decode(b"{not json}")


class TestIterJsonValues:
    @pytest.mark.asyncio
    async def test_yields_in_order(self):
        values = [v async for v in iter_json_values(_response(b"[1,", b"2,", b"3]"))]

        assert values == [1, 2, 3]
