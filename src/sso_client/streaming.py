"""
Incremental JSON decoding of streamed response bodies.

Accepts either a single top-level JSON array, decoded element by element as
bytes arrive, or a sequence of JSON values separated by whitespace
(newline-delimited JSON). Elements are yielded in body order.
"""

import codecs
import json
from typing import Any, AsyncIterator, List, Optional

import aiohttp

_WHITESPACE = " \t\r\n"


class JsonStreamDecoder:
    """
    Push decoder: feed raw bytes, receive the complete JSON values seen so far.

    A value is only emitted once at least one character follows it (or the
    stream is closed), so a number split across chunks is never cut short.
    """

    def __init__(self):
        self._decoder = json.JSONDecoder()
        self._text = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""
        self._mode: Optional[str] = None  # "array" or "values"
        self._need_comma = False
        self._expect_value = False
        self._closed_array = False

    def feed(self, data: bytes) -> List[Any]:
        self._buffer += self._text.decode(data)
        return self._drain(final=False)

    def close(self) -> List[Any]:
        """Flush remaining input; raises JSONDecodeError on truncated or invalid data."""
        self._buffer += self._text.decode(b"", final=True)
        items = self._drain(final=True)
        if self._mode == "array" and not self._closed_array:
            raise json.JSONDecodeError("Unterminated JSON array", self._buffer, len(self._buffer))
        return items

    def _drain(self, final: bool) -> List[Any]:
        items: List[Any] = []
        while True:
            buf = self._buffer.lstrip(_WHITESPACE)
            self._buffer = buf
            if not buf:
                break

            if self._mode is None:
                if buf[0] == "[":
                    self._mode = "array"
                    self._buffer = buf[1:]
                    continue
                self._mode = "values"

            if self._closed_array:
                raise json.JSONDecodeError("Extra data after JSON array", buf, 0)

            if self._mode == "array":
                if buf[0] == "]":
                    if self._expect_value:
                        raise json.JSONDecodeError("Expecting value", buf, 0)
                    self._closed_array = True
                    self._buffer = buf[1:]
                    continue
                if self._need_comma:
                    if buf[0] != ",":
                        raise json.JSONDecodeError("Expecting ',' delimiter", buf, 0)
                    self._need_comma = False
                    self._expect_value = True
                    self._buffer = buf[1:]
                    continue

            try:
                value, end = self._decoder.raw_decode(buf)
            except json.JSONDecodeError:
                if final:
                    raise
                break

            if end == len(buf) and not final:
                break

            items.append(value)
            self._buffer = buf[end:]
            self._need_comma = self._mode == "array"
            self._expect_value = False
        return items


async def iter_json_values(response: aiohttp.ClientResponse) -> AsyncIterator[Any]:
    """Yield JSON values from a response body as they arrive."""
    decoder = JsonStreamDecoder()
    async for chunk in response.content.iter_any():
        for value in decoder.feed(chunk):
            yield value
    for value in decoder.close():
        yield value


__all__ = ["JsonStreamDecoder", "iter_json_values"]
