"""Newline-delimited JSON framing for watch streams.

A watch response body is an unbounded sequence of JSON documents, one per
``\\n``-terminated line. ``LineFramer`` owns the byte buffer for exactly one
connection; ``decode_ndjson_stream`` drives it from an async chunk iterator
and yields decoded values lazily, so a consumer that stops iterating stops
the reads as well.

Malformed line policy:
    strict=True  -- the first undecodable line raises StreamDecodeError and
                    ends the sequence. There is no resynchronisation.
    strict=False -- undecodable lines are logged and skipped as keep-alives.

Whitespace-only lines are keep-alives under both policies.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterable, AsyncIterator, Iterator
from typing import Any

from kubewire.errors import StreamDecodeError
from kubewire.observability.logging import get_logger

_log = get_logger("watch.framer")

_NEWLINE = b"\n"


class LineFramer:
    """Accumulates bytes and emits one decoded JSON value per complete line."""

    def __init__(self, strict: bool = True) -> None:
        self._strict = strict
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet terminated by a newline."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> Iterator[Any]:
        """Append *chunk* and return an iterator over the values it completes.

        The bytes are buffered immediately, whether or not the result is
        iterated. The iterator consumes one line per step, so values left
        unyielded when the caller stops iterating are dropped with the framer.
        """
        self._buffer += chunk
        return self._drain()

    def _drain(self) -> Iterator[Any]:
        while True:
            idx = self._buffer.find(_NEWLINE)
            if idx < 0:
                return
            line = bytes(self._buffer[:idx])
            del self._buffer[: idx + 1]
            yield from self._decode(line)

    def finish(self) -> Iterator[Any]:
        """Flush a non-empty trailing buffer as a best-effort final record."""
        if not self._buffer:
            return
        line = bytes(self._buffer)
        self._buffer.clear()
        yield from self._decode(line)

    def _decode(self, line: bytes) -> Iterator[Any]:
        line = line.rstrip(b"\r")
        if not line.strip():
            return
        try:
            value = json.loads(line)
        except ValueError as exc:
            # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
            if self._strict:
                raise StreamDecodeError(line, str(exc), cause=exc) from exc
            _log.debug("stream_keepalive_skipped", raw=line[:200], error=str(exc))
            return
        yield value


async def decode_ndjson_stream(
    chunks: AsyncIterable[bytes],
    *,
    strict: bool = True,
) -> AsyncIterator[Any]:
    """Yield decoded JSON values from an async iterable of byte chunks.

    The next chunk is requested only once every value buffered from the
    previous one has been consumed. Values are produced in arrival order.
    The sequence ends at end of input or on the first decode failure
    (strict mode); it cannot be restarted.
    """
    framer = LineFramer(strict=strict)
    async for chunk in chunks:
        for value in framer.feed(chunk):
            yield value
    for value in framer.finish():
        yield value
