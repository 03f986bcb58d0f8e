"""Shared fakes for kubewire unit tests.

HTTP traffic goes through ``httpx.MockTransport`` so the real client code
paths (URL building, streaming, status handling) are exercised without a
network.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

API_URI = "https://api.kubernetes.local"


class ChunkedBody:
    """Streaming response body that records how many chunks were read.

    When *error* is set it is raised after the last chunk, simulating a
    connection dropped mid-stream.
    """

    def __init__(self, chunks: list[bytes], error: Exception | None = None) -> None:
        self._chunks = chunks
        self._error = error
        self.pulled = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            self.pulled += 1
            yield chunk
        if self._error is not None:
            raise self._error


def make_http(handler: Callable[[httpx.Request], Any]) -> httpx.AsyncClient:
    """AsyncClient whose every request is answered by *handler*."""
    return httpx.AsyncClient(base_url=API_URI, transport=httpx.MockTransport(handler))


def query_of(request: httpx.Request) -> dict[str, str]:
    return dict(request.url.params)
