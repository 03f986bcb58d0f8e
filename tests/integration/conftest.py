"""Shared fixtures for kubewire integration tests.

``FakeApiServer`` plays the Kubernetes API server behind an
``httpx.MockTransport``: list requests return scripted snapshots, watch
requests return scripted streaming bodies (or failures) in order. Clients
are built through ClientFactory so the whole wiring is exercised.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from unittest.mock import MagicMock

import httpx
import pytest

from kubewire.client import ClientFactory, KubernetesClient
from kubewire.models.config import WatchConfig

API_URI = "https://api.kubernetes.local"
SERVICES = "/api/v1/namespaces/default/services"


class StreamScript:
    """One scripted watch response: chunks, then EOF or a transport error."""

    def __init__(self, *chunks: bytes, error: Exception | None = None, status: int = 200) -> None:
        self.chunks = list(chunks)
        self.error = error
        self.status = status
        self.pulled = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            self.pulled += 1
            yield chunk
        if self.error is not None:
            raise self.error


class FakeApiServer:
    """Answers list and watch requests from per-path scripts."""

    def __init__(self) -> None:
        self.snapshots: list[dict] = []
        self.streams: list[StreamScript] = []
        self.requests: list[httpx.Request] = []

    @property
    def watch_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "watch" in r.url.params]

    @property
    def list_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "watch" not in r.url.params]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if "watch" not in request.url.params:
            return httpx.Response(200, json=self.snapshots.pop(0))
        if not self.streams:
            raise RuntimeError("no more scripted watch streams")
        script = self.streams.pop(0)
        if script.status != 200:
            return httpx.Response(script.status, json={"kind": "Status", "code": script.status})
        return httpx.Response(200, content=script)


def make_client(server: FakeApiServer, logger: MagicMock | None = None) -> KubernetesClient:
    return (
        ClientFactory.connect_to(API_URI)
        .with_access_token("S3cR3770K3N")
        .with_logger(logger or MagicMock())
        .with_watch_config(WatchConfig(retry_delay=0.0))
        .with_transport(httpx.MockTransport(server))
        .construct_client()
    )


@pytest.fixture
def server() -> FakeApiServer:
    return FakeApiServer()


@pytest.fixture
def logger() -> MagicMock:
    return MagicMock()
