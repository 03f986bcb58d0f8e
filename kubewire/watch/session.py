"""A single watch attempt: optional snapshot, then one streaming GET.

WatchSession never retries and never handles its own failures. Every
RequestError, ResponseError and StreamDecodeError propagates to the caller
(normally WatchSupervisor). Exceptions raised by the caller's callbacks
propagate unchanged.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from contextlib import aclosing
from typing import Any

import httpx
import structlog

from kubewire.errors import ResponseError
from kubewire.http import request_error, send_json, with_query_values
from kubewire.models.watch import WatchOutcome
from kubewire.observability.logging import get_logger
from kubewire.watch.framer import decode_ndjson_stream

EventCallback = Callable[[Any], Any]
SnapshotCallback = Callable[[Any], Any]


async def _invoke(callback: Callable[[Any], Any], arg: Any) -> Any:
    result = callback(arg)
    if inspect.isawaitable(result):
        result = await result
    return result


def extract_resource_version(snapshot: Any) -> str:
    """Return ``metadata.resourceVersion`` from a list response.

    Raises:
        ResponseError: the field is missing or not a string.
    """
    metadata = snapshot.get("metadata") if isinstance(snapshot, dict) else None
    version = metadata.get("resourceVersion") if isinstance(metadata, dict) else None
    if not isinstance(version, str) or not version:
        raise ResponseError("Snapshot response carries no metadata.resourceVersion")
    return version


class WatchSession:
    """Executes exactly one watch attempt against a collection endpoint.

    Args:
        http:             Pre-built transport, shared across sessions.
        endpoint:         Resource collection URI, e.g.
                          ``/api/v1/namespaces/default/services``.
        on_event:         Called with every decoded event. Returning
                          ``False`` (exactly) stops the watch.
        on_snapshot:      Optional. Called once with the full list response
                          before streaming; its ``metadata.resourceVersion``
                          becomes the resumption token.
        resource_version: Token to resume from when no snapshot is taken.
        strict_framing:   Malformed frame policy, see watch.framer.
        logger:           Log sink; defaults to the component logger.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        endpoint: str,
        on_event: EventCallback,
        on_snapshot: SnapshotCallback | None = None,
        *,
        resource_version: str | None = None,
        strict_framing: bool = True,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._http = http
        self._endpoint = endpoint
        self._on_event = on_event
        self._on_snapshot = on_snapshot
        self._resource_version = resource_version
        self._strict_framing = strict_framing
        self._log = logger or get_logger("watch.session")
        self.events_delivered = 0

    @property
    def resource_version(self) -> str | None:
        """Resumption token used (or about to be used) by the streaming request."""
        return self._resource_version

    async def run(self) -> WatchOutcome:
        """Run the attempt to completion.

        Returns WatchOutcome.STOPPED when the event callback asked to stop,
        WatchOutcome.STREAM_ENDED when the server closed the stream.
        """
        if self._on_snapshot is not None:
            self._resource_version = await self._initialize(self._on_snapshot)

        self._log.info("watch_starting", endpoint=self._endpoint, resource_version=self._resource_version)
        return await self._stream()

    async def _initialize(self, on_snapshot: SnapshotCallback) -> str:
        self._log.info("watch_initializing", endpoint=self._endpoint)
        snapshot = await send_json(self._http, "GET", self._endpoint)
        await _invoke(on_snapshot, snapshot)
        return extract_resource_version(snapshot)

    def watch_uri(self) -> str:
        """Streaming request URI: ``watch=1`` plus the token when present."""
        # https://kubernetes.io/docs/reference/using-api/api-concepts/#the-resourceversion-parameter
        return with_query_values(
            self._endpoint,
            {"watch": 1, "resourceVersion": self._resource_version or None},
        )

    async def _stream(self) -> WatchOutcome:
        uri = self.watch_uri()
        timeout = httpx.Timeout(self._http.timeout.connect, read=None)
        try:
            async with self._http.stream("GET", uri, timeout=timeout) as response:
                response.raise_for_status()
                events = decode_ndjson_stream(response.aiter_bytes(), strict=self._strict_framing)
                async with aclosing(events):
                    async for event in events:
                        self.events_delivered += 1
                        if await _invoke(self._on_event, event) is False:
                            self._log.info(
                                "watch_stopped",
                                endpoint=self._endpoint,
                                events=self.events_delivered,
                            )
                            return WatchOutcome.STOPPED
        except httpx.HTTPError as exc:
            raise request_error("GET", uri, exc) from exc
        return WatchOutcome.STREAM_ENDED
