"""Asynchronous Kubernetes API client.

CRUD helpers are thin call-and-decode wrappers. ``watch`` hands the
endpoint to a WatchSupervisor and only returns once the event callback
returns ``False``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from kubewire.http import send_json, with_query_values
from kubewire.models.config import WatchConfig
from kubewire.watch.session import EventCallback, SnapshotCallback, WatchSession
from kubewire.watch.supervisor import WatchSupervisor

Query = Mapping[str, Any]
Body = Mapping[str, Any]


class KubernetesClient:
    """Kubernetes REST client over a pre-built ``httpx.AsyncClient``.

    The transport (base URI, TLS, auth headers) is assembled by
    ClientFactory; this class never changes it. The transport is safe to
    share between concurrent watches and requests.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        logger: structlog.stdlib.BoundLogger | None = None,
        *,
        watch_config: WatchConfig | None = None,
    ) -> None:
        self._http = http
        self._log = logger
        self._watch_config = watch_config or WatchConfig()

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http

    async def get(self, uri: str, query: Query | None = None) -> Any:
        return await self.request("GET", with_query_values(uri, query))

    async def post(self, uri: str, body: Body | None = None, query: Query | None = None) -> Any:
        return await self.request("POST", with_query_values(uri, query), body or {})

    async def put(self, uri: str, body: Body | None = None, query: Query | None = None) -> Any:
        return await self.request("PUT", with_query_values(uri, query), body or {})

    async def patch(self, uri: str, body: Body | None = None, query: Query | None = None) -> Any:
        return await self.request("PATCH", with_query_values(uri, query), body or {})

    async def delete(self, uri: str, query: Query | None = None) -> Any:
        return await self.request("DELETE", with_query_values(uri, query))

    async def request(self, method: str, uri: str, body: Body | None = None) -> Any:
        """Send *method* to *uri* and return the decoded JSON body.

        A *body* of ``None`` sends no payload; any mapping (including an
        empty one) is sent as a JSON object.

        Raises:
            RequestError:  transport failure or non-2xx status.
            ResponseError: the body is not valid JSON.
        """
        return await send_json(self._http, method, uri, body)

    def watch_session(
        self,
        endpoint: str,
        on_event: EventCallback,
        on_snapshot: SnapshotCallback | None = None,
        *,
        resource_version: str | None = None,
    ) -> WatchSession:
        """Build one watch attempt without supervision."""
        return WatchSession(
            self._http,
            endpoint,
            on_event,
            on_snapshot,
            resource_version=resource_version,
            strict_framing=self._watch_config.strict_framing,
            logger=self._log,
        )

    async def watch(
        self,
        endpoint: str,
        on_event: EventCallback,
        on_snapshot: SnapshotCallback | None = None,
        *,
        resource_version: str | None = None,
    ) -> None:
        """Watch *endpoint* until *on_event* returns ``False``.

        Failures are logged and retried after a fixed delay, forever. Every
        retry starts over: the snapshot is fetched again when *on_snapshot*
        is given, otherwise the stream resumes from *resource_version*.
        """
        supervisor = WatchSupervisor(
            lambda: self.watch_session(
                endpoint,
                on_event,
                on_snapshot,
                resource_version=resource_version,
            ),
            retry_delay=self._watch_config.retry_delay,
            logger=self._log,
        )
        await supervisor.run()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> KubernetesClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
