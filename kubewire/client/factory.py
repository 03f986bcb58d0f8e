"""Fluent, immutable builder for KubernetesClient.

Every ``with_*`` method returns a new factory; the receiver is never
modified, so a partially configured factory can be shared and specialised.

Usage::

    client = (
        ClientFactory.connect_to("https://10.0.0.1:6443")
        .with_certificate_authority("/etc/kubernetes/ca.crt")
        .with_access_token("file:///var/run/secrets/token")
        .construct_client()
    )
"""

from __future__ import annotations

import base64
import os
import ssl
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any
from urllib.parse import unquote_to_bytes, urlparse

import httpx
import structlog

from kubewire.client.client import KubernetesClient
from kubewire.errors import ConfigError
from kubewire.models.config import ClientConfig, KubeWireConfig, TLSConfig, WatchConfig

SERVICE_ACCOUNT_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")


class ClientFactory:
    """Assembles transport settings and constructs a KubernetesClient."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
        watch_config: WatchConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._logger = logger
        self._watch_config = watch_config or WatchConfig()
        self._transport = transport

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    @classmethod
    def create(cls) -> ClientFactory:
        return cls()

    @classmethod
    def connect_to(cls, api_uri: str) -> ClientFactory:
        return cls(ClientConfig(base_uri=api_uri))

    @classmethod
    def from_config(cls, config: KubeWireConfig) -> ClientFactory:
        """Build a factory from environment-loaded configuration."""
        factory = cls(config.client, watch_config=config.watch)
        if config.access_token:
            factory = factory.with_access_token(config.access_token)
        return factory

    @classmethod
    def in_cluster(cls, service_account_dir: Path = SERVICE_ACCOUNT_DIR) -> ClientFactory:
        """Configure from the pod's service account and service env vars.

        Raises:
            ConfigError: not running inside a cluster.
        """
        host = os.environ.get("KUBERNETES_SERVICE_HOST", "")
        port = os.environ.get("KUBERNETES_SERVICE_PORT", "443")
        if not host:
            raise ConfigError("Not running in a cluster: KUBERNETES_SERVICE_HOST is not set")
        if ":" in host:
            host = f"[{host}]"
        return (
            cls.connect_to(f"https://{host}:{port}")
            .with_certificate_authority(str(service_account_dir / "ca.crt"))
            .with_access_token((service_account_dir / "token").as_uri())
        )

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def logger(self) -> structlog.stdlib.BoundLogger | None:
        return self._logger

    @property
    def watch_config(self) -> WatchConfig:
        return self._watch_config

    def with_logger(self, logger: structlog.stdlib.BoundLogger) -> ClientFactory:
        return self._derive(logger=logger)

    def with_config(self, **changes: Any) -> ClientFactory:
        """Return a factory whose ClientConfig has *changes* applied."""
        return self._derive(config=replace(self._config, **changes))

    def with_watch_config(self, watch_config: WatchConfig) -> ClientFactory:
        return self._derive(watch_config=watch_config)

    def with_transport(self, transport: httpx.AsyncBaseTransport) -> ClientFactory:
        """Send every request through *transport* (e.g. a proxy or a mock)."""
        return self._derive(transport=transport)

    def with_headers(self, headers: Mapping[str, str]) -> ClientFactory:
        """Merge *headers* over the headers configured so far."""
        return self.with_config(headers={**self._config.headers, **headers})

    def with_api_uri(self, api_uri: str) -> ClientFactory:
        return self.with_config(base_uri=api_uri)

    def without_certificate_authority_verification(self) -> ClientFactory:
        return self._with_tls(verify=False)

    def with_certificate_authority(self, certificate_authority: str) -> ClientFactory:
        return self._with_tls(verify=certificate_authority)

    def with_client_certificate(self, client_certificate: str, password: str | None = None) -> ClientFactory:
        return self._with_tls(client_cert=client_certificate, client_cert_password=password)

    def with_private_ssl_key(self, private_key: str, password: str | None = None) -> ClientFactory:
        return self._with_tls(client_key=private_key, client_key_password=password)

    def with_access_token(self, access_token: str) -> ClientFactory:
        """Send ``Authorization: Bearer <token>``.

        ``file://`` and ``data://`` tokens are read immediately.

        Raises:
            ConfigError: the referenced source cannot be read.
        """
        if access_token.startswith(("file://", "data://")):
            access_token = _read_source(access_token).strip()
        return self.with_headers({"Authorization": f"Bearer {access_token}"})

    def _with_tls(self, **changes: Any) -> ClientFactory:
        return self.with_config(tls=replace(self._config.tls, **changes))

    def _derive(self, **changes: Any) -> ClientFactory:
        state = {
            "config": self._config,
            "logger": self._logger,
            "watch_config": self._watch_config,
            "transport": self._transport,
        }
        return ClientFactory(**{**state, **changes})

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def construct_client(self) -> KubernetesClient:
        """Build the HTTP transport and wrap it in a KubernetesClient.

        Raises:
            ConfigError: TLS material cannot be loaded.
        """
        http = httpx.AsyncClient(
            base_url=self._config.base_uri,
            headers=self._config.headers,
            verify=build_ssl_context(self._config.tls),
            timeout=self._config.request_timeout,
            transport=self._transport,
        )
        return KubernetesClient(http, self._logger, watch_config=self._watch_config)


def build_ssl_context(tls: TLSConfig) -> ssl.SSLContext | bool:
    """Translate TLSConfig into httpx's ``verify`` argument.

    Plain True/False is returned when no CA bundle or client identity is
    configured, leaving httpx's defaults in place.
    """
    if tls.client_key and not tls.client_cert:
        raise ConfigError("private key configured without a client certificate")
    if not isinstance(tls.verify, str) and not tls.client_cert:
        return tls.verify
    try:
        if isinstance(tls.verify, str):
            context = ssl.create_default_context(cafile=tls.verify)
        else:
            context = ssl.create_default_context()
            if tls.verify is False:
                context.check_hostname = False
                context.verify_mode = ssl.CERT_NONE
        if tls.client_cert:
            context.load_cert_chain(
                tls.client_cert,
                keyfile=tls.client_key or None,
                password=tls.client_key_password or tls.client_cert_password,
            )
    except (OSError, ssl.SSLError) as exc:
        raise ConfigError(f"Failed loading TLS material: {exc}", cause=exc) from exc
    return context


def _read_source(uri: str) -> str:
    """Read a ``file://`` path or an RFC 2397 ``data://`` URI."""
    try:
        if uri.startswith("data://"):
            return _decode_data_uri(uri[len("data://") :])
        return Path(unquote_to_bytes(urlparse(uri).path).decode()).read_text()
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Failed to read contents from `{uri}`: {exc}", cause=exc) from exc


def _decode_data_uri(data: str) -> str:
    header, sep, payload = data.partition(",")
    if not sep:
        raise ValueError("data URI has no ',' separator")
    if header.endswith(";base64"):
        return base64.b64decode(payload, validate=True).decode()
    return unquote_to_bytes(payload).decode()
