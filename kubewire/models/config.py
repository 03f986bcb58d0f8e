"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TLSConfig:
    """TLS trust and client identity material.

    ``verify`` is True for the system trust store, False to disable
    verification, or a path to a CA bundle.
    """

    verify: bool | str = True
    client_cert: str = ""
    client_cert_password: str | None = None
    client_key: str = ""
    client_key_password: str | None = None


@dataclass(frozen=True)
class WatchConfig:
    """Watch supervisor configuration."""

    retry_delay: float = 5.0
    strict_framing: bool = True


@dataclass(frozen=True)
class ClientConfig:
    """HTTP transport configuration, assembled once before any call."""

    base_uri: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    tls: TLSConfig = field(default_factory=TLSConfig)
    request_timeout: float = 30.0


@dataclass(frozen=True)
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass(frozen=True)
class KubeWireConfig:
    """Top-level kubewire configuration."""

    client: ClientConfig = field(default_factory=ClientConfig)
    access_token: str = ""
    watch: WatchConfig = field(default_factory=WatchConfig)
    log: LogConfig = field(default_factory=LogConfig)
