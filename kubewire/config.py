"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kubewire.models.config import (
    ClientConfig,
    KubeWireConfig,
    LogConfig,
    TLSConfig,
    WatchConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEWIRE_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_float(key: str, default: float, min_val: float | None = None, max_val: float | None = None) -> float:
    val = float(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_optional(key: str) -> str | None:
    return _env(key) or None


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _resolve_verify() -> bool | str:
    if _env_bool("INSECURE_SKIP_TLS_VERIFY", False):
        return False
    return _env("CA_CERT") or True


def load_config() -> KubeWireConfig:
    """Load configuration from KUBEWIRE_* environment variables."""
    return KubeWireConfig(
        client=ClientConfig(
            base_uri=_env("API_URI", ""),
            tls=TLSConfig(
                verify=_resolve_verify(),
                client_cert=_env("CLIENT_CERT", ""),
                client_cert_password=_env_optional("CLIENT_CERT_PASSWORD"),
                client_key=_env("CLIENT_KEY", ""),
                client_key_password=_env_optional("CLIENT_KEY_PASSWORD"),
            ),
            request_timeout=_env_float("REQUEST_TIMEOUT", 30.0, min_val=1.0, max_val=600.0),
        ),
        access_token=_env("TOKEN", ""),
        watch=WatchConfig(
            retry_delay=_env_float("WATCH_RETRY_DELAY", 5.0, min_val=0.0),
            strict_framing=_env_bool("WATCH_STRICT_FRAMING", True),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
