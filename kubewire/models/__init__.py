"""Core data structures for kubewire."""

from kubewire.models.config import (
    ClientConfig,
    KubeWireConfig,
    LogConfig,
    TLSConfig,
    WatchConfig,
)
from kubewire.models.watch import WatchOutcome, WatchState

__all__ = [
    "ClientConfig",
    "KubeWireConfig",
    "LogConfig",
    "TLSConfig",
    "WatchConfig",
    "WatchOutcome",
    "WatchState",
]
