"""kubewire: asyncio Kubernetes REST client with a self-healing watch.

Exports:
    ClientFactory     -- fluent builder for the HTTP transport.
    KubernetesClient  -- CRUD calls plus ``watch``.
    WatchSession      -- one watch attempt (snapshot + streaming GET).
    WatchSupervisor   -- fixed-delay retry loop around WatchSession.
"""

from kubewire.client import ClientFactory, KubernetesClient
from kubewire.errors import (
    ConfigError,
    KubeWireError,
    RequestError,
    ResponseError,
    StreamDecodeError,
)
from kubewire.models.watch import WatchOutcome, WatchState
from kubewire.watch import WatchSession, WatchSupervisor

__version__ = "0.1.0"

__all__ = [
    "ClientFactory",
    "ConfigError",
    "KubeWireError",
    "KubernetesClient",
    "RequestError",
    "ResponseError",
    "StreamDecodeError",
    "WatchOutcome",
    "WatchSession",
    "WatchState",
    "WatchSupervisor",
    "__version__",
]
