"""Watch lifecycle enumerations."""

from __future__ import annotations

from enum import StrEnum


class WatchState(StrEnum):
    """Supervisor state machine."""

    STARTING = "starting"
    STREAMING = "streaming"
    RETRYING = "retrying"
    STOPPED = "stopped"


class WatchOutcome(StrEnum):
    """How a single watch session finished without raising."""

    STOPPED = "stopped"
    STREAM_ENDED = "stream_ended"
