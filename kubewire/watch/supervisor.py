"""Retry-forever supervisor around WatchSession.

State machine::

    STARTING --session built, request issued--> STREAMING
    STREAMING --callback returned False------> STOPPED   (run() returns)
    STREAMING --retryable failure------------> RETRYING
    STREAMING --server closed the stream-----> STARTING  (no delay)
    RETRYING  --fixed delay elapsed----------> STARTING

There is no retry cap and no backoff growth. The delay is an awaited sleep,
so cancelling the owning task ends the loop at any suspension point.
Callers needing backoff or a deadline wrap ``run()`` themselves.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from kubewire.errors import RETRYABLE_ERRORS
from kubewire.models.watch import WatchOutcome, WatchState
from kubewire.observability.logging import get_logger
from kubewire.watch.session import WatchSession

DEFAULT_RETRY_DELAY = 5.0

SessionFactory = Callable[[], WatchSession]


class WatchSupervisor:
    """Keeps one watch registration alive until its callback asks to stop.

    Args:
        session_factory: Builds a fresh WatchSession for every attempt. No
                         connection, buffer or token outlives an attempt.
        retry_delay:     Seconds to wait after a failed attempt.
        sleep:           Awaitable sleep, injectable for tests.
        logger:          Log sink; defaults to the component logger.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        if retry_delay < 0:
            raise ValueError("retry_delay must not be negative")
        self._session_factory = session_factory
        self._retry_delay = retry_delay
        self._sleep = sleep
        self._log = logger or get_logger("watch.supervisor")
        self.state = WatchState.STARTING
        self.attempts = 0

    async def run(self) -> None:
        """Drive sessions until one reports a caller-requested stop."""
        while self.state is not WatchState.STOPPED:
            self.state = WatchState.STARTING
            session = self._session_factory()
            self.attempts += 1
            self.state = WatchState.STREAMING
            try:
                outcome = await session.run()
            except RETRYABLE_ERRORS as exc:
                self._log.warning(
                    "watch_failed",
                    error_class=exc.category,
                    error=exc.message,
                    code=exc.code,
                    attempt=self.attempts,
                )
                self._log.info("watch_retrying", delay_seconds=self._retry_delay)
                self.state = WatchState.RETRYING
                await self._sleep(self._retry_delay)
                continue

            if outcome is WatchOutcome.STOPPED:
                self.state = WatchState.STOPPED
            else:
                self._log.info("watch_stream_ended", attempt=self.attempts)
