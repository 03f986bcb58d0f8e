"""Exception hierarchy for kubewire.

RequestError      -- an HTTP call could not be issued or completed, or the
                     server answered with a non-2xx status.
ResponseError     -- a response arrived but its body is not the JSON we need.
StreamDecodeError -- a newline-delimited frame inside a watch stream failed
                     to decode.
ConfigError       -- the client was assembled from unusable settings.

The first three are retryable from the watch supervisor's point of view.
"""

from __future__ import annotations


class KubeWireError(Exception):
    """Base class for every error raised by kubewire.

    Carries the diagnostic context the watch supervisor logs on failure:
    the category (originating exception class name), message and code.
    """

    def __init__(self, message: str, code: int = 0, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.cause = cause

    @property
    def category(self) -> str:
        """Class name of the underlying failure, or of this error if there is none."""
        if self.cause is not None:
            return type(self.cause).__name__
        return type(self).__name__


class RequestError(KubeWireError):
    """Transport-level failure or non-2xx status on an HTTP call."""


class ResponseError(KubeWireError):
    """Response body failed JSON decoding or lacks a required field."""


class StreamDecodeError(KubeWireError):
    """A framed line of a watch stream is not valid JSON."""

    def __init__(self, raw: bytes, diagnostic: str, cause: BaseException | None = None) -> None:
        super().__init__(f"Failed decoding watch frame: {diagnostic}", cause=cause)
        self.raw = raw
        self.diagnostic = diagnostic


class ConfigError(KubeWireError):
    """Client configuration is invalid or a referenced source is unreadable."""


RETRYABLE_ERRORS: tuple[type[KubeWireError], ...] = (RequestError, ResponseError, StreamDecodeError)
