"""Error taxonomy shared by the service client, download pipeline, and auth poller.

Every failure that can surface in the UI derives from ``LazyputError`` so the
workflow can turn it into a displayable message without catching broadly.
"""

from __future__ import annotations


class LazyputError(Exception):
    """Base class for all expected lazyput failures."""


class TransportError(LazyputError):
    """Network-level failure talking to the remote service."""


class ServiceError(LazyputError):
    """Non-2xx response or unexpected payload from the remote service."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PollTimeoutError(LazyputError):
    """A bounded polling loop gave up before the remote side became ready."""


class DownloadWriteError(LazyputError):
    """Local filesystem failure while saving a download."""


__all__ = [
    "LazyputError",
    "TransportError",
    "ServiceError",
    "PollTimeoutError",
    "DownloadWriteError",
]
