"""Closed set of messages delivered into the runtime loop.

Input events and background task results share one vocabulary. Every message
is a frozen dataclass so nothing mutable crosses the worker/loop boundary.
Job-scoped results carry the ``job_id`` they belong to; listing results carry
the ``parent_id`` that was requested. The workflow compares those tags with
its current state and drops anything stale.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .browser.entries import Entry


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class Tick:
    """Idle animation frame emitted by the loop while work is in flight."""

    frame: int


@dataclass(frozen=True)
class ListingLoaded:
    parent_id: int
    entries: tuple[Entry, ...]


@dataclass(frozen=True)
class ListingFailed:
    parent_id: int
    error: str


@dataclass(frozen=True)
class DeleteFinished:
    job_id: int
    error: str | None = None


@dataclass(frozen=True)
class RenameFinished:
    job_id: int
    error: str | None = None


@dataclass(frozen=True)
class DownloadResolved:
    """Download source is known; streaming is about to start."""

    job_id: int
    filename: str
    total: int


@dataclass(frozen=True)
class DownloadProgress:
    job_id: int
    written: int
    total: int
    speed: float


@dataclass(frozen=True)
class DownloadFinished:
    job_id: int
    path: str
    written: int


@dataclass(frozen=True)
class DownloadFailed:
    job_id: int
    error: str


DownloadEvent = Union[DownloadResolved, DownloadProgress, DownloadFinished, DownloadFailed]

Message = Union[
    KeyPressed,
    Tick,
    ListingLoaded,
    ListingFailed,
    DeleteFinished,
    RenameFinished,
    DownloadResolved,
    DownloadProgress,
    DownloadFinished,
    DownloadFailed,
]

__all__ = [
    "KeyPressed",
    "Tick",
    "ListingLoaded",
    "ListingFailed",
    "DeleteFinished",
    "RenameFinished",
    "DownloadResolved",
    "DownloadProgress",
    "DownloadFinished",
    "DownloadFailed",
    "DownloadEvent",
    "Message",
]
