"""Download pipeline: source resolution, zip polling, and throttled streaming copy.

A job with one target downloads the file directly. Several targets are bundled
server-side first: the zip is created, then polled until it exposes a URL.
Either way the body is streamed to disk in fixed-size chunks while progress is
reported at most every ``PROGRESS_INTERVAL_SECONDS``.

Speed is the cumulative average since the copy started, not a windowed rate.
A failed copy leaves whatever was already written on disk.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Protocol

import httpx

from .browser.entries import Entry
from .errors import DownloadWriteError, LazyputError, PollTimeoutError, ServiceError, TransportError
from .messages import (
    DownloadEvent,
    DownloadFailed,
    DownloadFinished,
    DownloadProgress,
    DownloadResolved,
)
from .putio import ZipStatus
from .runtime.tasks import MessageChannel, describe_error

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
PROGRESS_INTERVAL_SECONDS = 0.2
ZIP_POLL_INTERVAL_SECONDS = 2.0
ZIP_POLL_MAX_ATTEMPTS = 300

PHASE_PREPARING = "preparing"
PHASE_DOWNLOADING = "downloading"
PHASE_COMPLETE = "complete"
PHASE_FAILED = "failed"


class DownloadService(Protocol):
    def file_url(self, file_id: int) -> str: ...

    def get_file(self, file_id: int) -> Entry: ...

    def create_zip(self, file_ids: Iterable[int]) -> int: ...

    def get_zip(self, zip_id: int) -> ZipStatus: ...

    def stream_download(self, url: str): ...


@dataclass(frozen=True)
class DownloadSource:
    url: str
    filename: str
    total: int


@dataclass(frozen=True)
class CopyProgress:
    written: int
    total: int
    speed: float


@dataclass(frozen=True)
class DownloadJob:
    """UI-side view of one download, updated only from its own events."""

    job_id: int
    ids: tuple[int, ...]
    destination: Path
    phase: str = PHASE_PREPARING
    filename: str = ""
    written: int = 0
    total: int = 0
    speed: float = 0.0
    saved_path: str = ""
    error: str = ""

    @property
    def finished(self) -> bool:
        return self.phase in {PHASE_COMPLETE, PHASE_FAILED}

    @property
    def fraction(self) -> float:
        if self.phase == PHASE_COMPLETE:
            return 1.0
        if self.total <= 0:
            return 0.0
        return max(0.0, min(1.0, self.written / self.total))

    def apply(self, event: DownloadEvent) -> DownloadJob:
        """Return the job after folding in one event for this job."""
        if event.job_id != self.job_id or self.finished:
            return self
        if isinstance(event, DownloadResolved):
            return replace(self, phase=PHASE_DOWNLOADING, filename=event.filename, total=event.total)
        if isinstance(event, DownloadProgress):
            return replace(
                self,
                phase=PHASE_DOWNLOADING,
                written=max(self.written, event.written),
                total=event.total,
                speed=event.speed,
            )
        if isinstance(event, DownloadFinished):
            return replace(
                self,
                phase=PHASE_COMPLETE,
                written=event.written,
                total=self.total if self.total > 0 else event.written,
                saved_path=event.path,
            )
        if isinstance(event, DownloadFailed):
            return replace(self, phase=PHASE_FAILED, error=event.error)
        return self


def _with_context(prefix: str, exc: LazyputError) -> LazyputError:
    if isinstance(exc, ServiceError):
        return ServiceError(f"{prefix}: {exc}", exc.status_code)
    return type(exc)(f"{prefix}: {exc}")


def wait_for_zip(
    client: DownloadService,
    zip_id: int,
    *,
    sleep: Callable[[float], None] = time.sleep,
    interval: float = ZIP_POLL_INTERVAL_SECONDS,
    max_attempts: int = ZIP_POLL_MAX_ATTEMPTS,
) -> ZipStatus:
    """Poll a zip until it carries a URL, sleeping before every attempt.

    Errors on individual polls count as "not ready yet".
    """
    for attempt in range(1, max_attempts + 1):
        sleep(interval)
        try:
            status = client.get_zip(zip_id)
        except LazyputError as exc:
            logger.debug("Zip %d poll %d failed: %s", zip_id, attempt, exc)
            continue
        if status.ready:
            logger.info("Zip %d ready after %d polls (%d bytes)", zip_id, attempt, status.size)
            return status
        logger.debug("Zip %d not ready (poll %d/%d)", zip_id, attempt, max_attempts)
    raise PollTimeoutError(f"zip creation timed out after {max_attempts} attempts")


def local_filename(name: str, fallback: str) -> str:
    """Last path component of a remote name, so the file stays inside the download dir."""
    base = Path(name).name
    if base in ("", ".", ".."):
        return fallback
    return base


def resolve_download_source(
    client: DownloadService,
    ids: Sequence[int],
    *,
    sleep: Callable[[float], None] = time.sleep,
    interval: float = ZIP_POLL_INTERVAL_SECONDS,
    max_attempts: int = ZIP_POLL_MAX_ATTEMPTS,
) -> DownloadSource:
    if not ids:
        raise ValueError("nothing to download")
    if len(ids) == 1:
        file_id = ids[0]
        try:
            url = client.file_url(file_id)
        except LazyputError as exc:
            raise _with_context("getting download URL", exc) from exc
        try:
            entry = client.get_file(file_id)
        except LazyputError as exc:
            raise _with_context("getting file info", exc) from exc
        return DownloadSource(url=url, filename=local_filename(entry.name, f"putio-{file_id}"), total=entry.size)

    try:
        zip_id = client.create_zip(ids)
    except LazyputError as exc:
        raise _with_context("creating zip", exc) from exc
    logger.info("Created zip %d for %d files", zip_id, len(ids))
    status = wait_for_zip(client, zip_id, sleep=sleep, interval=interval, max_attempts=max_attempts)
    return DownloadSource(url=status.url, filename=f"putio-{zip_id}.zip", total=status.size)


def copy_stream(
    chunks: Iterable[bytes],
    destination: Path,
    *,
    total: int,
    emit: Callable[[CopyProgress], None],
    clock: Callable[[], float] = time.monotonic,
    interval: float = PROGRESS_INTERVAL_SECONDS,
) -> int:
    """Write ``chunks`` sequentially to ``destination`` and return bytes written.

    Progress is emitted when more than ``interval`` seconds passed since the
    previous emission. Reaching ``total`` is left to the caller's completion
    event so it is reported exactly once.
    """
    start = clock()
    last_report = start
    written = 0
    try:
        out = destination.open("wb")
    except OSError as exc:
        raise DownloadWriteError(f"creating file: {exc}") from exc
    with out:
        for chunk in chunks:
            if not chunk:
                continue
            try:
                out.write(chunk)
            except OSError as exc:
                raise DownloadWriteError(f"writing file: {exc}") from exc
            written += len(chunk)

            now = clock()
            if now - last_report > interval and not (total > 0 and written >= total):
                elapsed = now - start
                speed = written / elapsed if elapsed > 0 else 0.0
                emit(CopyProgress(written=written, total=total, speed=speed))
                last_report = now
    return written


def _iter_body(resp: httpx.Response, chunk_size: int) -> Iterator[bytes]:
    try:
        yield from resp.iter_bytes(chunk_size)
    except httpx.HTTPError as exc:
        raise TransportError(f"reading response: {exc}") from exc


def _content_length(resp: httpx.Response) -> int | None:
    raw = resp.headers.get("content-length")
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value >= 0 else None


def download_to(
    client: DownloadService,
    source: DownloadSource,
    destination_dir: Path,
    *,
    emit: Callable[[CopyProgress], None],
    clock: Callable[[], float] = time.monotonic,
    chunk_size: int = CHUNK_SIZE,
) -> tuple[Path, int]:
    """Stream ``source`` into ``destination_dir`` and return ``(path, written)``."""
    with client.stream_download(source.url) as resp:
        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DownloadWriteError(f"creating directory: {exc}") from exc
        destination = destination_dir / local_filename(source.filename, "putio-download")
        length = _content_length(resp)
        total = length if length is not None else source.total
        written = copy_stream(
            _iter_body(resp, chunk_size),
            destination,
            total=total,
            emit=emit,
            clock=clock,
        )
    return destination, written


def run_download_job(
    client: DownloadService,
    job_id: int,
    ids: Sequence[int],
    destination_dir: Path,
    channel: MessageChannel,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Producer body for one job: pushes events and exactly one terminal message."""

    def emit(progress: CopyProgress) -> None:
        channel.put(
            DownloadProgress(
                job_id=job_id,
                written=progress.written,
                total=progress.total,
                speed=progress.speed,
            )
        )

    try:
        source = resolve_download_source(client, ids, sleep=sleep)
        channel.put(DownloadResolved(job_id=job_id, filename=source.filename, total=source.total))
        path, written = download_to(client, source, destination_dir, emit=emit, clock=clock)
    except Exception as exc:
        if not isinstance(exc, LazyputError):
            logger.exception("Download job %d crashed", job_id)
        else:
            logger.warning("Download job %d failed: %s", job_id, exc)
        channel.put(DownloadFailed(job_id=job_id, error=describe_error(exc)))
        return
    logger.info("Download job %d saved %d bytes to %s", job_id, written, path)
    channel.put(DownloadFinished(job_id=job_id, path=str(path), written=written))
