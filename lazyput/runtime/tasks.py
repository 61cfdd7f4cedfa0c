"""Background task scheduler feeding results into the runtime loop.

Each scheduled operation runs on its own daemon thread and delivers exactly one
message into a shared queue. Streaming jobs get a bounded ``MessageChannel``
that may carry any number of progress messages before one terminal message.
The loop pulls everything through ``drain`` without blocking.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, TypeVar

from ..errors import LazyputError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CHANNEL_CAPACITY = 100


@dataclass(frozen=True)
class Task:
    """Handle for one scheduled operation."""

    task_id: int
    name: str


class MessageChannel:
    """Bounded many-to-one message stream from one producer to the loop.

    ``put`` blocks while the channel is full, which throttles the producer to
    the loop's consumption rate.
    """

    def __init__(self, name: str, capacity: int = DEFAULT_CHANNEL_CAPACITY) -> None:
        self.name = name
        self._queue: Queue[object] = Queue(maxsize=max(1, capacity))
        self._closed = threading.Event()

    def put(self, message: object) -> None:
        if self._closed.is_set():
            raise RuntimeError(f"channel {self.name!r} is closed")
        self._queue.put(message)

    def close(self) -> None:
        """Mark the producer side finished; queued messages stay readable."""
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def drain(self) -> list[object]:
        out: list[object] = []
        while True:
            try:
                out.append(self._queue.get_nowait())
            except Empty:
                break
        return out

    def exhausted(self) -> bool:
        return self._closed.is_set() and self._queue.empty()


def describe_error(exc: BaseException) -> str:
    """Render an exception for display, keeping library messages readable."""
    if isinstance(exc, LazyputError):
        return str(exc) or exc.__class__.__name__
    detail = str(exc)
    return f"{exc.__class__.__name__}: {detail}" if detail else exc.__class__.__name__


class TaskScheduler:
    """Run operations off the loop thread and collect their messages."""

    def __init__(self, thread_prefix: str = "lazyput") -> None:
        self._thread_prefix = thread_prefix
        self._lock = threading.Lock()
        self._next_task_id = 1
        self._results: Queue[object] = Queue()
        self._channels: list[MessageChannel] = []

    def _new_task(self, name: str) -> Task:
        with self._lock:
            task = Task(task_id=self._next_task_id, name=name)
            self._next_task_id += 1
        return task

    def _start_thread(self, task: Task, target: Callable[[], None]) -> None:
        worker = threading.Thread(
            target=target,
            name=f"{self._thread_prefix}-{task.name}-{task.task_id}",
            daemon=True,
        )
        worker.start()

    def schedule(
        self,
        name: str,
        operation: Callable[[], T],
        on_success: Callable[[T], object],
        on_error: Callable[[str], object],
    ) -> Task:
        """Run ``operation`` in the background and queue one result message.

        ``on_success`` wraps the return value; ``on_error`` wraps a display
        string built from the raised exception. Both run on the worker thread
        and must only build immutable messages.
        """
        task = self._new_task(name)
        logger.debug("Scheduling task %s #%d", name, task.task_id)

        def run() -> None:
            try:
                value = operation()
            except LazyputError as exc:
                logger.warning("Task %s #%d failed: %s", name, task.task_id, exc)
                message = on_error(describe_error(exc))
            except Exception as exc:
                logger.exception("Task %s #%d crashed", name, task.task_id)
                message = on_error(describe_error(exc))
            else:
                message = on_success(value)
            self._results.put(message)

        self._start_thread(task, run)
        return task

    def stream(
        self,
        name: str,
        producer: Callable[[MessageChannel], None],
        capacity: int = DEFAULT_CHANNEL_CAPACITY,
    ) -> Task:
        """Run ``producer`` in the background with a fresh channel.

        The channel is closed when the producer returns or raises; producers
        are expected to push their own terminal message.
        """
        task = self._new_task(name)
        channel = MessageChannel(f"{name}-{task.task_id}", capacity)
        with self._lock:
            self._channels.append(channel)
        logger.debug("Scheduling stream %s #%d", name, task.task_id)

        def run() -> None:
            try:
                producer(channel)
            except Exception:
                logger.exception("Stream %s #%d crashed", name, task.task_id)
            finally:
                channel.close()

        self._start_thread(task, run)
        return task

    def drain(self) -> list[Any]:
        """Return every message delivered so far, oldest first per source."""
        out: list[Any] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        with self._lock:
            channels = list(self._channels)
        for channel in channels:
            out.extend(channel.drain())
            if channel.exhausted():
                with self._lock:
                    if channel in self._channels:
                        self._channels.remove(channel)
        return out

    def active_channels(self) -> int:
        with self._lock:
            return len(self._channels)


__all__ = [
    "DEFAULT_CHANNEL_CAPACITY",
    "MessageChannel",
    "Task",
    "TaskScheduler",
    "describe_error",
]
