"""Top-level workflow state machine.

``Workflow.update`` is the single entry point for every message the runtime
loop delivers. It mutates navigation and selection state, swaps the active
mode, and schedules background work. It never blocks.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from ..browser.navigation import NavigationState
from ..browser.selection import SelectionSet, effective_selection
from ..download import DownloadJob, run_download_job
from ..keymap import DEFAULT_KEY_BINDINGS, KeyBindings, KeyComboBinding, KeyComboRegistry
from ..messages import (
    DeleteFinished,
    DownloadFailed,
    DownloadFinished,
    DownloadProgress,
    DownloadResolved,
    KeyPressed,
    ListingFailed,
    ListingLoaded,
    Message,
    RenameFinished,
    Tick,
)
from ..putio import PutioClient
from ..runtime.tasks import MessageChannel, TaskScheduler
from .modes import (
    PHASE_DONE,
    PHASE_FAILED,
    PHASE_RUNNING,
    Browsing,
    ConfirmingDelete,
    Deleting,
    Downloading,
    ErrorBanner,
    Renaming,
    TextBuffer,
    WorkflowMode,
)

logger = logging.getLogger(__name__)

_BUFFER_EDIT_KEYS: dict[str, Callable[[TextBuffer], TextBuffer]] = {
    "BACKSPACE": TextBuffer.backspace,
    "DELETE": TextBuffer.delete_forward,
    "LEFT": lambda buffer: buffer.move(-1),
    "RIGHT": lambda buffer: buffer.move(1),
    "HOME": TextBuffer.home,
    "END": TextBuffer.end,
    "CTRL_U": TextBuffer.cleared,
}


class Workflow:
    """Owns all UI state; mutated only from the runtime loop thread."""

    def __init__(
        self,
        client: PutioClient,
        scheduler: TaskScheduler,
        *,
        keys: KeyBindings = DEFAULT_KEY_BINDINGS,
        download_dir: Path = Path("."),
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.scheduler = scheduler
        self.keys = keys
        self.download_dir = download_dir
        self._sleep = sleep
        self._clock = clock

        self.navigation = NavigationState()
        self.selection = SelectionSet()
        self.mode: WorkflowMode = Browsing()
        self.show_help = False
        self.quit_requested = False
        self.dirty = True
        self.spinner_frame = 0
        self._next_job_id = 1
        self._browse_keys = self._build_browse_registry()

    # ------------------------------------------------------------------
    # lifecycle

    def start(self) -> None:
        """Kick off the initial root listing."""
        self._request_listing(self.navigation.begin_reload())

    @property
    def busy(self) -> bool:
        """Whether a listing or job is in flight (drives the spinner)."""
        if self.navigation.loading:
            return True
        mode = self.mode
        if isinstance(mode, (Deleting, Renaming)):
            return mode.phase == PHASE_RUNNING
        if isinstance(mode, Downloading):
            return not mode.job.finished
        return False

    def effective_ids(self) -> tuple[int, ...]:
        return effective_selection(self.selection, self.navigation.entries, self.navigation.cursor)

    def _new_job_id(self) -> int:
        job_id = self._next_job_id
        self._next_job_id += 1
        return job_id

    def _request_listing(self, parent_id: int) -> None:
        client = self.client
        self.scheduler.schedule(
            "list",
            lambda: tuple(client.list_files(parent_id)),
            lambda entries: ListingLoaded(parent_id=parent_id, entries=entries),
            lambda error: ListingFailed(parent_id=parent_id, error=error),
        )

    def _reload(self) -> None:
        self._request_listing(self.navigation.begin_reload())

    # ------------------------------------------------------------------
    # dispatch

    def update(self, message: Message) -> bool:
        """Fold one message into state. Returns whether anything changed."""
        if isinstance(message, KeyPressed):
            changed = self._handle_key(message.key)
        elif isinstance(message, Tick):
            changed = self._handle_tick(message)
        elif isinstance(message, ListingLoaded):
            changed = self._handle_listing_loaded(message)
        elif isinstance(message, ListingFailed):
            changed = self._handle_listing_failed(message)
        elif isinstance(message, DeleteFinished):
            changed = self._handle_delete_finished(message)
        elif isinstance(message, RenameFinished):
            changed = self._handle_rename_finished(message)
        elif isinstance(message, (DownloadResolved, DownloadProgress, DownloadFinished, DownloadFailed)):
            changed = self._handle_download_event(message)
        else:
            logger.debug("Ignoring unknown message %r", message)
            changed = False
        if changed:
            self.dirty = True
        return bool(changed)

    def _handle_tick(self, tick: Tick) -> bool:
        if not self.busy or tick.frame == self.spinner_frame:
            return False
        self.spinner_frame = tick.frame
        return True

    def _handle_listing_loaded(self, message: ListingLoaded) -> bool:
        if not self.navigation.install_listing(message.parent_id, message.entries):
            logger.debug("Dropping stale listing for %d", message.parent_id)
            return False
        logger.info("Listed %d entries in %d", len(message.entries), message.parent_id)
        return True

    def _handle_listing_failed(self, message: ListingFailed) -> bool:
        if not self.navigation.listing_failed(message.parent_id):
            logger.debug("Dropping stale listing failure for %d", message.parent_id)
            return False
        self.mode = ErrorBanner(f"Failed to load files: {message.error}")
        return True

    def _handle_delete_finished(self, message: DeleteFinished) -> bool:
        mode = self.mode
        if not isinstance(mode, Deleting) or mode.job_id != message.job_id or mode.finished:
            return False
        if message.error is None:
            logger.info("Deleted %d items", len(mode.ids))
            self.mode = replace(mode, phase=PHASE_DONE)
        else:
            logger.warning("Delete of %d items failed: %s", len(mode.ids), message.error)
            self.mode = replace(mode, phase=PHASE_FAILED, error=message.error)
        return True

    def _handle_rename_finished(self, message: RenameFinished) -> bool:
        mode = self.mode
        if not isinstance(mode, Renaming) or mode.job_id != message.job_id or mode.phase != PHASE_RUNNING:
            return False
        if message.error is None:
            logger.info("Renamed %d to %r", mode.entry_id, mode.buffer.text.strip())
            self.mode = replace(mode, phase=PHASE_DONE)
        else:
            logger.warning("Rename of %d failed: %s", mode.entry_id, message.error)
            self.mode = replace(mode, phase=PHASE_FAILED, error=message.error)
        return True

    def _handle_download_event(
        self,
        event: DownloadResolved | DownloadProgress | DownloadFinished | DownloadFailed,
    ) -> bool:
        mode = self.mode
        if not isinstance(mode, Downloading):
            return False
        job = mode.job.apply(event)
        if job == mode.job:
            return False
        self.mode = Downloading(job)
        return True

    # ------------------------------------------------------------------
    # keys

    def _handle_key(self, key: str) -> bool:
        mode = self.mode
        keys = self.keys
        if isinstance(mode, ConfirmingDelete):
            if keys.matches("confirm", key):
                return self._start_delete(mode.ids)
            if keys.matches("dismiss", key):
                self.mode = Browsing()
                return True
            return False
        if isinstance(mode, Deleting):
            if mode.finished and keys.matches("dismiss", key):
                self.selection.clear()
                self.mode = Browsing()
                self._reload()
                return True
            return False
        if isinstance(mode, Renaming):
            return self._handle_rename_key(mode, key)
        if isinstance(mode, Downloading):
            if keys.matches("quit", key):
                return self._request_quit()
            if mode.job.finished and keys.matches("dismiss", key):
                self.mode = Browsing()
                return True
            return False
        if isinstance(mode, ErrorBanner):
            if keys.matches("quit", key):
                return self._request_quit()
            if keys.matches("dismiss", key):
                self.mode = Browsing()
                return True
            return False
        return self._handle_browse_key(key)

    def _handle_browse_key(self, key: str) -> bool:
        if self.show_help:
            if self.keys.matches("quit", key):
                return self._request_quit()
            if self.keys.matches("help", key) or self.keys.matches("dismiss", key):
                self.show_help = False
                return True
            return False
        if self.navigation.loading:
            if self.keys.matches("quit", key):
                return self._request_quit()
            return False
        return bool(self._browse_keys.dispatch(key))

    def _handle_rename_key(self, mode: Renaming, key: str) -> bool:
        keys = self.keys
        if mode.editing:
            if keys.matches("force_quit", key):
                return self._request_quit()
            if keys.matches("dismiss", key):
                self.mode = Browsing()
                return True
            if keys.matches("submit", key):
                return self._submit_rename(mode)
            edit = _BUFFER_EDIT_KEYS.get(key)
            if edit is not None:
                buffer = edit(mode.buffer)
            elif len(key) == 1 and key.isprintable():
                buffer = mode.buffer.insert(key)
            else:
                return False
            if buffer == mode.buffer:
                return False
            self.mode = replace(mode, buffer=buffer)
            return True
        if keys.matches("quit", key):
            return self._request_quit()
        if mode.finished and (keys.matches("dismiss", key) or keys.matches("submit", key)):
            self.mode = Browsing()
            self._reload()
            return True
        return False

    def _build_browse_registry(self) -> KeyComboRegistry:
        keys = self.keys
        nav = self.navigation
        return KeyComboRegistry().register_bindings(
            KeyComboBinding(keys.up, lambda: nav.move_cursor(-1)),
            KeyComboBinding(keys.down, lambda: nav.move_cursor(1)),
            KeyComboBinding(keys.top, nav.jump_top),
            KeyComboBinding(keys.bottom, nav.jump_bottom),
            KeyComboBinding(keys.open, self._descend),
            KeyComboBinding(keys.back, self._ascend),
            KeyComboBinding(keys.toggle_select, self._toggle_select),
            KeyComboBinding(keys.select_all, self._select_all),
            KeyComboBinding(keys.download, self._start_download),
            KeyComboBinding(keys.delete, self._confirm_delete),
            KeyComboBinding(keys.rename, self._begin_rename),
            KeyComboBinding(keys.help, self._open_help),
            KeyComboBinding(keys.quit, self._request_quit),
        )

    # ------------------------------------------------------------------
    # browsing actions

    def _request_quit(self) -> bool:
        self.quit_requested = True
        return True

    def _open_help(self) -> bool:
        self.show_help = True
        return True

    def _descend(self) -> bool:
        target = self.navigation.begin_descend()
        if target is None:
            return False
        self._request_listing(target)
        return True

    def _ascend(self) -> bool:
        target = self.navigation.begin_ascend()
        if target is None:
            return False
        self.selection.clear()
        self._request_listing(target)
        return True

    def _toggle_select(self) -> bool:
        entry = self.navigation.current_entry()
        if entry is None:
            return False
        self.selection.toggle(entry.id)
        self.navigation.move_cursor(1)
        return True

    def _select_all(self) -> bool:
        if self.selection:
            self.selection.clear()
            return True
        if not self.navigation.entries:
            return False
        for entry in self.navigation.entries:
            self.selection.add(entry.id)
        return True

    def _confirm_delete(self) -> bool:
        ids = self.effective_ids()
        if not ids:
            return False
        self.mode = ConfirmingDelete(ids)
        return True

    def _start_delete(self, ids: tuple[int, ...]) -> bool:
        job_id = self._new_job_id()
        client = self.client
        self.mode = Deleting(job_id=job_id, ids=ids)
        logger.info("Deleting %d items (job %d)", len(ids), job_id)
        self.scheduler.schedule(
            "delete",
            lambda: client.delete_files(ids),
            lambda _: DeleteFinished(job_id=job_id),
            lambda error: DeleteFinished(job_id=job_id, error=error),
        )
        return True

    def _begin_rename(self) -> bool:
        ids = self.effective_ids()
        if len(ids) != 1:
            return False
        entry = self.navigation.find_entry(ids[0])
        if entry is None:
            return False
        self.mode = Renaming(
            entry_id=entry.id,
            original_name=entry.name,
            buffer=TextBuffer.prefilled(entry.name),
        )
        return True

    def _submit_rename(self, mode: Renaming) -> bool:
        name = mode.buffer.text.strip()
        if not name:
            return False
        job_id = self._new_job_id()
        client = self.client
        entry_id = mode.entry_id
        self.mode = replace(mode, phase=PHASE_RUNNING, job_id=job_id)
        logger.info("Renaming %d to %r (job %d)", entry_id, name, job_id)
        self.scheduler.schedule(
            "rename",
            lambda: client.rename_file(entry_id, name),
            lambda _: RenameFinished(job_id=job_id),
            lambda error: RenameFinished(job_id=job_id, error=error),
        )
        return True

    def _start_download(self) -> bool:
        ids = self.effective_ids()
        if not ids:
            return False
        job_id = self._new_job_id()
        client = self.client
        destination = self.download_dir
        sleep = self._sleep
        clock = self._clock
        self.mode = Downloading(DownloadJob(job_id=job_id, ids=ids, destination=destination))
        logger.info("Downloading %d items to %s (job %d)", len(ids), destination, job_id)

        def produce(channel: MessageChannel) -> None:
            run_download_job(client, job_id, ids, destination, channel, sleep=sleep, clock=clock)

        self.scheduler.stream("download", produce)
        return True
