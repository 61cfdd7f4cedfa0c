"""Workflow state-machine behavior driven through ``Workflow.update``.

Background work is captured by a synchronous scheduler so each test decides
when (and whether) results arrive.
"""

from __future__ import annotations

import unittest
from pathlib import Path

from lazyput.browser import ROOT_ID, Entry
from lazyput.errors import LazyputError, TransportError
from lazyput.messages import (
    DownloadFinished,
    DownloadProgress,
    DownloadResolved,
    KeyPressed,
    ListingFailed,
    ListingLoaded,
    RenameFinished,
    Tick,
)
from lazyput.runtime.tasks import MessageChannel, describe_error
from lazyput.workflow import (
    Browsing,
    ConfirmingDelete,
    Deleting,
    Downloading,
    ErrorBanner,
    Renaming,
    Workflow,
)
from lazyput.workflow.modes import PHASE_DONE, PHASE_EDITING, PHASE_FAILED, PHASE_RUNNING

ROOT_ENTRIES = (
    Entry(10, "Alpha", is_dir=True),
    Entry(11, "Beta", is_dir=True),
    Entry(12, "movie.mkv", size=2048),
    Entry(13, "notes.txt", size=10),
)


class FakeScheduler:
    def __init__(self) -> None:
        self.pending: list[tuple] = []
        self.names: list[str] = []

    def schedule(self, name, operation, on_success, on_error):
        self.names.append(name)
        self.pending.append(("task", operation, on_success, on_error))

    def stream(self, name, producer):
        self.names.append(name)
        self.pending.append(("stream", producer))

    def drain(self) -> list:
        return []

    def run_pending(self) -> list:
        pending, self.pending = self.pending, []
        messages: list = []
        for item in pending:
            if item[0] == "task":
                _, operation, on_success, on_error = item
                try:
                    value = operation()
                except Exception as exc:
                    messages.append(on_error(describe_error(exc)))
                else:
                    messages.append(on_success(value))
            else:
                channel = MessageChannel("test", capacity=1000)
                item[1](channel)
                messages.extend(channel.drain())
        return messages


class FakeClient:
    def __init__(self) -> None:
        self.listings: dict[int, tuple[Entry, ...]] = {ROOT_ID: ROOT_ENTRIES}
        self.list_calls: list[int] = []
        self.deleted: list[tuple[int, ...]] = []
        self.renamed: list[tuple[int, str]] = []
        self.delete_error: LazyputError | None = None
        self.rename_error: LazyputError | None = None

    def list_files(self, parent_id: int):
        self.list_calls.append(parent_id)
        return self.listings.get(parent_id, ())

    def delete_files(self, ids):
        self.deleted.append(tuple(ids))
        if self.delete_error is not None:
            raise self.delete_error

    def rename_file(self, file_id: int, name: str) -> None:
        self.renamed.append((file_id, name))
        if self.rename_error is not None:
            raise self.rename_error


class WorkflowTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.client = FakeClient()
        self.scheduler = FakeScheduler()
        self.workflow = Workflow(self.client, self.scheduler, download_dir=Path("/tmp/lazyput-test"))
        self.workflow.start()
        self.settle()

    def settle(self) -> None:
        for message in self.scheduler.run_pending():
            self.workflow.update(message)

    def press(self, *keys: str) -> None:
        for key in keys:
            self.workflow.update(KeyPressed(key))


class BrowsingTests(WorkflowTestCase):
    def test_start_lists_root_sorted(self) -> None:
        self.assertEqual(self.client.list_calls, [ROOT_ID])
        self.assertEqual([entry.name for entry in self.workflow.navigation.entries], ["Alpha", "Beta", "movie.mkv", "notes.txt"])
        self.assertIsInstance(self.workflow.mode, Browsing)

    def test_toggle_selects_and_advances_cursor(self) -> None:
        self.press(" ", " ")

        self.assertEqual(self.workflow.selection.ids(), (10, 11))
        self.assertEqual(self.workflow.navigation.cursor, 2)

    def test_toggle_on_last_row_keeps_cursor(self) -> None:
        self.press("G", " ")

        self.assertEqual(self.workflow.selection.ids(), (13,))
        self.assertEqual(self.workflow.navigation.cursor, 3)

    def test_select_all_then_clear(self) -> None:
        self.press("a")
        self.assertEqual(self.workflow.selection.ids(), (10, 11, 12, 13))

        self.press("a")
        self.assertEqual(self.workflow.selection.ids(), ())

    def test_ascend_clears_selection_and_restores_cursor(self) -> None:
        self.client.listings[11] = (Entry(20, "inner.bin"),)
        self.press("j", "ENTER")
        self.settle()
        self.press(" ")
        self.assertEqual(self.workflow.selection.ids(), (20,))

        self.press("h")
        self.settle()

        self.assertEqual(self.workflow.selection.ids(), ())
        self.assertEqual(self.workflow.navigation.parent_id, ROOT_ID)
        self.assertEqual(self.workflow.navigation.cursor, 1)

    def test_input_ignored_while_listing_except_quit(self) -> None:
        self.press("ENTER")
        self.assertTrue(self.workflow.navigation.loading)

        self.assertFalse(self.workflow.update(KeyPressed("j")))
        self.assertFalse(self.workflow.update(KeyPressed("x")))
        self.assertIsInstance(self.workflow.mode, Browsing)

        self.press("q")
        self.assertTrue(self.workflow.quit_requested)

    def test_stale_listing_is_ignored(self) -> None:
        self.press("ENTER")

        changed = self.workflow.update(ListingLoaded(parent_id=999, entries=(Entry(1, "late"),)))

        self.assertFalse(changed)
        self.assertTrue(self.workflow.navigation.loading)

    def test_listing_failure_shows_banner_and_rolls_back(self) -> None:
        self.press("ENTER")
        self.workflow.update(ListingFailed(parent_id=10, error="offline"))

        self.assertEqual(self.workflow.mode, ErrorBanner("Failed to load files: offline"))
        self.assertEqual(self.workflow.navigation.parent_id, ROOT_ID)
        self.assertFalse(self.workflow.navigation.loading)

        self.assertFalse(self.workflow.update(KeyPressed("j")))
        self.press("ESC")
        self.assertIsInstance(self.workflow.mode, Browsing)

    def test_help_overlay_swallows_other_keys(self) -> None:
        self.press("?")
        self.assertTrue(self.workflow.show_help)

        self.assertFalse(self.workflow.update(KeyPressed("j")))
        self.assertEqual(self.workflow.navigation.cursor, 0)

        self.press("ESC")
        self.assertFalse(self.workflow.show_help)

    def test_tick_only_changes_state_while_busy(self) -> None:
        self.assertFalse(self.workflow.update(Tick(frame=3)))

        self.press("ENTER")
        self.assertTrue(self.workflow.update(Tick(frame=3)))
        self.assertEqual(self.workflow.spinner_frame, 3)
        self.assertFalse(self.workflow.update(Tick(frame=3)))


class DeleteFlowTests(WorkflowTestCase):
    def test_confirm_then_cancel_returns_to_browsing(self) -> None:
        self.press("x")
        self.assertEqual(self.workflow.mode, ConfirmingDelete((10,)))
        self.assertEqual(self.workflow.mode.message, "Delete 1 item?")

        self.press("ESC")

        self.assertIsInstance(self.workflow.mode, Browsing)
        self.assertEqual(self.scheduler.names, ["list"])

    def test_successful_delete_reloads_after_dismiss(self) -> None:
        self.press("G", " ", "k", " ", "x", "y")
        mode = self.workflow.mode
        self.assertIsInstance(mode, Deleting)
        self.assertEqual(mode.ids, (12, 13))
        self.assertEqual(mode.phase, PHASE_RUNNING)
        self.assertTrue(self.workflow.busy)

        self.settle()

        self.assertEqual(self.client.deleted, [(12, 13)])
        self.assertEqual(self.workflow.mode.phase, PHASE_DONE)
        self.press("ESC")
        self.assertIsInstance(self.workflow.mode, Browsing)
        self.assertEqual(self.workflow.selection.ids(), ())
        self.assertEqual(self.client.list_calls, [ROOT_ID])
        self.settle()
        self.assertEqual(self.client.list_calls, [ROOT_ID, ROOT_ID])

    def test_failed_delete_stays_until_dismissed(self) -> None:
        self.client.delete_error = TransportError("connection reset")
        self.press(" ", " ", "x")
        self.assertEqual(self.workflow.mode.message, "Delete 2 items?")
        self.press("y")
        self.settle()

        mode = self.workflow.mode
        self.assertIsInstance(mode, Deleting)
        self.assertEqual(mode.phase, PHASE_FAILED)
        self.assertEqual(mode.error, "connection reset")
        self.assertEqual(self.client.list_calls, [ROOT_ID])

        self.press("q")
        self.assertFalse(self.workflow.quit_requested)
        self.assertIs(self.workflow.mode, mode)

        self.press("ESC")
        self.assertIsInstance(self.workflow.mode, Browsing)
        self.assertEqual(self.workflow.selection.ids(), ())
        self.assertEqual(self.scheduler.names[-1], "list")

    def test_running_delete_ignores_dismiss(self) -> None:
        self.press("x", "y")

        self.assertFalse(self.workflow.update(KeyPressed("ESC")))
        self.assertIsInstance(self.workflow.mode, Deleting)

    def test_quit_keys_ignored_while_confirming(self) -> None:
        self.press("x")
        mode = self.workflow.mode

        for key in ("q", "CTRL_C"):
            self.assertFalse(self.workflow.update(KeyPressed(key)), key)
            self.assertFalse(self.workflow.quit_requested)
            self.assertIs(self.workflow.mode, mode)

    def test_quit_keys_ignored_while_delete_runs(self) -> None:
        self.press("x", "y")
        mode = self.workflow.mode
        self.assertEqual(mode.phase, PHASE_RUNNING)

        for key in ("q", "CTRL_C"):
            self.assertFalse(self.workflow.update(KeyPressed(key)), key)
            self.assertFalse(self.workflow.quit_requested)
            self.assertIs(self.workflow.mode, mode)

        self.settle()
        self.assertEqual(self.workflow.mode.phase, PHASE_DONE)


class RenameFlowTests(WorkflowTestCase):
    def test_rename_prefills_and_submits_trimmed_name(self) -> None:
        self.press("G", "r")
        mode = self.workflow.mode
        self.assertIsInstance(mode, Renaming)
        self.assertEqual(mode.buffer.text, "notes.txt")
        self.assertEqual(mode.buffer.cursor, len("notes.txt"))

        self.press("CTRL_U", " ", "t", "o", "d", "o", ".", "m", "d", " ", "ENTER")
        self.assertEqual(self.workflow.mode.phase, PHASE_RUNNING)
        self.settle()

        self.assertEqual(self.client.renamed, [(13, "todo.md")])
        self.assertEqual(self.workflow.mode.phase, PHASE_DONE)
        self.press("ENTER")
        self.assertIsInstance(self.workflow.mode, Browsing)
        self.assertEqual(self.scheduler.names[-1], "list")

    def test_blank_name_is_rejected(self) -> None:
        self.press("r", "CTRL_U", "ENTER")
        self.assertEqual(self.workflow.mode.phase, PHASE_EDITING)

        self.press(" ", " ", "ENTER")
        self.assertEqual(self.workflow.mode.phase, PHASE_EDITING)
        self.assertEqual(self.scheduler.names, ["list"])

    def test_quit_key_is_text_while_editing(self) -> None:
        self.press("r", "q")

        self.assertFalse(self.workflow.quit_requested)
        self.assertEqual(self.workflow.mode.buffer.text, "Alphaq")

    def test_escape_cancels_without_reload(self) -> None:
        self.press("r", "ESC")

        self.assertIsInstance(self.workflow.mode, Browsing)
        self.assertEqual(self.scheduler.names, ["list"])

    def test_rename_requires_exactly_one_target(self) -> None:
        self.press(" ", " ")

        self.assertFalse(self.workflow.update(KeyPressed("r")))
        self.assertIsInstance(self.workflow.mode, Browsing)

    def test_failed_rename_reports_error(self) -> None:
        self.client.rename_error = TransportError("timeout")
        self.press("r", "x", "ENTER")
        self.settle()

        mode = self.workflow.mode
        self.assertEqual(mode.phase, PHASE_FAILED)
        self.assertEqual(mode.error, "timeout")

    def test_stale_rename_result_is_ignored(self) -> None:
        self.press("r", "ENTER")
        job_id = self.workflow.mode.job_id

        self.assertFalse(self.workflow.update(RenameFinished(job_id=job_id + 1)))
        self.assertEqual(self.workflow.mode.phase, PHASE_RUNNING)


class DownloadFlowTests(WorkflowTestCase):
    def test_download_events_update_job_and_ignore_other_jobs(self) -> None:
        self.scheduler.stream = lambda name, producer: self.scheduler.names.append(name)
        self.press("G", "d")

        mode = self.workflow.mode
        self.assertIsInstance(mode, Downloading)
        self.assertEqual(mode.job.ids, (13,))
        self.assertEqual(self.scheduler.names[-1], "download")
        job_id = mode.job.job_id

        self.workflow.update(DownloadResolved(job_id=job_id, filename="notes.txt", total=100))
        self.workflow.update(DownloadProgress(job_id=job_id, written=40, total=100, speed=20.0))
        self.assertFalse(self.workflow.update(DownloadProgress(job_id=job_id + 7, written=90, total=100, speed=1.0)))

        job = self.workflow.mode.job
        self.assertEqual((job.filename, job.written, job.total), ("notes.txt", 40, 100))
        self.assertAlmostEqual(job.fraction, 0.4)

        self.assertFalse(self.workflow.update(KeyPressed("ESC")))
        self.workflow.update(DownloadFinished(job_id=job_id, path="/tmp/lazyput-test/notes.txt", written=100))
        self.assertTrue(self.workflow.mode.job.finished)
        self.assertFalse(self.workflow.busy)

        self.press("ESC")
        self.assertIsInstance(self.workflow.mode, Browsing)

    def test_download_without_entries_is_noop(self) -> None:
        self.client.listings[10] = ()
        self.press("ENTER")
        self.settle()

        self.assertFalse(self.workflow.update(KeyPressed("d")))

    def test_quit_is_allowed_during_download(self) -> None:
        self.scheduler.stream = lambda name, producer: None
        self.press("d", "q")

        self.assertTrue(self.workflow.quit_requested)


if __name__ == "__main__":
    unittest.main()
