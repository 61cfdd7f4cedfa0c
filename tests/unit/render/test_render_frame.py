"""Frame composition and formatting helpers.

Frames are composed with the plain theme so assertions can read the text
directly; widths are still measured with the ANSI-aware helpers.
"""

from __future__ import annotations

import unittest
from pathlib import Path

from lazyput.ansi import display_width, strip_ansi, truncate_plain
from lazyput.browser import Entry, SelectionSet
from lazyput.download import PHASE_COMPLETE, PHASE_DOWNLOADING, DownloadJob
from lazyput.render import RenderContext, build_status_line, compose_frame, display_path, format_entry_row
from lazyput.render.format import entry_icon, human_size, progress_bar, scrollbar_thumb_row, viewport_start
from lazyput.render.panels import panel_width
from lazyput.ui_theme import DEFAULT_THEME, PLAIN_THEME, normalize_theme_name, resolve_theme
from lazyput.workflow import ConfirmingDelete, Deleting, Downloading, ErrorBanner, Renaming, TextBuffer
from lazyput.workflow.modes import PHASE_FAILED

ENTRIES = [
    Entry(1, "Movies", is_dir=True),
    Entry(2, "clip.mp4", size=1536, content_type="video/mp4"),
    Entry(3, "readme.txt", size=12),
]


def _context(**overrides) -> RenderContext:
    values = dict(
        width=60,
        height=12,
        entries=list(ENTRIES),
        cursor=0,
        breadcrumbs=["Your Files"],
        download_dir="~/Downloads",
        theme=PLAIN_THEME,
    )
    values.update(overrides)
    return RenderContext(**values)


def _plain(rows: list[str]) -> list[str]:
    return [strip_ansi(row) for row in rows]


class FormatHelperTests(unittest.TestCase):
    def test_human_size_uses_binary_units(self) -> None:
        self.assertEqual(human_size(0), "0 B")
        self.assertEqual(human_size(1023), "1023 B")
        self.assertEqual(human_size(1024), "1.0 KB")
        self.assertEqual(human_size(1536), "1.5 KB")
        self.assertEqual(human_size(5 * 1024**3), "5.0 GB")
        self.assertEqual(human_size(3 * 1024**4), "3.0 TB")

    def test_entry_icon_by_kind(self) -> None:
        self.assertEqual(entry_icon(ENTRIES[0]), "📁")
        self.assertEqual(entry_icon(ENTRIES[1]), "🎬")
        self.assertEqual(entry_icon(Entry(4, "a.flac", content_type="audio/flac")), "🎵")
        self.assertEqual(entry_icon(Entry(5, "a.zip", content_type="application/zip")), "📦")
        self.assertEqual(entry_icon(ENTRIES[2]), "📄")

    def test_progress_bar_is_fixed_width(self) -> None:
        self.assertEqual(progress_bar(0.5, 10), "█████░░░░░")
        self.assertEqual(progress_bar(2.0, 4), "████")
        self.assertEqual(progress_bar(0.3, 0), "")

    def test_viewport_keeps_cursor_visible(self) -> None:
        self.assertEqual(viewport_start(0, 100, 10), 0)
        self.assertEqual(viewport_start(9, 100, 10), 0)
        self.assertEqual(viewport_start(10, 100, 10), 1)
        self.assertEqual(viewport_start(99, 100, 10), 90)
        self.assertEqual(viewport_start(3, 5, 10), 0)

    def test_scrollbar_only_when_listing_overflows(self) -> None:
        self.assertIsNone(scrollbar_thumb_row(0, 5, 10))
        self.assertEqual(scrollbar_thumb_row(0, 100, 10), 0)
        self.assertEqual(scrollbar_thumb_row(99, 100, 10), 9)

    def test_truncate_plain_marks_cut(self) -> None:
        self.assertEqual(truncate_plain("abcdef", 4), "abc…")
        self.assertEqual(truncate_plain("abc", 4), "abc")

    def test_status_line_right_aligns_and_truncates_left(self) -> None:
        line = build_status_line(" left side", 20, "right ")
        self.assertEqual(display_width(line), 20)
        self.assertTrue(line.endswith("right "))

        narrow = build_status_line(" a very long left side text", 16, "right ")
        self.assertEqual(display_width(narrow), 16)
        self.assertIn("…", narrow)

    def test_display_path_shortens_home(self) -> None:
        self.assertEqual(display_path(Path.home()), "~")
        self.assertEqual(display_path(Path.home() / "Downloads"), "~/Downloads")


class EntryRowTests(unittest.TestCase):
    def test_rows_are_exact_width_with_wide_icons(self) -> None:
        for entry in ENTRIES:
            for theme in (PLAIN_THEME, DEFAULT_THEME):
                row = format_entry_row(entry, 40, is_cursor=True, is_selected=True, theme=theme)
                self.assertEqual(display_width(row), 40, entry.name)

    def test_file_row_shows_size_and_markers(self) -> None:
        row = strip_ansi(format_entry_row(ENTRIES[1], 40, is_cursor=True, is_selected=True, theme=PLAIN_THEME))

        self.assertTrue(row.startswith("▸ ● "))
        self.assertIn("clip.mp4", row)
        self.assertTrue(row.rstrip().endswith("1.5 KB"))


class ComposeFrameTests(unittest.TestCase):
    def assertFrameShape(self, rows: list[str], width: int, height: int) -> None:
        self.assertEqual(len(rows), height)
        for row in rows:
            self.assertEqual(display_width(row), width, repr(row))

    def test_browsing_frame_layout(self) -> None:
        selection = SelectionSet([3])
        rows = compose_frame(_context(selection=selection, breadcrumbs=["Your Files", "Movies"]))

        self.assertFrameShape(rows, 60, 12)
        text = _plain(rows)
        self.assertIn("lazyput", text[0])
        self.assertIn("Your Files / Movies", text[0])
        self.assertIn("Movies", text[1])
        self.assertIn(" 3 items │ 1 selected", text[-2])
        self.assertTrue(text[-2].rstrip().endswith("↓ ~/Downloads"))
        self.assertIn("navigate", text[-1])

    def test_long_listing_scrolls_to_cursor(self) -> None:
        entries = [Entry(index, f"file{index:03d}") for index in range(50)]
        rows = _plain(compose_frame(_context(entries=entries, cursor=49, height=10)))

        listing = rows[1:-2]
        self.assertEqual(len(listing), 7)
        self.assertIn("file049", listing[-1])
        self.assertTrue(listing[-1].endswith("┃"))

    def test_loading_and_empty_messages(self) -> None:
        loading = "\n".join(_plain(compose_frame(_context(loading=True))))
        self.assertIn("Loading...", loading)

        empty = "\n".join(_plain(compose_frame(_context(entries=[]))))
        self.assertIn("Empty folder", empty)

    def test_error_banner_replaces_status_bar(self) -> None:
        rows = _plain(compose_frame(_context(mode=ErrorBanner("Failed to load files: offline"))))

        self.assertIn("✗ Failed to load files: offline", rows[-2])
        self.assertIn("Esc to dismiss", rows[-2])

    def test_confirm_panel(self) -> None:
        rows = compose_frame(_context(mode=ConfirmingDelete((1, 2)), height=20))

        self.assertFrameShape(rows, 60, 20)
        text = "\n".join(_plain(rows))
        self.assertIn("Delete 2 items?", text)
        self.assertIn("y to confirm, Esc to cancel", text)
        self.assertIn("╭", text)

    def test_failed_delete_panel_shows_error(self) -> None:
        mode = Deleting(job_id=1, ids=(1, 2), phase=PHASE_FAILED, error="connection reset")
        text = "\n".join(_plain(compose_frame(_context(mode=mode, height=20))))

        self.assertIn("✗ connection reset", text)
        self.assertIn("Press Esc to return", text)

    def test_rename_panel_shows_buffer(self) -> None:
        mode = Renaming(entry_id=3, original_name="readme.txt", buffer=TextBuffer.prefilled("readme.md"))
        rows = compose_frame(_context(mode=mode, height=20))

        self.assertFrameShape(rows, 60, 20)
        self.assertIn("> readme.md", "\n".join(_plain(rows)))

    def test_download_panel_progress(self) -> None:
        job = DownloadJob(
            job_id=1,
            ids=(2,),
            destination=Path("/tmp/dl"),
            phase=PHASE_DOWNLOADING,
            filename="clip.mp4",
            written=512,
            total=2048,
            speed=256.0,
        )
        rows = compose_frame(_context(mode=Downloading(job), height=24))

        self.assertFrameShape(rows, 60, 24)
        text = "\n".join(_plain(rows))
        self.assertIn("clip.mp4", text)
        self.assertIn("512 B / 2.0 KB", text)
        self.assertIn("256 B/s", text)
        self.assertIn("25.0%", text)

    def test_download_panel_complete(self) -> None:
        job = DownloadJob(
            job_id=1,
            ids=(2, 3),
            destination=Path("/tmp/dl"),
            phase=PHASE_COMPLETE,
            filename="putio-9.zip",
            written=100,
            total=100,
            saved_path="/tmp/dl/putio-9.zip",
        )
        text = "\n".join(_plain(compose_frame(_context(mode=Downloading(job), height=24))))

        self.assertIn("✓ Download complete", text)
        self.assertIn("100.0%", text)

    def test_help_panel(self) -> None:
        text = "\n".join(_plain(compose_frame(_context(show_help=True, height=40))))

        self.assertIn("lazyput help", text)
        self.assertIn("j", text)
        self.assertIn("toggle help", text)

    def test_tiny_terminal_still_fills_exact_size(self) -> None:
        rows = compose_frame(_context(width=5, height=2))
        self.assertFrameShape(rows, 5, 2)

        panel_rows = compose_frame(_context(width=20, height=3, mode=ConfirmingDelete((1,))))
        self.assertFrameShape(panel_rows, 20, 3)


class PanelAndThemeTests(unittest.TestCase):
    def test_panel_width_bounds(self) -> None:
        self.assertEqual(panel_width(200), 70)
        self.assertEqual(panel_width(60), 50)
        self.assertEqual(panel_width(45), 40)
        self.assertEqual(panel_width(20), 20)

    def test_theme_resolution(self) -> None:
        self.assertEqual(normalize_theme_name(" MOCHA "), "mocha")
        self.assertEqual(normalize_theme_name("unknown"), "default")
        self.assertIs(resolve_theme("mocha", no_color=True), PLAIN_THEME)
        self.assertIs(resolve_theme(None), DEFAULT_THEME)


if __name__ == "__main__":
    unittest.main()
