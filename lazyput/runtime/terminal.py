"""Terminal control helpers for the TUI session.

Owns raw-mode lifecycle, alternate-screen switching, and full-frame writes.
"""

from __future__ import annotations

import contextlib
import os
import termios
import tty
from collections.abc import Sequence

# Synchronized output (DEC mode 2026); terminals without it ignore the toggle.
SYNC_BEGIN = "\x1b[?2026h"
SYNC_END = "\x1b[?2026l"


class TerminalController:
    """Manage terminal mode transitions and screen output for one session."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l")

    def disable_tui_mode(self) -> None:
        """Show the cursor, restore the main screen buffer and tty state."""
        os.write(self.stdout_fd, b"\x1b[?25h\x1b[?1049l")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def write_frame(self, rows: Sequence[str]) -> None:
        """Replace the whole screen with ``rows`` in a single write.

        Rows are expected to be padded to the terminal width already, so the
        frame overwrites every cell and no clear is needed between frames.
        """
        payload = f"{SYNC_BEGIN}\x1b[H" + "\r\n".join(rows) + SYNC_END
        data = payload.encode("utf-8", errors="replace")
        while data:
            written = os.write(self.stdout_fd, data)
            data = data[written:]

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
