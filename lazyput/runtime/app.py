"""Runtime composition layer for lazyput.

Builds the workflow around an authenticated client and starts the loop.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from ..keymap import DEFAULT_KEY_BINDINGS, KeyBindings
from ..putio import PutioClient
from ..ui_theme import resolve_theme
from ..workflow import Workflow
from .loop import RuntimeLoopTiming, run_main_loop
from .tasks import TaskScheduler
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def stdio_is_interactive() -> bool:
    return os.isatty(sys.stdin.fileno()) and os.isatty(sys.stdout.fileno())


def run_browser(
    client: PutioClient,
    download_dir: Path,
    theme_name: str | None = None,
    keys: KeyBindings = DEFAULT_KEY_BINDINGS,
) -> None:
    """Initialize browser state, start the root listing, and run the loop."""
    if not stdio_is_interactive():
        raise SystemExit("lazyput needs an interactive terminal.")

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    scheduler = TaskScheduler()
    workflow = Workflow(client, scheduler, keys=keys, download_dir=download_dir)
    terminal = TerminalController(stdin_fd, stdout_fd)
    theme = resolve_theme(theme_name)

    logger.info("Starting browser (theme=%s, download_dir=%s)", theme.name, download_dir)
    workflow.start()
    run_main_loop(workflow, terminal, stdin_fd, RuntimeLoopTiming(), theme=theme)
