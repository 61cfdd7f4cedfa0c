"""Main interactive event loop for the terminal UI.

Each iteration picks up resizes, feeds finished background work into the
workflow, advances the spinner, renders when dirty, and waits briefly for one
key. All state mutation happens on this thread.
"""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..input import read_key
from ..messages import KeyPressed, Tick
from ..render import RenderContext, compose_frame, context_from_workflow
from ..ui_theme import DEFAULT_THEME, UITheme
from ..workflow import Workflow
from .terminal import TerminalController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    key_timeout_ms: int = 120
    spinner_frame_seconds: float = 0.1


def normalize_enter(key: str, skip_next_lf: bool) -> tuple[str | None, bool]:
    """Collapse CR, LF, and CRLF into one ``ENTER`` token.

    Returns the key to dispatch (``None`` to drop it) and the new skip flag.
    """
    if skip_next_lf and key == "ENTER_LF":
        return None, False
    if key == "ENTER_CR":
        return "ENTER", True
    if key == "ENTER_LF":
        return "ENTER", False
    return key, False


def pump_messages(workflow: Workflow) -> int:
    """Feed every pending background message into ``workflow`` in arrival order."""
    messages = workflow.scheduler.drain()
    for message in messages:
        workflow.update(message)
    return len(messages)


def _terminal_renderer(terminal: TerminalController) -> Callable[[RenderContext], None]:
    def render(context: RenderContext) -> None:
        terminal.write_frame(compose_frame(context))

    return render


def run_main_loop(
    workflow: Workflow,
    terminal: TerminalController,
    stdin_fd: int,
    timing: RuntimeLoopTiming = RuntimeLoopTiming(),
    *,
    theme: UITheme = DEFAULT_THEME,
    render: Callable[[RenderContext], None] | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Run the interactive TUI loop until the workflow requests quit.

    ``render`` defaults to composing the frame and writing it through ``terminal``.
    """
    draw = render if render is not None else _terminal_renderer(terminal)
    last_size: tuple[int, int] | None = None
    skip_next_lf = False

    with terminal.raw_mode():
        while True:
            term = shutil.get_terminal_size((80, 24))
            size = (term.columns, term.lines)
            if size != last_size:
                last_size = size
                workflow.dirty = True

            pump_messages(workflow)
            if workflow.busy:
                workflow.update(Tick(frame=int(clock() / timing.spinner_frame_seconds)))
            if workflow.quit_requested:
                break

            if workflow.dirty:
                draw(context_from_workflow(workflow, term.columns, term.lines, theme))
                workflow.dirty = False

            try:
                key = read_key(stdin_fd, timeout_ms=timing.key_timeout_ms)
            except KeyboardInterrupt:
                continue
            if key == "":
                continue
            normalized, skip_next_lf = normalize_enter(key, skip_next_lf)
            if normalized is None:
                continue
            workflow.update(KeyPressed(normalized))
            if workflow.quit_requested:
                break

    logger.info("Main loop finished")
