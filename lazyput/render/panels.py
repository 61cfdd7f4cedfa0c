"""Modal panel bodies and the boxed, centered panel layout.

Each ``*_panel_lines`` function turns one workflow mode into styled body lines.
``place_panel`` frames a body and centers it on an otherwise blank screen.
"""

from __future__ import annotations

from ..ansi import clip_ansi_line, pad_ansi_line, truncate_plain
from ..download import PHASE_COMPLETE, PHASE_DOWNLOADING, PHASE_FAILED, PHASE_PREPARING
from ..keymap import KeyBindings
from ..ui_theme import UITheme
from ..workflow.modes import (
    PHASE_DONE,
    PHASE_EDITING,
    ConfirmingDelete,
    Deleting,
    Downloading,
    Renaming,
    pluralize_items,
)
from .format import human_size, progress_bar, spinner_glyph

PANEL_MIN_WIDTH = 40
PANEL_MAX_WIDTH = 70
PANEL_PADDING = 2
LABEL_WIDTH = 11


def panel_width(screen_width: int) -> int:
    return max(min(PANEL_MIN_WIDTH, screen_width), min(PANEL_MAX_WIDTH, screen_width - 10))


def _return_hint(theme: UITheme, keys: KeyBindings) -> str:
    return f"{theme.muted}Press {keys.label('dismiss')} to return{theme.reset}"


def _failure_line(theme: UITheme, error: str) -> str:
    return f"{theme.error}✗ {error}{theme.reset}"


def confirm_panel_lines(mode: ConfirmingDelete, theme: UITheme, keys: KeyBindings) -> list[str]:
    return [
        f"{theme.panel_warn_title}Delete{theme.reset}",
        "",
        f"{theme.panel_text}{mode.message}{theme.reset}",
        "",
        f"{theme.muted}{keys.label('confirm')} to confirm, {keys.label('dismiss')} to cancel{theme.reset}",
    ]


def delete_panel_lines(mode: Deleting, theme: UITheme, keys: KeyBindings, spinner_frame: int) -> list[str]:
    count = len(mode.ids)
    items = pluralize_items(count)
    lines = [f"{theme.panel_warn_title}Delete{theme.reset}", ""]
    if mode.phase == PHASE_FAILED:
        lines += [_failure_line(theme, mode.error), "", _return_hint(theme, keys)]
    elif mode.phase == PHASE_DONE:
        lines += [f"{theme.success}✓ Deleted {count} {items}{theme.reset}", "", _return_hint(theme, keys)]
    else:
        spin = f"{theme.spinner}{spinner_glyph(spinner_frame)}{theme.reset}"
        lines.append(f"{spin} {theme.panel_text}Deleting {count} {items}...{theme.reset}")
    return lines


def _edit_field(mode: Renaming, theme: UITheme, width: int) -> str:
    """Render the buffer with a visible cursor, scrolled to keep it in view."""
    text = mode.buffer.text
    cursor = mode.buffer.cursor
    room = max(1, width - 3)
    start = max(0, cursor - room + 1)
    visible = text[start : start + room]
    local = cursor - start
    under = visible[local] if local < len(visible) else " "
    field = (
        f"{theme.panel_text}{visible[:local]}{theme.reset}"
        f"{theme.reverse}{under}{theme.reset}"
        f"{theme.panel_text}{visible[local + 1:]}{theme.reset}"
    )
    return f"{theme.panel_title}>{theme.reset} {field}"


def rename_panel_lines(
    mode: Renaming,
    theme: UITheme,
    keys: KeyBindings,
    spinner_frame: int,
    inner_width: int,
) -> list[str]:
    lines = [f"{theme.panel_title}Rename{theme.reset}", ""]
    if mode.phase == PHASE_FAILED:
        lines += [_failure_line(theme, mode.error), "", _return_hint(theme, keys)]
    elif mode.phase == PHASE_DONE:
        lines += [f"{theme.success}✓ Renamed{theme.reset}", "", _return_hint(theme, keys)]
    elif mode.phase == PHASE_EDITING:
        lines += [
            _edit_field(mode, theme, inner_width),
            "",
            f"{theme.muted}{keys.label('submit')} to confirm, {keys.label('dismiss')} to cancel{theme.reset}",
        ]
    else:
        spin = f"{theme.spinner}{spinner_glyph(spinner_frame)}{theme.reset}"
        lines.append(f"{spin} {theme.panel_text}Renaming...{theme.reset}")
    return lines


def _status_text(mode: Downloading) -> str:
    job = mode.job
    if job.phase == PHASE_PREPARING:
        return "Preparing zip..." if len(job.ids) > 1 else "Fetching download link..."
    if job.phase == PHASE_DOWNLOADING:
        return "Downloading"
    if job.phase == PHASE_COMPLETE:
        return "Complete"
    return "Failed"


def download_panel_lines(
    mode: Downloading,
    theme: UITheme,
    keys: KeyBindings,
    spinner_frame: int,
    inner_width: int,
) -> list[str]:
    job = mode.job
    value_width = max(1, inner_width - LABEL_WIDTH - 1)

    def row(label: str, value: str) -> str:
        return f"{theme.panel_label}{label.rjust(LABEL_WIDTH)}{theme.reset} {value}"

    lines = [f"{theme.panel_title}Download{theme.reset}", ""]
    lines.append(row("Files", f"{theme.panel_text}{len(job.ids)}{theme.reset}"))
    lines.append(row("Directory", f"{theme.panel_text}{truncate_plain(str(job.destination), value_width)}{theme.reset}"))
    if job.filename:
        lines.append(row("Filename", f"{theme.panel_text}{truncate_plain(job.filename, value_width)}{theme.reset}"))

    status = _status_text(mode)
    if job.phase == PHASE_COMPLETE:
        status = f"{theme.success}{status}{theme.reset}"
    elif job.phase == PHASE_FAILED:
        status = f"{theme.error}{status}{theme.reset}"
    elif job.total <= 0 and job.written <= 0:
        status = f"{theme.spinner}{spinner_glyph(spinner_frame)}{theme.reset} {theme.panel_text}{status}{theme.reset}"
    else:
        status = f"{theme.panel_text}{status}{theme.reset}"
    lines.append(row("Status", status))

    if job.total > 0:
        lines.append("")
        lines.append(progress_bar(job.fraction, inner_width, theme.progress_fill, theme.progress_empty, theme.reset))
        stats = f"{human_size(job.written)} / {human_size(job.total)}"
        if job.speed > 0:
            stats += f"  {human_size(job.speed)}/s"
        lines.append(f"{theme.muted}{stats}{theme.reset}  {theme.percent}{job.fraction * 100:.1f}%{theme.reset}")
    elif job.written > 0:
        stats = f"Downloaded: {human_size(job.written)}"
        if job.speed > 0:
            stats += f"  ({human_size(job.speed)}/s)"
        lines += ["", f"{theme.muted}{stats}{theme.reset}"]

    if job.phase == PHASE_COMPLETE:
        lines += ["", f"{theme.success}✓ Download complete{theme.reset}"]
        if job.saved_path:
            lines.append(f"{theme.muted}{truncate_plain(job.saved_path, inner_width)}{theme.reset}")
        lines += ["", _return_hint(theme, keys)]
    elif job.phase == PHASE_FAILED:
        lines += ["", _failure_line(theme, job.error), "", _return_hint(theme, keys)]
    return lines


def place_panel(body: list[str], width: int, height: int, theme: UITheme) -> list[str]:
    """Frame ``body`` in a rounded box centered on a blank ``width`` x ``height`` screen."""
    box_w = panel_width(width)
    inner_w = panel_inner_width(width)
    max_body = max(0, height - 4)
    body = body[:max_body]
    pad = " " * PANEL_PADDING
    border = theme.panel_border
    reset = theme.reset

    box: list[str] = [f"{border}╭{'─' * (box_w - 2)}╮{reset}"]
    box.append(f"{border}│{reset}{' ' * (box_w - 2)}{border}│{reset}")
    for line in body:
        box.append(f"{border}│{reset}{pad}{pad_ansi_line(line, inner_w)}{reset}{pad}{border}│{reset}")
    box.append(f"{border}│{reset}{' ' * (box_w - 2)}{border}│{reset}")
    box.append(f"{border}╰{'─' * (box_w - 2)}╯{reset}")
    box = box[:height]

    top = max(0, (height - len(box)) // 2)
    left = " " * max(0, (width - box_w) // 2)
    rows = [""] * height
    for offset, line in enumerate(box):
        rows[top + offset] = clip_ansi_line(left + line, width)
    return [pad_ansi_line(row, width) for row in rows]


def panel_inner_width(screen_width: int) -> int:
    return max(1, panel_width(screen_width) - 2 - 2 * PANEL_PADDING)
