"""Rendering engine for the file browser and its modal panels.

Defines render context data and composes fully styled frames as a list of
rows, one per terminal line. Everything here is side-effect free; the terminal
controller owns writing frames out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..ansi import center_ansi_line, display_width, pad_ansi_line, truncate_plain
from ..browser.entries import Entry
from ..browser.selection import SelectionSet
from ..keymap import DEFAULT_KEY_BINDINGS, KeyBindings
from ..ui_theme import DEFAULT_THEME, UITheme
from ..workflow.modes import (
    Browsing,
    ConfirmingDelete,
    Deleting,
    Downloading,
    ErrorBanner,
    Renaming,
    WorkflowMode,
)
from .format import entry_icon, human_size, scrollbar_thumb_row, spinner_glyph, viewport_start
from .help import help_lines, hint_text
from .panels import (
    confirm_panel_lines,
    delete_panel_lines,
    download_panel_lines,
    panel_inner_width,
    place_panel,
    rename_panel_lines,
)

APP_TITLE = "lazyput"
CHROME_ROWS = 3
SIZE_COLUMN_WIDTH = 10


@dataclass
class RenderContext:
    width: int
    height: int
    entries: list[Entry]
    cursor: int
    breadcrumbs: list[str]
    download_dir: str
    mode: WorkflowMode = field(default_factory=Browsing)
    selection: SelectionSet = field(default_factory=SelectionSet)
    loading: bool = False
    show_help: bool = False
    spinner_frame: int = 0
    theme: UITheme = DEFAULT_THEME
    keys: KeyBindings = DEFAULT_KEY_BINDINGS


def context_from_workflow(workflow, width: int, height: int, theme: UITheme = DEFAULT_THEME) -> RenderContext:
    """Snapshot the workflow state the renderer reads."""
    nav = workflow.navigation
    return RenderContext(
        width=width,
        height=height,
        entries=nav.entries,
        cursor=nav.cursor,
        breadcrumbs=nav.breadcrumbs(),
        download_dir=display_path(workflow.download_dir),
        mode=workflow.mode,
        selection=workflow.selection,
        loading=nav.loading,
        show_help=workflow.show_help,
        spinner_frame=workflow.spinner_frame,
        theme=theme,
        keys=workflow.keys,
    )


def _bar(text: str, width: int, style: str, reset: str) -> str:
    return f"{style}{pad_ansi_line(text, width)}{reset}"


def build_title_bar(context: RenderContext) -> str:
    theme = context.theme
    crumbs = context.breadcrumbs
    title = f" {APP_TITLE}"
    if len(crumbs) > 1:
        sep = f"{theme.breadcrumb_dim} / "
        parts = [f"{theme.breadcrumb_dim}{crumb}" for crumb in crumbs[:-1]]
        parts.append(f"{theme.breadcrumb_current}{crumbs[-1]}")
        title += f"{theme.title_bar} │ " + sep.join(parts) + theme.title_bar
    return _bar(f"{theme.title_bar}{title}", context.width, theme.title_bar, theme.reset)


def build_status_line(left_text: str, width: int, right_text: str) -> str:
    usable = max(1, width)
    if usable <= display_width(right_text):
        return truncate_plain(right_text, usable)
    left_limit = max(0, usable - display_width(right_text) - 1)
    left = truncate_plain(left_text, left_limit)
    gap = " " * (usable - display_width(left) - display_width(right_text))
    return f"{left}{gap}{right_text}"


def build_status_bar(context: RenderContext) -> str:
    theme = context.theme
    left = f" {len(context.entries)} items"
    if context.selection:
        left += f" │ {len(context.selection)} selected"
    right = f"↓ {context.download_dir} "
    return _bar(build_status_line(left, context.width, right), context.width, theme.status_bar, theme.reset)


def build_banner(context: RenderContext, message: str) -> str:
    theme = context.theme
    text = build_status_line(f" ✗ {message}", context.width, f"{context.keys.label('dismiss')} to dismiss ")
    return _bar(text, context.width, theme.banner, theme.reset)


def format_entry_row(
    entry: Entry,
    width: int,
    *,
    is_cursor: bool,
    is_selected: bool,
    theme: UITheme,
) -> str:
    """One listing row (without scrollbar) exactly ``width`` columns wide."""
    cursor_mark = "▸ " if is_cursor else "  "
    select_mark = f"{theme.selected_marker}● {theme.reset}" if is_selected else "  "
    icon = pad_ansi_line(entry_icon(entry), 2)
    prefix_width = 2 + 2 + 2 + 1

    if entry.is_dir:
        name = truncate_plain(entry.name, max(1, width - prefix_width))
        body = f"{theme.entry_dir}{name}{theme.reset}"
    else:
        size = human_size(entry.size).rjust(SIZE_COLUMN_WIDTH)
        name_width = max(1, width - prefix_width - SIZE_COLUMN_WIDTH - 1)
        name = truncate_plain(entry.name, name_width).ljust(name_width)
        body = f"{theme.entry_file}{name}{theme.reset} {theme.entry_size}{size}{theme.reset}"

    line = f"{cursor_mark}{select_mark}{icon} {body}"
    row_style = theme.cursor_row if is_cursor else theme.selected_row if is_selected else ""
    if row_style and theme.reset:
        # Re-apply the row color after every inner reset.
        line = row_style + line.replace(theme.reset, theme.reset + row_style)
    return pad_ansi_line(line, width) + theme.reset


def build_listing_rows(context: RenderContext, visible: int) -> list[str]:
    theme = context.theme
    width = context.width
    blank = " " * width
    rows: list[str] = []

    if context.loading or not context.entries:
        if context.loading:
            message = f"{theme.spinner}{spinner_glyph(context.spinner_frame)}{theme.reset} {theme.muted}Loading...{theme.reset}"
        else:
            message = f"{theme.muted}Empty folder{theme.reset}"
        rows = [blank] * visible
        if visible:
            rows[min(visible - 1, visible // 3)] = pad_ansi_line(center_ansi_line(message, width), width)
        return rows

    entries = context.entries
    total = len(entries)
    start = viewport_start(context.cursor, total, visible)
    thumb = scrollbar_thumb_row(context.cursor, total, visible)
    content_width = max(1, width - 1)
    for row in range(visible):
        index = start + row
        if index >= total:
            rows.append(blank)
            continue
        entry = entries[index]
        line = format_entry_row(
            entry,
            content_width,
            is_cursor=index == context.cursor,
            is_selected=entry.id in context.selection,
            theme=theme,
        )
        if thumb is None:
            scroll = " "
        elif row == thumb:
            scroll = f"{theme.scrollbar_thumb}┃{theme.reset}"
        else:
            scroll = f"{theme.scrollbar_track}│{theme.reset}"
        rows.append(line + scroll)
    return rows


def _panel_body(context: RenderContext) -> list[str] | None:
    mode = context.mode
    theme = context.theme
    keys = context.keys
    inner = panel_inner_width(context.width)
    if isinstance(mode, ConfirmingDelete):
        return confirm_panel_lines(mode, theme, keys)
    if isinstance(mode, Deleting):
        return delete_panel_lines(mode, theme, keys, context.spinner_frame)
    if isinstance(mode, Renaming):
        return rename_panel_lines(mode, theme, keys, context.spinner_frame, inner)
    if isinstance(mode, Downloading):
        return download_panel_lines(mode, theme, keys, context.spinner_frame, inner)
    if context.show_help:
        return [f"{theme.panel_title}{APP_TITLE} help{theme.reset}", "", *help_lines(keys, theme)]
    return None


def compose_frame(context: RenderContext) -> list[str]:
    """Build every screen row for the current state."""
    width = max(1, context.width)
    height = max(1, context.height)
    context.width = width
    context.height = height

    body = _panel_body(context)
    if body is not None:
        return place_panel(body, width, height, context.theme)

    theme = context.theme
    visible = max(0, height - CHROME_ROWS)
    rows = [build_title_bar(context)]
    rows.extend(build_listing_rows(context, visible))
    if isinstance(context.mode, ErrorBanner):
        rows.append(build_banner(context, context.mode.message))
    else:
        rows.append(build_status_bar(context))
    rows.append(_bar(hint_text(context.keys), width, theme.hint_bar, theme.reset))
    return rows[:height]


def display_path(path: Path) -> str:
    """Shorten a download directory for the status bar."""
    home = Path.home().resolve()
    try:
        relative = path.resolve().relative_to(home)
    except ValueError:
        return str(path)
    return "~" if relative == Path(".") else f"~/{relative}"


__all__ = [
    "RenderContext",
    "build_status_line",
    "compose_frame",
    "context_from_workflow",
    "display_path",
    "format_entry_row",
]
