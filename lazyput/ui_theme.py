"""UI theme definitions and selection helpers.

Themes are ANSI palettes for the browser chrome, entry rows, and modal
panels. Renderers only ever read semantic fields from a ``UITheme``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    reverse: str
    bold: str
    title_bar: str
    breadcrumb_dim: str
    breadcrumb_current: str
    status_bar: str
    hint_bar: str
    cursor_row: str
    selected_row: str
    selected_marker: str
    entry_dir: str
    entry_file: str
    entry_size: str
    scrollbar_thumb: str
    scrollbar_track: str
    spinner: str
    muted: str
    panel_border: str
    panel_title: str
    panel_warn_title: str
    panel_text: str
    panel_label: str
    progress_fill: str
    progress_empty: str
    percent: str
    success: str
    error: str
    banner: str
    help_heading: str
    help_key: str
    help_dim: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    reverse="\033[7m",
    bold="\033[1m",
    title_bar="\033[1;38;5;16;48;5;141m",
    breadcrumb_dim="\033[38;5;235;48;5;141m",
    breadcrumb_current="\033[1;38;5;16;48;5;141m",
    status_bar="\033[38;5;252;48;5;238m",
    hint_bar="\033[38;5;245;48;5;236m",
    cursor_row="\033[38;5;215m",
    selected_row="\033[38;5;218m",
    selected_marker="\033[38;5;218m",
    entry_dir="\033[1;38;5;81m",
    entry_file="\033[38;5;252m",
    entry_size="\033[38;5;245m",
    scrollbar_thumb="\033[38;5;141m",
    scrollbar_track="\033[38;5;238m",
    spinner="\033[38;5;141m",
    muted="\033[2;38;5;250m",
    panel_border="\033[38;5;141m",
    panel_title="\033[1;38;5;141m",
    panel_warn_title="\033[1;38;5;215m",
    panel_text="\033[38;5;252m",
    panel_label="\033[38;5;245m",
    progress_fill="\033[38;5;141m",
    progress_empty="\033[38;5;238m",
    percent="\033[1;38;5;141m",
    success="\033[38;5;114m",
    error="\033[38;5;203m",
    banner="\033[1;38;5;231;48;5;124m",
    help_heading="\033[1;38;5;81m",
    help_key="\033[38;5;229m",
    help_dim="\033[2;38;5;250m",
)


def _fg(hex_color: str, bold: bool = False) -> str:
    r, g, b = (int(hex_color[i : i + 2], 16) for i in (1, 3, 5))
    prefix = "1;" if bold else ""
    return f"\033[{prefix}38;2;{r};{g};{b}m"


def _fg_bg(fg_hex: str, bg_hex: str, bold: bool = False) -> str:
    fr, fg, fb = (int(fg_hex[i : i + 2], 16) for i in (1, 3, 5))
    br, bg, bb = (int(bg_hex[i : i + 2], 16) for i in (1, 3, 5))
    prefix = "1;" if bold else ""
    return f"\033[{prefix}38;2;{fr};{fg};{fb};48;2;{br};{bg};{bb}m"


# Catppuccin Mocha.
_PINK = "#f5c2e7"
_MAUVE = "#cba6f7"
_PEACH = "#fab387"
_SAPPHIRE = "#74c7ec"
_GREEN = "#a6e3a1"
_RED = "#f38ba8"
_TEXT = "#cdd6f4"
_SUBTEXT1 = "#bac2de"
_SUBTEXT0 = "#a6adc8"
_OVERLAY1 = "#7f849c"
_SURFACE1 = "#45475a"
_SURFACE0 = "#313244"
_BASE = "#1e1e2e"
_CRUST = "#11111b"

MOCHA_THEME = UITheme(
    name="mocha",
    reset="\033[0m",
    reverse="\033[7m",
    bold="\033[1m",
    title_bar=_fg_bg(_CRUST, _MAUVE, bold=True),
    breadcrumb_dim=_fg_bg(_CRUST, _MAUVE),
    breadcrumb_current=_fg_bg(_BASE, _MAUVE, bold=True),
    status_bar=_fg_bg(_SUBTEXT1, _SURFACE1),
    hint_bar=_fg_bg(_OVERLAY1, _SURFACE0),
    cursor_row=_fg(_PEACH),
    selected_row=_fg(_PINK),
    selected_marker=_fg(_PINK),
    entry_dir=_fg(_SAPPHIRE, bold=True),
    entry_file=_fg(_TEXT),
    entry_size=_fg(_OVERLAY1),
    scrollbar_thumb=_fg(_MAUVE),
    scrollbar_track=_fg(_SURFACE1),
    spinner=_fg(_MAUVE),
    muted=_fg(_SUBTEXT0),
    panel_border=_fg(_MAUVE),
    panel_title=_fg(_MAUVE, bold=True),
    panel_warn_title=_fg(_PEACH, bold=True),
    panel_text=_fg(_TEXT),
    panel_label=_fg(_OVERLAY1),
    progress_fill=_fg(_MAUVE),
    progress_empty=_fg(_SURFACE1),
    percent=_fg(_MAUVE, bold=True),
    success=_fg(_GREEN),
    error=_fg(_RED),
    banner=_fg_bg(_CRUST, _RED, bold=True),
    help_heading=_fg(_SAPPHIRE, bold=True),
    help_key=_fg(_PEACH),
    help_dim=_fg(_OVERLAY1),
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    reverse="",
    bold="",
    title_bar="",
    breadcrumb_dim="",
    breadcrumb_current="",
    status_bar="",
    hint_bar="",
    cursor_row="",
    selected_row="",
    selected_marker="",
    entry_dir="",
    entry_file="",
    entry_size="",
    scrollbar_thumb="",
    scrollbar_track="",
    spinner="",
    muted="",
    panel_border="",
    panel_title="",
    panel_warn_title="",
    panel_text="",
    panel_label="",
    progress_fill="",
    progress_empty="",
    percent="",
    success="",
    error="",
    banner="",
    help_heading="",
    help_key="",
    help_dim="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    MOCHA_THEME.name: MOCHA_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "MOCHA_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
