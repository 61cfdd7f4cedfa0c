"""Help overlay content built from the active key bindings.

Rendering helpers here are presentation-only and side-effect free.
"""

from __future__ import annotations

from ..keymap import KeyBindings
from ..ui_theme import UITheme

_KEY_NAMES = {
    " ": "Space",
    "UP": "Up",
    "DOWN": "Down",
    "LEFT": "Left",
    "RIGHT": "Right",
    "ENTER": "Enter",
    "ESC": "Esc",
    "BACKSPACE": "Backspace",
    "CTRL_C": "Ctrl+C",
    "CTRL_U": "Ctrl+U",
    "HOME": "Home",
    "END": "End",
}

HELP_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Navigate",
        (
            ("up", "move up"),
            ("down", "move down"),
            ("top", "jump to top"),
            ("bottom", "jump to bottom"),
            ("open", "open folder"),
            ("back", "parent folder"),
        ),
    ),
    (
        "Select",
        (
            ("toggle_select", "toggle item"),
            ("select_all", "select all / clear"),
        ),
    ),
    (
        "Act",
        (
            ("download", "download selection"),
            ("delete", "delete selection"),
            ("rename", "rename item"),
        ),
    ),
    (
        "General",
        (
            ("help", "toggle help"),
            ("dismiss", "close panel / cancel"),
            ("quit", "quit"),
        ),
    ),
)


def key_names(keys: KeyBindings, action: str) -> str:
    combos: tuple[str, ...] = getattr(keys, action)
    return "/".join(_KEY_NAMES.get(combo, combo) for combo in combos)


def help_lines(keys: KeyBindings, theme: UITheme) -> list[str]:
    """Styled help body, one entry per bound action."""
    rows = [(key_names(keys, action), label) for _, entries in HELP_SECTIONS for action, label in entries]
    key_width = max(len(names) for names, _ in rows)

    lines: list[str] = []
    for heading, entries in HELP_SECTIONS:
        if lines:
            lines.append("")
        lines.append(f"{theme.help_heading}{heading}{theme.reset}")
        for action, label in entries:
            names = key_names(keys, action)
            lines.append(f"  {theme.help_key}{names.ljust(key_width)}{theme.reset}  {label}")
    lines.append("")
    lines.append(f"{theme.help_dim}Press {key_names(keys, 'help')} or Esc to close{theme.reset}")
    return lines


def hint_text(keys: KeyBindings) -> str:
    """One-line key summary shown in the hint bar."""
    return (
        f" {keys.label('up')}{keys.label('down')} navigate"
        f" │ {keys.label('open')} open"
        f" │ {keys.label('back')} back"
        f" │ {keys.label('toggle_select')} select"
        f" │ {keys.label('download')} download"
        f" │ {keys.label('delete')} delete"
        f" │ {keys.label('rename')} rename"
        f" │ {keys.label('help')} help"
    )
