"""Key bindings and a small key-combo dispatch registry.

``KeyBindings`` is an immutable value built once at startup and handed to the
workflow. ``KeyComboRegistry`` maps key tokens to bound handlers for one mode.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class KeyBindings:
    """Logical actions mapped to the key tokens produced by ``read_key``."""

    up: tuple[str, ...] = ("UP", "k")
    down: tuple[str, ...] = ("DOWN", "j")
    top: tuple[str, ...] = ("g", "HOME")
    bottom: tuple[str, ...] = ("G", "END")
    open: tuple[str, ...] = ("ENTER", "l", "RIGHT")
    back: tuple[str, ...] = ("BACKSPACE", "h", "LEFT")
    toggle_select: tuple[str, ...] = (" ",)
    select_all: tuple[str, ...] = ("a",)
    download: tuple[str, ...] = ("d",)
    delete: tuple[str, ...] = ("x",)
    rename: tuple[str, ...] = ("r",)
    help: tuple[str, ...] = ("?",)
    confirm: tuple[str, ...] = ("y", "Y")
    dismiss: tuple[str, ...] = ("ESC",)
    submit: tuple[str, ...] = ("ENTER",)
    quit: tuple[str, ...] = ("q", "CTRL_C")
    force_quit: tuple[str, ...] = ("CTRL_C",)

    def matches(self, action: str, key: str) -> bool:
        return key in getattr(self, action)

    def label(self, action: str) -> str:
        """Human label for the first key of ``action`` (used in hints)."""
        combos: tuple[str, ...] = getattr(self, action)
        if not combos:
            return ""
        return _KEY_LABELS.get(combos[0], combos[0])


_KEY_LABELS = {
    " ": "Space",
    "UP": "↑",
    "DOWN": "↓",
    "LEFT": "←",
    "RIGHT": "→",
    "ENTER": "Enter",
    "ESC": "Esc",
    "BACKSPACE": "Backspace",
    "CTRL_C": "Ctrl+C",
    "HOME": "Home",
    "END": "End",
}

DEFAULT_KEY_BINDINGS = KeyBindings()


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action callback."""

    combos: tuple[str, ...]
    handler: Callable[[], bool | None]


class KeyComboRegistry:
    """Exact-match key dispatch table."""

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[], bool | None]] = {}

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        """Register one binding, overwriting existing handlers for same combos."""
        for combo in binding.combos:
            self._handlers[combo] = binding.handler
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def dispatch(self, key: str) -> bool | None:
        """Invoke bound handler for ``key``; ``None`` when nothing is bound."""
        handler = self._handlers.get(key)
        if handler is None:
            return None
        return handler()
