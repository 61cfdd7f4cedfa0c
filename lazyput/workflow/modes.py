"""Workflow modes as a closed set of frozen variants.

Exactly one mode is active. Data that only matters while a mode is active
lives on that mode's variant and is discarded with it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

from ..download import DownloadJob

RENAME_MAX_LENGTH = 255

PHASE_EDITING = "editing"
PHASE_RUNNING = "running"
PHASE_DONE = "done"
PHASE_FAILED = "failed"


def pluralize_items(count: int) -> str:
    return "item" if count == 1 else "items"


@dataclass(frozen=True)
class TextBuffer:
    """Single-line edit buffer with a cursor position."""

    text: str = ""
    cursor: int = 0
    max_length: int = RENAME_MAX_LENGTH

    @classmethod
    def prefilled(cls, text: str, max_length: int = RENAME_MAX_LENGTH) -> TextBuffer:
        text = text[:max_length]
        return cls(text=text, cursor=len(text), max_length=max_length)

    def insert(self, chars: str) -> TextBuffer:
        room = self.max_length - len(self.text)
        if room <= 0 or not chars:
            return self
        chars = chars[:room]
        text = self.text[: self.cursor] + chars + self.text[self.cursor :]
        return replace(self, text=text, cursor=self.cursor + len(chars))

    def backspace(self) -> TextBuffer:
        if self.cursor == 0:
            return self
        text = self.text[: self.cursor - 1] + self.text[self.cursor :]
        return replace(self, text=text, cursor=self.cursor - 1)

    def delete_forward(self) -> TextBuffer:
        if self.cursor >= len(self.text):
            return self
        return replace(self, text=self.text[: self.cursor] + self.text[self.cursor + 1 :])

    def move(self, delta: int) -> TextBuffer:
        return replace(self, cursor=max(0, min(len(self.text), self.cursor + delta)))

    def home(self) -> TextBuffer:
        return replace(self, cursor=0)

    def end(self) -> TextBuffer:
        return replace(self, cursor=len(self.text))

    def cleared(self) -> TextBuffer:
        return replace(self, text="", cursor=0)


@dataclass(frozen=True)
class Browsing:
    pass


@dataclass(frozen=True)
class ConfirmingDelete:
    ids: tuple[int, ...]

    @property
    def message(self) -> str:
        count = len(self.ids)
        return f"Delete {count} {pluralize_items(count)}?"


@dataclass(frozen=True)
class Deleting:
    job_id: int
    ids: tuple[int, ...]
    phase: str = PHASE_RUNNING
    error: str = ""

    @property
    def finished(self) -> bool:
        return self.phase in {PHASE_DONE, PHASE_FAILED}


@dataclass(frozen=True)
class Renaming:
    entry_id: int
    original_name: str
    buffer: TextBuffer
    phase: str = PHASE_EDITING
    job_id: int = 0
    error: str = ""

    @property
    def editing(self) -> bool:
        return self.phase == PHASE_EDITING

    @property
    def finished(self) -> bool:
        return self.phase in {PHASE_DONE, PHASE_FAILED}


@dataclass(frozen=True)
class Downloading:
    job: DownloadJob


@dataclass(frozen=True)
class ErrorBanner:
    message: str


WorkflowMode = Union[Browsing, ConfirmingDelete, Deleting, Renaming, Downloading, ErrorBanner]

__all__ = [
    "Browsing",
    "ConfirmingDelete",
    "Deleting",
    "Downloading",
    "ErrorBanner",
    "PHASE_DONE",
    "PHASE_EDITING",
    "PHASE_FAILED",
    "PHASE_RUNNING",
    "RENAME_MAX_LENGTH",
    "Renaming",
    "TextBuffer",
    "WorkflowMode",
    "pluralize_items",
]
