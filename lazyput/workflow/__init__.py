"""Workflow modes and the state machine that switches between them."""

from .machine import Workflow
from .modes import (
    RENAME_MAX_LENGTH,
    Browsing,
    ConfirmingDelete,
    Deleting,
    Downloading,
    ErrorBanner,
    Renaming,
    TextBuffer,
    WorkflowMode,
)

__all__ = [
    "RENAME_MAX_LENGTH",
    "Browsing",
    "ConfirmingDelete",
    "Deleting",
    "Downloading",
    "ErrorBanner",
    "Renaming",
    "TextBuffer",
    "Workflow",
    "WorkflowMode",
]
