"""Remote listing model: entries, navigation stack, and multi-selection."""

from __future__ import annotations

from .entries import DIRECTORY_CONTENT_TYPE, Entry, sort_entries
from .navigation import ROOT_ID, ROOT_NAME, NavigationState
from .selection import SelectionSet, effective_selection

__all__ = [
    "DIRECTORY_CONTENT_TYPE",
    "Entry",
    "sort_entries",
    "ROOT_ID",
    "ROOT_NAME",
    "NavigationState",
    "SelectionSet",
    "effective_selection",
]
