"""Directory navigation: ancestor stack, cursor memory, and listing install.

This module has no UI or I/O concerns. Callers schedule the actual listing
request using the parent id returned by the ``begin_*`` methods and later feed
the result back through ``install_listing`` or ``listing_failed``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .entries import Entry, sort_entries

ROOT_ID = 0
ROOT_NAME = "Your Files"


@dataclass(frozen=True)
class _PendingListing:
    """Listing request in flight plus the state to restore if it fails."""

    parent_id: int
    name: str
    ancestors: tuple[int, ...]
    ancestor_names: tuple[str, ...]
    cursor_memory: tuple[tuple[int, int], ...]
    previous_name: str


@dataclass
class NavigationState:
    parent_id: int = ROOT_ID
    current_name: str = ROOT_NAME
    ancestors: list[int] = field(default_factory=list)
    ancestor_names: list[str] = field(default_factory=list)
    cursor_memory: dict[int, int] = field(default_factory=dict)
    entries: list[Entry] = field(default_factory=list)
    cursor: int = 0
    loading: bool = False
    pending: _PendingListing | None = None

    def current_entry(self) -> Entry | None:
        if 0 <= self.cursor < len(self.entries):
            return self.entries[self.cursor]
        return None

    def find_entry(self, entry_id: int) -> Entry | None:
        return next((entry for entry in self.entries if entry.id == entry_id), None)

    def breadcrumbs(self) -> list[str]:
        return [*self.ancestor_names, self.current_name]

    def _last_index(self) -> int:
        return max(0, len(self.entries) - 1)

    def move_cursor(self, delta: int) -> bool:
        """Move by ``delta`` rows, clamped to the listing. Returns whether it moved."""
        target = max(0, min(self._last_index(), self.cursor + delta))
        if target == self.cursor:
            return False
        self.cursor = target
        return True

    def jump_top(self) -> bool:
        return self.move_cursor(-self.cursor)

    def jump_bottom(self) -> bool:
        return self.move_cursor(self._last_index() - self.cursor)

    def _begin(self, parent_id: int, name: str) -> None:
        self.pending = _PendingListing(
            parent_id=parent_id,
            name=name,
            ancestors=tuple(self.ancestors),
            ancestor_names=tuple(self.ancestor_names),
            cursor_memory=tuple(self.cursor_memory.items()),
            previous_name=self.current_name,
        )
        self.loading = True

    def begin_descend(self) -> int | None:
        """Start opening the directory under the cursor.

        Returns the id to list, or ``None`` when the cursor is not on a
        directory.
        """
        entry = self.current_entry()
        if entry is None or not entry.is_dir:
            return None
        self._begin(entry.id, entry.name)
        self.cursor_memory[self.parent_id] = self.cursor
        self.ancestors.append(self.parent_id)
        self.ancestor_names.append(self.current_name)
        self.current_name = entry.name
        return entry.id

    def begin_ascend(self) -> int | None:
        """Start returning to the parent directory, or ``None`` at the root."""
        if not self.ancestors:
            return None
        target_id = self.ancestors[-1]
        target_name = self.ancestor_names[-1] if self.ancestor_names else ROOT_NAME
        self._begin(target_id, target_name)
        self.ancestors.pop()
        if self.ancestor_names:
            self.ancestor_names.pop()
        self.current_name = target_name
        return target_id

    def begin_reload(self) -> int:
        """Re-list the current directory, keeping the cursor where it is."""
        self._begin(self.parent_id, self.current_name)
        self.cursor_memory[self.parent_id] = self.cursor
        return self.parent_id

    def install_listing(self, parent_id: int, entries: Iterable[Entry]) -> bool:
        """Install a completed listing. Stale results are rejected."""
        if self.pending is None or self.pending.parent_id != parent_id:
            return False
        self.entries = sort_entries(entries)
        self.parent_id = parent_id
        self.current_name = self.pending.name
        saved = self.cursor_memory.pop(parent_id, None)
        self.cursor = 0 if saved is None else max(0, min(saved, self._last_index()))
        self.loading = False
        self.pending = None
        return True

    def listing_failed(self, parent_id: int) -> bool:
        """Roll back a failed navigation so the previous listing stays usable."""
        pending = self.pending
        if pending is None or pending.parent_id != parent_id:
            return False
        self.ancestors = list(pending.ancestors)
        self.ancestor_names = list(pending.ancestor_names)
        self.cursor_memory = dict(pending.cursor_memory)
        self.current_name = pending.previous_name
        self.loading = False
        self.pending = None
        return True
