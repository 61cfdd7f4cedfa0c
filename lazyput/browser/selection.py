"""Multi-item selection independent of cursor position."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from .entries import Entry


class SelectionSet:
    """Set of entry ids marked for bulk operations.

    Ids do not need to be present in the current listing; selections made in
    one directory survive descending into another.
    """

    def __init__(self, ids: Iterable[int] = ()) -> None:
        self._ids: set[int] = set(ids)

    def add(self, entry_id: int) -> None:
        self._ids.add(entry_id)

    def discard(self, entry_id: int) -> None:
        self._ids.discard(entry_id)

    def toggle(self, entry_id: int) -> bool:
        """Flip membership and return the new state."""
        if entry_id in self._ids:
            self._ids.remove(entry_id)
            return False
        self._ids.add(entry_id)
        return True

    def clear(self) -> None:
        self._ids.clear()

    def ids(self) -> tuple[int, ...]:
        """Return members in ascending order."""
        return tuple(sorted(self._ids))

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[int]:
        return iter(self.ids())

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __repr__(self) -> str:
        return f"SelectionSet({list(self.ids())!r})"


def effective_selection(selection: SelectionSet, entries: Sequence[Entry], cursor: int) -> tuple[int, ...]:
    """Return explicit selection, else the entry under the cursor, else nothing."""
    if selection:
        return selection.ids()
    if 0 <= cursor < len(entries):
        return (entries[cursor].id,)
    return ()
