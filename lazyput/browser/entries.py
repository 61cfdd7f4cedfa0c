"""Immutable remote entry records and listing order."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

DIRECTORY_CONTENT_TYPE = "application/x-directory"
FOLDER_FILE_TYPE = "FOLDER"


@dataclass(frozen=True)
class Entry:
    """One file or directory from the last listing of a remote folder."""

    id: int
    name: str
    is_dir: bool = False
    size: int = 0
    content_type: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, object]) -> Entry:
        """Build an entry from a service file object.

        Missing or mistyped fields fall back to neutral values; only ``id`` is
        required.
        """
        content_type = payload.get("content_type")
        content_type = content_type if isinstance(content_type, str) else ""
        file_type = payload.get("file_type")
        name = payload.get("name")
        size = payload.get("size")
        return cls(
            id=int(payload["id"]),
            name=name if isinstance(name, str) else "",
            is_dir=content_type == DIRECTORY_CONTENT_TYPE or file_type == FOLDER_FILE_TYPE,
            size=size if isinstance(size, int) and not isinstance(size, bool) else 0,
            content_type=content_type,
        )


def entry_sort_key(entry: Entry) -> tuple[bool, str]:
    """Directories first, then case-insensitive name."""
    return (not entry.is_dir, entry.name.lower())


def sort_entries(entries: Iterable[Entry]) -> list[Entry]:
    return sorted(entries, key=entry_sort_key)
