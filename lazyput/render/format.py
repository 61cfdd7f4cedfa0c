"""Pure formatting helpers for sizes, icons, spinners, and progress bars."""

from __future__ import annotations

from ..browser.entries import Entry

SPINNER_FRAMES: tuple[str, ...] = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")

_SIZE_UNITS: tuple[tuple[str, int], ...] = (
    ("TB", 1024**4),
    ("GB", 1024**3),
    ("MB", 1024**2),
    ("KB", 1024),
)


def human_size(num_bytes: int | float) -> str:
    """Format a byte count with 1024-based units and one decimal."""
    value = int(num_bytes)
    for unit, factor in _SIZE_UNITS:
        if value >= factor:
            return f"{value / factor:.1f} {unit}"
    return f"{value} B"


def entry_icon(entry: Entry) -> str:
    if entry.is_dir:
        return "📁"
    content_type = entry.content_type
    if content_type.startswith("video/"):
        return "🎬"
    if content_type.startswith("audio/"):
        return "🎵"
    if content_type.startswith("image/"):
        return "🖼"
    if any(kind in content_type for kind in ("zip", "rar", "tar")):
        return "📦"
    return "📄"


def spinner_glyph(frame: int) -> str:
    return SPINNER_FRAMES[frame % len(SPINNER_FRAMES)]


def progress_bar(fraction: float, width: int, fill: str = "", empty: str = "", reset: str = "") -> str:
    """Fixed-width bar; style arguments are ANSI prefixes (empty for plain)."""
    if width <= 0:
        return ""
    fraction = max(0.0, min(1.0, fraction))
    filled = int(round(fraction * width))
    return f"{fill}{'█' * filled}{reset}{empty}{'░' * (width - filled)}{reset}"


def viewport_start(cursor: int, total: int, visible: int) -> int:
    """First visible row index that keeps ``cursor`` on screen."""
    if visible <= 0 or total <= visible:
        return 0
    start = cursor - visible + 1 if cursor >= visible else 0
    return max(0, min(start, total - visible))


def scrollbar_thumb_row(cursor: int, total: int, visible: int) -> int | None:
    """Row of the scrollbar thumb within the viewport, or ``None`` if it all fits."""
    if total <= visible or visible <= 0:
        return None
    return int(cursor / max(1, total - 1) * (visible - 1))
