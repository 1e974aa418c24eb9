"""Small text helpers shared by cards and the detail pane."""

from __future__ import annotations

import io
from datetime import datetime, timezone

from rich.cells import cell_len, get_character_cell_size
from rich.console import Console
from rich.text import Text

ELLIPSIS = "…"

# Only used for Text.wrap defaults; nothing is ever printed to it
_wrap_console = Console(file=io.StringIO())


def truncate(text: str, max_width: int, suffix: str = ELLIPSIS) -> str:
    """Truncate to ``max_width`` terminal cells, appending ``suffix`` if cut."""
    if max_width <= 0:
        return ""
    if cell_len(text) <= max_width:
        return text
    suffix_width = cell_len(suffix)
    if suffix_width > max_width:
        return _take_cells(suffix, max_width)
    return _take_cells(text, max_width - suffix_width) + suffix


def _take_cells(text: str, width: int) -> str:
    out = []
    used = 0
    for ch in text:
        size = get_character_cell_size(ch)
        if used + size > width:
            break
        out.append(ch)
        used += size
    return "".join(out)


def fit(line: Text, width: int) -> Text:
    """Crop or pad a styled line to exactly ``width`` cells."""
    fitted = line.copy()
    fitted.truncate(max(width, 0), overflow="crop", pad=True)
    return fitted


def wrap(line: Text, width: int) -> list[Text]:
    """Word-wrap a styled line to ``width`` cells."""
    if not line.plain:
        return [line.copy()]
    return list(line.wrap(_wrap_console, max(width, 1), overflow="fold"))


def format_priority(priority: int) -> str:
    """P0..P4, clamping out-of-range values."""
    return f"P{min(max(priority, 0), 4)}"


def format_time_rel(timestamp: datetime | None, now: datetime | None = None) -> str:
    """Human-readable age such as ``5m ago`` or ``3w ago``."""
    if timestamp is None:
        return "unknown"
    now = now or datetime.now(timezone.utc)
    seconds = (now - timestamp).total_seconds()
    if seconds < 60:
        # Future timestamps read as now
        return "now"
    minutes = int(seconds // 60)
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 7:
        return f"{days}d ago"
    if days < 30:
        return f"{days // 7}w ago"
    return f"{days // 30}mo ago"
