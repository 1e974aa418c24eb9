"""Colours and icons for the board."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

# Shared palette (dark-background values)
RED = "#ef5350"
ORANGE = "#ffb74d"
GREEN = "#81c784"
BLUE = "#64b5f6"
PURPLE = "#ce93d8"
GRAY = "#9e9e9e"

STATUS_ICONS = {
    "open": "🟢",
    "in_progress": "🔵",
    "blocked": "🔴",
    "closed": "⚫",
}

PRIORITY_ICONS = {
    0: "🔥",  # Critical
    1: "⚡",  # High
    2: "🔹",  # Medium
    3: "☕",  # Low
    4: "💤",  # Backlog
}

TYPE_ICONS = {
    "bug": "🐛",
    "feature": "✨",
    "task": "📋",
    "epic": "🚀",
    "chore": "🧹",
}


@dataclass
class Theme:
    """Style lookups for the board.

    Every lookup answers for unknown input too, so callers never have to
    guard against statuses or types the board has not heard of.
    """

    primary: str = "#7aa2f7"
    secondary: str = "#8c8c8c"
    border: str = "#5c5c5c"
    highlight: str = "#2d3250"
    text: str = "#e0e0e0"
    subtext: str = GRAY
    status_colors: dict[str, str] = field(default_factory=lambda: {
        "open": GREEN,
        "in_progress": BLUE,
        "blocked": RED,
        "closed": GRAY,
        "tombstone": GRAY,
    })
    type_colors: dict[str, str] = field(default_factory=lambda: {
        "bug": RED,
        "feature": GREEN,
        "task": BLUE,
        "epic": PURPLE,
        "chore": GRAY,
    })

    def status_color(self, status: str) -> str:
        return self.status_colors.get(status, self.subtext)

    def type_color(self, issue_type: str) -> str:
        return self.type_colors.get(issue_type, self.subtext)

    def type_icon(self, issue_type: str) -> str:
        """Get the icon for an issue type."""
        return TYPE_ICONS.get(issue_type, "•")

    def status_icon(self, status: str) -> str:
        """Get the icon for an issue status."""
        return STATUS_ICONS.get(status, "⚪")

    def priority_icon(self, priority: int) -> str:
        """Get the icon for a priority level."""
        return PRIORITY_ICONS.get(priority, "  ")

    def priority_style(self, priority: int) -> str:
        if priority <= 1:
            return f"bold {RED}"
        return f"bold {self.secondary}"

    def age_style(self, timestamp: datetime | None, now: datetime | None = None) -> str:
        """Colour by staleness: green under a week, orange under a month, red after."""
        if timestamp is None:
            return self.subtext
        now = now or datetime.now(timezone.utc)
        days = int((now - timestamp).total_seconds() // 86400)
        if days < 7:
            return GREEN
        if days < 30:
            return ORANGE
        return RED


DEFAULT_THEME = Theme()
