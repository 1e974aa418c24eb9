"""Width-driven layout math for the board.

Everything here is a pure function of terminal size and board contents:
how wide the detail pane is, how wide each column is, how many cards fit,
and how much per-column statistics the header can afford.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Mapping, Sequence

from swimlane.deps import has_open_blocker
from swimlane.issue import Issue

# Detail pane
DETAIL_MIN_TERMINAL_WIDTH = 120  # pane only appears on wider terminals
DETAIL_WIDTH_PERCENT = 35
DETAIL_MIN_WIDTH = 40
DETAIL_MAX_WIDTH = 80
SPLIT_PANEL_OVERHEAD = 8  # two panels, border + padding each

# Columns and cards
MIN_COLUMN_WIDTH = 28
MIN_COLUMN_HEIGHT = 8
BOARD_CHROME_ROWS = 6  # title bar + column header
CARD_HEIGHT = 6  # 3 content lines + 2 border lines + 1 margin

# Stat density breakpoints
STATS_PRIORITY_WIDTH = 100
STATS_FULL_WIDTH = 140


@dataclass(frozen=True)
class BoardLayout:
    """Resolved geometry for one render."""

    width: int
    height: int
    board_width: int
    detail_width: int
    column_width: int
    column_height: int
    visible_cards: int

    @property
    def card_width(self) -> int:
        """Text area inside a card: column padding, card border and card
        padding each take one cell per side."""
        return max(self.column_width - 6, 10)


def detail_width_for(width: int, show_detail: bool) -> int:
    """Width of the detail pane, 0 when it is not rendered."""
    if not show_detail or width <= DETAIL_MIN_TERMINAL_WIDTH:
        return 0
    return min(max(width * DETAIL_WIDTH_PERCENT // 100, DETAIL_MIN_WIDTH), DETAIL_MAX_WIDTH)


def compute_layout(width: int, height: int, num_columns: int, show_detail: bool) -> BoardLayout:
    """Compute board geometry, flooring degenerate sizes first."""
    width = max(width, MIN_COLUMN_WIDTH)
    height = max(height, 1)
    num_columns = max(num_columns, 1)

    detail_width = detail_width_for(width, show_detail)
    board_width = width - detail_width - 1 if detail_width else width

    # One separator character between adjacent columns, no upper cap
    available = board_width - (num_columns - 1)
    column_width = max(MIN_COLUMN_WIDTH, available // num_columns)

    column_height = max(MIN_COLUMN_HEIGHT, height - BOARD_CHROME_ROWS)
    visible_cards = max(1, (column_height - 1) // CARD_HEIGHT)

    return BoardLayout(
        width=width,
        height=height,
        board_width=board_width,
        detail_width=detail_width,
        column_width=column_width,
        column_height=column_height,
        visible_cards=visible_cards,
    )


def scroll_window(selected: int, count: int, visible_cards: int) -> tuple[int, int]:
    """Slice bounds [start, end) that keep ``selected`` on screen."""
    if count <= 0:
        return 0, 0
    visible_cards = max(visible_cards, 1)
    selected = min(max(selected, 0), count - 1)
    start = max(0, selected - visible_cards + 1)
    end = min(start + visible_cards, count)
    return start, end


class StatDensity(Enum):
    """How much a column header shows."""

    COUNT = "count"
    PRIORITY = "priority"
    FULL = "full"


def stat_density(width: int) -> StatDensity:
    if width < STATS_PRIORITY_WIDTH:
        return StatDensity.COUNT
    if width < STATS_FULL_WIDTH:
        return StatDensity.PRIORITY
    return StatDensity.FULL


@dataclass
class ColumnStats:
    """Summary numbers for one column header."""

    total: int = 0
    p0_count: int = 0
    p1_count: int = 0
    blocked_count: int = 0
    oldest_age: timedelta | None = None


def compute_column_stats(
    issues: Sequence[Issue],
    issue_map: Mapping[str, Issue] | None,
    now: datetime | None = None,
) -> ColumnStats:
    """Count priority tiers, open blockers and the oldest item in a column."""
    now = now or datetime.now(timezone.utc)
    stats = ColumnStats(total=len(issues))
    oldest: datetime | None = None
    for issue in issues:
        if issue.priority == 0:
            stats.p0_count += 1
        elif issue.priority == 1:
            stats.p1_count += 1
        if has_open_blocker(issue, issue_map):
            stats.blocked_count += 1
        if issue.created_at is not None and (oldest is None or issue.created_at < oldest):
            oldest = issue.created_at
    if oldest is not None:
        stats.oldest_age = now - oldest
    return stats


def format_oldest_age(age: timedelta) -> str:
    """Compact age: <1d, Nd, Nw (under 30 days), Nmo."""
    days = int(age.total_seconds() // 86400)
    if days <= 0:
        return "<1d"
    if days < 7:
        return f"{days}d"
    if days < 30:
        return f"{days // 7}w"
    return f"{days // 30}mo"


def column_header_text(
    icon: str,
    title: str,
    stats: ColumnStats,
    density: StatDensity,
    show_blocked: bool = False,
) -> str:
    """Header line for a column at the given stat density.

    ``show_blocked`` is set by the caller for the in-progress column of the
    status board only.
    """
    header = f"{icon} {title} ({stats.total})"
    if density is StatDensity.COUNT:
        return header

    indicators = []
    if stats.p0_count:
        indicators.append(f"{stats.p0_count}🔴")
    if stats.p1_count:
        indicators.append(f"{stats.p1_count}🟡")
    if density is StatDensity.FULL:
        if show_blocked and stats.blocked_count:
            indicators.append(f"⚠️{stats.blocked_count}")
        if stats.total and stats.oldest_age is not None and stats.oldest_age > timedelta(0):
            indicators.append(f"⏱{format_oldest_age(stats.oldest_age)}")

    if indicators:
        return header + " " + " ".join(indicators)
    return header


def candidate_detail_width(width: int, split_ratio: float) -> int:
    """Detail width a split layout would give at ``width``.

    ``split_ratio`` is the board's share of the usable width.
    """
    usable = max(width - SPLIT_PANEL_OVERHEAD, 0)
    return int(usable * (1.0 - split_ratio))


class DetailPaneVisibility:
    """Whether the detail pane is on, from two independent reasons to hide it.

    ``user_hidden`` follows explicit toggles; ``auto_hidden`` follows the
    terminal width. Resizing only ever touches ``auto_hidden``, so a pane the
    user closed stays closed when the terminal grows again.
    """

    def __init__(self, user_hidden: bool = True) -> None:
        self.user_hidden = user_hidden
        self.auto_hidden = False

    @property
    def visible(self) -> bool:
        return not self.user_hidden and not self.auto_hidden

    def toggle(self) -> None:
        self.user_hidden = not self.user_hidden

    def show(self) -> None:
        self.user_hidden = False

    def hide(self) -> None:
        self.user_hidden = True

    def resize(self, width: int, split_ratio: float) -> bool:
        """Re-evaluate auto-hide for a new width; returns the new visibility."""
        self.auto_hidden = candidate_detail_width(width, split_ratio) < DETAIL_MIN_WIDTH
        return self.visible
