"""Column visibility and cursor bookkeeping for the board."""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from swimlane.grouping import COLUMN_COUNT, Columns, SwimLaneMode

ALL_COLUMNS = tuple(range(COLUMN_COUNT))


class VisibilityOverride(Enum):
    """User override for showing empty columns."""

    AUTO = "auto"
    SHOW_ALL = "show_all"
    HIDE_EMPTY = "hide_empty"

    def next(self) -> "VisibilityOverride":
        """Auto -> Show All -> Hide Empty -> Auto."""
        return _NEXT_OVERRIDE[self]

    @property
    def label(self) -> str:
        return _OVERRIDE_LABELS[self]


_NEXT_OVERRIDE = {
    VisibilityOverride.AUTO: VisibilityOverride.SHOW_ALL,
    VisibilityOverride.SHOW_ALL: VisibilityOverride.HIDE_EMPTY,
    VisibilityOverride.HIDE_EMPTY: VisibilityOverride.AUTO,
}

_OVERRIDE_LABELS = {
    VisibilityOverride.AUTO: "Auto",
    VisibilityOverride.SHOW_ALL: "Show All",
    VisibilityOverride.HIDE_EMPTY: "Hide Empty",
}


class VisibilityPolicy:
    """Decides which of the four columns are rendered.

    In auto mode the status board keeps all four columns (the workflow reads
    left to right even when a stage is empty); priority and type boards drop
    empty columns to save space.
    """

    def __init__(self, override: VisibilityOverride = VisibilityOverride.AUTO) -> None:
        self.override = override

    def shows_empty(self, mode: SwimLaneMode) -> bool:
        if self.override is VisibilityOverride.SHOW_ALL:
            return True
        if self.override is VisibilityOverride.HIDE_EMPTY:
            return False
        return mode is SwimLaneMode.STATUS

    def visible_columns(self, columns: Columns, mode: SwimLaneMode) -> list[int]:
        """Raw indices of the columns to render, never empty."""
        show_empty = self.shows_empty(mode)
        visible = [i for i in ALL_COLUMNS if columns[i] or show_empty]
        if not visible:
            return list(ALL_COLUMNS)
        return visible

    @staticmethod
    def hidden_count(columns: Columns, visible: Sequence[int]) -> int:
        """Number of empty columns left out of ``visible``."""
        return sum(1 for i in ALL_COLUMNS if not columns[i] and i not in visible)

    def cycle(self) -> VisibilityOverride:
        self.override = self.override.next()
        return self.override


class SelectionController:
    """Per-column selected rows plus the focused visible column.

    ``focused`` is a position in the visible-column list, not a raw column
    index. Every mutation re-clamps, so callers never see an out-of-range
    cursor.
    """

    def __init__(self) -> None:
        self.rows = [0] * COLUMN_COUNT
        self.focused = 0
        self._columns: Columns = ([], [], [], [])
        self._visible: list[int] = list(ALL_COLUMNS)

    # ── structure ──────────────────────────────────────────────────────────

    def update(self, columns: Columns, visible: Sequence[int]) -> None:
        """Adopt new columns and a new visible list, clamping everything."""
        self._columns = columns
        self._visible = list(visible) or list(ALL_COLUMNS)
        self.clamp()

    def clamp(self) -> None:
        for i in ALL_COLUMNS:
            count = len(self._columns[i])
            if count == 0:
                self.rows[i] = 0
            else:
                self.rows[i] = min(max(self.rows[i], 0), count - 1)
        self.focused = min(max(self.focused, 0), len(self._visible) - 1)

    @property
    def visible(self) -> list[int]:
        return list(self._visible)

    @property
    def focused_column(self) -> int:
        """Raw column index (0-3) under focus."""
        self.clamp()
        return self._visible[self.focused]

    @property
    def selected_row(self) -> int:
        return self.rows[self.focused_column]

    def position_of(self, column: int) -> int | None:
        """Visible position of a raw column index, or None if hidden."""
        try:
            return self._visible.index(column)
        except ValueError:
            return None

    def _count(self, column: int) -> int:
        return len(self._columns[column])

    # ── rows ───────────────────────────────────────────────────────────────

    def move_down(self) -> None:
        col = self.focused_column
        count = self._count(col)
        if count and self.rows[col] < count - 1:
            self.rows[col] += 1

    def move_up(self) -> None:
        col = self.focused_column
        if self.rows[col] > 0:
            self.rows[col] -= 1

    def move_to_top(self) -> None:
        self.rows[self.focused_column] = 0

    def move_to_bottom(self) -> None:
        col = self.focused_column
        count = self._count(col)
        if count:
            self.rows[col] = count - 1

    def page_down(self, visible_rows: int) -> None:
        """Move down by half a viewport."""
        col = self.focused_column
        count = self._count(col)
        if not count:
            return
        step = max(visible_rows, 0) // 2
        self.rows[col] = min(self.rows[col] + step, count - 1)

    def page_up(self, visible_rows: int) -> None:
        """Move up by half a viewport."""
        col = self.focused_column
        step = max(visible_rows, 0) // 2
        self.rows[col] = max(self.rows[col] - step, 0)

    # ── columns ────────────────────────────────────────────────────────────

    def move_left(self) -> None:
        self.clamp()
        if self.focused > 0:
            self.focused -= 1

    def move_right(self) -> None:
        self.clamp()
        if self.focused < len(self._visible) - 1:
            self.focused += 1

    def jump_to_first_column(self) -> None:
        self.focused = 0

    def jump_to_last_column(self) -> None:
        self.focused = len(self._visible) - 1

    def jump_to_column(self, column: int) -> None:
        """Focus raw column ``column`` or, if hidden, the nearest visible one.

        Ties go to the visible column met first (the lower one).
        """
        if not 0 <= column < COLUMN_COUNT:
            return
        position = self.position_of(column)
        if position is not None:
            self.focused = position
            return
        best_pos = 0
        best_dist = COLUMN_COUNT + 1
        for pos, visible_col in enumerate(self._visible):
            dist = abs(visible_col - column)
            if dist < best_dist:
                best_dist = dist
                best_pos = pos
        self.focused = best_pos

    def focus(self, column: int, row: int) -> None:
        """Point the cursor at (column, row), focusing the column if visible."""
        position = self.position_of(column)
        if position is not None:
            self.focused = position
        if 0 <= column < COLUMN_COUNT:
            self.rows[column] = row
        self.clamp()
