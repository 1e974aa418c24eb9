"""Swimlane grouping: partitioning issues into the four board columns."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from swimlane.issue import (
    STATUS_BLOCKED,
    STATUS_IN_PROGRESS,
    STATUS_OPEN,
    Issue,
    is_closed_like,
)
from swimlane.theme import BLUE, GRAY, GREEN, ORANGE, PURPLE, RED

COLUMN_COUNT = 4

# Column indices in status mode
COL_OPEN = 0
COL_IN_PROGRESS = 1
COL_BLOCKED = 2
COL_CLOSED = 3

Columns = tuple[list[Issue], list[Issue], list[Issue], list[Issue]]


class SwimLaneMode(Enum):
    """Which issue attribute decides the column."""

    STATUS = 0
    PRIORITY = 1
    TYPE = 2

    def next(self) -> "SwimLaneMode":
        members = list(SwimLaneMode)
        return members[(members.index(self) + 1) % len(members)]

    @property
    def spec(self) -> "LaneSpec":
        return LANE_SPECS[self]

    @property
    def display_name(self) -> str:
        return LANE_SPECS[self].name


def _status_column(issue: Issue) -> int:
    if is_closed_like(issue.status):
        return COL_CLOSED
    if issue.status == STATUS_OPEN:
        return COL_OPEN
    if issue.status == STATUS_IN_PROGRESS:
        return COL_IN_PROGRESS
    if issue.status == STATUS_BLOCKED:
        return COL_BLOCKED
    return COL_OPEN


def _priority_column(issue: Issue) -> int:
    if 0 <= issue.priority <= 2:
        return issue.priority
    return 3


_TYPE_COLUMNS = {"bug": 0, "feature": 1, "task": 2, "epic": 3}


def _type_column(issue: Issue) -> int:
    # Unknown types are shown as tasks
    return _TYPE_COLUMNS.get(issue.issue_type, 2)


@dataclass(frozen=True)
class LaneSpec:
    """Everything that depends on the swimlane mode, kept in one row."""

    name: str
    assign: Callable[[Issue], int]
    titles: tuple[str, str, str, str]
    icons: tuple[str, str, str, str]
    colors: tuple[str, str, str, str]


LANE_SPECS: dict[SwimLaneMode, LaneSpec] = {
    SwimLaneMode.STATUS: LaneSpec(
        name="Status",
        assign=_status_column,
        titles=("OPEN", "IN PROGRESS", "BLOCKED", "CLOSED"),
        icons=("📋", "🔄", "🚫", "✅"),
        colors=(GREEN, BLUE, RED, GRAY),
    ),
    SwimLaneMode.PRIORITY: LaneSpec(
        name="Priority",
        assign=_priority_column,
        titles=("P0 CRITICAL", "P1 HIGH", "P2 MEDIUM", "P3+ OTHER"),
        icons=("🔥", "⚡", "🔹", "💤"),
        colors=(RED, ORANGE, BLUE, GRAY),
    ),
    SwimLaneMode.TYPE: LaneSpec(
        name="Type",
        assign=_type_column,
        titles=("BUG", "FEATURE", "TASK", "EPIC"),
        icons=("🐛", "✨", "📋", "🎯"),
        colors=(RED, GREEN, BLUE, PURPLE),
    ),
}


def column_for(issue: Issue, mode: SwimLaneMode) -> int:
    """Column index (0-3) an issue falls into under ``mode``."""
    return LANE_SPECS[mode].assign(issue)


def _sort_key(issue: Issue) -> tuple:
    # Priority ascending, then newest first; undated issues go last in a tier
    if issue.created_at is None:
        return (issue.priority, 1, 0.0)
    return (issue.priority, 0, -issue.created_at.timestamp())


def sort_issues(issues: list[Issue]) -> None:
    """Sort in place by priority (ascending) then creation time (descending)."""
    issues.sort(key=_sort_key)


def empty_columns() -> Columns:
    return ([], [], [], [])


def group_issues(issues: Iterable[Issue], mode: SwimLaneMode) -> Columns:
    """Distribute issues into 4 sorted columns for ``mode``."""
    cols = empty_columns()
    assign = LANE_SPECS[mode].assign
    for issue in issues:
        cols[assign(issue)].append(issue)
    for col in cols:
        sort_issues(col)
    return cols


@dataclass
class BoardState:
    """Precomputed columns for every swimlane mode.

    Lets the board swap modes without regrouping when the caller already
    holds the full dataset.
    """

    by_status: Columns
    by_priority: Columns
    by_type: Columns

    @classmethod
    def build(cls, issues: Iterable[Issue]) -> "BoardState | None":
        issues = list(issues)
        if not issues:
            return None
        return cls(
            by_status=group_issues(issues, SwimLaneMode.STATUS),
            by_priority=group_issues(issues, SwimLaneMode.PRIORITY),
            by_type=group_issues(issues, SwimLaneMode.TYPE),
        )

    def columns_for(self, mode: SwimLaneMode) -> Columns:
        if mode is SwimLaneMode.PRIORITY:
            return self.by_priority
        if mode is SwimLaneMode.TYPE:
            return self.by_type
        return self.by_status
