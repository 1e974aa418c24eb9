"""Randomized tests for board model invariants.

Tests that selection stays in bounds after every step of an arbitrary
command sequence, and that cycling the swimlane mode is a closed loop.
"""

from __future__ import annotations

import random
from typing import Callable

import pytest

from swimlane.board import BoardModel
from swimlane.grouping import COLUMN_COUNT, SwimLaneMode, column_for
from swimlane.issue import Issue
from tests.fixtures.sample_issues import NOW, PlainRenderer, make_issue

SEARCH_CHARS = "bd-0123 otaskbug"


def _sample_issues() -> list[Issue]:
    """A mixed set covering every status, priority and type column."""
    statuses = ["open", "in_progress", "blocked", "closed", "tombstone"]
    types = ["bug", "feature", "task", "epic", "chore", "spike"]
    issues = []
    for i in range(23):
        issues.append(
            make_issue(
                f"bd-{i}",
                f"{types[i % len(types)]} number {i}",
                status=statuses[i % len(statuses)],
                priority=i % 5,
                issue_type=types[i % len(types)],
                days_old=i % 7,
                blocked_by=[f"bd-{i - 1}"] if i % 4 == 0 and i else None,
            )
        )
    return issues


def check_invariants(board: BoardModel) -> None:
    """Assert that the selection points at a real card or an empty column."""
    visible = board.visible_columns
    assert visible, "visible column list is empty"
    assert 0 <= board.selection.focused < len(visible)

    focused = board.selection.focused_column
    assert focused in visible
    for col in range(COLUMN_COUNT):
        count = board.column_count(col)
        row = board.selection.rows[col]
        assert 0 <= row < max(count, 1), f"row {row} out of bounds in column {col} ({count} cards)"

    selected = board.selected_issue()
    if board.column_count(focused) == 0:
        assert selected is None
    else:
        assert selected is board.columns[focused][board.selection.rows[focused]]


class CommandRunner:
    """Applies random board commands and records them for failure messages."""

    def __init__(self, board: BoardModel, issues: list[Issue], rng: random.Random):
        self.board = board
        self.issues = issues
        self.rng = rng
        self.history: list[str] = []

    def commands(self) -> list[tuple[str, Callable[[], None]]]:
        board = self.board
        rng = self.rng
        return [
            ("move_up", board.move_up),
            ("move_down", board.move_down),
            ("move_left", board.move_left),
            ("move_right", board.move_right),
            ("move_to_top", board.move_to_top),
            ("move_to_bottom", board.move_to_bottom),
            ("page_down", lambda: board.page_down(rng.randint(-2, 12))),
            ("page_up", lambda: board.page_up(rng.randint(-2, 12))),
            ("jump_to_column", lambda: board.jump_to_column(rng.randint(-2, 5))),
            ("jump_to_first_column", board.jump_to_first_column),
            ("jump_to_last_column", board.jump_to_last_column),
            ("cycle_mode", board.cycle_mode),
            ("cycle_visibility", board.cycle_visibility),
            ("start_search", board.start_search),
            ("append_search_char", lambda: board.append_search_char(rng.choice(SEARCH_CHARS))),
            ("backspace_search", board.backspace_search),
            ("next_match", board.next_match),
            ("prev_match", board.prev_match),
            ("finish_search", board.finish_search),
            ("cancel_search", board.cancel_search),
            ("toggle_expand", board.toggle_expand),
            ("toggle_detail", board.toggle_detail),
            ("resize", lambda: board.resize(rng.randint(0, 260), rng.randint(0, 70))),
            ("set_issues", self.replace_issues),
        ]

    def replace_issues(self) -> None:
        subset = self.rng.sample(self.issues, self.rng.randint(0, len(self.issues)))
        self.board.set_issues(subset, preserve_selection=self.rng.random() < 0.5)

    def run(self, steps: int) -> None:
        commands = self.commands()
        for _ in range(steps):
            name, command = self.rng.choice(commands)
            command()
            self.history.append(name)
            try:
                check_invariants(self.board)
            except AssertionError as e:
                raise AssertionError(f"after {self.history[-10:]}: {e}") from e


class TestRandomCommandSequences:
    """Test that invariants hold after any sequence of commands."""

    @pytest.mark.parametrize("seed", range(8))
    def test_selection_stays_in_bounds(self, seed: int):
        issues = _sample_issues()
        board = BoardModel(issues, renderer=PlainRenderer(), clock=lambda: NOW)
        check_invariants(board)
        CommandRunner(board, issues, random.Random(seed)).run(300)

    @pytest.mark.parametrize("seed", range(3))
    def test_render_never_fails_mid_sequence(self, seed: int):
        """Test that rendering succeeds at every step of a random session."""
        issues = _sample_issues()
        board = BoardModel(issues, renderer=PlainRenderer(), clock=lambda: NOW)
        rng = random.Random(seed)
        runner = CommandRunner(board, issues, rng)
        for _ in range(60):
            runner.run(1)
            board.render(rng.randint(0, 240), rng.randint(0, 60))


class TestModeCycle:
    """Test that cycling the swimlane mode is a closed loop."""

    def _assignment(self, board: BoardModel) -> dict[str, int]:
        return {issue.id: col for col in range(COLUMN_COUNT) for issue in board.columns[col]}

    def test_three_cycles_restore_column_assignment(self):
        """Test that every issue is back in its original column after three cycles."""
        board = BoardModel(_sample_issues(), renderer=PlainRenderer(), clock=lambda: NOW)
        before = self._assignment(board)
        seen_modes = []
        for _ in range(3):
            seen_modes.append(board.cycle_mode())
        assert seen_modes == [SwimLaneMode.PRIORITY, SwimLaneMode.TYPE, SwimLaneMode.STATUS]
        assert self._assignment(board) == before
        assert before == {issue.id: column_for(issue, SwimLaneMode.STATUS) for issue in board.issues}

    @pytest.mark.parametrize("mode", list(SwimLaneMode))
    def test_every_issue_in_exactly_one_column(self, mode: SwimLaneMode):
        issues = _sample_issues()
        board = BoardModel(issues, renderer=PlainRenderer(), clock=lambda: NOW, mode=mode)
        ids = [issue.id for col in range(COLUMN_COUNT) for issue in board.columns[col]]
        assert sorted(ids) == sorted(issue.id for issue in issues)
