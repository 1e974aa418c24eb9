"""Tests for swimlane.board module."""

from __future__ import annotations

from swimlane.board import BoardModel, BoardSnapshot, Focus
from swimlane.grouping import SwimLaneMode
from swimlane.issue import Issue
from swimlane.selection import VisibilityOverride
from tests.fixtures.sample_issues import NOW, BrokenRenderer, PlainRenderer, make_issue


def _board(issues: list[Issue], **kwargs) -> BoardModel:
    return BoardModel(issues, renderer=PlainRenderer(), clock=lambda: NOW, **kwargs)


class TestBoardData:
    """Test data replacement."""

    def test_initial_selection(self, board: BoardModel):
        """Test that the first card of the first column is selected."""
        assert board.selected_issue().id == "bd-1"
        assert board.total_count == 4
        assert [board.column_count(i) for i in range(4)] == [2, 1, 0, 1]

    def test_column_count_out_of_range(self, board: BoardModel):
        assert board.column_count(-1) == 0
        assert board.column_count(4) == 0

    def test_empty_board(self):
        board = _board([])
        assert board.selected_issue() is None
        assert board.total_count == 0
        board.move_down()
        board.move_right()
        board.toggle_expand()
        assert board.selected_issue() is None

    def test_set_issues_clamps_selection(self, board: BoardModel):
        board.move_down()
        board.set_issues([make_issue("only")])
        assert board.selected_issue().id == "only"

    def test_preserve_selection(self, board: BoardModel, status_issues: list[Issue]):
        """Test that a reload keeps the selected issue when it still exists."""
        board.jump_to_column(3)
        assert board.selected_issue().id == "bd-4"
        board.set_issues(list(reversed(status_issues)), preserve_selection=True)
        assert board.selected_issue().id == "bd-4"

    def test_set_issues_cancels_search(self, board: BoardModel):
        board.start_search()
        board.append_search_char("b")
        board.set_issues([make_issue("x")])
        assert not board.is_search_mode
        assert board.search_match_count == 0

    def test_set_snapshot_uses_precomputed_columns(self, status_issues: list[Issue]):
        board = _board([])
        board.set_snapshot(BoardSnapshot.build(status_issues))
        assert board.board_state is not None
        assert [board.column_count(i) for i in range(4)] == [2, 1, 0, 1]
        board.cycle_mode()
        assert [board.column_count(i) for i in range(4)] == [1, 1, 1, 1]

    def test_set_snapshot_none_clears(self, board: BoardModel):
        board.set_snapshot(None)
        assert board.total_count == 0


class TestBoardModes:
    """Test swimlane and visibility cycling."""

    def test_cycle_mode(self, board: BoardModel):
        assert board.mode_name == "Status"
        board.cycle_mode()
        assert board.mode is SwimLaneMode.PRIORITY
        board.cycle_mode()
        assert board.mode_name == "Type"
        board.cycle_mode()
        assert board.mode is SwimLaneMode.STATUS

    def test_mode_change_cancels_search_and_invalidates_detail(self, board: BoardModel):
        board.start_search()
        board.append_search_char("d")
        board.detail.last_key = "bd-1"
        board.cycle_mode()
        assert not board.is_search_mode
        assert board.detail.last_key == ""

    def test_priority_mode_hides_empty_columns(self):
        board = _board([make_issue("a", priority=0), make_issue("b", priority=3)], mode=SwimLaneMode.PRIORITY)
        assert board.visible_columns == [0, 3]
        assert board.hidden_column_count == 2

    def test_cycle_visibility(self, board: BoardModel):
        assert board.visibility_mode_name == "Auto"
        assert board.visible_columns == [0, 1, 2, 3]
        board.cycle_visibility()
        assert board.visibility_mode_name == "Show All"
        board.cycle_visibility()
        assert board.policy.override is VisibilityOverride.HIDE_EMPTY
        assert board.visible_columns == [0, 1, 3]
        assert board.hidden_column_count == 1
        board.cycle_visibility()
        assert board.visible_columns == [0, 1, 2, 3]


class TestBoardNavigation:
    """Test navigation through the model."""

    def test_move_down_and_right(self, board: BoardModel):
        board.move_down()
        assert board.selected_issue().id == "bd-2"
        board.move_right()
        assert board.selected_issue().id == "bd-3"
        board.move_right()
        assert board.selected_issue() is None  # empty blocked column

    def test_navigation_collapses_expanded_card(self, board: BoardModel):
        board.toggle_expand()
        assert board.is_card_expanded("bd-1")
        board.move_down()
        assert not board.has_expanded_card

    def test_select_issue_by_id(self, board: BoardModel):
        assert board.select_issue_by_id("bd-3")
        assert board.selected_issue().id == "bd-3"
        assert not board.select_issue_by_id("nope")
        assert not board.select_issue_by_id("")

    def test_gg_flag(self, board: BoardModel):
        board.set_waiting_for_g()
        assert board.is_waiting_for_g
        board.clear_waiting_for_g()
        assert not board.is_waiting_for_g


class TestBoardSearch:
    """Test search through the model."""

    def test_search_moves_selection(self, board: BoardModel):
        board.start_search()
        for ch in "flight":
            board.append_search_char(ch)
        assert board.search_match_count == 1
        assert board.selected_issue().id == "bd-3"
        assert board.is_match_highlighted(1, 0)

    def test_next_match_cycles(self, board: BoardModel):
        board.start_search()
        board.append_search_char("o")
        count = board.search_match_count
        assert count >= 2
        first = board.selected_issue().id
        board.next_match()
        assert board.selected_issue().id != first
        assert board.search_cursor_position == 2

    def test_finish_keeps_matches_but_stops_highlighting(self, board: BoardModel):
        board.start_search()
        board.append_search_char("d")
        board.finish_search()
        assert board.search_match_count > 0
        assert not board.is_search_match(0, 0)


class TestBoardDetail:
    """Test the detail pane and focus."""

    def test_default_hidden(self, board: BoardModel):
        assert not board.is_detail_shown
        assert not board.focus_detail()
        assert board.focus is Focus.BOARD

    def test_toggle_and_focus(self, board: BoardModel):
        board.toggle_detail()
        assert board.is_detail_shown
        assert board.focus_detail()
        assert board.focus is Focus.DETAIL
        board.toggle_detail()
        assert board.focus is Focus.BOARD

    def test_auto_hide_moves_focus(self):
        """Test width 200 with split 0.8: pane auto-hides and focus returns to the board."""
        board = _board([make_issue("a")], show_detail=True, split_ratio=0.8)
        board.resize(300, 40)
        assert board.focus_detail()
        board.resize(200, 40)
        assert not board.is_detail_shown
        assert board.focus is Focus.BOARD

    def test_manual_hide_survives_widening(self):
        board = _board([make_issue("a")], show_detail=True)
        board.hide_detail()
        board.resize(300, 40)
        assert not board.is_detail_shown
        board.show_detail()
        assert board.is_detail_shown


class TestBoardRender:
    """Test rendered output."""

    def test_title_bar(self, board: BoardModel):
        plain = board.render(160, 40).plain
        assert plain.splitlines()[0].strip() == "BOARD [by: Status]"

    def test_hidden_badge(self):
        board = _board([make_issue("a", priority=0)], mode=SwimLaneMode.PRIORITY)
        assert "BOARD [by: Priority] [+3 hidden]" in board.render(160, 40).plain

    def test_columns_and_placeholder(self, board: BoardModel):
        plain = board.render(160, 40).plain
        assert "│" in plain
        assert "OPEN (2)" in plain
        assert "BLOCKED (0)" in plain
        assert "(empty)" in plain
        assert "Critical open bug" in plain

    def test_scroll_indicator(self, many_issues: list[Issue]):
        board = _board(many_issues)
        board.move_down()
        assert "↕ 2/12" in board.render(160, 30).plain

    def test_empty_board_message(self):
        assert "No issues to display" in _board([]).render(100, 30).plain

    def test_detail_pane_rendered_when_wide(self, board: BoardModel):
        board.show_detail()
        board.resize(200, 40)
        plain = board.render(200, 40).plain
        assert "DETAILS" in plain
        assert "Critical open bug" in plain
        assert all(len(line) <= 200 for line in plain.splitlines())

    def test_no_detail_pane_when_narrow(self, board: BoardModel):
        board.show_detail()
        board.resize(110, 40)
        assert "DETAILS" not in board.render(110, 40).plain

    def test_expanded_card_rendered(self, board: BoardModel):
        board.toggle_expand()
        assert "bd-1 ▼" in board.render(160, 60).plain

    def test_degenerate_sizes_do_not_fail(self, board: BoardModel):
        for width, height in [(0, 0), (-10, -10), (1, 1), (30, 3)]:
            board.render(width, height)

    def test_renderer_exception_falls_back_to_plain_text(self, status_issues: list[Issue]):
        """Test that a renderer raising an unexpected error never breaks rendering."""
        board = BoardModel(
            status_issues, renderer=BrokenRenderer(), show_detail=True, clock=lambda: NOW
        )
        board.resize(200, 40)
        plain = board.render(200, 40).plain
        assert "DETAILS" in plain
        assert "**Critical open bug**" in plain

        board.toggle_expand()
        assert "bd-1 ▼" in board.render(200, 60).plain
