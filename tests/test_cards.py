"""Tests for swimlane.cards module."""

from __future__ import annotations

from datetime import datetime

from swimlane.cards import border_color, card_meta_line, render_card, render_expanded_card
from swimlane.deps import DependencyIndex
from swimlane.issue import Issue
from swimlane.layout import CARD_HEIGHT
from swimlane.theme import BLUE, DEFAULT_THEME, GREEN, ORANGE, PURPLE, RED
from tests.fixtures.sample_issues import FailingRenderer, PlainRenderer, make_issue


class TestBorderColor:
    """Test card border colour precedence."""

    def test_blocked_and_blocking(self, dependent_issues: list[Issue]):
        """Test that A blocks others and B is blocked."""
        index = DependencyIndex.build(dependent_issues)
        a, b, _ = dependent_issues
        assert border_color(a, index, DEFAULT_THEME) == ORANGE
        assert border_color(b, index, DEFAULT_THEME) == RED

    def test_plain_open_is_green(self):
        issue = make_issue("X")
        assert border_color(issue, DependencyIndex.build([issue]), DEFAULT_THEME) == GREEN

    def test_closed_uses_theme_border(self):
        issue = make_issue("X", status="closed")
        assert border_color(issue, DependencyIndex.build([issue]), DEFAULT_THEME) == DEFAULT_THEME.border

    def test_selection_and_search_win(self, dependent_issues: list[Issue]):
        """Test that selection beats search, and search beats dependency colours."""
        index = DependencyIndex.build(dependent_issues)
        b = dependent_issues[1]
        assert border_color(b, index, DEFAULT_THEME, selected=True, current_match=True) == DEFAULT_THEME.primary
        assert border_color(b, index, DEFAULT_THEME, current_match=True, any_match=True) == PURPLE
        assert border_color(b, index, DEFAULT_THEME, any_match=True) == BLUE


class TestMetaLine:
    """Test the third card line."""

    def test_first_blocker_with_title(self, dependent_issues: list[Issue]):
        index = DependencyIndex.build(dependent_issues)
        assert card_meta_line(dependent_issues[1], index, DEFAULT_THEME).plain == "🚫←A (Blocker)"

    def test_unresolved_blocker_shows_id_only(self, dependent_issues: list[Issue]):
        index = DependencyIndex.build(dependent_issues)
        assert card_meta_line(dependent_issues[2], index, DEFAULT_THEME).plain == "🚫←missing"

    def test_blocks_count_and_labels(self, dependent_issues: list[Issue]):
        a = dependent_issues[0]
        a.labels = ["frontend-work", "ux", "q3", "extra"]
        index = DependencyIndex.build(dependent_issues)
        assert card_meta_line(a, index, DEFAULT_THEME).plain == "⚡→1 frontend,ux,q3"


class TestRenderCard:
    """Test compact card rendering."""

    def test_card_is_fixed_height(self, dependent_issues: list[Issue], now: datetime):
        index = DependencyIndex.build(dependent_issues)
        for issue in dependent_issues:
            assert len(render_card(issue, 24, index, now=now)) == CARD_HEIGHT

    def test_card_lines_have_consistent_width(self, dependent_issues: list[Issue], now: datetime):
        index = DependencyIndex.build(dependent_issues)
        lines = render_card(dependent_issues[1], 24, index, now=now)
        assert {line.cell_len for line in lines[:-1]} == {28}
        assert lines[-1].plain == ""

    def test_card_content(self, dependent_issues: list[Issue], now: datetime):
        index = DependencyIndex.build(dependent_issues)
        lines = render_card(dependent_issues[1], 30, index, now=now)
        assert "P2" in lines[1].plain
        assert "B" in lines[1].plain
        assert "1d ago" in lines[1].plain
        assert "Blocked work" in lines[2].plain
        assert "🚫←A" in lines[3].plain

    def test_long_title_is_truncated(self, now: datetime):
        issue = make_issue("X", "A very long title that cannot possibly fit on one card line")
        lines = render_card(issue, 20, DependencyIndex.build([issue]), now=now)
        assert "…" in lines[2].plain


class TestRenderExpandedCard:
    """Test inline expanded cards."""

    def test_shows_description_and_dependencies(self, dependent_issues: list[Issue], now: datetime):
        b = dependent_issues[1]
        b.description = "Needs the blocker first."
        index = DependencyIndex.build(dependent_issues)
        plain = "\n".join(line.plain for line in render_expanded_card(b, 40, index, PlainRenderer(), now=now))
        assert "B ▼" in plain
        assert "Needs the blocker first." in plain
        assert "Blocked by:" in plain
        assert "A: Blocker (open)" in plain
        assert "Created: 1d ago" in plain

    def test_lists_blocked_issues(self, dependent_issues: list[Issue], now: datetime):
        index = DependencyIndex.build(dependent_issues)
        plain = "\n".join(line.plain for line in render_expanded_card(dependent_issues[0], 40, index, now=now))
        assert "Blocks:" in plain
        assert "B: Blocked work" in plain

    def test_long_description_is_cut(self, now: datetime):
        issue = make_issue("X", description="\n".join(f"line {i}" for i in range(20)))
        lines = render_expanded_card(issue, 40, DependencyIndex.build([issue]), PlainRenderer(), now=now)
        plain = "\n".join(line.plain for line in lines)
        assert "line 7" in plain
        assert "line 8" not in plain
        assert "..." in plain

    def test_renderer_failure_falls_back(self, now: datetime):
        issue = make_issue("X", description="**raw** text")
        lines = render_expanded_card(issue, 40, DependencyIndex.build([issue]), FailingRenderer(), now=now)
        assert any("**raw** text" in line.plain for line in lines)
