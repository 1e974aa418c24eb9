"""The Kanban board view model.

``BoardModel`` owns the small mutable view state (selection, search,
expansion, visibility override, detail pane) and treats the issue set as an
immutable snapshot that is replaced wholesale. All commands are total: they
clamp instead of raising. ``render`` is a pure function of that state apart
from the detail pane memo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterable

from rich.text import Text

from swimlane.cards import render_card, render_expanded_card
from swimlane.deps import DependencyIndex
from swimlane.detail import DetailPanelCache, MarkdownRenderer
from swimlane.expansion import ExpansionController
from swimlane.formatting import fit, truncate
from swimlane.grouping import (
    COL_IN_PROGRESS,
    COLUMN_COUNT,
    BoardState,
    Columns,
    SwimLaneMode,
    empty_columns,
    group_issues,
)
from swimlane.issue import Issue
from swimlane.layout import (
    BoardLayout,
    DetailPaneVisibility,
    column_header_text,
    compute_column_stats,
    compute_layout,
    scroll_window,
    stat_density,
)
from swimlane.search import SearchMatch, SearchEngine
from swimlane.selection import SelectionController, VisibilityOverride, VisibilityPolicy
from swimlane.theme import DEFAULT_THEME, Theme

logger = logging.getLogger(__name__)

DEFAULT_SPLIT_RATIO = 0.6
UNFOCUSED_HEADER_BG = "#2a2a2a"
FOCUSED_HEADER_FG = "#1a1a1a"


class Focus(Enum):
    """Which pane receives keys."""

    BOARD = "board"
    DETAIL = "detail"


@dataclass
class BoardSnapshot:
    """Issue data handed over by the data layer, optionally pre-grouped."""

    issues: list[Issue]
    board_state: BoardState | None = None
    issue_map: dict[str, Issue] | None = None

    @classmethod
    def build(cls, issues: Iterable[Issue], precompute_board: bool = True) -> "BoardSnapshot":
        issues = list(issues)
        return cls(
            issues=issues,
            board_state=BoardState.build(issues) if precompute_board else None,
            issue_map={issue.id: issue for issue in issues},
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BoardModel:
    """Adaptive four-column board with search, expansion and a detail pane."""

    def __init__(
        self,
        issues: Iterable[Issue] | None = None,
        theme: Theme = DEFAULT_THEME,
        renderer: MarkdownRenderer | None = None,
        mode: SwimLaneMode = SwimLaneMode.STATUS,
        visibility: VisibilityOverride = VisibilityOverride.AUTO,
        show_detail: bool = False,
        split_ratio: float = DEFAULT_SPLIT_RATIO,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.theme = theme
        self.renderer = renderer
        self.mode = mode
        self.split_ratio = split_ratio
        self.clock = clock
        self.focus = Focus.BOARD

        self.policy = VisibilityPolicy(visibility)
        self.selection = SelectionController()
        self.search = SearchEngine()
        self.expansion = ExpansionController()
        self.detail = DetailPanelCache(renderer, theme)
        self.detail_pane = DetailPaneVisibility(user_hidden=not show_detail)

        self.issues: list[Issue] = []
        self.board_state: BoardState | None = None
        self.index = DependencyIndex()
        self.columns: Columns = empty_columns()
        self.width = 0
        self.height = 0
        self._waiting_for_g = False

        self.set_issues(issues or [])

    # ═══════════════════════════════════════════════════════════════════════
    # Data replacement
    # ═══════════════════════════════════════════════════════════════════════

    def set_issues(self, issues: Iterable[Issue], preserve_selection: bool = False) -> None:
        """Replace the issue set, regrouping under the current mode."""
        self._replace(BoardSnapshot(issues=list(issues)), preserve_selection)

    def set_snapshot(self, snapshot: BoardSnapshot | None, preserve_selection: bool = False) -> None:
        """Replace the issue set from a snapshot, using its precomputed columns."""
        if snapshot is None:
            snapshot = BoardSnapshot(issues=[])
        self._replace(snapshot, preserve_selection)

    def _replace(self, snapshot: BoardSnapshot, preserve_selection: bool) -> None:
        previous = self.selected_issue()
        previous_id = previous.id if previous is not None else ""

        self.issues = list(snapshot.issues)
        self.board_state = snapshot.board_state
        self.index = DependencyIndex.build(self.issues, snapshot.issue_map)
        self.columns = self._group()
        self.search.cancel()
        self.detail.invalidate()
        self._refresh_structure()

        if preserve_selection and previous_id:
            self.select_issue_by_id(previous_id)
        logger.debug(
            "Board loaded %d issues (mode=%s, precomputed=%s)",
            len(self.issues), self.mode.display_name, self.board_state is not None,
        )

    def _group(self) -> Columns:
        if self.board_state is not None:
            return self.board_state.columns_for(self.mode)
        return group_issues(self.issues, self.mode)

    def _refresh_structure(self) -> None:
        visible = self.policy.visible_columns(self.columns, self.mode)
        self.selection.update(self.columns, visible)

    # ═══════════════════════════════════════════════════════════════════════
    # Queries
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def visible_columns(self) -> list[int]:
        return self.selection.visible

    @property
    def mode_name(self) -> str:
        return self.mode.display_name

    @property
    def visibility_mode_name(self) -> str:
        return self.policy.override.label

    @property
    def hidden_column_count(self) -> int:
        return self.policy.hidden_count(self.columns, self.selection.visible)

    def column_count(self, col: int) -> int:
        if 0 <= col < COLUMN_COUNT:
            return len(self.columns[col])
        return 0

    @property
    def total_count(self) -> int:
        return sum(len(col) for col in self.columns)

    def selected_issue(self) -> Issue | None:
        """The card under the cursor, or None for an empty column."""
        col = self.selection.focused_column
        row = self.selection.rows[col]
        issues = self.columns[col]
        if 0 <= row < len(issues):
            return issues[row]
        return None

    # ═══════════════════════════════════════════════════════════════════════
    # Navigation (every move collapses an expanded card)
    # ═══════════════════════════════════════════════════════════════════════

    def move_down(self) -> None:
        self.expansion.collapse()
        self.selection.move_down()

    def move_up(self) -> None:
        self.expansion.collapse()
        self.selection.move_up()

    def move_left(self) -> None:
        self.expansion.collapse()
        self.selection.move_left()

    def move_right(self) -> None:
        self.expansion.collapse()
        self.selection.move_right()

    def move_to_top(self) -> None:
        self.expansion.collapse()
        self.selection.move_to_top()

    def move_to_bottom(self) -> None:
        self.expansion.collapse()
        self.selection.move_to_bottom()

    def page_down(self, visible_rows: int) -> None:
        self.expansion.collapse()
        self.selection.page_down(visible_rows)

    def page_up(self, visible_rows: int) -> None:
        self.expansion.collapse()
        self.selection.page_up(visible_rows)

    def jump_to_column(self, column: int) -> None:
        """Focus raw column 0-3, or the nearest visible one."""
        self.expansion.collapse()
        self.selection.jump_to_column(column)

    def jump_to_first_column(self) -> None:
        self.expansion.collapse()
        self.selection.jump_to_first_column()

    def jump_to_last_column(self) -> None:
        self.expansion.collapse()
        self.selection.jump_to_last_column()

    def select_issue_by_id(self, issue_id: str) -> bool:
        """Focus the card with ``issue_id``; False if it is not on the board."""
        if not issue_id:
            return False
        for col, issues in enumerate(self.columns):
            for row, issue in enumerate(issues):
                if issue.id == issue_id:
                    self.selection.focus(col, row)
                    return True
        return False

    # vim-style "gg"
    def set_waiting_for_g(self) -> None:
        self._waiting_for_g = True

    def clear_waiting_for_g(self) -> None:
        self._waiting_for_g = False

    @property
    def is_waiting_for_g(self) -> bool:
        return self._waiting_for_g

    # ═══════════════════════════════════════════════════════════════════════
    # Grouping and visibility
    # ═══════════════════════════════════════════════════════════════════════

    def cycle_mode(self) -> SwimLaneMode:
        """Status -> Priority -> Type -> Status."""
        return self.set_mode(self.mode.next())

    def set_mode(self, mode: SwimLaneMode) -> SwimLaneMode:
        self.mode = mode
        self.columns = self._group()
        self._refresh_structure()
        # Match coordinates and cached detail are mode dependent
        self.search.cancel()
        self.detail.invalidate()
        logger.info("Swimlane mode: %s", mode.display_name)
        return mode

    def cycle_visibility(self) -> VisibilityOverride:
        """Auto -> Show All -> Hide Empty -> Auto."""
        override = self.policy.cycle()
        self._refresh_structure()
        logger.info("Empty columns: %s (%d hidden)", override.label, self.hidden_column_count)
        return override

    # ═══════════════════════════════════════════════════════════════════════
    # Search
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def is_search_mode(self) -> bool:
        return self.search.active

    @property
    def search_query(self) -> str:
        return self.search.query

    @property
    def search_match_count(self) -> int:
        return self.search.match_count

    @property
    def search_cursor_position(self) -> int:
        return self.search.cursor_position

    def start_search(self) -> None:
        self.search.start()

    def append_search_char(self, ch: str) -> None:
        self._jump_to(self.search.append_char(ch, self.columns))

    def backspace_search(self) -> None:
        self._jump_to(self.search.backspace(self.columns))

    def next_match(self) -> None:
        self._jump_to(self.search.next_match())

    def prev_match(self) -> None:
        self._jump_to(self.search.prev_match())

    def finish_search(self) -> None:
        self.search.finish()

    def cancel_search(self) -> None:
        self.search.cancel()

    def _jump_to(self, match: SearchMatch | None) -> None:
        if match is not None:
            self.selection.focus(match.col, match.row)

    def is_match_highlighted(self, col: int, row: int) -> bool:
        return self.search.is_current_match(col, row)

    def is_search_match(self, col: int, row: int) -> bool:
        return self.search.is_match(col, row)

    # ═══════════════════════════════════════════════════════════════════════
    # Card expansion
    # ═══════════════════════════════════════════════════════════════════════

    def toggle_expand(self) -> None:
        selected = self.selected_issue()
        if selected is not None:
            self.expansion.toggle(selected.id)

    def collapse_expanded(self) -> None:
        self.expansion.collapse()

    def is_card_expanded(self, issue_id: str) -> bool:
        return self.expansion.is_expanded(issue_id)

    @property
    def expanded_id(self) -> str:
        return self.expansion.expanded_id

    @property
    def has_expanded_card(self) -> bool:
        return self.expansion.has_expanded

    # ═══════════════════════════════════════════════════════════════════════
    # Detail pane
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def is_detail_shown(self) -> bool:
        return self.detail_pane.visible

    def toggle_detail(self) -> None:
        self.detail_pane.toggle()
        self._sync_focus()

    def show_detail(self) -> None:
        self.detail_pane.show()
        self._sync_focus()

    def hide_detail(self) -> None:
        self.detail_pane.hide()
        self._sync_focus()

    def focus_detail(self) -> bool:
        if not self.is_detail_shown:
            return False
        self.focus = Focus.DETAIL
        return True

    def focus_board(self) -> None:
        self.focus = Focus.BOARD

    def detail_scroll_down(self, lines: int = 3) -> None:
        if self.is_detail_shown:
            self.detail.scroll_down(lines)

    def detail_scroll_up(self, lines: int = 3) -> None:
        if self.is_detail_shown:
            self.detail.scroll_up(lines)

    def resize(self, width: int, height: int) -> None:
        """Record a new terminal size and re-evaluate detail auto-hide."""
        self.width = width
        self.height = height
        was_shown = self.is_detail_shown
        self.detail_pane.resize(width, self.split_ratio)
        if was_shown != self.is_detail_shown:
            logger.debug("Detail pane %s at width %d", "shown" if self.is_detail_shown else "auto-hidden", width)
        self._sync_focus()

    def _sync_focus(self) -> None:
        if self.focus is Focus.DETAIL and not self.is_detail_shown:
            self.focus = Focus.BOARD

    # ═══════════════════════════════════════════════════════════════════════
    # Rendering
    # ═══════════════════════════════════════════════════════════════════════

    def layout(self, width: int, height: int) -> BoardLayout:
        return compute_layout(width, height, len(self.selection.visible), self.is_detail_shown)

    def render(self, width: int, height: int) -> Text:
        """Render the board (and detail pane when shown) for a terminal size."""
        now = self.clock()
        layout = self.layout(width, height)

        if self.total_count == 0:
            board_lines = self._render_empty(layout)
        else:
            board_lines = [self._render_title_bar(layout.board_width), Text("")]
            board_lines.extend(self._render_columns(layout, now))
        board_lines = [fit(line, layout.board_width) for line in board_lines]

        if layout.detail_width:
            panel = self.detail.render_panel(
                self.selected_issue(), self.index, layout.detail_width, max(layout.height - 2, 1), now,
            )
            board_lines = _join_horizontal(board_lines, layout.board_width, panel, layout.detail_width)

        return Text("\n").join(board_lines)

    def _render_empty(self, layout: BoardLayout) -> list[Text]:
        rows = max(layout.height - 3, 3)
        lines = [Text("") for _ in range(rows)]
        lines[rows // 2] = _centered(
            Text("No issues to display", style=f"italic {self.theme.secondary}"), layout.board_width,
        )
        return lines

    def _render_title_bar(self, width: int) -> Text:
        title = f"BOARD [by: {self.mode_name}]"
        hidden = self.hidden_column_count
        if hidden:
            title = f"{title} [+{hidden} hidden]"
        return _centered(Text(title, style=f"bold {self.theme.primary}"), width)

    def _render_columns(self, layout: BoardLayout, now: datetime) -> list[Text]:
        spec = self.mode.spec
        density = stat_density(layout.width)
        col_width = layout.column_width
        inner = col_width - 2

        rendered: list[list[Text]] = []
        for pos, col in enumerate(self.selection.visible):
            focused = pos == self.selection.focused
            issues = self.columns[col]
            count = len(issues)

            stats = compute_column_stats(issues, self.index.issue_map, now)
            header_text = column_header_text(
                spec.icons[col], spec.titles[col], stats, density,
                show_blocked=self.mode is SwimLaneMode.STATUS and col == COL_IN_PROGRESS,
            )
            color = spec.colors[col]
            if focused:
                header_style = f"bold {FOCUSED_HEADER_FG} on {color}"
            else:
                header_style = f"bold {color} on {UNFOCUSED_HEADER_BG}"
            header = _centered(Text(truncate(header_text, inner)), col_width)
            header.stylize(header_style)

            sel = min(self.selection.rows[col], max(count - 1, 0))
            start, end = scroll_window(sel, count, layout.visible_cards)

            body: list[Text] = []
            for row in range(start, end):
                issue = issues[row]
                if self.expansion.is_expanded(issue.id):
                    body.extend(render_expanded_card(
                        issue, layout.card_width, self.index, self.renderer, self.theme, now,
                    ))
                else:
                    body.extend(render_card(
                        issue, layout.card_width, self.index, self.theme,
                        selected=focused and row == sel,
                        current_match=self.is_match_highlighted(col, row),
                        any_match=self.is_search_match(col, row),
                        now=now,
                    ))

            if count == 0:
                placeholder_rows = max(layout.column_height - 2, 1)
                body.extend(Text("") for _ in range(placeholder_rows // 2))
                body.append(_centered(Text("(empty)", style=f"italic {self.theme.secondary}"), inner))

            scroll_line = None
            if count > layout.visible_cards:
                scroll_line = _centered(
                    Text(f"↕ {sel + 1}/{count}", style=f"italic {self.theme.secondary}"), inner,
                )

            room = layout.column_height - (1 if scroll_line is not None else 0)
            body = body[:room]
            if scroll_line is not None:
                body.append(scroll_line)
            while len(body) < layout.column_height:
                body.append(Text(""))

            column = [header]
            for line in body:
                padded = Text(" ")
                padded.append_text(fit(line, inner))
                padded.append(" ")
                column.append(padded)
            rendered.append(column)

        separator = Text("│", style=self.theme.secondary)
        rows = []
        for row_idx in range(layout.column_height + 1):
            rows.append(separator.join(column[row_idx] for column in rendered))
        return rows


def _centered(text: Text, width: int) -> Text:
    pad = max(width - text.cell_len, 0)
    line = Text(" " * (pad // 2))
    line.append_text(text)
    line.append(" " * (pad - pad // 2))
    return line


def _join_horizontal(left: list[Text], left_width: int, right: list[Text], right_width: int) -> list[Text]:
    """Place two line blocks side by side with a one-cell gap."""
    rows = max(len(left), len(right))
    joined = []
    for i in range(rows):
        line = fit(left[i], left_width) if i < len(left) else Text(" " * left_width)
        line.append(" ")
        line.append_text(fit(right[i], right_width) if i < len(right) else Text(" " * right_width))
        joined.append(line)
    return joined
