"""Incremental card search with n/N cycling."""

from __future__ import annotations

from dataclasses import dataclass

from swimlane.grouping import Columns


@dataclass(frozen=True)
class SearchMatch:
    """Position of a matching card."""

    col: int
    row: int


class SearchEngine:
    """Query string, ordered matches and a cursor into them.

    Matching scans all four columns, visible or not, so a hit in a hidden
    column still counts.
    """

    def __init__(self) -> None:
        self.active = False
        self.query = ""
        self.matches: list[SearchMatch] = []
        self.cursor = 0

    def start(self) -> None:
        """Enter input mode with an empty query."""
        self.active = True
        self.query = ""
        self.matches = []
        self.cursor = 0

    def cancel(self) -> None:
        """Leave input mode and drop all results."""
        self.active = False
        self.query = ""
        self.matches = []
        self.cursor = 0

    def finish(self) -> None:
        """Leave input mode but keep results for n/N."""
        self.active = False

    def append_char(self, ch: str, columns: Columns) -> SearchMatch | None:
        self.query += ch
        return self.rescan(columns)

    def backspace(self, columns: Columns) -> SearchMatch | None:
        if not self.query:
            return None
        self.query = self.query[:-1]
        return self.rescan(columns)

    def rescan(self, columns: Columns) -> SearchMatch | None:
        """Recompute matches and return the first one, if any."""
        self.matches = []
        self.cursor = 0
        if not self.query:
            return None
        needle = self.query.lower()
        for col_idx, issues in enumerate(columns):
            for row_idx, issue in enumerate(issues):
                if needle in issue.id.lower() or needle in issue.title.lower():
                    self.matches.append(SearchMatch(col_idx, row_idx))
        return self.current_match

    @property
    def current_match(self) -> SearchMatch | None:
        if not self.matches:
            return None
        self.cursor = min(max(self.cursor, 0), len(self.matches) - 1)
        return self.matches[self.cursor]

    @property
    def match_count(self) -> int:
        return len(self.matches)

    @property
    def cursor_position(self) -> int:
        """1-based cursor for display, 0 with no matches."""
        if not self.matches:
            return 0
        return self.cursor + 1

    def next_match(self) -> SearchMatch | None:
        if not self.matches:
            return None
        self.cursor = (self.cursor + 1) % len(self.matches)
        return self.matches[self.cursor]

    def prev_match(self) -> SearchMatch | None:
        if not self.matches:
            return None
        self.cursor = (self.cursor - 1) % len(self.matches)
        return self.matches[self.cursor]

    def is_current_match(self, col: int, row: int) -> bool:
        """True for the card under the search cursor while typing."""
        match = self.current_match if self.active else None
        return match is not None and match.col == col and match.row == row

    def is_match(self, col: int, row: int) -> bool:
        """True for any matching card while typing."""
        if not self.active or not self.query:
            return False
        return SearchMatch(col, row) in self.matches
