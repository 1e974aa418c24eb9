"""Inline card expansion: at most one card is expanded at a time."""

from __future__ import annotations


class ExpansionController:
    """Tracks the expanded card by issue ID."""

    def __init__(self) -> None:
        self.expanded_id = ""

    def toggle(self, issue_id: str) -> None:
        """Expand ``issue_id``, or collapse it if it is already expanded."""
        if not issue_id:
            return
        if self.expanded_id == issue_id:
            self.expanded_id = ""
        else:
            self.expanded_id = issue_id

    def collapse(self) -> None:
        self.expanded_id = ""

    def is_expanded(self, issue_id: str) -> bool:
        return bool(self.expanded_id) and self.expanded_id == issue_id

    @property
    def has_expanded(self) -> bool:
        return bool(self.expanded_id)
