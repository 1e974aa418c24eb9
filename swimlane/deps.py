"""Blocking-dependency indexing for the board.

The forward view is each issue's own ``blocking_dependencies``. The reverse
index maps an issue ID to the IDs of issues that declare a blocking
dependency on it, which is what the board needs to highlight high-impact
cards and to list "Blocks:" in the detail pane.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from swimlane.issue import Dependency, Issue, is_closed_like


def build_blocks_index(issues: Iterable[Issue]) -> dict[str, list[str]]:
    """Build the reverse dependency map: target ID -> IDs it blocks.

    Insertion order follows the issue order, then declaration order.
    """
    index: dict[str, list[str]] = {}
    for issue in issues:
        for dep in issue.dependencies:
            if dep.is_blocking:
                # dep.depends_on_id blocks issue.id
                index.setdefault(dep.depends_on_id, []).append(issue.id)
    return index


def build_issue_map(issues: Iterable[Issue]) -> dict[str, Issue]:
    """Build an ID -> Issue lookup."""
    return {issue.id: issue for issue in issues}


def has_open_blocker(issue: Issue, issue_map: Mapping[str, Issue] | None) -> bool:
    """True if the issue has an unresolved blocking dependency.

    Without a lookup map every blocking dependency counts. With one, only
    targets that exist and are not closed-like count.
    """
    for dep in issue.dependencies:
        if not dep.is_blocking:
            continue
        if issue_map is None:
            return True
        blocker = issue_map.get(dep.depends_on_id)
        if blocker is not None and not is_closed_like(blocker.status):
            return True
    return False


@dataclass
class DependencyIndex:
    """Forward and reverse blocking relationships for one issue snapshot."""

    blocks_index: dict[str, list[str]] = field(default_factory=dict)
    issue_map: dict[str, Issue] | None = None

    @classmethod
    def build(
        cls,
        issues: Iterable[Issue],
        issue_map: Mapping[str, Issue] | None = None,
    ) -> "DependencyIndex":
        """Index an issue set, reusing a caller-supplied lookup if given."""
        issues = list(issues)
        lookup = dict(issue_map) if issue_map is not None else build_issue_map(issues)
        return cls(blocks_index=build_blocks_index(issues), issue_map=lookup)

    def lookup(self, issue_id: str) -> Issue | None:
        if self.issue_map is None:
            return None
        return self.issue_map.get(issue_id)

    def blocks(self, issue_id: str) -> list[str]:
        """IDs of issues blocked by ``issue_id``."""
        return self.blocks_index.get(issue_id, [])

    def blocks_others(self, issue_id: str) -> bool:
        return bool(self.blocks_index.get(issue_id))

    def blocked_by(self, issue: Issue) -> list[tuple[Dependency, Issue | None]]:
        """Blocking dependencies of ``issue`` paired with their resolved targets."""
        return [(dep, self.lookup(dep.depends_on_id)) for dep in issue.blocking_dependencies]

    def has_open_blocker(self, issue: Issue) -> bool:
        return has_open_blocker(issue, self.issue_map)
