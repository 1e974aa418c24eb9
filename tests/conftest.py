"""Shared pytest fixtures for swimlane tests."""

from __future__ import annotations

import json
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Generator

import pytest

from swimlane.board import BoardModel
from swimlane.config import ensure_board_dir
from swimlane.issue import Issue
from tests.fixtures.sample_issues import NOW, PlainRenderer, make_issue


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test isolation."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def project_root(temp_dir: Path) -> Path:
    """Create a mock project root with .swimlane directory."""
    ensure_board_dir(temp_dir)
    return temp_dir


@pytest.fixture
def now() -> datetime:
    """Fixed clock used by every time-dependent test."""
    return NOW


@pytest.fixture
def status_issues() -> list[Issue]:
    """Two open, one in-progress and one closed issue."""
    return [
        make_issue("bd-2", "Medium open task", priority=2, days_old=1),
        make_issue("bd-1", "Critical open bug", priority=0, issue_type="bug", days_old=3),
        make_issue("bd-3", "Work in flight", status="in_progress", priority=1, issue_type="feature"),
        make_issue("bd-4", "Done already", status="closed", priority=3),
    ]


@pytest.fixture
def dependent_issues() -> list[Issue]:
    """B is blocked by A; C depends on an issue that does not exist."""
    return [
        make_issue("A", "Blocker", priority=1),
        make_issue("B", "Blocked work", priority=2, blocked_by=["A"]),
        make_issue("C", "Dangling dependency", priority=2, blocked_by=["missing"]),
    ]


@pytest.fixture
def many_issues() -> list[Issue]:
    """Twelve open issues, enough to scroll a column."""
    return [make_issue(f"bd-{i:02d}", f"Task number {i}", days_old=i + 1) for i in range(12)]


@pytest.fixture
def board(status_issues: list[Issue]) -> BoardModel:
    """A status-mode board with the sample issues and a fixed clock."""
    return BoardModel(status_issues, renderer=PlainRenderer(), clock=lambda: NOW)


@pytest.fixture
def issues_file(project_root: Path, status_issues: list[Issue]) -> Path:
    """Write the sample issues as a beads JSONL file."""
    path = project_root / ".beads" / "issues.jsonl"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(json.dumps(issue.to_dict()) for issue in status_issues) + "\n")
    return path
