"""Loading issues from a beads-style JSONL file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from swimlane.issue import Issue

logger = logging.getLogger(__name__)

BEADS_DIR = ".beads"
ISSUES_FILE = "issues.jsonl"


class IssueLoadError(Exception):
    """Issue data could not be read."""

    pass


def find_issues_file(project_root: Path | None = None) -> Path:
    """Get the default issues file path for a project."""
    root = project_root or Path.cwd()
    return root / BEADS_DIR / ISSUES_FILE


def load_issues(path: Path) -> list[Issue]:
    """Load issues from a JSONL file (one issue object per line).

    Args:
        path: Path to the JSONL file.

    Returns:
        Issues in file order. A later line with a repeated ID replaces the
        earlier one in place.

    Raises:
        IssueLoadError: If the file is missing or a line is malformed.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise IssueLoadError(f"Issues file not found: {path}") from e
    except OSError as e:
        raise IssueLoadError(f"Cannot read {path}: {e}") from e

    issues: dict[str, Issue] = {}
    for line_no, line in enumerate(content.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise IssueLoadError(f"{path.name}:{line_no}: invalid JSON ({e.msg})") from e
        if not isinstance(data, dict) or not data.get("id"):
            raise IssueLoadError(f"{path.name}:{line_no}: expected an issue object with an id")
        issue = Issue.from_dict(data)
        issues[issue.id] = issue

    logger.info("Loaded %d issues from %s", len(issues), path)
    return list(issues.values())
