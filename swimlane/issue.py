"""Issue data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

STATUS_OPEN = "open"
STATUS_IN_PROGRESS = "in_progress"
STATUS_BLOCKED = "blocked"
STATUS_CLOSED = "closed"
STATUS_TOMBSTONE = "tombstone"

CLOSED_LIKE_STATUSES = frozenset({STATUS_CLOSED, STATUS_TOMBSTONE})

DEP_BLOCKS = "blocks"

# An empty kind comes from older data files and means "blocks".
BLOCKING_DEP_TYPES = frozenset({DEP_BLOCKS, ""})


def is_closed_like(status: str) -> bool:
    """True for statuses that no longer block anything."""
    return status in CLOSED_LIKE_STATUSES


def _text(value: object, default: str = "") -> str:
    """JSON scalar as a string; null and missing become ``default``."""
    if value is None or value == "":
        return default
    return str(value)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None for missing or bad input."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class Dependency:
    """A dependency edge declared by ``issue_id`` on ``depends_on_id``."""

    issue_id: str
    depends_on_id: str
    type: str = DEP_BLOCKS
    created_at: datetime | None = None

    @property
    def is_blocking(self) -> bool:
        """True if this edge keeps the owning issue from being ready."""
        return self.type in BLOCKING_DEP_TYPES

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON storage."""
        return {
            "issue_id": self.issue_id,
            "depends_on_id": self.depends_on_id,
            "type": self.type,
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict, owner_id: str = "") -> "Dependency":
        """Deserialize from dictionary."""
        return cls(
            issue_id=_text(data.get("issue_id"), owner_id),
            depends_on_id=_text(data.get("depends_on_id")),
            type=_text(data.get("type", DEP_BLOCKS)),
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class Issue:
    """A single tracked issue as the board sees it."""

    id: str
    title: str
    description: str = ""
    status: str = STATUS_OPEN
    priority: int = 2
    issue_type: str = "task"
    assignee: str = ""
    labels: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    dependencies: list[Dependency] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "issue_type": self.issue_type,
            "assignee": self.assignee,
            "labels": list(self.labels),
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
            "dependencies": [dep.to_dict() for dep in self.dependencies],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Issue":
        """Deserialize from dictionary."""
        issue_id = _text(data["id"])
        priority = data.get("priority", 2)
        try:
            priority = int(priority)
        except (TypeError, ValueError, OverflowError):
            priority = 2
        labels = data.get("labels") or []
        if not isinstance(labels, list):
            labels = []
        return cls(
            id=issue_id,
            title=_text(data.get("title")),
            description=_text(data.get("description")),
            status=_text(data.get("status"), STATUS_OPEN),
            priority=priority,
            issue_type=_text(data.get("issue_type"), "task"),
            assignee=_text(data.get("assignee")),
            labels=[_text(label) for label in labels if label is not None],
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
            dependencies=[
                Dependency.from_dict(dep, owner_id=issue_id)
                for dep in data.get("dependencies") or []
                if isinstance(dep, dict)
            ],
        )

    @property
    def blocking_dependencies(self) -> list[Dependency]:
        """Blocking dependencies in declaration order."""
        return [dep for dep in self.dependencies if dep.is_blocking]

    @property
    def has_blocking_deps(self) -> bool:
        """True if the issue declares any blocking dependency."""
        return any(dep.is_blocking for dep in self.dependencies)
