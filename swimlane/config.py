"""Per-project board configuration."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from swimlane.grouping import SwimLaneMode
from swimlane.selection import VisibilityOverride
from swimlane.source import BEADS_DIR, ISSUES_FILE

logger = logging.getLogger(__name__)

BOARD_DIR = ".swimlane"
CONFIG_FILE = "config.json"
CONFIG_VERSION = 1

ISSUES_ENV_VAR = "SWIMLANE_ISSUES"

MIN_SPLIT_RATIO = 0.2
MAX_SPLIT_RATIO = 0.8
DEFAULT_SPLIT_RATIO = 0.6
DEFAULT_MARKDOWN_WIDTH = 60
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def clamp_split_ratio(value: float) -> float:
    return min(max(value, MIN_SPLIT_RATIO), MAX_SPLIT_RATIO)


@dataclass
class BoardConfig:
    """Board settings stored in .swimlane/config.json."""

    issues_file: str = f"{BEADS_DIR}/{ISSUES_FILE}"
    swimlane_mode: SwimLaneMode = SwimLaneMode.STATUS
    visibility: VisibilityOverride = VisibilityOverride.AUTO
    show_detail: bool = False
    split_ratio: float = DEFAULT_SPLIT_RATIO
    markdown_width: int = DEFAULT_MARKDOWN_WIDTH
    log_level: str = "INFO"
    version: int = CONFIG_VERSION

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON storage."""
        return {
            "issues_file": self.issues_file,
            "swimlane_mode": self.swimlane_mode.name.lower(),
            "visibility": self.visibility.value,
            "show_detail": self.show_detail,
            "split_ratio": self.split_ratio,
            "markdown_width": self.markdown_width,
            "log_level": self.log_level,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BoardConfig":
        """Deserialize from dictionary, falling back to defaults for bad values."""
        defaults = cls()

        mode = defaults.swimlane_mode
        mode_name = str(data.get("swimlane_mode", "")).upper()
        if mode_name in SwimLaneMode.__members__:
            mode = SwimLaneMode[mode_name]

        visibility = defaults.visibility
        try:
            visibility = VisibilityOverride(data.get("visibility", visibility.value))
        except ValueError:
            logger.warning("Unknown visibility %r in config, using auto", data.get("visibility"))

        try:
            split_ratio = clamp_split_ratio(float(data.get("split_ratio", defaults.split_ratio)))
        except (TypeError, ValueError):
            split_ratio = defaults.split_ratio

        markdown_width = data.get("markdown_width", defaults.markdown_width)
        if not isinstance(markdown_width, int) or markdown_width <= 0:
            markdown_width = defaults.markdown_width

        log_level = str(data.get("log_level", defaults.log_level)).upper()
        if log_level not in LOG_LEVELS:
            log_level = defaults.log_level

        issues_file = data.get("issues_file") or defaults.issues_file

        return cls(
            issues_file=str(issues_file),
            swimlane_mode=mode,
            visibility=visibility,
            show_detail=bool(data.get("show_detail", defaults.show_detail)),
            split_ratio=split_ratio,
            markdown_width=markdown_width,
            log_level=log_level,
            version=data.get("version", CONFIG_VERSION),
        )

    def issues_path(self, project_root: Path | None = None) -> Path:
        """Resolve the issues file, honouring $SWIMLANE_ISSUES."""
        override = os.environ.get(ISSUES_ENV_VAR)
        path = Path(override or self.issues_file)
        if path.is_absolute():
            return path
        return (project_root or Path.cwd()) / path


def get_board_dir(project_root: Path | None = None) -> Path:
    """Get the .swimlane directory path."""
    root = project_root or Path.cwd()
    return root / BOARD_DIR


def ensure_board_dir(project_root: Path | None = None) -> Path:
    """Ensure .swimlane directory exists, return path."""
    board_dir = get_board_dir(project_root)
    board_dir.mkdir(parents=True, exist_ok=True)
    (board_dir / "logs").mkdir(exist_ok=True)
    return board_dir


def load_config(project_root: Path | None = None) -> BoardConfig:
    """Load config from .swimlane/config.json, or return defaults."""
    config_path = get_board_dir(project_root) / CONFIG_FILE

    if config_path.exists():
        try:
            with open(config_path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unreadable %s: %s", config_path, e)
            return BoardConfig()
        if isinstance(data, dict):
            return BoardConfig.from_dict(data)

    return BoardConfig()


def save_config(config: BoardConfig, project_root: Path | None = None) -> None:
    """Save config to .swimlane/config.json."""
    board_dir = ensure_board_dir(project_root)
    config_path = board_dir / CONFIG_FILE

    with open(config_path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)
