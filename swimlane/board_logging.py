"""Logging for the swimlane board.

The TUI owns the terminal, so log records go to a per-project file under
``.swimlane/logs`` instead of stdout.
"""

from __future__ import annotations

import logging
from pathlib import Path

from swimlane.config import ensure_board_dir

LOGGER_NAME = "swimlane"
LOG_FILE = "board.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_log_path(project_root: Path | None = None) -> Path:
    """Get the board log file path, creating the log directory."""
    return ensure_board_dir(project_root) / "logs" / LOG_FILE


def setup_logger(
    level: int | str = logging.INFO,
    project_root: Path | None = None,
    name: str = LOGGER_NAME,
) -> logging.Logger:
    """Set up and return the package logger writing to .swimlane/logs/board.log.

    Calling this again replaces the previous file handler, so switching
    projects in one process does not duplicate records.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        if handler.get_name() == name:
            logger.removeHandler(handler)
            handler.close()

    handler = logging.FileHandler(get_log_path(project_root), encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.set_name(name)
    logger.addHandler(handler)
    return logger


def read_log_tail(lines: int = 30, project_root: Path | None = None) -> str | None:
    """Read the last N lines of the board log."""
    log_path = get_log_path(project_root)
    if not log_path.exists():
        return None
    content = log_path.read_text(encoding="utf-8")
    if not content.strip():
        return None
    log_lines = content.strip().split("\n")
    return "\n".join(log_lines[-lines:])


def clear_log(project_root: Path | None = None) -> None:
    """Truncate the board log."""
    log_path = get_log_path(project_root)
    if log_path.exists():
        log_path.write_text("")
