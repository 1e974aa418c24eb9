"""CLI and REPL interface for swimlane."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.history import FileHistory
from rich.console import Console

from swimlane.board import BoardModel
from swimlane.board_logging import read_log_tail, setup_logger
from swimlane.config import BoardConfig, ensure_board_dir, load_config, save_config
from swimlane.detail import RichMarkdownRenderer
from swimlane.display import (
    print_banner,
    print_board,
    print_config,
    print_error,
    print_help,
    print_info,
    print_log_tail,
    print_selection,
    print_stats,
    print_warning,
)
from swimlane.grouping import COLUMN_COUNT, SwimLaneMode
from swimlane.source import IssueLoadError, load_issues

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_RENDER_HEIGHT = 40


@dataclass
class Shell:
    """Everything the REPL commands operate on."""

    model: BoardModel
    config: BoardConfig
    project_root: Path
    issues_path: Path
    width: int = field(default_factory=lambda: console.width)
    height: int = DEFAULT_RENDER_HEIGHT

    def redraw(self) -> None:
        self.model.resize(self.width, self.height)
        print_board(self.model, self.width, self.height)


def make_shell(project_root: Path, issues_path: Path | None = None, config: BoardConfig | None = None) -> Shell:
    """Build a shell with an empty board for ``project_root``."""
    config = config or load_config(project_root)
    model = BoardModel(
        renderer=RichMarkdownRenderer(max_width=config.markdown_width),
        mode=config.swimlane_mode,
        visibility=config.visibility,
        show_detail=config.show_detail,
        split_ratio=config.split_ratio,
    )
    return Shell(
        model=model,
        config=config,
        project_root=project_root,
        issues_path=issues_path or config.issues_path(project_root),
    )


def get_prompt(shell: Shell) -> str:
    """Generate the prompt string."""
    model = shell.model
    if model.total_count:
        return f"[{model.mode_name.lower()} {model.total_count}] swimlane> "
    return "swimlane> "


def cmd_load(shell: Shell, args: list[str], preserve_selection: bool = False) -> bool:
    """Load issues from ``args[0]`` or the current issues file.

    Returns:
        True if the board was replaced.
    """
    if args:
        path = Path(args[0]).expanduser()
        if not path.is_absolute():
            path = shell.project_root / path
        shell.issues_path = path

    try:
        issues = load_issues(shell.issues_path)
    except IssueLoadError as e:
        print_error(str(e))
        return False

    shell.model.set_issues(issues, preserve_selection=preserve_selection)
    print_info(f"Loaded {len(issues)} issues from {shell.issues_path}")
    return True


def cmd_mode(shell: Shell, args: list[str]) -> None:
    """Cycle the swimlane mode, or set it by name."""
    if not args:
        shell.model.cycle_mode()
    else:
        name = args[0].upper()
        if name not in SwimLaneMode.__members__:
            print_error(f"Unknown mode: {args[0]}. Use status, priority or type.")
            return
        shell.model.set_mode(SwimLaneMode[name])
    print_info(f"🔀 Swimlane: {shell.model.mode_name}")
    shell.redraw()


def cmd_empty(shell: Shell, args: list[str]) -> None:
    """Cycle empty column visibility."""
    shell.model.cycle_visibility()
    hidden = shell.model.hidden_column_count
    message = f"👁 Empty columns: {shell.model.visibility_mode_name}"
    if hidden > 0:
        message = f"{message} ({hidden} hidden)"
    print_info(message)
    shell.redraw()


def cmd_col(shell: Shell, args: list[str]) -> None:
    """Jump to column 1-4."""
    try:
        column = int(args[0]) - 1
    except (IndexError, ValueError):
        print_error(f"Usage: col <1-{COLUMN_COUNT}>")
        return
    shell.model.jump_to_column(column)
    shell.redraw()


def cmd_select(shell: Shell, args: list[str]) -> None:
    """Select a card by issue ID."""
    if not args:
        print_error("Usage: select <id>")
        return
    if not shell.model.select_issue_by_id(args[0]):
        print_error(f"No issue '{args[0]}' on the board")
        return
    shell.redraw()


def cmd_search(shell: Shell, args: list[str]) -> None:
    """Run a search for the given text and keep the results for n/N."""
    query = " ".join(args)
    if not query:
        print_error("Usage: search <text>")
        return
    model = shell.model
    model.start_search()
    for ch in query:
        model.append_search_char(ch)
    count = model.search_match_count
    shell.redraw()
    model.finish_search()
    if count:
        print_info(f"{count} match(es) for '{query}'")
    else:
        print_info(f"No matches for '{query}'")


def cmd_match(shell: Shell, forward: bool) -> None:
    """Move to the next or previous search match."""
    model = shell.model
    if model.search_match_count == 0:
        print_info("No search results. Use 'search <text>' first.")
        return
    if forward:
        model.next_match()
    else:
        model.prev_match()
    shell.redraw()
    print_info(f"Match {model.search_cursor_position}/{model.search_match_count}")


def cmd_expand(shell: Shell, args: list[str]) -> None:
    """Expand or collapse the selected card."""
    shell.model.toggle_expand()
    if shell.model.has_expanded_card:
        print_info("📋 Card expanded (d=collapse, j/k=auto-collapse)")
    else:
        print_info("📋 Card collapsed")
    shell.redraw()


def cmd_detail(shell: Shell, args: list[str]) -> None:
    """Toggle the detail panel."""
    shell.model.toggle_detail()
    shell.model.resize(shell.width, shell.height)
    if not shell.model.is_detail_shown and not shell.model.detail_pane.user_hidden:
        print_warning("Detail panel is hidden at this width")
    shell.redraw()


def cmd_size(shell: Shell, args: list[str]) -> None:
    """Set the render size used by board output."""
    try:
        width, height = int(args[0]), int(args[1])
    except (IndexError, ValueError):
        print_error("Usage: size <width> <height>")
        return
    shell.width = max(width, 1)
    shell.height = max(height, 1)
    shell.redraw()


def cmd_save(shell: Shell, args: list[str]) -> None:
    """Save the current mode and visibility to the project config."""
    shell.config.swimlane_mode = shell.model.mode
    shell.config.visibility = shell.model.policy.override
    shell.config.show_detail = not shell.model.detail_pane.user_hidden
    save_config(shell.config, shell.project_root)
    print_info("Saved board configuration")


def cmd_logs(shell: Shell, args: list[str]) -> None:
    """Show the tail of the board log.

    Usage:
        logs          - Show last 30 lines
        logs -n 50    - Show last 50 lines
    """
    lines = 30
    if len(args) >= 2 and args[0] == "-n":
        try:
            lines = int(args[1])
        except ValueError:
            print_error(f"Invalid line count: {args[1]}")
            return

    content = read_log_tail(lines, shell.project_root)
    if content:
        print_log_tail(content)
    else:
        print_info("No log entries yet")


def cmd_tui(shell: Shell, args: list[str]) -> None:
    """Open the Textual board on the current issues file."""
    from swimlane.tui import main as tui_main

    tui_main(shell.issues_path, config=shell.config, project_root=shell.project_root)
    # The app may have reloaded data, so pick up the file again
    cmd_load(shell, [], preserve_selection=True)


_MOVES = {
    "h": BoardModel.move_left,
    "left": BoardModel.move_left,
    "l": BoardModel.move_right,
    "right": BoardModel.move_right,
    "j": BoardModel.move_down,
    "down": BoardModel.move_down,
    "k": BoardModel.move_up,
    "up": BoardModel.move_up,
    "top": BoardModel.move_to_top,
    "bottom": BoardModel.move_to_bottom,
    "first": BoardModel.jump_to_first_column,
    "last": BoardModel.jump_to_last_column,
}


def handle_command(line: str, shell: Shell) -> bool:
    """Handle a command line. Returns True to continue, False to quit."""
    parts = line.strip().split()
    if not parts:
        return True

    cmd = parts[0]
    args = parts[1:]

    # n/N are case sensitive, everything else is not
    if cmd == "N":
        cmd_match(shell, forward=False)
        return True
    cmd = cmd.lower()

    if cmd in ("quit", "exit", "q"):
        return False
    elif cmd == "help":
        print_help()
    elif cmd in ("board", "b", "show"):
        shell.redraw()
    elif cmd == "load":
        if cmd_load(shell, args):
            shell.redraw()
    elif cmd == "reload":
        if cmd_load(shell, [], preserve_selection=True):
            shell.redraw()
    elif cmd == "stats":
        print_stats(shell.model)
    elif cmd in _MOVES:
        _MOVES[cmd](shell.model)
        shell.redraw()
        print_selection(shell.model)
    elif cmd == "col":
        cmd_col(shell, args)
    elif cmd == "select":
        cmd_select(shell, args)
    elif cmd in ("mode", "s"):
        cmd_mode(shell, args)
    elif cmd in ("empty", "e"):
        cmd_empty(shell, args)
    elif cmd in ("search", "/"):
        cmd_search(shell, args)
    elif cmd == "n":
        cmd_match(shell, forward=True)
    elif cmd in ("expand", "d"):
        cmd_expand(shell, args)
    elif cmd in ("detail", "tab"):
        cmd_detail(shell, args)
    elif cmd == "size":
        cmd_size(shell, args)
    elif cmd == "config":
        print_config(shell.config)
    elif cmd == "save":
        cmd_save(shell, args)
    elif cmd == "logs":
        cmd_logs(shell, args)
    elif cmd == "tui":
        cmd_tui(shell, args)
    else:
        print_error(f"Unknown command: {cmd}. Type 'help' for commands.")

    return True


def main() -> None:
    """Main entry point.

    ``swimlane`` opens the shell; ``swimlane <issues.jsonl>`` loads that file;
    ``swimlane tui [issues.jsonl]`` goes straight to the interactive board.
    """
    project_root = Path.cwd()
    ensure_board_dir(project_root)
    config = load_config(project_root)
    setup_logger(config.log_level, project_root)

    argv = sys.argv[1:]
    open_tui = bool(argv) and argv[0] == "tui"
    if open_tui:
        argv = argv[1:]

    issues_path = Path(argv[0]).expanduser().resolve() if argv else None
    shell = make_shell(project_root, issues_path, config)

    if open_tui:
        from swimlane.tui import main as tui_main

        tui_main(shell.issues_path, config=shell.config, project_root=project_root)
        return

    # Set up prompt session with history
    history_file = project_root / ".swimlane" / "history"
    session = PromptSession(
        history=FileHistory(str(history_file)),
        auto_suggest=AutoSuggestFromHistory(),
    )

    print_banner()
    if cmd_load(shell, []):
        shell.redraw()

    # REPL loop
    while True:
        try:
            line = session.prompt(get_prompt(shell))
            if not handle_command(line, shell):
                break
        except KeyboardInterrupt:
            continue
        except EOFError:
            break

    console.print("[dim]bye[/dim]")


if __name__ == "__main__":
    main()
