"""TUI for the swimlane board using Textual.

The board itself is rendered by ``BoardModel.render`` into a single Static
widget; this module only routes keys and shows the search bar and status
line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Center, Middle
from textual.widgets import Static

from swimlane.board import BoardModel
from swimlane.config import BoardConfig, load_config, save_config
from swimlane.detail import RichMarkdownRenderer
from swimlane.grouping import COL_BLOCKED, COL_CLOSED, COL_IN_PROGRESS, COL_OPEN
from swimlane.source import IssueLoadError, load_issues

logger = logging.getLogger(__name__)

DETAIL_SCROLL_LINES = 3

COLUMN_KEYS = {"1": COL_OPEN, "2": COL_IN_PROGRESS, "3": COL_BLOCKED, "4": COL_CLOSED}

HELP_BINDINGS = [
    ("h/j/k/l", "Move between cards and columns"),
    ("1-4", "Jump to column"),
    ("H / L", "First / last column"),
    ("gg / G", "Top / bottom of column"),
    ("0 / $", "Top / bottom of column"),
    ("ctrl+d/u", "Page down / up"),
    ("/", "Search, n/N next/previous match"),
    ("s", "Cycle swimlane mode"),
    ("e", "Cycle empty column visibility"),
    ("d", "Expand / collapse card"),
    ("tab", "Toggle detail panel"),
    ("ctrl+j/k", "Scroll detail panel"),
    ("R", "Reload issues"),
    ("?", "Show/hide this help"),
    ("q", "Quit"),
]


@dataclass
class KeyResult:
    """What the app should do after a key was routed to the board."""

    handled: bool = True
    message: str | None = None
    action: str | None = None  # "quit", "reload" or "help"


def key_name(key: str, character: str | None) -> str:
    """Printable characters by their glyph, everything else by Textual's key name."""
    if character and len(character) == 1 and character.isprintable():
        return character
    return key


def dispatch_key(model: BoardModel, key: str, page_rows: int) -> KeyResult:
    """Route one key to the board.

    Args:
        model: The board to drive.
        key: Key as returned by ``key_name``.
        page_rows: Rows to move for ctrl+d / ctrl+u.

    Returns:
        KeyResult describing any status message or app-level action.
    """
    if model.is_search_mode:
        if key == "escape":
            model.cancel_search()
        elif key == "enter":
            model.finish_search()
        elif key == "backspace":
            model.backspace_search()
        elif key == "n":
            model.next_match()
        elif key == "N":
            model.prev_match()
        elif len(key) == 1:
            model.append_search_char(key)
        else:
            return KeyResult(handled=False)
        return KeyResult()

    if model.is_waiting_for_g:
        model.clear_waiting_for_g()
        if key == "g":
            model.move_to_top()
            return KeyResult()

    if key in ("h", "left"):
        model.move_left()
    elif key in ("l", "right"):
        model.move_right()
    elif key in ("j", "down"):
        model.move_down()
    elif key in ("k", "up"):
        model.move_up()
    elif key in ("home", "0"):
        model.move_to_top()
    elif key in ("G", "end", "$"):
        model.move_to_bottom()
    elif key == "ctrl+d":
        model.page_down(page_rows)
    elif key == "ctrl+u":
        model.page_up(page_rows)
    elif key in COLUMN_KEYS:
        model.jump_to_column(COLUMN_KEYS[key])
    elif key == "H":
        model.jump_to_first_column()
    elif key == "L":
        model.jump_to_last_column()
    elif key == "g":
        model.set_waiting_for_g()
    elif key == "/":
        model.start_search()
    elif key == "n":
        if model.search_match_count > 0:
            model.next_match()
    elif key == "N":
        if model.search_match_count > 0:
            model.prev_match()
    elif key == "s":
        model.cycle_mode()
        return KeyResult(message=f"🔀 Swimlane: {model.mode_name}")
    elif key == "e":
        model.cycle_visibility()
        hidden = model.hidden_column_count
        message = f"👁 Empty columns: {model.visibility_mode_name}"
        if hidden > 0:
            message = f"{message} ({hidden} hidden)"
        return KeyResult(message=message)
    elif key == "d":
        model.toggle_expand()
        if model.has_expanded_card:
            return KeyResult(message="📋 Card expanded (d=collapse, j/k=auto-collapse)")
        return KeyResult(message="📋 Card collapsed")
    elif key == "tab":
        model.toggle_detail()
    elif key == "ctrl+j":
        model.detail_scroll_down(DETAIL_SCROLL_LINES)
    elif key == "ctrl+k":
        model.detail_scroll_up(DETAIL_SCROLL_LINES)
    elif key == "R":
        return KeyResult(action="reload")
    elif key == "?":
        return KeyResult(action="help")
    elif key == "q":
        return KeyResult(action="quit")
    else:
        return KeyResult(handled=False)
    return KeyResult()


def search_bar_text(model: BoardModel) -> Text:
    """The one-line search prompt shown while typing a query."""
    text = Text()
    if not model.is_search_mode:
        return text
    text.append("/", style="bold cyan")
    text.append(model.search_query)
    text.append("█", style="dim")
    if model.search_query:
        if model.search_match_count:
            text.append(
                f"  {model.search_cursor_position}/{model.search_match_count} matches",
                style="dim",
            )
        else:
            text.append("  no matches", style="bold red")
    return text


class BoardView(Static, can_focus=True):
    """Static widget that re-renders the board on every change."""

    DEFAULT_CSS = """
    BoardView {
        width: 100%;
        height: 1fr;
    }
    """

    def __init__(self, model: BoardModel, **kwargs) -> None:
        super().__init__(**kwargs)
        self.model = model

    def on_resize(self, event: events.Resize) -> None:
        self.model.resize(event.size.width, event.size.height)
        self.redraw()

    def on_key(self, event: events.Key) -> None:
        # Handled keys stop here so app bindings such as tab never see them
        if self.app.handle_board_key(event):
            event.stop()
            event.prevent_default()

    def redraw(self) -> None:
        width, height = self.size.width, self.size.height
        if width and height:
            self.update(self.model.render(width, height))


class HelpOverlay(Static):
    """A modal overlay showing all keybindings."""

    DEFAULT_CSS = """
    HelpOverlay {
        width: 56;
        height: auto;
        background: $surface;
        border: round $primary;
        padding: 1 2;
    }
    """

    def __init__(self, bindings: list[tuple[str, str]], **kwargs) -> None:
        super().__init__(**kwargs)
        self._bindings = bindings

    def compose(self) -> ComposeResult:
        yield Static(self._render_help())

    def _render_help(self) -> Text:
        text = Text()
        text.append("Keybindings\n", style="bold underline")
        text.append("\n")
        for key, description in self._bindings:
            text.append(f"  {key:>10}", style="bold cyan")
            text.append(f"  {description}\n")
        text.append("\n")
        text.append("Press ", style="dim")
        text.append("?", style="bold cyan")
        text.append(" to close", style="dim")
        return text


class BoardApp(App):
    """A Textual app hosting the swimlane board."""

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True),
    ]

    CSS = """
    #search-bar {
        height: 1;
        width: 100%;
        padding: 0 1;
    }
    #status-line {
        height: 1;
        width: 100%;
        padding: 0 1;
        background: $surface;
    }
    #help-overlay-container {
        width: 100%;
        height: 100%;
        align: center middle;
        display: none;
    }
    #help-overlay-container.visible {
        display: block;
    }
    """

    def __init__(
        self,
        issues_path: Path,
        config: BoardConfig | None = None,
        project_root: Path | None = None,
    ) -> None:
        """Initialize the app.

        Args:
            issues_path: JSONL file to load issues from.
            config: Board settings; loaded from the project when omitted.
            project_root: Project root for config persistence.
        """
        super().__init__()
        self._project_root = project_root or Path.cwd()
        self._board_config = config or load_config(self._project_root)
        self._issues_path = issues_path
        self._help_visible = False
        self.model = BoardModel(
            renderer=RichMarkdownRenderer(max_width=self._board_config.markdown_width),
            mode=self._board_config.swimlane_mode,
            visibility=self._board_config.visibility,
            show_detail=self._board_config.show_detail,
            split_ratio=self._board_config.split_ratio,
        )

    def compose(self) -> ComposeResult:
        """Compose the board, search bar and status line."""
        yield BoardView(self.model, id="board")
        yield Static(id="search-bar")
        yield Static(id="status-line")
        with Center(id="help-overlay-container"):
            with Middle():
                yield HelpOverlay(HELP_BINDINGS, id="help-overlay")

    def on_mount(self) -> None:
        """Load issues and focus the board."""
        self._load(preserve_selection=False)
        self.query_one("#board", BoardView).focus()

    def _load(self, preserve_selection: bool) -> None:
        try:
            issues = load_issues(self._issues_path)
        except IssueLoadError as e:
            logger.error("Reload failed: %s", e)
            self._set_status(f"[red]✗[/red] {e}")
            return
        self.model.set_issues(issues, preserve_selection=preserve_selection)
        self._set_status(f"Loaded {len(issues)} issues from {self._issues_path.name}")
        self._redraw()

    def _set_status(self, message: str) -> None:
        self.query_one("#status-line", Static).update(message)

    def _redraw(self) -> None:
        self.query_one("#board", BoardView).redraw()
        self.query_one("#search-bar", Static).update(search_bar_text(self.model))

    def handle_board_key(self, event: events.Key) -> bool:
        """Route a key pressed on the board.

        Returns:
            True if the key was consumed.
        """
        if self._help_visible:
            if event.key in ("question_mark", "escape", "q"):
                self.action_toggle_help()
            return True

        page_rows = max(self.size.height // 3, 1)
        result = dispatch_key(self.model, key_name(event.key, event.character), page_rows)
        if not result.handled:
            return False

        if result.action == "quit":
            self._save_view_settings()
            self.exit()
        elif result.action == "reload":
            self._load(preserve_selection=True)
        elif result.action == "help":
            self.action_toggle_help()
        else:
            if result.message:
                self._set_status(result.message)
            self._redraw()
        return True

    def action_toggle_help(self) -> None:
        """Show or hide the keybinding overlay."""
        self._help_visible = not self._help_visible
        container = self.query_one("#help-overlay-container")
        container.set_class(self._help_visible, "visible")

    def _save_view_settings(self) -> None:
        """Persist the last used swimlane mode, visibility and detail pane."""
        self._board_config.swimlane_mode = self.model.mode
        self._board_config.visibility = self.model.policy.override
        self._board_config.show_detail = not self.model.detail_pane.user_hidden
        save_config(self._board_config, self._project_root)


def main(
    issues_path: Path,
    config: BoardConfig | None = None,
    project_root: Path | None = None,
):
    """Run the TUI application.

    Args:
        issues_path: JSONL file to load issues from.
        config: Board settings.
        project_root: Project root path.
    """
    app = BoardApp(issues_path, config=config, project_root=project_root)
    app.run()
