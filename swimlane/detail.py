"""Detail pane content for the selected issue.

The pane text is a small markdown document run through a renderer. Building
and rendering it is the most expensive thing the board does per keystroke,
so the result is memoized per selected issue and rebuilt only when the
selection, the data or the wrap width changes.
"""

from __future__ import annotations

import io
import logging
from datetime import datetime
from typing import Protocol

from rich.console import Console
from rich.markdown import Markdown
from rich.text import Text

from swimlane.deps import DependencyIndex
from swimlane.formatting import fit, format_time_rel
from swimlane.issue import Issue
from swimlane.theme import DEFAULT_THEME, Theme

logger = logging.getLogger(__name__)

NO_SELECTION_KEY = "_none_"

NO_SELECTION_TEXT = (
    "## No Selection\n\n"
    "Navigate to a card with **h/l** and **j/k** to see details here.\n\n"
    "Press **Tab** to hide this panel."
)

MIN_VIEWPORT_WIDTH = 20
MIN_VIEWPORT_HEIGHT = 5


class MarkdownRenderError(Exception):
    """Markdown could not be rendered."""

    pass


class MarkdownRenderer(Protocol):
    """Turns markdown into styled terminal text."""

    def render(self, text: str, width: int) -> Text:
        """Render ``text`` wrapped to ``width``; raise MarkdownRenderError on failure."""
        ...


class RichMarkdownRenderer:
    """Markdown rendering through rich's Markdown renderable.

    Text wraps at ``width`` or ``max_width``, whichever is narrower.
    """

    def __init__(self, code_theme: str = "monokai", max_width: int = 60) -> None:
        self.code_theme = code_theme
        self.max_width = max_width

    def render(self, text: str, width: int) -> Text:
        console = Console(
            width=max(min(width, self.max_width), 1),
            file=io.StringIO(),
            force_terminal=True,
            color_system="truecolor",
        )
        try:
            with console.capture() as capture:
                console.print(Markdown(text, code_theme=self.code_theme))
        except Exception as e:
            raise MarkdownRenderError(f"markdown render failed: {e}") from e
        rendered = Text.from_ansi(capture.get())
        rendered.rstrip()
        return rendered


def render_markdown(renderer: MarkdownRenderer | None, text: str, width: int) -> Text:
    """Render markdown, falling back to the raw text on any renderer failure."""
    if renderer is None:
        return Text(text)
    try:
        return renderer.render(text, width)
    except MarkdownRenderError as e:
        logger.warning("Falling back to plain text: %s", e)
    except Exception as e:
        logger.warning(
            "Markdown renderer %s failed, using plain text: %r", type(renderer).__name__, e
        )
    return Text(text)


def build_detail_markdown(
    issue: Issue,
    index: DependencyIndex,
    theme: Theme = DEFAULT_THEME,
    now: datetime | None = None,
) -> str:
    """Markdown document for one issue's detail pane."""
    parts = [
        f"## {theme.type_icon(issue.issue_type)} {issue.id}\n\n",
        f"**{issue.title}**\n\n",
        f"{theme.status_icon(issue.status)} {issue.status}  "
        f"{theme.priority_icon(issue.priority)} P{issue.priority}\n\n",
    ]

    if issue.assignee:
        parts.append(f"**Assignee:** @{issue.assignee}\n\n")

    if issue.labels:
        parts.append(f"**Labels:** {', '.join(issue.labels)}\n\n")

    blockers = index.blocked_by(issue)
    if blockers:
        parts.append("**Blocked by:**\n")
        for dep, blocker in blockers:
            if blocker is not None:
                parts.append(f"- {dep.depends_on_id}: {blocker.title} ({blocker.status})\n")
            else:
                parts.append(f"- {dep.depends_on_id}\n")
        parts.append("\n")

    blocked_ids = index.blocks(issue.id)
    if blocked_ids:
        parts.append("**Blocks:**\n")
        for blocked_id in blocked_ids:
            blocked = index.lookup(blocked_id)
            if blocked is not None:
                parts.append(f"- {blocked_id}: {blocked.title}\n")
            else:
                parts.append(f"- {blocked_id}\n")
        parts.append(f"\n💡 Completing this would unblock {len(blocked_ids)} issue(s)\n\n")

    if issue.description:
        parts.append("---\n\n")
        parts.append(issue.description)
        parts.append("\n")

    parts.append("\n---\n\n")
    parts.append(f"*Created: {format_time_rel(issue.created_at, now)}*\n")
    parts.append(f"*Updated: {format_time_rel(issue.updated_at, now)}*\n")
    return "".join(parts)


class DetailPanelCache:
    """Memoized detail content plus the pane's scroll offset."""

    def __init__(
        self,
        renderer: MarkdownRenderer | None = None,
        theme: Theme = DEFAULT_THEME,
    ) -> None:
        self.renderer = renderer
        self.theme = theme
        self.last_key = ""
        self.offset = 0
        self.builds = 0
        self._width = 0
        self._lines: list[Text] = []

    def invalidate(self) -> None:
        """Force a rebuild on the next render."""
        self.last_key = ""

    def lines_for(
        self,
        issue: Issue | None,
        index: DependencyIndex,
        width: int,
        now: datetime | None = None,
    ) -> list[Text]:
        """Rendered content lines, rebuilt only when the key or width changes."""
        key = issue.id if issue is not None else NO_SELECTION_KEY
        width = max(width, MIN_VIEWPORT_WIDTH)
        if key == self.last_key and width == self._width:
            return self._lines

        if issue is None:
            source = NO_SELECTION_TEXT
        else:
            source = build_detail_markdown(issue, index, self.theme, now)
        rendered = render_markdown(self.renderer, source, width)

        self.last_key = key
        self._width = width
        self._lines = list(rendered.split("\n", allow_blank=True))
        self.offset = 0
        self.builds += 1
        return self._lines

    def scroll_down(self, lines: int) -> None:
        self.offset = min(self.offset + max(lines, 0), self._max_offset_hint())

    def scroll_up(self, lines: int) -> None:
        self.offset = max(self.offset - max(lines, 0), 0)

    def _max_offset_hint(self) -> int:
        # Exact bound depends on viewport height; render clamps the rest
        return max(len(self._lines) - 1, 0)

    def render_panel(
        self,
        issue: Issue | None,
        index: DependencyIndex,
        width: int,
        height: int,
        now: datetime | None = None,
    ) -> list[Text]:
        """The bordered DETAILS pane as exactly ``height`` lines of ``width`` cells."""
        theme = self.theme
        width = max(width, MIN_VIEWPORT_WIDTH + 4)
        height = max(height, MIN_VIEWPORT_HEIGHT + 3)
        inner = width - 4  # border + padding
        content = self.lines_for(issue, index, inner, now)

        viewport_rows = height - 3  # borders + title
        overflow = len(content) > viewport_rows
        if overflow:
            viewport_rows -= 1  # room for the scroll hint
        max_offset = max(len(content) - viewport_rows, 0)
        offset = min(self.offset, max_offset)
        visible = content[offset:offset + viewport_rows]

        border_style = theme.primary
        body: list[Text] = [Text("DETAILS", style=f"bold {theme.primary}", justify="center")]
        body.extend(visible)
        while len(body) < height - 2 - (1 if overflow else 0):
            body.append(Text(""))
        if overflow:
            percent = int(offset * 100 / max_offset) if max_offset else 100
            body.append(Text(f"─ {percent}% ─ ctrl+j/k", style=f"italic {theme.secondary}"))

        lines = [Text("╭" + "─" * (width - 2) + "╮", style=border_style)]
        for row in body:
            if row.justify == "center":
                row = _center(row, inner)
            line = Text("│ ", style=border_style)
            line.append_text(fit(row, inner))
            line.append(" │", style=border_style)
            lines.append(line)
        lines.append(Text("╰" + "─" * (width - 2) + "╯", style=border_style))
        return lines


def _center(text: Text, width: int) -> Text:
    pad = max(width - text.cell_len, 0)
    centered = Text(" " * (pad // 2))
    centered.append_text(text)
    return centered
