"""Card rendering for board columns.

A compact card is always six lines tall (three content lines, two border
lines, one margin line) so the layout engine can count how many fit. The
expanded card grows to show the description and resolved dependencies.
"""

from __future__ import annotations

from datetime import datetime

from rich.text import Text

from swimlane.deps import DependencyIndex
from swimlane.detail import MarkdownRenderer, render_markdown
from swimlane.formatting import fit, format_priority, format_time_rel, truncate, wrap
from swimlane.issue import STATUS_OPEN, Issue
from swimlane.theme import BLUE, GREEN, ORANGE, PURPLE, RED, DEFAULT_THEME, Theme

EXPANDED_DESCRIPTION_LINES = 8
MATCH_BACKGROUND = "#4a148c"


def border_color(
    issue: Issue,
    index: DependencyIndex,
    theme: Theme,
    selected: bool = False,
    current_match: bool = False,
    any_match: bool = False,
) -> str:
    """Card border colour, most specific reason first."""
    if selected:
        return theme.primary
    if current_match:
        return PURPLE
    if any_match:
        return BLUE
    if issue.has_blocking_deps:
        return RED
    if index.blocks_others(issue.id):
        return ORANGE
    if issue.status == STATUS_OPEN:
        return GREEN
    return theme.border


def _boxed(rows: list[Text], width: int, color: str, background: str | None) -> list[Text]:
    """Wrap content rows in a thick border, with a trailing margin line."""
    lines = [Text("┏" + "━" * (width + 2) + "┓", style=color)]
    for row in rows:
        line = Text("┃", style=color)
        body = Text(" ")
        body.append_text(fit(row, width))
        body.append(" ")
        if background:
            body.stylize(f"on {background}")
        line.append_text(body)
        line.append("┃", style=color)
        lines.append(line)
    lines.append(Text("┗" + "━" * (width + 2) + "┛", style=color))
    lines.append(Text(""))
    return lines


def _header_parts(issue: Issue, theme: Theme) -> tuple[Text, Text]:
    icon = Text(theme.type_icon(issue.issue_type), style=theme.type_color(issue.issue_type))
    prio = Text(format_priority(issue.priority), style=theme.priority_style(issue.priority))
    return icon, prio


def card_meta_line(issue: Issue, index: DependencyIndex, theme: Theme) -> Text:
    """Third card line: first blocker, blocks count, up to three labels."""
    meta: list[Text] = []

    for dep in issue.blocking_dependencies:
        blocker_id = truncate(dep.depends_on_id, 10)
        badge = f"🚫←{blocker_id}"
        blocker = index.lookup(dep.depends_on_id)
        if blocker is not None:
            badge = f"🚫←{blocker_id} ({truncate(blocker.title, 12)})"
        meta.append(Text(badge, style=theme.status_color("blocked")))
        break  # only the first blocker fits

    blocked_ids = index.blocks(issue.id)
    if blocked_ids:
        meta.append(Text(f"⚡→{len(blocked_ids)}", style=theme.type_color("feature")))

    if issue.labels:
        labels = ",".join(truncate(label, 8, "") for label in issue.labels[:3])
        meta.append(Text(labels, style=theme.status_color("in_progress")))

    return Text(" ").join(meta)


def render_card(
    issue: Issue,
    width: int,
    index: DependencyIndex,
    theme: Theme = DEFAULT_THEME,
    selected: bool = False,
    current_match: bool = False,
    any_match: bool = False,
    now: datetime | None = None,
) -> list[Text]:
    """Compact three-line card; ``width`` is the text area width."""
    width = max(width, 10)
    icon, prio = _header_parts(issue, theme)

    # Reserve room for icon, priority and the age tag
    display_id = truncate(issue.id, max(width - 14, 6))
    age_text = truncate(format_time_rel(issue.updated_at, now), 6, "")

    line1 = Text()
    line1.append_text(icon)
    line1.append(" ")
    line1.append_text(prio)
    line1.append(" ")
    line1.append(display_id, style=f"bold {theme.secondary}")
    line1.append(" ")
    line1.append(age_text, style=theme.age_style(issue.updated_at, now))

    title_style = f"bold {theme.primary}" if selected else theme.text
    line2 = Text(truncate(issue.title, max(width - 2, 10)), style=title_style)

    line3 = card_meta_line(issue, index, theme)

    color = border_color(issue, index, theme, selected, current_match, any_match)
    background = None
    if selected:
        background = theme.highlight
    elif current_match:
        background = MATCH_BACKGROUND
    return _boxed([line1, line2, line3], width, color, background)


def render_expanded_card(
    issue: Issue,
    width: int,
    index: DependencyIndex,
    renderer: MarkdownRenderer | None = None,
    theme: Theme = DEFAULT_THEME,
    now: datetime | None = None,
) -> list[Text]:
    """Inline expanded card with description, dependencies and labels."""
    width = max(width, 10)
    icon, prio = _header_parts(issue, theme)

    header = Text()
    header.append_text(icon)
    header.append(" ")
    header.append_text(prio)
    header.append(" ")
    header.append(issue.id, style=f"bold {theme.primary}")
    header.append(" ▼")

    rows: list[Text] = [header]
    rows.extend(wrap(Text(issue.title, style=f"bold {theme.primary}"), width))
    separator = Text("─" * max(width - 2, 1), style=theme.secondary)
    rows.append(separator)

    if issue.description:
        desc_lines = issue.description.split("\n")
        if len(desc_lines) > EXPANDED_DESCRIPTION_LINES:
            desc_lines = desc_lines[:EXPANDED_DESCRIPTION_LINES] + ["..."]
        rendered = render_markdown(renderer, "\n".join(desc_lines), width)
        rendered.rstrip()
        for line in rendered.split("\n", allow_blank=True):
            rows.extend(wrap(line, width))

    dep_rows: list[Text] = []
    blockers = index.blocked_by(issue)
    blocked_color = theme.status_color("blocked")
    if blockers:
        dep_rows.append(Text("Blocked by:", style=f"bold {blocked_color}"))
        for dep, blocker in blockers:
            entry = f"  • {dep.depends_on_id}"
            if blocker is not None:
                entry = f"  • {dep.depends_on_id}: {blocker.title} ({blocker.status})"
            dep_rows.extend(wrap(Text(entry, style=blocked_color), width))

    blocked_ids = index.blocks(issue.id)
    feature_color = theme.type_color("feature")
    if blocked_ids:
        dep_rows.append(Text("Blocks:", style=f"bold {feature_color}"))
        for blocked_id in blocked_ids:
            entry = f"  • {blocked_id}"
            blocked = index.lookup(blocked_id)
            if blocked is not None:
                entry = f"  • {blocked_id}: {blocked.title}"
            dep_rows.extend(wrap(Text(entry, style=feature_color), width))

    if dep_rows:
        rows.append(Text(""))
        rows.extend(dep_rows)

    if issue.labels:
        rows.append(Text(""))
        label_line = Text("🏷 " + ", ".join(issue.labels), style=theme.status_color("in_progress"))
        rows.extend(wrap(label_line, width))

    rows.append(separator.copy())
    timestamps = (
        f"Created: {format_time_rel(issue.created_at, now)} | "
        f"Updated: {format_time_rel(issue.updated_at, now)}"
    )
    rows.extend(wrap(Text(timestamps, style=f"italic {theme.secondary}"), width))

    if issue.has_blocking_deps:
        color = RED
    elif index.blocks_others(issue.id):
        color = ORANGE
    elif issue.status == STATUS_OPEN:
        color = GREEN
    else:
        color = theme.primary
    return _boxed(rows, width, color, theme.highlight)
