"""Display formatting for the swimlane shell."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from swimlane.board import BoardModel
from swimlane.config import BoardConfig
from swimlane.layout import compute_column_stats

console = Console()


def print_banner() -> None:
    """Print the swimlane banner."""
    banner = Text()
    banner.append("swimlane", style="bold blue")
    banner.append(" - adaptive kanban board", style="dim")
    console.print(Panel(banner, border_style="blue"))


def print_error(message: str) -> None:
    """Print error message."""
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print warning message."""
    console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    """Print info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_board(model: BoardModel, width: int, height: int) -> None:
    """Print one rendered frame of the board."""
    console.print(model.render(width, height), crop=False, soft_wrap=True)


def print_stats(model: BoardModel) -> None:
    """Print per-column counts for the current swimlane mode."""
    spec = model.mode.spec
    now = model.clock()
    table = Table(title=f"Columns by {model.mode_name}", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Column")
    table.add_column("Total", justify="right")
    table.add_column("P0", justify="right")
    table.add_column("P1", justify="right")
    table.add_column("Blocked", justify="right")
    table.add_column("Shown")

    visible = set(model.visible_columns)
    for col, issues in enumerate(model.columns):
        stats = compute_column_stats(issues, model.index.issue_map, now)
        table.add_row(
            spec.icons[col],
            Text(spec.titles[col], style=spec.colors[col]),
            str(stats.total),
            str(stats.p0_count),
            str(stats.p1_count),
            str(stats.blocked_count),
            "[green]yes[/green]" if col in visible else "[dim]hidden[/dim]",
        )

    console.print(table)
    console.print(f"\n[dim]{model.total_count} issue(s)[/dim]")


def print_selection(model: BoardModel) -> None:
    """Print a one-line summary of the selected card."""
    issue = model.selected_issue()
    if issue is None:
        console.print("[dim]No card selected[/dim]")
        return
    console.print(f"[bold]{issue.id}[/bold] {issue.title} [dim]({issue.status}, P{issue.priority})[/dim]")


def print_config(config: BoardConfig) -> None:
    """Print the effective board configuration."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in config.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)


def print_log_tail(content: str) -> None:
    """Print the tail of the board log."""
    console.print(Panel(content, title="[bold]board.log[/bold]", border_style="dim"))


def print_help() -> None:
    """Print help message."""
    help_text = """
[bold]Commands:[/bold]

  [cyan]board[/cyan], [cyan]b[/cyan]           Show the board
  [cyan]load[/cyan] [path]        Load issues (default: configured issues file)
  [cyan]reload[/cyan]             Reload issues, keeping the selection
  [cyan]stats[/cyan]              Show per-column counts

  [cyan]h[/cyan] / [cyan]j[/cyan] / [cyan]k[/cyan] / [cyan]l[/cyan]      Move left / down / up / right
  [cyan]top[/cyan], [cyan]bottom[/cyan]        Jump to top / bottom of column
  [cyan]col[/cyan] <1-4>          Jump to column
  [cyan]select[/cyan] <id>        Select a card by ID

  [cyan]mode[/cyan] [name]        Cycle swimlane mode, or set status/priority/type
  [cyan]empty[/cyan]              Cycle empty column visibility
  [cyan]search[/cyan] <text>      Search titles and IDs
  [cyan]n[/cyan], [cyan]N[/cyan]               Next / previous search match
  [cyan]expand[/cyan], [cyan]d[/cyan]          Expand / collapse the selected card
  [cyan]detail[/cyan]             Toggle the detail panel
  [cyan]size[/cyan] <w> <h>       Set the render size

  [cyan]config[/cyan]             Show board configuration
  [cyan]save[/cyan]               Save mode and visibility to config
  [cyan]logs[/cyan] [-n N]        Show the board log
  [cyan]tui[/cyan]                Open the interactive board

  [cyan]help[/cyan]               Show this help
  [cyan]quit[/cyan]               Exit
"""
    console.print(help_text)
