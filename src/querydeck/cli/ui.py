"""Shared UI components for the querydeck CLI."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from querydeck.models.session import HistoryEntry, Notification

theme = Theme(
    {
        "info": "dim cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "tip": "blue",
        "link": "underline blue",
        "heading": "bold cyan",
    }
)

console = Console(theme=theme)
error_console = Console(theme=theme, stderr=True)


def print_banner(host: str, port: int, config_path: Any) -> None:
    """Print the API server startup banner."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold white", justify="right")
    table.add_column("Value", style="cyan")

    api_url = f"http://{host}:{port}/api/session"
    table.add_row("API", f"[link={api_url}]{api_url}[/link]")
    table.add_row("Config", str(config_path))

    console.print(
        Panel(table, title="[bold]querydeck[/bold]", border_style="dim white", padding=(1, 1))
    )
    console.print()


def print_error(
    title: str, message: str, tip: str | None = None, *, target: Console | None = None
) -> None:
    """Print a styled error message with an optional actionable tip."""
    content = Text()
    content.append(f"{message}\n", style="white")

    if tip:
        content.append("\nTip: ", style="bold blue")
        content.append(tip, style="blue")

    (target or error_console).print(
        Panel(
            content,
            title=f"[bold red]Error: {title}[/bold red]",
            border_style="red",
            padding=(1, 1),
        )
    )


def print_success(message: str, *, target: Console | None = None) -> None:
    (target or console).print(f"[bold green]✓[/bold green] {message}")


def print_notification(notification: Notification, *, target: Console | None = None) -> None:
    if notification.level == "error":
        print_error(notification.title, notification.message, target=target)
    elif notification.level == "success":
        print_success(notification.message, target=target)
    else:
        (target or console).print(f"[info]{notification.message}[/info]")


def render_query(query: str, *, title: str = "Query") -> Panel:
    body = Syntax(query, "sql", word_wrap=True) if query else Text("(empty)", style="dim")
    return Panel(body, title=title, border_style="cyan")


def render_results(results: Sequence[dict[str, Any]]) -> Table:
    """Render result rows; columns come from the first row, as returned by the gateway."""
    table = Table(
        title="Results",
        caption=f"{len(results)} rows returned",
        row_styles=["", "dim"],
        header_style="bold",
    )
    if not results:
        table.add_column("(no rows)")
        return table

    columns = list(results[0].keys())
    for column in columns:
        table.add_column(str(column))
    for row in results:
        table.add_row(*(str(row.get(column)) for column in columns))
    return table


def render_history(entries: Sequence[HistoryEntry]) -> Table:
    table = Table(title="History", header_style="bold")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Executed at")
    table.add_column("Rows", justify="right")
    table.add_column("Query")
    for number, entry in enumerate(entries, start=1):
        first_line = entry.query.splitlines()[0] if entry.query else ""
        if "\n" in entry.query:
            first_line += " …"
        table.add_row(
            str(number),
            entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
            str(len(entry.results)),
            first_line,
        )
    return table
