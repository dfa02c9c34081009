"""Rich formatting for history listings."""

from collections.abc import Iterable
from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from .history import Entry
from .persistence import PersistResult

console = Console()

NEWLINE_MARK = "↵"


def display_line(line: str) -> str:
    """Render a possibly multi-line entry on one row."""
    return line.replace("\n", NEWLINE_MARK)


def format_time(when: datetime) -> str:
    """Local time with millisecond precision."""
    return when.astimezone().strftime("%Y-%m-%d %H:%M:%S.") + f"{when.microsecond // 1000:03d}"


def format_history_table(entries: Iterable[Entry], title: str | None = None) -> Table:
    """Build a table with one row per entry: index, time, line."""
    table = Table(title=title, show_edge=False, header_style="bold")
    table.add_column("#", justify="right", style="cyan", no_wrap=True)
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("Line", overflow="fold")
    for entry in entries:
        table.add_row(str(entry.index), format_time(entry.time), Text(display_line(entry.line)))
    return table


def format_failure(result: PersistResult) -> str:
    """Markup line describing a failed load/save/purge."""
    kind = "parse error" if result.kind == "parse" else "I/O error"
    return (
        f"[red]Error:[/red] {result.operation} of {escape(str(result.path))} "
        f"failed ({kind}): {escape(result.error)}"
    )
