"""Rich console utilities for styled terminal output.

Every user-facing message of shh goes through this module. Errors are
written to stderr so they survive ``--quiet`` and shell redirection.
"""

from collections.abc import Generator, Iterable
from contextlib import contextmanager

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from shh.models import Environment, RepositoryStatus

_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "magenta bold",
        "muted": "dim",
    }
)

_STATUS_STYLES = {
    RepositoryStatus.EMPTY: "muted",
    RepositoryStatus.LOCKED: "warning",
    RepositoryStatus.READY: "success",
}

console = Console(theme=_THEME)
error_console = Console(theme=_THEME, stderr=True)


def set_quiet(quiet: bool) -> None:
    """Silence or restore non-error output.

    Args:
        quiet: True to suppress everything but errors.

    """
    console.quiet = quiet


def info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[error]✗[/error] {message}")


def action(message: str) -> None:
    """Print an action/progress message."""
    console.print(f"[info]→[/info] {message}")


def step(message: str) -> None:
    """Print a sub-step message."""
    console.print(f"[muted]•[/muted] {message}")


def highlight(text: str) -> str:
    """Return text wrapped in highlight markup.

    Square brackets in the text are escaped so paths such as
    ``.env.[name]`` are not read as markup.

    Args:
        text: The text to highlight.

    Returns:
        Text wrapped in Rich markup for highlighting.

    """
    return f"[highlight]{escape(text)}[/highlight]"


def status_badge(status: RepositoryStatus) -> str:
    """Return the repository status wrapped in its color markup."""
    style = _STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


@contextmanager
def spinner(message: str) -> Generator[None, None, None]:
    """Display a spinner while waiting on an external process.

    Args:
        message: The status message to display.

    Yields:
        None

    """
    with console.status(f"[info]{message}[/info]", spinner="dots"):
        yield


def environments_table(environments: Iterable[Environment]) -> None:
    """Print discovered environments as a table.

    Args:
        environments: The environments to list.

    """
    table = Table(show_edge=False, header_style="bold")
    table.add_column("Name", style="highlight")
    table.add_column("File", style="muted")

    for environment in environments:
        table.add_row(escape(environment.name), escape(environment.relative))

    console.print(table)


def summary_panel(title: str, items: dict[str, str]) -> None:
    """Print a summary panel with key-value pairs.

    Args:
        title: Title for the panel.
        items: Dictionary of label -> value pairs to display.

    """
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(style="cyan")

    for label, value in items.items():
        table.add_row(f"{label}:", escape(value))

    console.print(Panel(table, title=f"[bold]{title}[/bold]", border_style="green"))


def newline() -> None:
    """Print an empty line."""
    console.print()
