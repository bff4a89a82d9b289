"""Rich console helpers for gitopsi-auth terminal output.

Status messages go to stderr so generated manifests written to stdout
can be redirected into files untouched.
"""

from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from gitopsi_auth.models import Credential, TestResult

_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "cyan bold",
        "muted": "dim",
    }
)

# Longest URL shown in the credentials table before truncation
_URL_WIDTH = 40

console = Console(theme=_THEME, stderr=True)


def info(message: str) -> None:
    """Print an informational message.

    Args:
        message: The message to display.

    """
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Print a success message.

    Args:
        message: The message to display.

    """
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message.

    Args:
        message: The message to display.

    """
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message.

    Args:
        message: The message to display.

    """
    console.print(f"[error]✗[/error] {message}")


def action(message: str) -> None:
    """Print an action/progress message.

    Args:
        message: The message to display.

    """
    console.print(f"[info]→[/info] {message}")


def step(message: str) -> None:
    """Print a sub-step message.

    Args:
        message: The message to display.

    """
    console.print(f"  [muted]•[/muted] {message}")


def highlight(text: str) -> str:
    """Return text wrapped in highlight markup.

    Args:
        text: The text to highlight.

    Returns:
        Text wrapped in Rich markup for highlighting.

    """
    return f"[highlight]{text}[/highlight]"


def _truncate(url: str) -> str:
    if len(url) > _URL_WIDTH:
        return url[: _URL_WIDTH - 3] + "..."
    return url


def credentials_table(credentials: Iterable[Credential]) -> None:
    """Print stored credentials as a table.

    Args:
        credentials: The credentials to list. Secret values are never shown.

    """
    table = Table(header_style="bold")
    for column in ("NAME", "TYPE", "PROVIDER", "METHOD", "URL"):
        table.add_column(column)

    for credential in credentials:
        name = credential.name
        if credential.is_expired():
            name = f"{name} [warning](expired)[/warning]"
        table.add_row(
            name,
            credential.type.value,
            credential.provider,
            credential.method.value,
            _truncate(credential.metadata.url),
        )

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
        table.add_row(f"{label}:", value)

    console.print(Panel(table, title=f"[bold]{title}[/bold]", border_style="green"))


def show_test_result(result: TestResult) -> None:
    """Print the outcome of a credential check."""
    if result.success:
        success(f"Credential {highlight(result.name)} is valid")
        info(result.message)
    else:
        error(f"Credential {highlight(result.name)} validation failed")
        error(result.message)
