"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from logkeeper.core.theme import get_theme
from logkeeper.retention.models import ActionResult, DirectoryEntry, RetentionAction


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int) -> str:
    """Format a byte count as a human-readable string."""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def format_action(action: RetentionAction) -> str:
    """Format a lifecycle action with color markup."""
    return f"[action.{action.value}]{action.value}[/]"


def create_plan_table(
    plan: list[tuple[DirectoryEntry, RetentionAction]],
    title: str = "Retention Plan",
) -> Table:
    """Create a Rich table displaying planned lifecycle actions.

    Args:
        plan: (entry, action) pairs as returned by the engine.
        title: Table title.

    Returns:
        Rich Table configured for plan display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=9, justify="center")
    table.add_column("File", no_wrap=True)
    table.add_column("Modified", style="muted")
    table.add_column("Size", style="info", justify="right")

    for entry, action in plan:
        table.add_row(
            format_action(action),
            escape(entry.name),
            entry.mtime.strftime("%Y-%m-%d %H:%M:%S"),
            format_size(entry.size_bytes),
        )

    return table


def create_results_table(results: list[ActionResult]) -> Table:
    """Create a Rich table displaying action results.

    Successful results show "OK" status; failed results show "FAIL"
    with the error message.

    Args:
        results: List of action results to display.

    Returns:
        Rich Table configured for results display.
    """
    table = Table(
        title="Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=6, justify="center")
    table.add_column("Action", width=9, justify="center")
    table.add_column("File", no_wrap=True)
    table.add_column("Message")

    for result in results:
        if not result.success:
            status = "[error]FAIL[/]"
            message = f"[error]{escape(result.error or '')}[/]"
        elif result.dry_run:
            status = "[warning]DRY[/]"
            message = f"[muted]would {result.action.value}[/]"
        else:
            status = "[success]OK[/]"
            message = f"[muted]{result.artifact or ''}[/]"

        table.add_row(status, format_action(result.action), escape(result.name), message)

    return table


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
