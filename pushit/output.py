"""Output formatting for the pushit CLI."""

from rich.console import Console
from rich.markup import escape


class OutputFormatter:
    """Formats user-facing output with an optional quiet mode.

    Errors and warnings go to stderr with a coloured prefix; everything
    else goes to stdout.
    """

    def __init__(self, quiet: bool = False):
        """Initialize output formatter.

        Args:
            quiet: Suppress non-essential output
        """
        self.quiet = quiet
        self.console = Console(highlight=False, soft_wrap=True)
        self.err_console = Console(stderr=True, highlight=False, soft_wrap=True)

    def print(self, message: str = "") -> None:
        """Print a plain message (always shown)."""
        self.console.print(escape(message))

    def info(self, message: str) -> None:
        """Print an informational message (suppressed in quiet mode)."""
        if self.quiet:
            return
        self.console.print(escape(message))

    def success(self, message: str) -> None:
        """Print a success message in green."""
        if self.quiet:
            return
        self.console.print(f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning message in yellow to stderr."""
        self.err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Print an error message to stderr (always shown)."""
        self.err_console.print(f"[red]Error:[/red] {escape(message)}")
