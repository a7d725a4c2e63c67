"""Console output for the pydots CLI."""

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text


class OutputFormatter:
    """Formats user-facing messages with rich.

    Errors and warnings go to stderr, everything else to stdout. In quiet
    mode only warnings, errors and explicitly printed renderables are shown.
    """

    def __init__(
        self,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            quiet: Suppress informational messages
            console: Console for regular output
            err_console: Console for warnings and errors
        """
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        """Print a plain message (not affected by quiet mode)."""
        self.console.print(Text(message), soft_wrap=True)

    def print_text(self, text: Text) -> None:
        """Print an already styled line."""
        self.console.print(text, soft_wrap=True)

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(Text(message), soft_wrap=True)

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(Text(message, style="green"), soft_wrap=True)

    def warning(self, message: str) -> None:
        self.err_console.print(Text(message, style="yellow"), soft_wrap=True)

    def error(self, message: str) -> None:
        self.err_console.print(Text(message, style="bold red"), soft_wrap=True)

    def print_summary(self, title: str, rows: list[tuple[str, str]]) -> None:
        """Print a two-column summary table.

        Args:
            title: Table title
            rows: (label, value) pairs
        """
        if self.quiet:
            return
        table = Table(title=title, show_header=False, box=None, padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        for label, value in rows:
            table.add_row(label, value)
        self.console.print(table)
