"""
Console output components for the command line tools.

Renders command progress the same way everywhere:

    Configuration cache cleared successfully.
    File [storage/app/report.csv] has been deleted ........... DONE
    File [.env] doesn't exists ............................ SKIPPED
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape


# Semantic color palette
class Colors:
    """Semantic colors for consistent UI."""
    SUCCESS = "bright_green"
    WARNING = "yellow"
    ERROR = "red"
    INFO = "blue"
    PRIMARY = "cyan"
    DIM = "grey50"


class ConsoleComponents:
    """
    Small set of output helpers used by console commands.

    Every message argument is plain text (escaped before rendering); the
    status column accepts rich markup.
    """

    MAX_WIDTH = 120

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def info(self, message: str):
        """Display an info line."""
        self.console.print(f"  [bold {Colors.INFO}] INFO [/] {escape(message)}")

    def warn(self, message: str):
        self.console.print(f"  [bold {Colors.WARNING}] WARN [/] {escape(message)}")

    def error(self, message: str):
        self.console.print(f"  [bold {Colors.ERROR}] ERROR [/] {escape(message)}")

    def two_column_detail(self, first: str, second: str = ""):
        """Display a line with a dotted filler between two columns."""
        width = min(self.console.width, self.MAX_WIDTH)
        plain_second = self.console.render_str(second).plain if second else ""
        dots = max(width - len(first) - len(plain_second) - 6, 1)
        self.console.print(f"  {escape(first)} [{Colors.DIM}]{'.' * dots}[/] {second}")

    def task(self, description: str, succeeded: bool = True):
        """Report a finished task."""
        status = f"[bold {Colors.SUCCESS}]DONE[/]" if succeeded else f"[bold {Colors.ERROR}]FAIL[/]"
        self.two_column_detail(description, status)

    def skipped(self, description: str):
        self.two_column_detail(description, f"[bold {Colors.WARNING}]SKIPPED[/]")
