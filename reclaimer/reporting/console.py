"""Themed console with tagged status lines.

Every user-facing line is tagged with its category, [INFO], [WARNING],
[ERROR] or [SUCCESS], so output stays readable when colour is stripped
(pipes, CI logs).
"""

from typing import Any, Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.theme import Theme

RECLAIMER_THEME = Theme(
    {
        "info": "blue",
        "warning": "yellow",
        "error": "bold red",
        "success": "green",
        "secondary": "dim",
        "rule": "cyan",
    }
)

TAGS = {
    "info": "[INFO]",
    "warning": "[WARNING]",
    "error": "[ERROR]",
    "success": "[SUCCESS]",
}


class ReclaimerConsole:
    """Semantic message methods on top of a rich console."""

    def __init__(self, console: Optional[RichConsole] = None):
        self._console = console or RichConsole(theme=RECLAIMER_THEME, highlight=False)

    @property
    def rich(self) -> RichConsole:
        return self._console

    def _tagged(self, style: str, message: str) -> None:
        self._console.print(f"[{style}]{escape(TAGS[style])}[/] {escape(message)}")

    def info(self, message: str) -> None:
        self._tagged("info", message)

    def warning(self, message: str) -> None:
        self._tagged("warning", message)

    def error(self, message: str, details: Optional[str] = None) -> None:
        self._tagged("error", message)
        if details:
            self.secondary(details)

    def success(self, message: str) -> None:
        self._tagged("success", message)

    def secondary(self, message: str) -> None:
        self._console.print(f"  [secondary]{escape(message)}[/]")

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._console.print(*args, **kwargs)

    def plain(self, message: str) -> None:
        """Print text verbatim, without markup or highlighting."""
        self._console.print(message, markup=False, highlight=False)

    def blank(self) -> None:
        self._console.print()

    def rule(self, title: str = "") -> None:
        self._console.rule(escape(title), style="rule")

    def input(self, prompt: str) -> str:
        """
        Read one line of user input.

        Raises:
            EOFError: If stdin is closed
        """
        return self._console.input(escape(prompt))
