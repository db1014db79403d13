"""Console rendering built on rich.

ConsoleDisplay is the only UserInterface implementation; every command
prints through it so output stays consistent (panels for problems, markup
lines for progress, tables for results).
"""

import logging
from typing import Any, Optional, Sequence

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from playground.domain.interfaces.user_interface import UserInterface
from playground.domain.models.common import SearchText

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the display.

        Args:
            console: Console to print to; a default stdout console when omitted.
        """
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    # --- Messages ---

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        self.console.print(f"[blue]ℹ[/blue] {escape(info_message)}")

    def display_success(self, message: str, **kwargs: Any) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def display_step(self, message: str) -> None:
        self.console.print(f"[cyan]→[/cyan] {escape(message)}...")

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message in a yellow panel.

        Args:
            warning_message: The warning message to display.
        """
        logger.debug(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
            **kwargs: `title` overrides the panel title.
        """
        title = kwargs.get("title", "Error")
        panel = Panel(
            Text(error_message, style="white"),
            title=f"[bold red]{escape(title)}[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1),
        )
        self.console.print(panel)

    # --- Structure ---

    def display_rule(self, title: str) -> None:
        self.console.print()
        self.console.rule(f"[bold cyan]{escape(title)}[/bold cyan]")

    def display_key_value(self, key: str, value: Any) -> None:
        shown = "" if value is None else str(value)
        self.console.print(f"  [bold]{escape(key)}:[/bold] {escape(shown)}")

    def display_table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        color: str = "blue",
    ) -> None:
        table = Table(
            title=f"[bold {color}]{escape(title)}[/bold {color}]",
            box=ROUNDED,
            border_style=color,
            show_lines=False,
        )
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*(escape("" if cell is None else str(cell)) for cell in row))
        self.console.print(table)
        self.console.print()

    def display_panel(self, body: str, title: Optional[str] = None) -> None:
        panel = Panel(
            Text(body),
            title=f"[bold]{escape(title)}[/bold]" if title else None,
            title_align="left",
            border_style="cyan",
            box=ROUNDED,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_links(self, urls: Sequence[str]) -> None:
        if not urls:
            return
        self.console.print("[bold]Links:[/bold]")
        for index, url in enumerate(urls, 1):
            self.console.print(f"  [dim]{index}.[/dim] [link={url}]{escape(url)}[/link]")

    def display_help(self, title: str, rows: Sequence[Sequence[str]]) -> None:
        """Displays the command overview as a two-column table."""
        table = Table(show_header=True, box=SIMPLE, border_style="cyan", padding=(0, 1))
        table.add_column("Command", style="bold cyan")
        table.add_column("Description", style="white")
        for command, description in rows:
            table.add_row(escape(command), escape(description))
        self.console.print(Panel(table, title=f"[bold cyan]{escape(title)}[/bold cyan]", box=ROUNDED, border_style="cyan"))

    def clear(self) -> None:
        self.console.clear()

    # --- Input ---

    def get_prompt(self, prompt_message: str = "Input: ") -> SearchText:
        """Gets a line of text from the user.

        Args:
            prompt_message: The message to display before the input cursor.

        Returns:
            The text input by the user, stripped.
        """
        user_input = self.console.input(f"[bold green]{escape(prompt_message)}[/bold green] ")
        return SearchText(user_input.strip())

    def ask_yes_no_question(self, question: str, default: bool = False) -> bool:
        """Asks a yes/no question; an empty answer returns `default`."""
        logger.debug(f"Asking yes/no question: {question}")
        hint = "Y/n" if default else "y/N"
        response = self.console.input(f"[bold yellow]{escape(question)} ({hint})[/bold yellow] ").strip().lower()
        if not response:
            return default
        return response in ("y", "yes")

    def ask_choice(self, question: str, choices: Sequence[str]) -> str:
        """Shows a numbered list and asks until a valid number is entered.

        Raises:
            ValueError: If `choices` is empty.
        """
        if not choices:
            raise ValueError("ask_choice needs at least one choice")
        lines = "\n".join(f"{index}. {choice}" for index, choice in enumerate(choices, 1))
        panel = Panel(
            Text(lines, style="white"),
            title=f"[bold blue]{escape(question)}[/bold blue]",
            border_style="blue",
            box=ROUNDED,
            padding=(0, 1),
        )
        self.console.print(panel)
        while True:
            response = self.console.input("[bold blue]> [/bold blue]").strip()
            if response.isdigit() and 1 <= int(response) <= len(choices):
                return choices[int(response) - 1]
            self.console.print(f"[red]Enter a number between 1 and {len(choices)}[/red]")
