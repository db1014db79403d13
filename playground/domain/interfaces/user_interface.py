"""Interface for interacting with the user (input/output).

Defines the contract for displaying information, errors, warnings, result
tables and getting input from the user, allowing different UI
implementations (e.g., console, test doubles).
"""

import abc
from typing import Any, Optional, Sequence

from playground.domain.models.common import SearchText


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def display_success(self, message: str, **kwargs: Any) -> None:
        """Displays the completion of a step."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def get_prompt(self, prompt_message: str = "Input: ") -> SearchText:
        """Gets a line of text from the user synchronously.

        Args:
            prompt_message: The message to display before the input prompt.

        Returns:
            The user's input.
        """
        pass

    def display_rule(self, title: str) -> None:
        """Displays a horizontal section separator with a title."""
        pass

    def display_step(self, message: str) -> None:
        """Announces that a step is starting."""
        pass

    def display_key_value(self, key: str, value: Any) -> None:
        pass

    def display_table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        color: str = "blue",
    ) -> None:
        """Displays tabular results.

        Args:
            title: Table title.
            columns: Column headers.
            rows: Row values, converted to text by the implementation.
            color: Accent color for the title and border.
        """
        pass

    def display_panel(self, body: str, title: Optional[str] = None) -> None:
        pass

    def display_links(self, urls: Sequence[str]) -> None:
        """Displays a numbered list of links."""
        pass

    def display_help(self, title: str, rows: Sequence[Sequence[str]]) -> None:
        """Displays a command overview as (command, description) rows."""
        pass

    def ask_yes_no_question(self, question: str, default: bool = False) -> bool:
        """Asks a yes/no question and returns the answer."""
        pass

    def ask_choice(self, question: str, choices: Sequence[str]) -> str:
        """Lets the user pick one of `choices` and returns it."""
        pass

    def clear(self) -> None:
        pass
