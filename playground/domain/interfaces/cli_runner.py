"""Interface for the toy command-line parsers.

Several parsing libraries implement the same three toy commands
(`scrape`, `mail`, `search`) so their usage can be compared side by side.
A backend only has to turn an argument list into a CliInvocation; running
and reporting are shared.
"""

import abc
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)

COMMANDS = ("scrape", "mail", "search")
DEFAULT_TIMEOUT = 30


class CliParseError(Exception):
    """Raised by a backend when the arguments do not form a valid invocation."""


@dataclass
class CliInvocation:
    """A parsed toy command."""
    command: str
    verbose: bool = False
    output: Optional[str] = None
    query: Optional[str] = None
    timeout: int = DEFAULT_TIMEOUT

    def describe(self) -> str:
        if self.command == "scrape":
            return f"Scrape: verbose={self.verbose}, output={self.output}"
        if self.command == "mail":
            return f"Mail: verbose={self.verbose}"
        return f"Search: query={self.query}, timeout={self.timeout}"


class CliRunner(abc.ABC):
    """Abstract Base Class for one parsing backend."""

    name: str = ""

    def __init__(self, report: Optional[Callable[[str], None]] = None):
        """Initializes the runner.

        Args:
            report: Receives one line per executed command; defaults to the logger.
        """
        self._report = report or logger.info

    @abc.abstractmethod
    def parse(self, args: List[str]) -> CliInvocation:
        """Parses `args` into an invocation.

        Raises:
            CliParseError: If the arguments are invalid.
        """
        pass

    def run(self, args: Sequence[str]) -> int:
        """Parses and executes `args`. Returns the process exit code; never raises."""
        try:
            invocation = self.parse(list(args))
        except CliParseError as e:
            self._report(f"[{self.name}] Error: {e}")
            return 1
        self._report(f"[{self.name}] {invocation.describe()}")
        return 0
