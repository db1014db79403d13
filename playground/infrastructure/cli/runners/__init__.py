"""Parser backends for the CLI comparison.

Each module implements the same toy commands with a different parsing
library.
"""

from typing import Callable, List, Optional

from playground.domain.interfaces.cli_runner import CliRunner
from playground.infrastructure.cli.runners.argparse_runner import ArgparseRunner
from playground.infrastructure.cli.runners.click_runner import ClickRunner
from playground.infrastructure.cli.runners.getopt_runner import GetoptRunner
from playground.infrastructure.cli.runners.optparse_runner import OptparseRunner
from playground.infrastructure.cli.runners.typer_runner import TyperRunner


def get_all_runners(report: Optional[Callable[[str], None]] = None) -> List[CliRunner]:
    """One instance of every backend, in display order."""
    return [
        ArgparseRunner(report),
        ClickRunner(report),
        TyperRunner(report),
        OptparseRunner(report),
        GetoptRunner(report),
    ]
