"""Core service comparing the toy CLI parser backends.

Runs the same argument lists through every backend and reports each
exit code, so the libraries can be compared on identical input.
"""

import logging
from typing import Dict, List, Optional, Sequence

from playground.domain.interfaces.cli_runner import CliRunner
from playground.domain.interfaces.user_interface import UserInterface
from playground.infrastructure.cli.runners import get_all_runners

logger = logging.getLogger(__name__)

DEMO_CASES: List[List[str]] = [
    ["scrape", "--verbose", "--output=output.csv"],
    ["mail", "-v"],
    ["search", "David Bowie", "--timeout=60"],
]


class CliComparisonService:
    """Drives every CliRunner backend over the same arguments."""

    def __init__(self, ui: UserInterface, runners: Optional[Sequence[CliRunner]] = None):
        self.ui = ui
        self.runners = list(runners) if runners is not None else get_all_runners(ui.display_info)

    def run_all(self, args: Sequence[str]) -> Dict[str, int]:
        """Runs `args` through every backend.

        Returns:
            Exit code per backend name. A backend that raises is reported
            with exit code 1.
        """
        self.ui.display_rule("CLI Implementation Comparison")
        exit_codes: Dict[str, int] = {}
        for runner in self.runners:
            self.ui.display_step(f"Running {runner.name}")
            try:
                exit_codes[runner.name] = runner.run(args)
            except Exception as e:
                logger.error(f"{runner.name} failed: {e}", exc_info=True)
                self.ui.display_error(f"{runner.name} failed: {e}")
                exit_codes[runner.name] = 1
                continue
            self.ui.display_key_value(f"{runner.name} exit code", exit_codes[runner.name])
        return exit_codes

    def demo(self) -> Dict[str, List[int]]:
        """Runs the canned demo invocations through every backend.

        Returns:
            Exit codes per backend, one entry per demo case.
        """
        self.ui.display_rule("CLI Demo - Same Commands Across All Implementations")
        results: Dict[str, List[int]] = {runner.name: [] for runner in self.runners}
        for case in DEMO_CASES:
            self.ui.display_info(f"Command: {' '.join(case)}")
            for runner in self.runners:
                try:
                    results[runner.name].append(runner.run(case))
                except Exception as e:
                    logger.error(f"{runner.name} failed: {e}", exc_info=True)
                    self.ui.display_error(f"{runner.name}: {e}")
                    results[runner.name].append(1)
        return results
