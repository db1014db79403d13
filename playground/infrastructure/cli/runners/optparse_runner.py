"""Toy commands parsed with optparse.

optparse has no subcommands, so the first argument selects one parser
per command.
"""

import optparse
from typing import Dict, List

from playground.domain.interfaces.cli_runner import DEFAULT_TIMEOUT, CliInvocation, CliParseError, CliRunner


class _RaisingOptionParser(optparse.OptionParser):
    def error(self, msg: str):
        raise CliParseError(msg)


def _build_parsers() -> Dict[str, optparse.OptionParser]:
    scrape = _RaisingOptionParser(prog="playground scrape", add_help_option=False)
    scrape.add_option("-v", "--verbose", action="store_true", default=False, help="Enable verbose output")
    scrape.add_option("-o", "--output", default=None, help="Output file path")

    mail = _RaisingOptionParser(prog="playground mail", add_help_option=False)
    mail.add_option("-v", "--verbose", action="store_true", default=False, help="Enable verbose output")

    search = _RaisingOptionParser(prog="playground search QUERY", add_help_option=False)
    search.add_option("-t", "--timeout", type="int", default=DEFAULT_TIMEOUT, help="Timeout in seconds")

    return {"scrape": scrape, "mail": mail, "search": search}


class OptparseRunner(CliRunner):
    name = "optparse"

    def parse(self, args: List[str]) -> CliInvocation:
        if not args:
            raise CliParseError("No command given")
        command, rest = args[0], args[1:]
        parsers = _build_parsers()
        if command not in parsers:
            raise CliParseError(f"Unknown command '{command}'")

        options, positional = parsers[command].parse_args(rest)
        if command == "search":
            if len(positional) != 1:
                raise CliParseError("search expects exactly one QUERY argument")
            return CliInvocation(command=command, query=positional[0], timeout=options.timeout)
        if positional:
            raise CliParseError(f"Unexpected arguments: {' '.join(positional)}")
        return CliInvocation(
            command=command,
            verbose=options.verbose,
            output=getattr(options, "output", None),
        )
