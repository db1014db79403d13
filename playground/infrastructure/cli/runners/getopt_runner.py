"""Toy commands parsed with getopt (GNU style, options may follow positionals)."""

import getopt
from typing import Dict, List, Tuple

from playground.domain.interfaces.cli_runner import DEFAULT_TIMEOUT, CliInvocation, CliParseError, CliRunner

# command -> (short options, long options)
_OPTIONS: Dict[str, Tuple[str, List[str]]] = {
    "scrape": ("vo:", ["verbose", "output="]),
    "mail": ("v", ["verbose"]),
    "search": ("t:", ["timeout="]),
}


class GetoptRunner(CliRunner):
    name = "getopt"

    def parse(self, args: List[str]) -> CliInvocation:
        if not args:
            raise CliParseError("No command given")
        command, rest = args[0], args[1:]
        if command not in _OPTIONS:
            raise CliParseError(f"Unknown command '{command}'")

        short_options, long_options = _OPTIONS[command]
        try:
            options, positional = getopt.gnu_getopt(rest, short_options, long_options)
        except getopt.GetoptError as e:
            raise CliParseError(str(e)) from e

        invocation = CliInvocation(command=command)
        for option, value in options:
            if option in ("-v", "--verbose"):
                invocation.verbose = True
            elif option in ("-o", "--output"):
                invocation.output = value
            elif option in ("-t", "--timeout"):
                try:
                    invocation.timeout = int(value)
                except ValueError:
                    raise CliParseError(f"Invalid timeout '{value}'")

        if command == "search":
            if len(positional) != 1:
                raise CliParseError("search expects exactly one QUERY argument")
            invocation.query = positional[0]
        elif positional:
            raise CliParseError(f"Unexpected arguments: {' '.join(positional)}")
        return invocation
