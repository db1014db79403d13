"""Toy commands parsed with argparse subparsers."""

import argparse
from typing import List

from playground.domain.interfaces.cli_runner import DEFAULT_TIMEOUT, CliInvocation, CliParseError, CliRunner


class _RaisingArgumentParser(argparse.ArgumentParser):
    """argparse exits the process on errors; raise instead."""

    def error(self, message: str):
        raise CliParseError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _RaisingArgumentParser(prog="playground", add_help=False)
    subparsers = parser.add_subparsers(dest="command", parser_class=_RaisingArgumentParser)
    subparsers.required = True

    scrape = subparsers.add_parser("scrape", add_help=False, help="Scrape Bowie discography")
    scrape.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    scrape.add_argument("-o", "--output", help="Output file path")

    mail = subparsers.add_parser("mail", add_help=False, help="Test mail.tm service")
    mail.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")

    search = subparsers.add_parser("search", add_help=False, help="Search music metadata")
    search.add_argument("query", help="Search query")
    search.add_argument("-t", "--timeout", type=int, default=DEFAULT_TIMEOUT, help="Timeout in seconds")
    return parser


class ArgparseRunner(CliRunner):
    name = "argparse"

    def parse(self, args: List[str]) -> CliInvocation:
        namespace = build_parser().parse_args(args)
        return CliInvocation(
            command=namespace.command,
            verbose=getattr(namespace, "verbose", False),
            output=getattr(namespace, "output", None),
            query=getattr(namespace, "query", None),
            timeout=getattr(namespace, "timeout", DEFAULT_TIMEOUT),
        )
