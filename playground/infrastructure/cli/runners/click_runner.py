"""Toy commands parsed with a click group."""

from typing import List, Optional

import click

from playground.domain.interfaces.cli_runner import DEFAULT_TIMEOUT, CliInvocation, CliParseError, CliRunner


@click.group(name="playground")
def cli() -> None:
    """Playground CLI using click."""


@cli.command()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-o", "--output", default=None, help="Output file path")
def scrape(verbose: bool, output: Optional[str]) -> CliInvocation:
    """Scrape Bowie discography."""
    return CliInvocation(command="scrape", verbose=verbose, output=output)


@cli.command()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def mail(verbose: bool) -> CliInvocation:
    """Test mail.tm service."""
    return CliInvocation(command="mail", verbose=verbose)


@cli.command()
@click.argument("query")
@click.option("-t", "--timeout", type=int, default=DEFAULT_TIMEOUT, help="Timeout in seconds")
def search(query: str, timeout: int) -> CliInvocation:
    """Search music metadata."""
    return CliInvocation(command="search", query=query, timeout=timeout)


class ClickRunner(CliRunner):
    name = "click"

    def parse(self, args: List[str]) -> CliInvocation:
        try:
            result = cli.main(args=args, prog_name="playground", standalone_mode=False)
        except click.ClickException as e:
            raise CliParseError(e.format_message()) from e
        if not isinstance(result, CliInvocation):
            raise CliParseError("No command given")
        return result
