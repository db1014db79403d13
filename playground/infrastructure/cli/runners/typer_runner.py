"""Toy commands parsed with Typer (type hints drive the options)."""

from typing import List, Optional

import click
import typer
from typing_extensions import Annotated

from playground.domain.interfaces.cli_runner import DEFAULT_TIMEOUT, CliInvocation, CliParseError, CliRunner

app = typer.Typer(name="playground", add_completion=False, help="Playground CLI using Typer.")


@app.command()
def scrape(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output")] = False,
    output: Annotated[Optional[str], typer.Option("--output", "-o", help="Output file path")] = None,
) -> CliInvocation:
    """Scrape Bowie discography."""
    return CliInvocation(command="scrape", verbose=verbose, output=output)


@app.command()
def mail(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output")] = False,
) -> CliInvocation:
    """Test mail.tm service."""
    return CliInvocation(command="mail", verbose=verbose)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Search query")],
    timeout: Annotated[int, typer.Option("--timeout", "-t", help="Timeout in seconds")] = DEFAULT_TIMEOUT,
) -> CliInvocation:
    """Search music metadata."""
    return CliInvocation(command="search", query=query, timeout=timeout)


class TyperRunner(CliRunner):
    name = "typer"

    def parse(self, args: List[str]) -> CliInvocation:
        command = typer.main.get_command(app)
        try:
            result = command.main(args=args, prog_name="playground", standalone_mode=False)
        except click.ClickException as e:
            raise CliParseError(e.format_message()) from e
        if not isinstance(result, CliInvocation):
            raise CliParseError("No command given")
        return result
