"""Main entry point for the playground CLI application.

Uses Typer to define commands, wires dependencies together (composition
root), and runs the async command handlers.
"""

import asyncio
import logging
import sys
from typing import Any, Coroutine, Dict, List, Optional

import typer
from typing_extensions import Annotated

from playground.core.command_handler import DEFAULT_REFRESH_SECONDS, CommandHandler
from playground.core.services.cli_comparison_service import CliComparisonService
from playground.core.services.music_metadata_service import MusicMetadataService
from playground.domain.models.resilience import LEGACY_RETRY_CONFIGURATION
from playground.infrastructure.cli.display import ConsoleDisplay
from playground.infrastructure.config.settings import (
    get_discogs_token,
    get_http_timeout,
    get_musicbrainz_app,
    get_retry_configuration,
    load_configuration,
)
from playground.infrastructure.monitoring.logger_setup import setup_logging_from_config
from playground.infrastructure.providers.discogs_client import DiscogsClient
from playground.infrastructure.providers.mailtm_client import MailTmClient
from playground.infrastructure.providers.musicbrainz_client import MusicBrainzClient
from playground.infrastructure.resilience.executor import ResilientExecutor
from playground.infrastructure.resilience.rate_gate import RateGate
from playground.infrastructure.resilience.retry_policy import is_transient_http_failure, retry_on_any_failure

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root. One RateGate is shared by every
    executor, so all outbound calls are serialized process-wide.
    """
    logger.debug("Initializing application dependencies...")
    dependencies: Dict[str, Any] = {}
    try:
        load_configuration()
        timeout = get_http_timeout()

        dependencies["ui"] = ConsoleDisplay()
        dependencies["rate_gate"] = RateGate()

        # Music providers: configurable policy, retry on transport errors and HTTP failures
        dependencies["music_executor"] = ResilientExecutor(
            dependencies["rate_gate"],
            retry_configuration=get_retry_configuration(),
            is_retryable=is_transient_http_failure,
        )
        # mail.tm keeps its lighter policy and retries on anything
        dependencies["mail_executor"] = ResilientExecutor(
            dependencies["rate_gate"],
            retry_configuration=LEGACY_RETRY_CONFIGURATION,
            is_retryable=retry_on_any_failure,
        )

        app_name, app_version, contact = get_musicbrainz_app()
        dependencies["musicbrainz_client"] = MusicBrainzClient(
            dependencies["music_executor"],
            app_name=app_name,
            app_version=app_version,
            contact=contact,
            timeout=timeout,
        )

        discogs_token = get_discogs_token()
        if discogs_token:
            dependencies["discogs_client"] = DiscogsClient(discogs_token, dependencies["music_executor"], timeout=timeout)
        else:
            logger.info("Discogs token not found, Discogs client disabled.")
            dependencies["discogs_client"] = None

        dependencies["mail_client"] = MailTmClient(dependencies["mail_executor"], timeout=timeout)

        dependencies["metadata_service"] = MusicMetadataService(
            musicbrainz=dependencies["musicbrainz_client"],
            discogs=dependencies["discogs_client"],
        )
        dependencies["cli_comparison_service"] = CliComparisonService(ui=dependencies["ui"])

        dependencies["command_handler"] = CommandHandler(
            ui=dependencies["ui"],
            metadata_service=dependencies["metadata_service"],
            mail_client=dependencies["mail_client"],
            cli_comparison_service=dependencies["cli_comparison_service"],
        )
        logger.debug("All dependencies initialized successfully.")
        return dependencies

    except Exception as e:
        logger.error(f"Fatal Error during application initialization: {e}", exc_info=True)
        if dependencies.get("ui"):
            dependencies["ui"].display_error(f"Application Initialization Failed: {e}")
        else:
            print(f"FATAL ERROR during initialization: {e}", file=sys.stderr)
        sys.exit(1)


_dependencies: Optional[Dict[str, Any]] = None


def get_dependencies() -> Dict[str, Any]:
    """Builds the dependency container on first use."""
    global _dependencies
    if _dependencies is None:
        _dependencies = create_dependencies()
    return _dependencies


def get_handler() -> CommandHandler:
    return get_dependencies()["command_handler"]

# --- Typer App Definition ---

app = typer.Typer(
    name="playground",
    help="Music metadata, disposable mail and CLI parser comparison toolkit.",
    add_completion=False,
)
music_app = typer.Typer(help="Query MusicBrainz and Discogs.", add_completion=False)
cli_app = typer.Typer(help="Compare command-line parsing libraries.", add_completion=False)
app.add_typer(music_app, name="music")
app.add_typer(cli_app, name="cli")

# --- Helper for Running Async Commands ---

def run_async(coro: Coroutine[Any, Any, int]) -> None:
    """Runs an async handler and turns a non-zero result into the exit code."""
    exit_code = asyncio.run(coro)
    if exit_code:
        raise typer.Exit(code=exit_code)


def exit_with(exit_code: int) -> None:
    if exit_code:
        raise typer.Exit(code=exit_code)

# --- CLI Commands ---

ArtistOption = Annotated[Optional[str], typer.Option("--artist", "-a", help="Filter by artist or band name.")]
AlbumOption = Annotated[Optional[str], typer.Option("--album", "-l", help="Filter by album or release title.")]


@music_app.command("search")
def music_search(
    query: Annotated[Optional[str], typer.Argument(help="Search term (artist, album, or any text).")] = None,
    track: Annotated[Optional[str], typer.Option("--track", "-t", help="Filter by track title.")] = None,
    artist: ArtistOption = None,
    album: AlbumOption = None,
    source: Annotated[
        str, typer.Option("--source", "-s", help="Metadata source: both, musicbrainz, discogs.")
    ] = "both",
    sort: Annotated[
        str, typer.Option("--sort", help="Sort by: none, type, artist, album, year, label.")
    ] = "none",
    more: Annotated[bool, typer.Option("--more", "-m", help="Prompt to load additional results.")] = False,
):
    """Query Discogs and MusicBrainz databases for music releases."""
    run_async(get_handler().handle_music_search(query, artist, album, track, source, sort, more))


@music_app.command("release")
def music_release(
    query: Annotated[Optional[str], typer.Argument(help="Release title.")] = None,
    artist: ArtistOption = None,
    album: AlbumOption = None,
    sort: Annotated[str, typer.Option("--sort", help="Sort tracks by: none, duration, track.")] = "none",
):
    """Show the tracklist and credits of the first matching release."""
    run_async(get_handler().handle_music_release(query, artist, album, sort))


@app.command()
def metadata(
    title: Annotated[str, typer.Option("--title", help="Release title.")] = "Heroes",
    artist: Annotated[str, typer.Option("--artist", help="Artist name.")] = "David Bowie",
):
    """Look up the first unified match for a title across providers."""
    run_async(get_handler().handle_metadata(title, artist))


@app.command()
def mail(
    once: Annotated[bool, typer.Option("--once", help="Create, list and delete an account, then exit.")] = False,
    refresh_seconds: Annotated[
        int, typer.Option("--refresh-seconds", "-r", min=1, help="Interval between inbox refresh cycles.")
    ] = DEFAULT_REFRESH_SECONDS,
):
    """Create a temporary mail.tm inbox and monitor it for incoming messages."""
    handler = get_handler()
    if once:
        run_async(handler.handle_mail_once())
    else:
        run_async(handler.handle_mail_watch(refresh_seconds))


@cli_app.command("compare", context_settings={"ignore_unknown_options": True})
def cli_compare(
    args: Annotated[Optional[List[str]], typer.Argument(help="Arguments passed to every backend.")] = None,
):
    """Run the same arguments through every parser backend."""
    exit_with(get_handler().handle_cli_compare(args))


@cli_app.command("demo")
def cli_demo():
    """Run the demo commands through every parser backend."""
    exit_with(get_handler().handle_cli_demo())


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Shows the command overview when no command is given."""
    load_configuration()
    setup_logging_from_config(verbose)
    if ctx.invoked_subcommand is None:
        exit_with(get_handler().show_overview())

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
