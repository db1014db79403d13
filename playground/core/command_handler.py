"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py) and delegates the
work to the application services and provider clients. Every handler
returns the process exit code; unrecoverable failures are shown as an
error panel and yield 1.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, List, Optional, Sequence

from playground.core.services.cli_comparison_service import CliComparisonService
from playground.core.services.music_metadata_service import (
    SEARCH_SORT_FIELDS,
    SOURCES,
    TRACK_SORT_FIELDS,
    MusicMetadataService,
    classify_release_type,
    truncate_label,
)
from playground.domain.interfaces.user_interface import UserInterface
from playground.domain.models.mail import MailTmAccount, MailTmMessage
from playground.domain.models.music import MusicSearchQuery
from playground.infrastructure.providers.mailtm_client import MailTmClient, extract_urls, truncate

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 50
MAX_RESULTS_STEP = 25
MAX_RESULTS_CAP = 100
LABEL_COLUMN_WIDTH = 30
SUBJECT_CHOICE_WIDTH = 40
DEFAULT_REFRESH_SECONDS = 10
REFRESH_CHOICE = "[Refresh inbox]"
QUIT_CHOICE = "[Quit]"
DEFAULT_COMPARE_ARGS = ["scrape", "--verbose"]

OVERVIEW = [
    ("music search [QUERY]", "Search MusicBrainz and Discogs for releases"),
    ("music release [QUERY]", "Show the tracklist and credits of the first matching release"),
    ("metadata --title --artist", "Look up the first unified match for a title"),
    ("mail [--once]", "Create a disposable mail.tm inbox and watch it"),
    ("cli compare [ARGS...]", "Run the same arguments through every parser backend"),
    ("cli demo", "Run the canned demo commands through every parser backend"),
]


def format_duration(duration: Optional[timedelta]) -> str:
    if duration is None:
        return ""
    total = int(duration.total_seconds())
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def format_timestamp(value: Optional[datetime]) -> str:
    return value.strftime("%Y/%m/%d %H:%M:%S") if value else ""


def _sender(message: MailTmMessage) -> str:
    return message.sender.address if message.sender else "(unknown)"


class CommandHandler:
    """Handles incoming commands and delegates to appropriate services."""

    def __init__(
        self,
        ui: UserInterface,
        metadata_service: MusicMetadataService,
        mail_client: MailTmClient,
        cli_comparison_service: CliComparisonService,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initializes the CommandHandler with required services."""
        self.ui = ui
        self.metadata_service = metadata_service
        self.mail_client = mail_client
        self.cli_comparison_service = cli_comparison_service
        self._sleep = sleep

    def _report_failure(self, action: str, error: Exception) -> int:
        logger.error(f"{action} failed: {error}")
        logger.debug("Failure details", exc_info=True)
        self.ui.display_error(f"{type(error).__name__}: {error}")
        if error.__cause__ is not None:
            self.ui.display_error(f"Caused by: {error.__cause__}")
        return 1

    def show_overview(self) -> int:
        self.ui.display_help("playground", OVERVIEW)
        return 0

    # --- Music ---

    async def handle_music_search(
        self,
        query_text: Optional[str] = None,
        artist: Optional[str] = None,
        album: Optional[str] = None,
        track: Optional[str] = None,
        source: str = "both",
        sort: str = "none",
        load_more: bool = False,
    ) -> int:
        """Searches the selected providers and renders one table per source.

        Args:
            query_text: Free-form term, used as the artist when --artist is absent.
            artist: Artist filter.
            album: Album/release title filter.
            track: Track title filter.
            source: "both", "musicbrainz" or "discogs".
            sort: One of SEARCH_SORT_FIELDS.
            load_more: Offer to fetch more results after each page.

        Returns:
            Exit code.
        """
        self.ui.display_rule("Music Search")
        try:
            if not any(value and value.strip() for value in (query_text, artist, album, track)):
                query_text = self.ui.get_prompt("Enter search term:")
                if not query_text:
                    self.ui.display_error("A search term is required.")
                    return 1

            resolved_source = source.lower()
            if resolved_source not in SOURCES:
                self.ui.display_error(f"Unknown source '{source}'. Allowed values are {', '.join(SOURCES)}.")
                return 1
            if sort.lower() not in SEARCH_SORT_FIELDS:
                self.ui.display_error(f"Unknown sort '{sort}'. Allowed values are {', '.join(SEARCH_SORT_FIELDS)}.")
                return 1

            if resolved_source in ("discogs", "both") and not self.metadata_service.discogs_enabled:
                self.ui.display_warning("DISCOGS_USER_TOKEN not set; Discogs results will be unavailable.")
                if resolved_source == "discogs":
                    self.ui.display_error("Cannot proceed with Discogs-only search without token.")
                    return 1
                resolved_source = "musicbrainz"

            sort_by = None if sort.lower() == "none" else sort.lower()
            current_max = DEFAULT_MAX_RESULTS
            while True:
                self.ui.display_info(f"Fetching up to {current_max} results per source...")
                query = MusicSearchQuery(
                    artist=artist or query_text,
                    album=album,
                    track=track,
                    max_results=current_max,
                    sort_by=sort_by,
                )
                discogs_results, mb_results = await self.metadata_service.search_both(query, resolved_source)

                if mb_results:
                    self.ui.display_table(
                        "MusicBrainz",
                        ["Type", "Title", "Artist", "Year", "Country"],
                        [
                            (classify_release_type(item.status), item.title, item.artist or "Unknown", item.year, item.country)
                            for item in mb_results[:current_max]
                        ],
                        color="blue",
                    )
                if discogs_results:
                    self.ui.display_table(
                        "Discogs",
                        ["Type", "Title", "Artist", "Year", "Label"],
                        [
                            (
                                classify_release_type(item.format),
                                item.title,
                                item.artist,
                                item.year,
                                truncate_label(item.label, LABEL_COLUMN_WIDTH),
                            )
                            for item in discogs_results[:current_max]
                        ],
                        color="orange1",
                    )

                if not mb_results and not discogs_results:
                    self.ui.display_warning("No results found.")
                    return 0

                if not load_more or current_max >= MAX_RESULTS_CAP:
                    if current_max >= MAX_RESULTS_CAP:
                        self.ui.display_info("Maximum result limit reached.")
                    return 0

                if not self.ui.ask_yes_no_question("Load more results?", default=False):
                    return 0
                current_max = min(current_max + MAX_RESULTS_STEP, MAX_RESULTS_CAP)
        except Exception as e:
            return self._report_failure("Music search", e)

    async def handle_music_release(
        self,
        query_text: Optional[str] = None,
        artist: Optional[str] = None,
        album: Optional[str] = None,
        sort: str = "none",
    ) -> int:
        """Shows the first matching release with its tracks and credits."""
        self.ui.display_rule("Release Details")
        if sort.lower() not in TRACK_SORT_FIELDS:
            self.ui.display_error(f"Unknown sort '{sort}'. Allowed values are {', '.join(TRACK_SORT_FIELDS)}.")
            return 1
        query = MusicSearchQuery(
            artist=artist,
            album=album or query_text,
            sort_by=None if sort.lower() == "none" else sort.lower(),
        )
        if not query.has_terms():
            self.ui.display_error("Give a release title or use --artist/--album.")
            return 1

        try:
            self.ui.display_step("Resolving release")
            release = await self.metadata_service.get_release(query)
        except Exception as e:
            return self._report_failure("Release lookup", e)

        if release is None:
            self.ui.display_warning("No release found.")
            return 1

        self.ui.display_key_value("Title", release.title)
        self.ui.display_key_value("Artist", release.artist or "Unknown")
        self.ui.display_key_value("Year", release.year or "Unknown")
        self.ui.display_key_value("Country", release.country)
        if release.label:
            self.ui.display_key_value("Label", release.label)
        self.ui.display_key_value("Source", release.source)
        self.ui.display_key_value("External ID", release.external_id)

        if release.tracks:
            self.ui.display_table(
                "Tracks",
                ["#", "Title", "Duration"],
                [(track.position, track.title, format_duration(track.duration)) for track in release.tracks],
                color="cyan",
            )
        else:
            self.ui.display_info("No track information available.")

        if release.credits:
            self.ui.display_table(
                "Credits",
                ["Name", "Role"],
                [(credit.name, credit.role) for credit in release.credits],
                color="magenta",
            )
        return 0

    async def handle_metadata(self, title: str = "Heroes", artist: Optional[str] = "David Bowie") -> int:
        """Looks up the first unified match for a title."""
        self.ui.display_rule("Music Metadata Search")
        try:
            result = await self.metadata_service.search(MusicSearchQuery(artist=artist, album=title))
        except Exception as e:
            return self._report_failure("Metadata search", e)

        if result is None:
            self.ui.display_warning("No results found")
            return 1

        self.ui.display_table(
            "Metadata",
            ["Field", "Value"],
            [
                ("Title", result.title),
                ("Artist", result.artist),
                ("Year", result.year if result.year is not None else "Unknown"),
                ("Source", result.source),
                ("External ID", result.external_id),
            ],
        )
        return 0

    # --- Mail ---

    async def handle_mail_once(self) -> int:
        """Creates an account, reports the inbox size and deletes the account."""
        self.ui.display_rule("Mail.tm Service")
        exit_code = 0
        try:
            self.ui.display_step("Creating mail.tm account")
            account = await self.mail_client.create_account()
            self.ui.display_success(f"Created account: {account.address}")

            inbox = await self.mail_client.get_inbox()
            self.ui.display_info(f"Inbox has {len(inbox)} messages")
        except Exception as e:
            exit_code = self._report_failure("Mail", e)
        finally:
            if not await self._delete_account():
                exit_code = 1
        return exit_code

    async def handle_mail_watch(
        self,
        refresh_seconds: int = DEFAULT_REFRESH_SECONDS,
        max_cycles: Optional[int] = None,
    ) -> int:
        """Creates an account and lets the user browse its inbox until they quit.

        Args:
            refresh_seconds: Wait between refreshes while the inbox is empty.
            max_cycles: Stop after this many inbox refreshes (unbounded when None).

        Returns:
            Exit code.
        """
        self.ui.display_rule("Mail.tm")
        exit_code = 0
        try:
            self.ui.display_step("Creating mail.tm account")
            account = await self.mail_client.create_account()
            self.ui.display_success(f"Created account: {account.address}")
            self.ui.display_info("Watching inbox. Press Ctrl+C to exit.")

            cycles = 0
            while max_cycles is None or cycles < max_cycles:
                cycles += 1
                if not await self._watch_cycle(account, refresh_seconds):
                    break
        except Exception as e:
            exit_code = self._report_failure("Mail", e)
        finally:
            if not await self._delete_account():
                exit_code = 1
        return exit_code

    async def _delete_account(self) -> bool:
        """Deletes the logged-in account, if any. Returns False when deletion failed."""
        if not self.mail_client.is_authenticated:
            return True
        try:
            await self.mail_client.delete_account()
        except Exception as e:
            self._report_failure("Account deletion", e)
            return False
        self.ui.display_success("Account deleted")
        return True

    async def _watch_cycle(self, account: MailTmAccount, refresh_seconds: int) -> bool:
        """One inbox refresh. Returns False when the user chose to quit."""
        self.ui.clear()
        self.ui.display_rule("Mail.tm")
        self.ui.display_success(f"Watching: {account.address}")

        inbox = await self.mail_client.get_inbox()
        self.ui.display_key_value("Messages", len(inbox))

        if not inbox:
            self.ui.display_info("Inbox empty. Waiting for new mail...")
            await self._sleep(refresh_seconds)
            return True

        self.ui.display_table(
            "Inbox",
            ["#", "From", "Subject", "Received"],
            [
                (index, _sender(message), message.subject, format_timestamp(message.created_at))
                for index, message in enumerate(inbox, 1)
            ],
            color="cyan",
        )

        choices: List[str] = [
            f"{index}. {truncate(message.subject, SUBJECT_CHOICE_WIDTH)}" for index, message in enumerate(inbox, 1)
        ]
        choices += [REFRESH_CHOICE, QUIT_CHOICE]
        selection = self.ui.ask_choice("Select a message to read:", choices)

        if selection == QUIT_CHOICE:
            return False
        if selection == REFRESH_CHOICE:
            await self._sleep(1)
            return True

        message = inbox[choices.index(selection)]
        await self._show_message(message)
        return True

    async def _show_message(self, message: MailTmMessage) -> None:
        full = await self.mail_client.read_message(message.id)

        self.ui.clear()
        self.ui.display_rule("Message Detail")
        self.ui.display_key_value("From", _sender(full))
        self.ui.display_key_value("Subject", full.subject)
        self.ui.display_key_value("Received", format_timestamp(full.created_at))

        body = full.body or "(no text content)"
        self.ui.display_panel(body, title="Body")

        links = extract_urls(body)
        if links:
            self.ui.display_info(f"Found {len(links)} link(s) in message:")
            self.ui.display_links(links)

        self.ui.get_prompt("Press Enter to return to inbox...")

    # --- CLI comparison ---

    def handle_cli_compare(self, args: Optional[Sequence[str]] = None) -> int:
        try:
            self.cli_comparison_service.run_all(list(args) if args else DEFAULT_COMPARE_ARGS)
            return 0
        except Exception as e:
            return self._report_failure("CLI comparison", e)

    def handle_cli_demo(self) -> int:
        try:
            self.cli_comparison_service.demo()
            return 0
        except Exception as e:
            return self._report_failure("CLI demo", e)
