import asyncio
from datetime import datetime, timedelta

import pytest
from unittest.mock import MagicMock

from playground.core.command_handler import (
    QUIT_CHOICE,
    REFRESH_CHOICE,
    CommandHandler,
    format_duration,
    format_timestamp,
)
from playground.core.services.cli_comparison_service import CliComparisonService
from playground.core.services.music_metadata_service import MusicMetadataService
from playground.domain.models.mail import MailTmAccount, MailTmAddress, MailTmMessage
from playground.domain.models.music import (
    DiscogsSearchResult,
    MusicBrainzSearchResult,
    MusicSearchResult,
    UnifiedCredit,
    UnifiedRelease,
    UnifiedTrack,
)
from playground.infrastructure.providers.errors import ProviderHttpError
from playground.infrastructure.providers.mailtm_client import MailTmClient

MB_RESULT = MusicBrainzSearchResult(id="mb-1", title="Heroes", artist="David Bowie", year=1977, country="GB", status="Official")
DISCOGS_RESULT = DiscogsSearchResult(release_id=1, title="David Bowie - Heroes", artist="David Bowie", year=1977, format="Vinyl, LP", label="RCA Victor")
ACCOUNT = MailTmAccount(id="acc1", address="test_1@mail.example", password="pw")
MESSAGE = MailTmMessage(
    id="m1",
    subject="Welcome",
    sender=MailTmAddress("noreply@example.com"),
    created_at=datetime(2024, 3, 1, 10, 0, 0),
)


@pytest.fixture
def mock_metadata_service():
    service = MagicMock(spec=MusicMetadataService)
    service.discogs_enabled = True
    return service


@pytest.fixture
def mock_mail_client():
    client = MagicMock(spec=MailTmClient)
    client.create_account.return_value = ACCOUNT
    client.get_inbox.return_value = []
    client.delete_account.return_value = True
    client.is_authenticated = True
    return client


@pytest.fixture
def mock_cli_comparison_service():
    return MagicMock(spec=CliComparisonService)


@pytest.fixture
def command_handler(mock_ui, mock_metadata_service, mock_mail_client, mock_cli_comparison_service, sleep_recorder):
    """Fixture to create CommandHandler with mocked services."""
    return CommandHandler(
        ui=mock_ui,
        metadata_service=mock_metadata_service,
        mail_client=mock_mail_client,
        cli_comparison_service=mock_cli_comparison_service,
        sleep=sleep_recorder,
    )

# --- Music search ---

@pytest.mark.asyncio
async def test_music_search_renders_both_tables(command_handler, mock_metadata_service, mock_ui):
    mock_metadata_service.search_both.return_value = ([DISCOGS_RESULT], [MB_RESULT])

    assert await command_handler.handle_music_search("David Bowie", sort="year") == 0

    query, source = mock_metadata_service.search_both.call_args.args
    assert (query.artist, query.max_results, query.sort_by, source) == ("David Bowie", 50, "year", "both")
    titles = [c.args[0] for c in mock_ui.display_table.call_args_list]
    assert titles == ["MusicBrainz", "Discogs"]
    mb_rows = mock_ui.display_table.call_args_list[0].args[2]
    assert mb_rows == [("Album", "Heroes", "David Bowie", 1977, "GB")]
    mock_ui.ask_yes_no_question.assert_not_called()


@pytest.mark.asyncio
async def test_music_search_prompts_for_term(command_handler, mock_metadata_service, mock_ui):
    mock_ui.get_prompt.return_value = "Kraftwerk"
    mock_metadata_service.search_both.return_value = (None, [MB_RESULT])

    assert await command_handler.handle_music_search() == 0
    assert mock_metadata_service.search_both.call_args.args[0].artist == "Kraftwerk"


@pytest.mark.asyncio
async def test_music_search_empty_prompt_fails(command_handler, mock_ui):
    mock_ui.get_prompt.return_value = ""
    assert await command_handler.handle_music_search() == 1
    mock_ui.display_error.assert_called_once()


@pytest.mark.asyncio
async def test_music_search_without_token_falls_back(command_handler, mock_metadata_service, mock_ui):
    mock_metadata_service.discogs_enabled = False
    mock_metadata_service.search_both.return_value = (None, [MB_RESULT])

    assert await command_handler.handle_music_search("Bowie", source="both") == 0
    assert mock_metadata_service.search_both.call_args.args[1] == "musicbrainz"
    mock_ui.display_warning.assert_called_once()

    assert await command_handler.handle_music_search("Bowie", source="discogs") == 1
    mock_ui.display_error.assert_called_with("Cannot proceed with Discogs-only search without token.")


@pytest.mark.asyncio
async def test_music_search_rejects_bad_options(command_handler, mock_metadata_service):
    assert await command_handler.handle_music_search("Bowie", source="spotify") == 1
    assert await command_handler.handle_music_search("Bowie", sort="popularity") == 1
    mock_metadata_service.search_both.assert_not_called()


@pytest.mark.asyncio
async def test_music_search_load_more(command_handler, mock_metadata_service, mock_ui):
    mock_metadata_service.search_both.return_value = (None, [MB_RESULT])
    mock_ui.ask_yes_no_question.side_effect = [True, True, True]

    assert await command_handler.handle_music_search("Bowie", load_more=True) == 0

    sizes = [c.args[0].max_results for c in mock_metadata_service.search_both.call_args_list]
    assert sizes == [50, 75, 100]
    mock_ui.display_info.assert_any_call("Maximum result limit reached.")


@pytest.mark.asyncio
async def test_music_search_no_results(command_handler, mock_metadata_service, mock_ui):
    mock_metadata_service.search_both.return_value = ([], [])
    assert await command_handler.handle_music_search("Nobody") == 0
    mock_ui.display_warning.assert_called_once_with("No results found.")


@pytest.mark.asyncio
async def test_music_search_failure_is_reported(command_handler, mock_metadata_service, mock_ui):
    error = ProviderHttpError("Discogs", 503)
    mock_metadata_service.search_both.side_effect = error

    assert await command_handler.handle_music_search("Bowie") == 1
    mock_ui.display_error.assert_called_once_with(f"ProviderHttpError: {error}")

# --- Release and metadata ---

@pytest.mark.asyncio
async def test_music_release(command_handler, mock_metadata_service, mock_ui):
    mock_metadata_service.get_release.return_value = UnifiedRelease(
        title="Heroes",
        source="MusicBrainz",
        external_id="mb-1",
        artist="David Bowie",
        year=1977,
        tracks=[UnifiedTrack("1", "Heroes", timedelta(minutes=6, seconds=10))],
        credits=[UnifiedCredit("Tony Visconti", "producer")],
    )

    assert await command_handler.handle_music_release("Heroes", artist="David Bowie", sort="duration") == 0

    query = mock_metadata_service.get_release.call_args.args[0]
    assert (query.album, query.artist, query.sort_by) == ("Heroes", "David Bowie", "duration")
    mock_ui.display_key_value.assert_any_call("Title", "Heroes")
    tracks_call, credits_call = mock_ui.display_table.call_args_list
    assert tracks_call.args[2] == [("1", "Heroes", "6:10")]
    assert credits_call.args[2] == [("Tony Visconti", "producer")]


@pytest.mark.asyncio
async def test_music_release_not_found(command_handler, mock_metadata_service):
    mock_metadata_service.get_release.return_value = None
    assert await command_handler.handle_music_release("Nothing") == 1
    assert await command_handler.handle_music_release() == 1
    assert await command_handler.handle_music_release("Heroes", sort="year") == 1


@pytest.mark.asyncio
async def test_metadata(command_handler, mock_metadata_service, mock_ui):
    mock_metadata_service.search.return_value = MusicSearchResult(
        title="Heroes", artist="David Bowie", source="MusicBrainz", external_id="mb-1"
    )

    assert await command_handler.handle_metadata() == 0

    query = mock_metadata_service.search.call_args.args[0]
    assert (query.artist, query.album) == ("David Bowie", "Heroes")
    rows = mock_ui.display_table.call_args.args[2]
    assert ("Year", "Unknown") in rows


@pytest.mark.asyncio
async def test_metadata_not_found(command_handler, mock_metadata_service, mock_ui):
    mock_metadata_service.search.return_value = None
    assert await command_handler.handle_metadata("Nothing", None) == 1
    mock_ui.display_warning.assert_called_once_with("No results found")

# --- Mail ---

@pytest.mark.asyncio
async def test_mail_once(command_handler, mock_mail_client, mock_ui):
    assert await command_handler.handle_mail_once() == 0
    mock_ui.display_info.assert_any_call("Inbox has 0 messages")
    mock_mail_client.delete_account.assert_awaited_once()


@pytest.mark.asyncio
async def test_mail_once_failure(command_handler, mock_mail_client, mock_ui):
    mock_mail_client.is_authenticated = False
    mock_mail_client.create_account.side_effect = RuntimeError("down")
    assert await command_handler.handle_mail_once() == 1
    mock_ui.display_error.assert_called_once_with("RuntimeError: down")
    mock_mail_client.delete_account.assert_not_awaited()


@pytest.mark.asyncio
async def test_mail_once_deletes_account_when_inbox_fails(command_handler, mock_mail_client, mock_ui):
    mock_mail_client.get_inbox.side_effect = RuntimeError("inbox down")

    assert await command_handler.handle_mail_once() == 1

    mock_mail_client.delete_account.assert_awaited_once()
    mock_ui.display_error.assert_called_once_with("RuntimeError: inbox down")
    mock_ui.display_success.assert_any_call("Account deleted")


@pytest.mark.asyncio
async def test_mail_once_reports_failed_deletion(command_handler, mock_mail_client, mock_ui):
    mock_mail_client.delete_account.side_effect = RuntimeError("delete refused")

    assert await command_handler.handle_mail_once() == 1

    mock_ui.display_info.assert_any_call("Inbox has 0 messages")
    mock_ui.display_error.assert_called_once_with("RuntimeError: delete refused")


@pytest.mark.asyncio
async def test_mail_watch_empty_inbox_waits(command_handler, mock_mail_client, sleep_recorder):
    assert await command_handler.handle_mail_watch(refresh_seconds=5, max_cycles=2) == 0
    assert sleep_recorder.delays == [5, 5]
    assert mock_mail_client.get_inbox.await_count == 2
    mock_mail_client.delete_account.assert_awaited_once()


@pytest.mark.asyncio
async def test_mail_watch_read_refresh_quit(command_handler, mock_mail_client, mock_ui, sleep_recorder):
    mock_mail_client.get_inbox.return_value = [MESSAGE]
    mock_mail_client.read_message.return_value = MailTmMessage(
        id="m1", subject="Welcome", sender=MESSAGE.sender, text="Confirm at https://example.com/c"
    )
    mock_ui.ask_choice.side_effect = ["1. Welcome", REFRESH_CHOICE, QUIT_CHOICE]

    assert await command_handler.handle_mail_watch() == 0

    choices = mock_ui.ask_choice.call_args.args[1]
    assert choices == ["1. Welcome", REFRESH_CHOICE, QUIT_CHOICE]
    mock_mail_client.read_message.assert_awaited_once_with("m1")
    mock_ui.display_panel.assert_called_once_with("Confirm at https://example.com/c", title="Body")
    mock_ui.display_links.assert_called_once_with(["https://example.com/c"])
    assert sleep_recorder.delays == [1]
    mock_mail_client.delete_account.assert_awaited_once()


@pytest.mark.asyncio
async def test_mail_watch_deletes_account_when_refresh_fails(command_handler, mock_mail_client, mock_ui, sleep_recorder):
    mock_mail_client.get_inbox.side_effect = [[], RuntimeError("refresh failed")]

    assert await command_handler.handle_mail_watch(refresh_seconds=5) == 1

    assert mock_mail_client.get_inbox.await_count == 2
    mock_mail_client.delete_account.assert_awaited_once()
    mock_ui.display_error.assert_called_once_with("RuntimeError: refresh failed")


@pytest.mark.asyncio
async def test_cancelled_mail_watch_still_deletes_account(command_handler, mock_mail_client, sleep_recorder):
    mock_mail_client.get_inbox.side_effect = asyncio.CancelledError

    with pytest.raises(asyncio.CancelledError):
        await command_handler.handle_mail_watch()

    mock_mail_client.delete_account.assert_awaited_once()

# --- CLI comparison ---

def test_cli_compare_defaults(command_handler, mock_cli_comparison_service):
    assert command_handler.handle_cli_compare() == 0
    mock_cli_comparison_service.run_all.assert_called_once_with(["scrape", "--verbose"])

    command_handler.handle_cli_compare(("search", "q"))
    mock_cli_comparison_service.run_all.assert_called_with(["search", "q"])


def test_cli_demo_failure(command_handler, mock_cli_comparison_service, mock_ui):
    mock_cli_comparison_service.demo.side_effect = RuntimeError("broken")
    assert command_handler.handle_cli_demo() == 1
    mock_ui.display_error.assert_called_once_with("RuntimeError: broken")


def test_show_overview(command_handler, mock_ui):
    assert command_handler.show_overview() == 0
    assert mock_ui.display_help.call_args.args[0] == "playground"


def test_formatters():
    assert format_duration(timedelta(seconds=65)) == "1:05"
    assert format_duration(timedelta(hours=1, seconds=5)) == "1:00:05"
    assert format_duration(None) == ""
    assert format_timestamp(datetime(2024, 3, 1, 10, 0, 0)) == "2024/03/01 10:00:00"
    assert format_timestamp(None) == ""
