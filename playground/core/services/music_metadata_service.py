"""Core service unifying the music metadata providers.

Fans a logical MusicSearchQuery out to MusicBrainz and Discogs one after
the other (all outbound calls share one rate gate anyway) and maps the
provider records onto the unified result types.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

from playground.domain.models.common import DISCOGS, MUSICBRAINZ, ExternalId
from playground.domain.models.music import (
    DiscogsRelease,
    DiscogsSearchResult,
    MusicBrainzRelease,
    MusicBrainzSearchResult,
    MusicSearchQuery,
    MusicSearchResult,
    UnifiedCredit,
    UnifiedRelease,
    UnifiedTrack,
)
from playground.infrastructure.providers.discogs_client import DiscogsClient
from playground.infrastructure.providers.http import parse_duration
from playground.infrastructure.providers.musicbrainz_client import MusicBrainzClient

logger = logging.getLogger(__name__)

SOURCES = ("both", "musicbrainz", "discogs")
SEARCH_SORT_FIELDS = ("none", "type", "artist", "album", "year", "label")
TRACK_SORT_FIELDS = ("none", "duration", "track")
NO_TYPE = "—"


def classify_release_type(release_format: Optional[str]) -> str:
    """Maps a Discogs format string or MusicBrainz status onto a short type label."""
    if not release_format or not release_format.strip():
        return NO_TYPE
    lower = release_format.lower()
    if "single" in lower:
        return "Single"
    if "ep" in lower or "e.p." in lower:
        return "EP"
    if "compilation" in lower or "comp" in lower:
        return "Comp"
    if "anthology" in lower:
        return "Anthology"
    if "lp" in lower or "album" in lower:
        return "LP"
    if lower == "official":
        return "Album"
    if "bootleg" in lower or "live" in lower:
        return "Live"
    if "promo" in lower:
        return "Promo"
    return NO_TYPE


def truncate_label(label: Optional[str], max_length: int) -> str:
    """Shortens a ", "-joined label list for a table cell.

    More than two labels collapse to "First (+N more)".
    """
    if not label or not label.strip():
        return ""
    labels = [part for part in label.split(", ") if part]
    if len(labels) <= 2:
        return label if len(label) <= max_length else label[: max_length - 3] + "..."
    first = labels[0]
    if len(first) > 20:
        first = first[:17] + "..."
    return f"{first} (+{len(labels) - 1} more)"


def _result_type(result: Any) -> str:
    if isinstance(result, DiscogsSearchResult):
        return classify_release_type(result.format)
    return classify_release_type(getattr(result, "status", None))


def sort_search_results(results: Sequence[Any], sort_by: Optional[str]) -> List[Any]:
    """Sorts provider search results by one of SEARCH_SORT_FIELDS.

    Year sorts newest first with undated results last; text fields sort
    case-insensitively. Unknown or empty fields keep the provider order.
    """
    key = (sort_by or "none").lower()
    if key in ("year", "releaseyear"):
        return sorted(results, key=lambda r: r.year if r.year is not None else -1, reverse=True)
    if key == "artist":
        return sorted(results, key=lambda r: (r.artist or "").lower())
    if key in ("album", "title"):
        return sorted(results, key=lambda r: (r.title or "").lower())
    if key == "label":
        return sorted(results, key=lambda r: (getattr(r, "label", None) or "").lower())
    if key == "type":
        return sorted(results, key=_result_type)
    if key != "none":
        logger.warning(f"Unknown sort field '{sort_by}', keeping provider order")
    return list(results)


def sort_tracks(tracks: Sequence[UnifiedTrack], sort_by: Optional[str]) -> List[UnifiedTrack]:
    """Longest first for "duration", alphabetical for "track"."""
    key = (sort_by or "none").lower()
    if key == "duration":
        return sorted(tracks, key=lambda t: t.duration.total_seconds() if t.duration else -1, reverse=True)
    if key in ("track", "title"):
        return sorted(tracks, key=lambda t: t.title.lower())
    return list(tracks)


class MusicMetadataService:
    """Orchestrates searches and release lookups across music providers."""

    def __init__(self, musicbrainz: MusicBrainzClient, discogs: Optional[DiscogsClient] = None):
        """Initializes the service.

        Args:
            musicbrainz: MusicBrainz client (always available).
            discogs: Discogs client, or None when no token is configured.
        """
        self.musicbrainz = musicbrainz
        self.discogs = discogs

    @property
    def discogs_enabled(self) -> bool:
        return self.discogs is not None

    async def _search_musicbrainz(self, query: MusicSearchQuery, max_results: int) -> List[MusicBrainzSearchResult]:
        if query.track and not query.album:
            return await self.musicbrainz.search_recordings(
                artist=query.artist, track=query.track, max_results=max_results
            )
        return await self.musicbrainz.search_releases(
            artist=query.artist,
            release=query.album,
            year=query.year,
            label=query.label,
            genre=query.genre,
            max_results=max_results,
        )

    async def _search_discogs(self, query: MusicSearchQuery, max_results: int) -> List[DiscogsSearchResult]:
        return await self.discogs.search(
            artist=query.artist,
            release=query.album,
            track=query.track,
            year=query.year,
            label=query.label,
            genre=query.genre,
            max_results=max_results,
        )

    async def search(self, query: MusicSearchQuery) -> Optional[MusicSearchResult]:
        """Returns the first match, preferring MusicBrainz over Discogs."""
        if not query.has_terms():
            return None

        mb_results = await self._search_musicbrainz(query, max_results=5)
        if mb_results:
            first = mb_results[0]
            return MusicSearchResult(
                title=first.title or query.album or query.track or "",
                artist=first.artist or query.artist or "Unknown",
                source=MUSICBRAINZ,
                external_id=ExternalId(first.id),
                year=first.year,
                country=first.country,
            )

        if self.discogs is not None:
            discogs_results = await self._search_discogs(query, max_results=5)
            if discogs_results:
                first = discogs_results[0]
                return MusicSearchResult(
                    title=first.title or query.album or query.track or "",
                    artist=first.artist or query.artist or "Unknown",
                    source=DISCOGS,
                    external_id=ExternalId(str(first.release_id)),
                    year=first.year,
                    country=first.country,
                )

        logger.info("No provider returned a match")
        return None

    async def search_both(
        self, query: MusicSearchQuery, source: str = "both"
    ) -> Tuple[Optional[List[DiscogsSearchResult]], List[MusicBrainzSearchResult]]:
        """Searches the selected providers sequentially.

        Args:
            query: The logical query; `max_results` applies per provider.
            source: One of "both", "musicbrainz", "discogs".

        Returns:
            (discogs_results, musicbrainz_results). The Discogs list is None
            when Discogs is not configured or not selected.

        Raises:
            ValueError: For an unknown source.
        """
        source = source.lower()
        if source not in SOURCES:
            raise ValueError(f"Unknown source '{source}'. Allowed values are {', '.join(SOURCES)}.")

        discogs_results: Optional[List[DiscogsSearchResult]] = None
        if source in ("both", "discogs") and self.discogs is not None:
            discogs_results = sort_search_results(
                await self._search_discogs(query, query.max_results), query.sort_by
            )

        mb_results: List[MusicBrainzSearchResult] = []
        if source in ("both", "musicbrainz"):
            mb_results = sort_search_results(
                await self._search_musicbrainz(query, query.max_results), query.sort_by
            )

        return discogs_results, mb_results

    async def get_release(self, query: MusicSearchQuery) -> Optional[UnifiedRelease]:
        """Resolves the first matching release with tracks and credits."""
        release: Optional[UnifiedRelease] = None

        mb_first = await self.musicbrainz.search_first_release(
            artist=query.artist, release=query.album, year=query.year, label=query.label, genre=query.genre
        )
        if mb_first is not None:
            mb_release = await self.musicbrainz.get_release(mb_first.id, include_tracks=True, include_credits=True)
            if mb_release is not None:
                release = _unify_musicbrainz(mb_release)

        if release is None and self.discogs is not None:
            discogs_first = await self.discogs.search_first(
                artist=query.artist,
                release=query.album,
                track=query.track,
                year=query.year,
                label=query.label,
                genre=query.genre,
            )
            if discogs_first is not None:
                discogs_release = await self.discogs.get_release(discogs_first.release_id)
                if discogs_release is not None:
                    release = _unify_discogs(discogs_release)

        if release is not None:
            release.tracks = sort_tracks(release.tracks, query.sort_by)
        return release

    async def get_credits(self, query: MusicSearchQuery) -> List[UnifiedCredit]:
        release = await self.get_release(query)
        return release.credits if release else []

# --- Mapping to unified records ---

def _unify_musicbrainz(release: MusicBrainzRelease) -> UnifiedRelease:
    return UnifiedRelease(
        title=release.title,
        source=MUSICBRAINZ,
        external_id=ExternalId(release.id),
        artist=release.artist_credit or release.artist,
        year=release.year,
        country=release.country,
        tracks=[
            UnifiedTrack(
                position=str(track.position),
                title=track.title,
                duration=track.length,
                recording_id=track.recording_id,
            )
            for track in release.tracks
        ],
        credits=[UnifiedCredit(name=credit.name, role=credit.role) for credit in release.credits],
    )


def _unify_discogs(release: DiscogsRelease) -> UnifiedRelease:
    return UnifiedRelease(
        title=release.title,
        source=DISCOGS,
        external_id=ExternalId(str(release.release_id)),
        artist=", ".join(release.artists) or None,
        year=release.year,
        country=release.country,
        label=", ".join(release.labels) or None,
        tracks=[
            UnifiedTrack(position=track.position, title=track.title, duration=parse_duration(track.duration))
            for track in release.tracklist
            if track.type == "track"
        ],
        credits=[UnifiedCredit(name=credit.name, role=credit.role) for credit in release.credits],
    )
