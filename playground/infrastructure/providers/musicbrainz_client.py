"""MusicBrainz web service (v2) client.

Searches use the Lucene query syntax of the /ws/2 search endpoints;
lookups use the `inc` parameter to pull tracks and relationships in one
request. Every request goes through the shared ResilientExecutor with the
MusicBrainz throttle.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from playground.domain.models.common import MUSICBRAINZ
from playground.domain.models.music import (
    MusicBrainzArtist,
    MusicBrainzCredit,
    MusicBrainzRelease,
    MusicBrainzReleaseGroup,
    MusicBrainzSearchResult,
    MusicBrainzTrack,
)
from playground.domain.models.resilience import throttle_for
from playground.infrastructure.providers.errors import is_not_found
from playground.infrastructure.providers.http import (
    DEFAULT_TIMEOUT_S,
    MAX_PAGE_SIZE,
    create_async_client,
    decode_json,
    expect_object,
    milliseconds,
    object_list,
    opt_int,
    opt_str,
    parse_partial_date,
    parse_year,
    str_list,
)
from playground.infrastructure.resilience.executor import ResilientExecutor

logger = logging.getLogger(__name__)

BASE_URL = "https://musicbrainz.org/ws/2"


def build_query(
    artist: Optional[str] = None,
    release: Optional[str] = None,
    year: Optional[int] = None,
    label: Optional[str] = None,
    genre: Optional[str] = None,
) -> str:
    """Builds a Lucene release query; empty when no term is given."""
    parts = []
    if artist and artist.strip():
        parts.append(f'artist:"{artist}"')
    if release and release.strip():
        parts.append(f'release:"{release}"')
    if label and label.strip():
        parts.append(f'label:"{label}"')
    if genre and genre.strip():
        parts.append(f'tag:"{genre}"')
    if year is not None:
        parts.append(f"date:{year}")
    return " AND ".join(parts)


def first_credited_artist(data: Dict[str, Any]) -> Optional[str]:
    for credit in object_list(data, "artist-credit"):
        artist = credit.get("artist")
        if isinstance(artist, dict) and opt_str(artist, "name"):
            return opt_str(artist, "name")
        if opt_str(credit, "name"):
            return opt_str(credit, "name")
    return None


class MusicBrainzClient:
    """Async client for the MusicBrainz web service."""

    def __init__(
        self,
        executor: ResilientExecutor,
        app_name: str = "PlaygroundApp",
        app_version: str = "1.0",
        contact: str = "user@example.com",
        timeout: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the client.

        Args:
            executor: Shared resilient executor.
            app_name: Application name for the User-Agent MusicBrainz requires.
            app_version: Application version for the User-Agent.
            contact: Contact e-mail or URL for the User-Agent.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests).
        """
        self.executor = executor
        self.user_agent = f"{app_name}/{app_version} ( {contact} )"
        self.timeout = timeout
        self._transport = transport

    async def _get(self, path: str, params: Dict[str, Any], allow_missing: bool = False) -> Any:
        request_params = dict(params)
        request_params["fmt"] = "json"

        async def operation() -> Any:
            async with create_async_client(
                BASE_URL,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
                transport=self._transport,
            ) as http:
                response = await http.get(path, params=request_params)
            return decode_json(MUSICBRAINZ, response)

        return await self.executor.execute(
            operation,
            throttle_for(MUSICBRAINZ),
            MUSICBRAINZ,
            not_found=is_not_found if allow_missing else None,
        )

    async def _search(self, entity: str, query: str, max_results: int) -> List[Dict[str, Any]]:
        logger.debug(f"MusicBrainz {entity} query: {query}")
        params = {"query": query, "limit": min(max_results, MAX_PAGE_SIZE)}
        payload = expect_object(MUSICBRAINZ, await self._get(f"/{entity}", params))
        # Collection keys are pluralized entity names ("releases", "release-groups").
        return object_list(payload, f"{entity}s")

    # --- Releases ---

    async def search_releases(
        self,
        artist: Optional[str] = None,
        release: Optional[str] = None,
        year: Optional[int] = None,
        label: Optional[str] = None,
        genre: Optional[str] = None,
        max_results: int = 25,
    ) -> List[MusicBrainzSearchResult]:
        """Searches releases. Returns [] without a request when no term is given."""
        query = build_query(artist, release, year, label, genre)
        if not query:
            return []
        items = await self._search("release", query, max_results)
        return [
            MusicBrainzSearchResult(
                id=opt_str(item, "id") or "",
                title=opt_str(item, "title") or "",
                artist=first_credited_artist(item),
                year=parse_year(item.get("date")),
                country=opt_str(item, "country"),
                status=opt_str(item, "status"),
                disambiguation=opt_str(item, "disambiguation"),
            )
            for item in items
        ]

    async def search_first_release(
        self,
        artist: Optional[str] = None,
        release: Optional[str] = None,
        year: Optional[int] = None,
        label: Optional[str] = None,
        genre: Optional[str] = None,
    ) -> Optional[MusicBrainzSearchResult]:
        results = await self.search_releases(artist, release, year, label, genre, max_results=1)
        return results[0] if results else None

    async def get_release(
        self,
        release_id: str,
        include_tracks: bool = True,
        include_credits: bool = False,
    ) -> Optional[MusicBrainzRelease]:
        """Looks up a release by MBID; None when it does not exist.

        Args:
            release_id: The release MBID.
            include_tracks: Fetch media and recordings.
            include_credits: Fetch artist relationships as credits.
        """
        includes = ["artist-credits"]
        if include_tracks:
            includes += ["recordings", "media"]
        if include_credits:
            includes.append("artist-rels")

        payload = await self._get(f"/release/{release_id}", {"inc": " ".join(includes)}, allow_missing=True)
        if payload is None:
            return None
        data = expect_object(MUSICBRAINZ, payload)

        tracks = []
        for medium in object_list(data, "media"):
            for track in object_list(medium, "tracks"):
                recording = track.get("recording") if isinstance(track.get("recording"), dict) else {}
                tracks.append(
                    MusicBrainzTrack(
                        id=opt_str(track, "id") or "",
                        title=opt_str(track, "title") or opt_str(recording, "title") or "",
                        position=opt_int(track, "position") or 0,
                        length=milliseconds(track.get("length")),
                        recording_id=opt_str(recording, "id"),
                    )
                )

        credits = []
        for relation in object_list(data, "relations"):
            artist = relation.get("artist")
            role = opt_str(relation, "type")
            if isinstance(artist, dict) and role:
                credits.append(
                    MusicBrainzCredit(
                        name=opt_str(artist, "name") or "",
                        role=role,
                        artist_id=opt_str(artist, "id"),
                    )
                )

        credited = str_list(data, "artist-credit", "name")
        return MusicBrainzRelease(
            id=opt_str(data, "id") or release_id,
            title=opt_str(data, "title") or "",
            artist=first_credited_artist(data),
            artist_credit=", ".join(credited) if credited else None,
            release_date=parse_partial_date(data.get("date")),
            country=opt_str(data, "country"),
            status=opt_str(data, "status"),
            barcode=opt_str(data, "barcode"),
            disambiguation=opt_str(data, "disambiguation"),
            tracks=tracks,
            credits=credits,
        )

    # --- Release groups ---

    async def search_release_groups(
        self,
        artist: Optional[str] = None,
        release_group: Optional[str] = None,
        max_results: int = 25,
    ) -> List[MusicBrainzSearchResult]:
        """Searches release groups; the primary type is reported as the status."""
        parts = []
        if artist and artist.strip():
            parts.append(f'artist:"{artist}"')
        if release_group and release_group.strip():
            parts.append(f'releasegroup:"{release_group}"')
        if not parts:
            return []
        items = await self._search("release-group", " AND ".join(parts), max_results)
        return [
            MusicBrainzSearchResult(
                id=opt_str(item, "id") or "",
                title=opt_str(item, "title") or "",
                artist=first_credited_artist(item),
                year=parse_year(item.get("first-release-date")),
                status=opt_str(item, "primary-type"),
                disambiguation=opt_str(item, "disambiguation"),
            )
            for item in items
        ]

    async def get_release_group(self, release_group_id: str) -> Optional[MusicBrainzReleaseGroup]:
        payload = await self._get(
            f"/release-group/{release_group_id}",
            {"inc": "artist-credits releases"},
            allow_missing=True,
        )
        if payload is None:
            return None
        data = expect_object(MUSICBRAINZ, payload)
        return MusicBrainzReleaseGroup(
            id=opt_str(data, "id") or release_group_id,
            title=opt_str(data, "title") or "",
            artist=first_credited_artist(data),
            primary_type=opt_str(data, "primary-type"),
            secondary_types=str_list(data, "secondary-types"),
            first_release_date=parse_partial_date(data.get("first-release-date")),
            release_count=len(object_list(data, "releases")),
            disambiguation=opt_str(data, "disambiguation"),
        )

    # --- Artists ---

    async def search_artists(self, artist: str, max_results: int = 25) -> List[MusicBrainzSearchResult]:
        """Searches artists; the artist type is reported as the status, begin year as the year."""
        if not artist or not artist.strip():
            return []
        items = await self._search("artist", f'artist:"{artist}"', max_results)
        results = []
        for item in items:
            life_span = item.get("life-span") if isinstance(item.get("life-span"), dict) else {}
            name = opt_str(item, "name") or ""
            results.append(
                MusicBrainzSearchResult(
                    id=opt_str(item, "id") or "",
                    title=name,
                    artist=name or None,
                    year=parse_year(life_span.get("begin")),
                    country=opt_str(item, "country"),
                    status=opt_str(item, "type"),
                    disambiguation=opt_str(item, "disambiguation"),
                )
            )
        return results

    async def get_artist(self, artist_id: str) -> Optional[MusicBrainzArtist]:
        payload = await self._get(f"/artist/{artist_id}", {}, allow_missing=True)
        if payload is None:
            return None
        data = expect_object(MUSICBRAINZ, payload)
        life_span = data.get("life-span") if isinstance(data.get("life-span"), dict) else {}
        return MusicBrainzArtist(
            id=opt_str(data, "id") or artist_id,
            name=opt_str(data, "name") or "",
            type=opt_str(data, "type"),
            country=opt_str(data, "country"),
            disambiguation=opt_str(data, "disambiguation"),
            begin_date=parse_partial_date(life_span.get("begin")),
            end_date=parse_partial_date(life_span.get("end")),
        )

    # --- Recordings ---

    async def search_recordings(
        self,
        artist: Optional[str] = None,
        track: Optional[str] = None,
        max_results: int = 25,
    ) -> List[MusicBrainzSearchResult]:
        """Searches recordings (single tracks); the first release's country and status are reported."""
        parts = []
        if artist and artist.strip():
            parts.append(f'artist:"{artist}"')
        if track and track.strip():
            parts.append(f'recording:"{track}"')
        if not parts:
            return []
        items = await self._search("recording", " AND ".join(parts), max_results)
        results = []
        for item in items:
            releases = object_list(item, "releases")
            first_release = releases[0] if releases else {}
            results.append(
                MusicBrainzSearchResult(
                    id=opt_str(item, "id") or "",
                    title=opt_str(item, "title") or "",
                    artist=first_credited_artist(item),
                    year=parse_year(item.get("first-release-date")),
                    country=opt_str(first_release, "country"),
                    status=opt_str(first_release, "status"),
                    disambiguation=opt_str(item, "disambiguation"),
                )
            )
        return results
