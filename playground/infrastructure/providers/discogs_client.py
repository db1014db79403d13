"""Discogs API client.

Wraps the parts of https://api.discogs.com the application uses: database
search, releases, masters and master versions. Every request goes through
the shared ResilientExecutor with the Discogs throttle.
"""

import logging
import re
from collections import OrderedDict
from typing import Any, Dict, List, Optional

import httpx

from playground.domain.models.common import DISCOGS
from playground.domain.models.music import (
    DiscogsCredit,
    DiscogsFormat,
    DiscogsMaster,
    DiscogsRelease,
    DiscogsSearchResult,
    DiscogsTrack,
    DiscogsVersion,
)
from playground.domain.models.resilience import throttle_for
from playground.infrastructure.providers.errors import ConfigurationError, is_not_found
from playground.infrastructure.providers.http import (
    DEFAULT_TIMEOUT_S,
    MAX_PAGE_SIZE,
    create_async_client,
    decode_json,
    expect_object,
    joined,
    object_list,
    opt_int,
    opt_str,
    parse_year,
    str_list,
)
from playground.infrastructure.resilience.executor import ResilientExecutor

logger = logging.getLogger(__name__)

BASE_URL = "https://api.discogs.com"

_MEDIUM_WITH_SEPARATOR = re.compile(r"^(?P<medium>.+?)[-.]\d+[a-z]?$", re.IGNORECASE)
_VINYL_SIDE = re.compile(r"^(?P<medium>[A-Za-z]+)\d*[a-z]?$")


class DiscogsClient:
    """Async client for the Discogs REST API."""

    def __init__(
        self,
        token: Optional[str],
        executor: ResilientExecutor,
        timeout: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the client.

        Args:
            token: Discogs personal access token.
            executor: Shared resilient executor.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests).

        Raises:
            ConfigurationError: If no token is given.
        """
        if not token:
            raise ConfigurationError("Discogs token is required (set DISCOGS_USER_TOKEN)")
        self._token = token
        self.executor = executor
        self.timeout = timeout
        self._transport = transport

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None, allow_missing: bool = False) -> Any:
        """GETs `path` through the executor and returns the decoded JSON.

        With `allow_missing`, a 404 yields None instead of raising.
        """
        async def operation() -> Any:
            async with create_async_client(
                BASE_URL,
                headers={"Authorization": f"Discogs token={self._token}"},
                timeout=self.timeout,
                transport=self._transport,
            ) as http:
                response = await http.get(path, params=params)
            return decode_json(DISCOGS, response)

        return await self.executor.execute(
            operation,
            throttle_for(DISCOGS),
            DISCOGS,
            not_found=is_not_found if allow_missing else None,
        )

    # --- Search ---

    async def search(
        self,
        artist: Optional[str] = None,
        release: Optional[str] = None,
        track: Optional[str] = None,
        year: Optional[int] = None,
        label: Optional[str] = None,
        genre: Optional[str] = None,
        max_results: int = 50,
    ) -> List[DiscogsSearchResult]:
        """Searches the Discogs database for releases."""
        params: Dict[str, Any] = {"type": "release", "page": 1, "per_page": min(max_results, MAX_PAGE_SIZE)}
        for key, value in (
            ("artist", artist),
            ("release_title", release),
            ("track", track),
            ("year", year),
            ("label", label),
            ("genre", genre),
        ):
            if value is not None and str(value).strip():
                params[key] = value

        logger.debug(f"Discogs search params: {params}")
        payload = expect_object(DISCOGS, await self._get("/database/search", params=params))
        return [_parse_search_result(item) for item in object_list(payload, "results")][:max_results]

    async def search_first(
        self,
        artist: Optional[str] = None,
        release: Optional[str] = None,
        track: Optional[str] = None,
        year: Optional[int] = None,
        label: Optional[str] = None,
        genre: Optional[str] = None,
    ) -> Optional[DiscogsSearchResult]:
        results = await self.search(artist, release, track, year, label, genre, max_results=1)
        return results[0] if results else None

    # --- Lookups ---

    async def get_release(self, release_id: int) -> Optional[DiscogsRelease]:
        """Fetches a release; None when Discogs answers 404."""
        payload = await self._get(f"/releases/{release_id}", allow_missing=True)
        if payload is None:
            return None
        return _parse_release(expect_object(DISCOGS, payload))

    async def get_master(self, master_id: int) -> Optional[DiscogsMaster]:
        """Fetches a master release; None when Discogs answers 404."""
        payload = await self._get(f"/masters/{master_id}", allow_missing=True)
        if payload is None:
            return None
        data = expect_object(DISCOGS, payload)
        return DiscogsMaster(
            master_id=opt_int(data, "id") or master_id,
            title=opt_str(data, "title") or "",
            artists=str_list(data, "artists", "name"),
            genres=str_list(data, "genres"),
            styles=str_list(data, "styles"),
            tracklist=[_parse_track(item) for item in object_list(data, "tracklist")],
            year=parse_year(data.get("year")),
            main_release_id=opt_int(data, "main_release"),
            most_recent_release_id=opt_int(data, "most_recent_release"),
        )

    async def get_versions(self, master_id: int, max_results: int = 50) -> List[DiscogsVersion]:
        """Lists the versions of a master release; empty when the master does not exist."""
        params = {"page": 1, "per_page": min(max_results, MAX_PAGE_SIZE)}
        payload = await self._get(f"/masters/{master_id}/versions", params=params, allow_missing=True)
        if payload is None:
            return []
        versions = []
        for item in object_list(expect_object(DISCOGS, payload), "versions")[:max_results]:
            versions.append(
                DiscogsVersion(
                    release_id=opt_int(item, "id") or 0,
                    title=opt_str(item, "title") or "",
                    format=opt_str(item, "format"),
                    label=opt_str(item, "label"),
                    country=opt_str(item, "country"),
                    year=parse_year(item.get("released")),
                    catalog_number=opt_str(item, "catno"),
                )
            )
        return versions

    async def get_tracks_by_media(self, release_id: int) -> Dict[str, List[DiscogsTrack]]:
        """Groups a release's tracklist by medium (vinyl side, disc number)."""
        release = await self.get_release(release_id)
        if release is None:
            return {}
        return split_media(release.tracklist)

# --- Parsing helpers ---

def extract_artist(title: Optional[str]) -> Optional[str]:
    """Discogs search titles look like "Artist - Release"."""
    if not title or " - " not in title:
        return None
    return title.split(" - ")[0].strip() or None


def medium_of(position: str) -> str:
    """Medium key for a track position: "A1" -> "A", "2-3" -> "2", "7" -> "1"."""
    position = position.strip()
    match = _MEDIUM_WITH_SEPARATOR.match(position)
    if match:
        return match.group("medium")
    match = _VINYL_SIDE.match(position)
    if match:
        return match.group("medium").upper()
    return "1"


def split_media(tracklist: List[DiscogsTrack]) -> Dict[str, List[DiscogsTrack]]:
    media: Dict[str, List[DiscogsTrack]] = OrderedDict()
    for track in tracklist:
        if track.type != "track":
            continue
        media.setdefault(medium_of(track.position), []).append(track)
    return dict(media)


def _parse_search_result(item: Dict[str, Any]) -> DiscogsSearchResult:
    title = opt_str(item, "title") or ""
    return DiscogsSearchResult(
        release_id=opt_int(item, "id") or 0,
        title=title,
        artist=extract_artist(title),
        year=parse_year(item.get("year")),
        country=opt_str(item, "country"),
        format=joined(str_list(item, "format")),
        label=joined(str_list(item, "label")),
        catalog_number=opt_str(item, "catno"),
        master_id=opt_int(item, "master_id") or None,
        thumb=opt_str(item, "thumb"),
        resource_url=opt_str(item, "resource_url"),
    )


def _parse_track(item: Dict[str, Any]) -> DiscogsTrack:
    return DiscogsTrack(
        position=opt_str(item, "position") or "",
        title=opt_str(item, "title") or "",
        duration=opt_str(item, "duration"),
        type=opt_str(item, "type_") or "track",
    )


def _parse_release(data: Dict[str, Any]) -> DiscogsRelease:
    formats = [
        DiscogsFormat(
            name=opt_str(item, "name") or "",
            quantity=opt_str(item, "qty"),
            descriptions=str_list(item, "descriptions"),
        )
        for item in object_list(data, "formats")
    ]
    credits = [
        DiscogsCredit(
            name=opt_str(item, "name") or "",
            role=opt_str(item, "role") or "",
            tracks=opt_str(item, "tracks"),
        )
        for item in object_list(data, "extraartists")
        if opt_str(item, "name")
    ]
    return DiscogsRelease(
        release_id=opt_int(data, "id") or 0,
        title=opt_str(data, "title") or "",
        artists=str_list(data, "artists", "name"),
        labels=str_list(data, "labels", "name"),
        formats=formats,
        genres=str_list(data, "genres"),
        styles=str_list(data, "styles"),
        tracklist=[_parse_track(item) for item in object_list(data, "tracklist")],
        credits=credits,
        year=parse_year(data.get("year")),
        country=opt_str(data, "country"),
        master_id=opt_int(data, "master_id") or None,
        notes=opt_str(data, "notes"),
        uri=opt_str(data, "uri"),
    )
