"""Domain models for the music metadata context.

Provider-specific records (Discogs, MusicBrainz) mirror the subset of the
upstream JSON the application uses. The unified records are what the
metadata service hands to the presentation layer.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional

from .common import ExternalId, ProviderTag

# --- Query ---

@dataclass
class MusicSearchQuery:
    """A logical search across all music providers."""
    artist: Optional[str] = None
    album: Optional[str] = None
    track: Optional[str] = None
    year: Optional[int] = None
    label: Optional[str] = None
    genre: Optional[str] = None
    max_results: int = 50
    sort_by: Optional[str] = None

    def has_terms(self) -> bool:
        return any(
            value for value in (self.artist, self.album, self.track, self.label, self.genre)
        ) or self.year is not None

# --- Discogs ---

@dataclass
class DiscogsSearchResult:
    release_id: int
    title: str
    artist: Optional[str] = None
    year: Optional[int] = None
    country: Optional[str] = None
    format: Optional[str] = None    # Joined with ", "
    label: Optional[str] = None     # Joined with ", "
    catalog_number: Optional[str] = None
    master_id: Optional[int] = None
    thumb: Optional[str] = None
    resource_url: Optional[str] = None


@dataclass
class DiscogsTrack:
    position: str
    title: str
    duration: Optional[str] = None  # As sent by Discogs, e.g. "4:32"
    type: str = "track"


@dataclass
class DiscogsFormat:
    name: str
    quantity: Optional[str] = None
    descriptions: List[str] = field(default_factory=list)


@dataclass
class DiscogsCredit:
    name: str
    role: str
    tracks: Optional[str] = None


@dataclass
class DiscogsRelease:
    release_id: int
    title: str
    artists: List[str] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    formats: List[DiscogsFormat] = field(default_factory=list)
    genres: List[str] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)
    tracklist: List[DiscogsTrack] = field(default_factory=list)
    credits: List[DiscogsCredit] = field(default_factory=list)
    year: Optional[int] = None
    country: Optional[str] = None
    master_id: Optional[int] = None
    notes: Optional[str] = None
    uri: Optional[str] = None


@dataclass
class DiscogsMaster:
    master_id: int
    title: str
    artists: List[str] = field(default_factory=list)
    genres: List[str] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)
    tracklist: List[DiscogsTrack] = field(default_factory=list)
    year: Optional[int] = None
    main_release_id: Optional[int] = None
    most_recent_release_id: Optional[int] = None


@dataclass
class DiscogsVersion:
    release_id: int
    title: str
    format: Optional[str] = None
    label: Optional[str] = None
    country: Optional[str] = None
    year: Optional[int] = None
    catalog_number: Optional[str] = None

# --- MusicBrainz ---

@dataclass
class MusicBrainzSearchResult:
    """A release (or recording, for track searches) returned by a MusicBrainz search."""
    id: str
    title: str
    artist: Optional[str] = None
    year: Optional[int] = None
    country: Optional[str] = None
    status: Optional[str] = None
    disambiguation: Optional[str] = None


@dataclass
class MusicBrainzTrack:
    id: str
    title: str
    position: int = 0
    length: Optional[timedelta] = None
    recording_id: Optional[str] = None


@dataclass
class MusicBrainzCredit:
    name: str
    role: str
    artist_id: Optional[str] = None


@dataclass
class MusicBrainzRelease:
    id: str
    title: str
    artist: Optional[str] = None
    artist_credit: Optional[str] = None   # All credited artists, joined
    release_date: Optional[date] = None
    country: Optional[str] = None
    status: Optional[str] = None
    barcode: Optional[str] = None
    disambiguation: Optional[str] = None
    tracks: List[MusicBrainzTrack] = field(default_factory=list)
    credits: List[MusicBrainzCredit] = field(default_factory=list)

    @property
    def year(self) -> Optional[int]:
        return self.release_date.year if self.release_date else None


@dataclass
class MusicBrainzReleaseGroup:
    id: str
    title: str
    artist: Optional[str] = None
    primary_type: Optional[str] = None
    secondary_types: List[str] = field(default_factory=list)
    first_release_date: Optional[date] = None
    release_count: int = 0
    disambiguation: Optional[str] = None


@dataclass
class MusicBrainzArtist:
    id: str
    name: str
    type: Optional[str] = None
    country: Optional[str] = None
    disambiguation: Optional[str] = None
    begin_date: Optional[date] = None
    end_date: Optional[date] = None

# --- Unified ---

@dataclass
class MusicSearchResult:
    """The first matching release across providers."""
    title: str
    artist: str
    source: ProviderTag
    external_id: ExternalId
    year: Optional[int] = None
    country: Optional[str] = None


@dataclass
class UnifiedTrack:
    position: str
    title: str
    duration: Optional[timedelta] = None
    recording_id: Optional[str] = None


@dataclass
class UnifiedCredit:
    name: str
    role: str


@dataclass
class UnifiedRelease:
    title: str
    source: ProviderTag
    external_id: ExternalId
    artist: Optional[str] = None
    year: Optional[int] = None
    country: Optional[str] = None
    label: Optional[str] = None
    tracks: List[UnifiedTrack] = field(default_factory=list)
    credits: List[UnifiedCredit] = field(default_factory=list)
