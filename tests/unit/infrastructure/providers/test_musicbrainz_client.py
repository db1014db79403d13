from datetime import date, timedelta

import pytest

from playground.infrastructure.providers.musicbrainz_client import MusicBrainzClient, build_query

RELEASE_ID = "9a0e3e1c-0000-4000-8000-000000000001"

RELEASE_PAYLOAD = {
    "id": RELEASE_ID,
    "title": "\"Heroes\"",
    "date": "1977-10-14",
    "country": "GB",
    "status": "Official",
    "barcode": "",
    "artist-credit": [{"name": "David Bowie", "artist": {"id": "a1", "name": "David Bowie"}}],
    "media": [
        {"tracks": [
            {"id": "t1", "title": "Beauty and the Beast", "position": 1, "length": 216000, "recording": {"id": "r1"}},
            {"id": "t2", "position": "2", "length": None, "recording": {"id": "r2", "title": "Joe the Lion"}},
        ]},
    ],
    "relations": [
        {"type": "producer", "artist": {"id": "a2", "name": "Tony Visconti"}},
        {"type": "mastering"},
    ],
}


@pytest.fixture
def make_client(make_executor):
    def _make(transport):
        return MusicBrainzClient(make_executor(), app_name="TestApp", app_version="2.0", contact="me@example.com", transport=transport)
    return _make


def test_build_query():
    assert build_query(artist="David Bowie", release="Heroes", year=1977) == 'artist:"David Bowie" AND release:"Heroes" AND date:1977'
    assert build_query(label="RCA", genre="rock") == 'label:"RCA" AND tag:"rock"'
    assert build_query(artist="  ") == ""


@pytest.mark.asyncio
async def test_search_releases(make_client, make_transport, sleep_recorder):
    transport = make_transport({"/ws/2/release": {"releases": [
        {"id": RELEASE_ID, "title": "\"Heroes\"", "date": "1977-10-14", "country": "GB", "status": "Official",
         "artist-credit": [{"artist": {"name": "David Bowie"}}]},
    ]}})
    client = make_client(transport)

    results = await client.search_releases(artist="David Bowie", release="Heroes", max_results=5)

    request = transport.requests[0]
    assert request.headers["User-Agent"] == "TestApp/2.0 ( me@example.com )"
    assert request.url.params["fmt"] == "json"
    assert request.url.params["limit"] == "5"
    assert request.url.params["query"] == 'artist:"David Bowie" AND release:"Heroes"'
    assert results[0].artist == "David Bowie"
    assert results[0].year == 1977
    assert sleep_recorder.delays == [2.0]


@pytest.mark.asyncio
async def test_search_without_terms_makes_no_request(make_client, make_transport):
    transport = make_transport({})
    client = make_client(transport)
    assert await client.search_releases() == []
    assert await client.search_first_release() is None
    assert transport.requests == []


@pytest.mark.asyncio
async def test_get_release_with_tracks_and_credits(make_client, make_transport):
    transport = make_transport({f"/ws/2/release/{RELEASE_ID}": RELEASE_PAYLOAD})
    client = make_client(transport)

    release = await client.get_release(RELEASE_ID, include_credits=True)

    assert transport.requests[0].url.params["inc"] == "artist-credits recordings media artist-rels"
    assert release.release_date == date(1977, 10, 14)
    assert release.year == 1977
    assert release.barcode is None
    assert release.artist_credit == "David Bowie"
    assert [(t.position, t.title) for t in release.tracks] == [(1, "Beauty and the Beast"), (2, "Joe the Lion")]
    assert release.tracks[0].length == timedelta(seconds=216)
    assert release.tracks[1].length is None
    assert [(c.name, c.role) for c in release.credits] == [("Tony Visconti", "producer")]


@pytest.mark.asyncio
async def test_missing_release_is_none(make_client, make_transport):
    transport = make_transport({})
    client = make_client(transport)
    assert await client.get_release("missing", include_tracks=False) is None
    assert transport.requests[0].url.params["inc"] == "artist-credits"
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_release_groups_artists_and_recordings(make_client, make_transport):
    client = make_client(make_transport({
        "/ws/2/release-group": {"release-groups": [
            {"id": "rg1", "title": "Low", "primary-type": "Album", "first-release-date": "1977-01-14"},
        ]},
        "/ws/2/artist": {"artists": [
            {"id": "a1", "name": "David Bowie", "type": "Person", "country": "GB", "life-span": {"begin": "1947-01-08"}},
        ]},
        "/ws/2/recording": {"recordings": [
            {"id": "r1", "title": "Heroes", "first-release-date": "1977", "releases": [{"country": "DE", "status": "Official"}]},
        ]},
        "/ws/2/release-group/rg1": {"id": "rg1", "title": "Low", "secondary-types": ["Live"], "releases": [{}, {}]},
        "/ws/2/artist/a1": {"id": "a1", "name": "David Bowie", "life-span": {"begin": "1947-01-08", "end": "2016-01-10"}},
    }))

    groups = await client.search_release_groups(artist="David Bowie", release_group="Low")
    artists = await client.search_artists("David Bowie")
    recordings = await client.search_recordings(artist="David Bowie", track="Heroes")
    group = await client.get_release_group("rg1")
    artist = await client.get_artist("a1")

    assert (groups[0].status, groups[0].year) == ("Album", 1977)
    assert (artists[0].status, artists[0].year, artists[0].artist) == ("Person", 1947, "David Bowie")
    assert (recordings[0].country, recordings[0].status, recordings[0].year) == ("DE", "Official", 1977)
    assert group.release_count == 2
    assert group.secondary_types == ["Live"]
    assert artist.end_date == date(2016, 1, 10)
    assert await client.search_artists("") == []
