from datetime import date, timedelta

import httpx
import pytest

from playground.infrastructure.providers.errors import ProviderHttpError, ProviderResponseError, is_not_found
from playground.infrastructure.providers.http import (
    decode_json,
    joined,
    milliseconds,
    opt_int,
    opt_str,
    parse_duration,
    parse_partial_date,
    parse_year,
    str_list,
)


def _response(status_code, **kwargs):
    return httpx.Response(status_code, request=httpx.Request("GET", "https://api.example/x"), **kwargs)


def test_decode_json_success():
    assert decode_json("Discogs", _response(200, json={"ok": True})) == {"ok": True}


def test_decode_json_raises_on_status():
    with pytest.raises(ProviderHttpError) as exc_info:
        decode_json("Discogs", _response(404, text="Release not found."))
    error = exc_info.value
    assert error.status_code == 404
    assert error.is_not_found
    assert not error.is_transient
    assert is_not_found(error)
    assert str(error) == "[Discogs] HTTP 404: Release not found."


def test_decode_json_rejects_invalid_body():
    with pytest.raises(ProviderResponseError):
        decode_json("MusicBrainz", _response(200, text="<html>"))


@pytest.mark.parametrize("status_code", [429, 500, 503])
def test_transient_statuses(status_code):
    assert ProviderHttpError("Discogs", status_code).is_transient


def test_lenient_scalars():
    data = {"a": " x ", "b": "", "n": "42", "f": True, "bad": "4x"}
    assert opt_str(data, "a") == "x"
    assert opt_str(data, "b") is None
    assert opt_str(data, "missing") is None
    assert opt_int(data, "n") == 42
    assert opt_int(data, "f") is None
    assert opt_int(data, "bad") is None


@pytest.mark.parametrize("value,expected", [
    ("1977", 1977),
    ("1977-10-14", 1977),
    (1977, 1977),
    (0, None),
    ("", None),
    (None, None),
])
def test_parse_year(value, expected):
    assert parse_year(value) == expected


def test_parse_partial_date():
    assert parse_partial_date("1977") == date(1977, 1, 1)
    assert parse_partial_date("1977-10") == date(1977, 10, 1)
    assert parse_partial_date("1977-10-14") == date(1977, 10, 14)
    assert parse_partial_date("garbage") is None
    assert parse_partial_date(None) is None


def test_durations():
    assert parse_duration("4:32") == timedelta(minutes=4, seconds=32)
    assert parse_duration("1:02:03") == timedelta(hours=1, minutes=2, seconds=3)
    assert parse_duration("") is None
    assert parse_duration(None) is None
    assert milliseconds(216000) == timedelta(seconds=216)
    assert milliseconds("216000") is None


def test_lists():
    data = {"artists": [{"name": "A"}, {"name": ""}, "junk", {"name": "B"}], "genres": ["Rock", None]}
    assert str_list(data, "artists", "name") == ["A", "B"]
    assert str_list(data, "genres") == ["Rock"]
    assert str_list(data, "missing") == []
    assert joined(["A", "B"]) == "A, B"
    assert joined([]) is None
