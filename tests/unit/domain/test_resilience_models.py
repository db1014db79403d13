import pytest

from playground.domain.models.resilience import (
    DEFAULT_RETRY_CONFIGURATION,
    DISCOGS_THROTTLE,
    LEGACY_RETRY_CONFIGURATION,
    MUSICBRAINZ_THROTTLE,
    RetryConfiguration,
    throttle_for,
)


def test_presets():
    assert (DEFAULT_RETRY_CONFIGURATION.max_attempts, DEFAULT_RETRY_CONFIGURATION.initial_delay) == (10, 3.0)
    assert (LEGACY_RETRY_CONFIGURATION.max_attempts, LEGACY_RETRY_CONFIGURATION.initial_delay) == (5, 1.0)
    assert DEFAULT_RETRY_CONFIGURATION.backoff_multiplier == LEGACY_RETRY_CONFIGURATION.backoff_multiplier == 2.0


def test_delay_for_is_exponential():
    config = RetryConfiguration(max_attempts=4, initial_delay=3.0, backoff_multiplier=2.0)
    assert [config.delay_for(n) for n in range(1, 5)] == [3.0, 6.0, 12.0, 24.0]


def test_multiplier_of_one_gives_constant_delay():
    config = RetryConfiguration(max_attempts=3, initial_delay=0.5, backoff_multiplier=1.0)
    assert [config.delay_for(n) for n in (1, 2, 3)] == [0.5, 0.5, 0.5]


@pytest.mark.parametrize("kwargs", [
    {"max_attempts": -1},
    {"initial_delay": -0.1},
    {"backoff_multiplier": 0.5},
])
def test_invalid_configuration_is_rejected(kwargs):
    with pytest.raises(ValueError):
        RetryConfiguration(**kwargs)


def test_throttle_lookup_is_case_insensitive():
    assert throttle_for("discogs") is DISCOGS_THROTTLE
    assert throttle_for("MUSICBRAINZ") is MUSICBRAINZ_THROTTLE
    assert DISCOGS_THROTTLE.min_inter_call_spacing == 1.5
    assert MUSICBRAINZ_THROTTLE.min_inter_call_spacing == 2.0


def test_unknown_provider_has_no_spacing():
    throttle = throttle_for("Elsewhere")
    assert throttle.provider_name == "Elsewhere"
    assert throttle.min_inter_call_spacing == 0.0
