import os

import pytest

from playground.domain.models.resilience import DEFAULT_RETRY_CONFIGURATION
from playground.infrastructure.config import settings

ENV_KEYS = ("DISCOGS_USER_TOKEN", "RETRY_MAX_ATTEMPTS", "HTTP_TIMEOUT", "PLAYGROUND_FROM_DOTENV")


@pytest.fixture(autouse=True)
def clean_configuration(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    settings.reset_configuration()
    yield
    settings.reset_configuration()
    # load_dotenv writes straight into os.environ
    os.environ.pop("PLAYGROUND_FROM_DOTENV", None)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "retry:\n"
        "  max_attempts: 4\n"
        "  initial_delay: 0.5\n"
        "musicbrainz:\n"
        "  app_name: Tester\n"
        "  contact: me@example.com\n"
        "discogs.user_token: from-yaml\n",
        encoding="utf-8",
    )
    return path


def test_defaults_without_sources(tmp_path):
    settings.load_configuration(config_file=tmp_path / "missing.yaml", env_file=tmp_path / "missing.env")

    assert settings.get_retry_configuration() == DEFAULT_RETRY_CONFIGURATION
    assert settings.get_http_timeout() == 30.0
    assert settings.get_discogs_token() is None
    assert settings.get_musicbrainz_app() == ("PlaygroundApp", "1.0", "user@example.com")


def test_yaml_values_nested_and_flat(config_file, tmp_path):
    settings.load_configuration(config_file=config_file, env_file=tmp_path / "missing.env")

    retry = settings.get_retry_configuration()
    assert (retry.max_attempts, retry.initial_delay, retry.backoff_multiplier) == (4, 0.5, 2.0)
    assert settings.get_musicbrainz_app() == ("Tester", "1.0", "me@example.com")
    assert settings.get_discogs_token() == "from-yaml"


def test_environment_overrides_yaml(config_file, tmp_path, monkeypatch):
    monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "7")
    monkeypatch.setenv("DISCOGS_USER_TOKEN", "  from-env  ")
    monkeypatch.setenv("HTTP_TIMEOUT", "12.5")
    settings.load_configuration(config_file=config_file, env_file=tmp_path / "missing.env")

    assert settings.get_retry_configuration().max_attempts == 7
    assert settings.get_discogs_token() == "from-env"
    assert settings.get_http_timeout() == 12.5


def test_blank_token_is_treated_as_missing(monkeypatch):
    monkeypatch.setenv("DISCOGS_USER_TOKEN", "   ")
    assert settings.get_discogs_token() is None


def test_dotenv_does_not_override_environment(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("PLAYGROUND_FROM_DOTENV=dotenv\nDISCOGS_USER_TOKEN=dotenv-token\n", encoding="utf-8")
    monkeypatch.setenv("DISCOGS_USER_TOKEN", "shell-token")

    settings.load_configuration(config_file=tmp_path / "missing.yaml", env_file=env_file)

    assert settings.get_config("playground_from_dotenv") == "dotenv"
    assert settings.get_discogs_token() == "shell-token"


def test_test_config_wins(monkeypatch):
    monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "7")
    settings.set_config_for_testing({"retry.max_attempts": 1})
    assert settings.get_retry_configuration().max_attempts == 1
    settings.clear_test_config()
    assert settings.get_retry_configuration().max_attempts == 7


def test_invalid_retry_value_is_rejected():
    settings.set_config_for_testing({"retry.backoff_multiplier": 0.5})
    with pytest.raises(ValueError):
        settings.get_retry_configuration()


def test_invalid_yaml_is_ignored(tmp_path):
    broken = tmp_path / "config.yaml"
    broken.write_text("retry: [unclosed\n", encoding="utf-8")
    settings.load_configuration(config_file=broken, env_file=tmp_path / "missing.env")
    assert settings.get_config("retry.max_attempts", 3) == 3
