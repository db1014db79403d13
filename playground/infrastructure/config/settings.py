"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
configuration file (~/.playground/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

from playground.domain.models.resilience import DEFAULT_RETRY_CONFIGURATION, RetryConfiguration

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".playground"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
DEFAULT_HTTP_TIMEOUT_S = 30.0

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(yaml_config)
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file; existing environment variables take precedence
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug(".env file not found at or above current directory.")

    _loaded = True
    logger.debug("Configuration loading process completed.")


def reset_configuration() -> None:
    """Forgets everything loaded so load_configuration runs again."""
    global _config, _loaded
    _config = {}
    _loaded = False


def _convert_env_value(value: str) -> Any:
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        if "." in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def _lookup_yaml(key: str) -> Tuple[bool, Any]:
    """Looks up a flat key first, then walks dotted keys into nested mappings."""
    if key in _config:
        return True, _config[key]
    node: Any = _config
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return False, None
        node = node[part]
    return True, node


def get_config(key: str, default: Any = None) -> Any:
    """Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (upper-cased key, dots replaced by underscores)
    3. YAML config
    4. Default value

    Args:
        key: The configuration key, e.g. "retry.max_attempts".
        default: Default value if the key is not found.

    Returns:
        The configuration value.
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper().replace(".", "_")
    if env_key in os.environ:
        return _convert_env_value(os.environ[env_key])

    found, value = _lookup_yaml(key)
    if found:
        return value

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def get_discogs_token() -> Optional[str]:
    """Discogs personal access token; None when unset or blank."""
    token = get_config("DISCOGS_USER_TOKEN") or get_config("discogs.user_token")
    if token is None or not str(token).strip():
        return None
    return str(token).strip()


def get_musicbrainz_app() -> Tuple[str, str, str]:
    """(app name, version, contact) for the MusicBrainz User-Agent."""
    return (
        str(get_config("musicbrainz.app_name", "PlaygroundApp")),
        str(get_config("musicbrainz.app_version", "1.0")),
        str(get_config("musicbrainz.contact", "user@example.com")),
    )


def get_retry_configuration() -> RetryConfiguration:
    """Retry settings for the music providers, falling back to the default preset.

    Raises:
        ValueError: If a configured value is not a number or out of range.
    """
    return RetryConfiguration(
        max_attempts=int(get_config("retry.max_attempts", DEFAULT_RETRY_CONFIGURATION.max_attempts)),
        initial_delay=float(get_config("retry.initial_delay", DEFAULT_RETRY_CONFIGURATION.initial_delay)),
        backoff_multiplier=float(
            get_config("retry.backoff_multiplier", DEFAULT_RETRY_CONFIGURATION.backoff_multiplier)
        ),
    )


def get_http_timeout() -> float:
    return float(get_config("http.timeout", DEFAULT_HTTP_TIMEOUT_S))


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """Set configuration values for testing purposes.

    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set.
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
