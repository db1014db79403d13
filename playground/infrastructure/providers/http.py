"""Shared HTTP plumbing for the provider clients.

Response checking, JSON decoding and lenient field extraction helpers.
The field helpers never raise on missing or oddly-typed optional fields.
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

import httpx

from playground.infrastructure.providers.errors import ProviderHttpError, ProviderResponseError

logger = logging.getLogger(__name__)

USER_AGENT = "PlaygroundApp/1.0"
DEFAULT_TIMEOUT_S = 30.0
MAX_PAGE_SIZE = 100

_YEAR_RE = re.compile(r"\d{4}")
_DURATION_RE = re.compile(r"^(?:(\d+):)?(\d+):(\d{1,2})$")


def create_async_client(
    base_url: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT_S,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Creates an AsyncClient for one request scope.

    Args:
        base_url: Provider base URL.
        headers: Default headers sent with every request.
        timeout: Request timeout in seconds.
        transport: Optional transport, used by tests to mock the provider.
    """
    merged_headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    merged_headers.update(headers or {})
    return httpx.AsyncClient(
        base_url=base_url,
        headers=merged_headers,
        timeout=timeout,
        transport=transport,
    )


def check_response(provider: str, response: httpx.Response) -> None:
    """Raises ProviderHttpError for any non-success status."""
    if response.is_success:
        return
    body = response.text[:200] if response.content else response.reason_phrase
    logger.debug(f"[{provider}] {response.request.method} {response.request.url} -> {response.status_code}")
    raise ProviderHttpError(provider, response.status_code, body)


def decode_json(provider: str, response: httpx.Response) -> Any:
    """Checks the status and decodes the JSON body."""
    check_response(provider, response)
    try:
        return response.json()
    except ValueError as e:
        raise ProviderResponseError(provider, f"Invalid JSON response: {e}") from e


def expect_object(provider: str, payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ProviderResponseError(provider, f"Expected a JSON object, got {type(payload).__name__}")
    return payload

# --- Lenient field extraction ---

def opt_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def opt_int(data: Dict[str, Any], key: str) -> Optional[int]:
    """Accepts ints and numeric strings; anything else becomes None."""
    value = data.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_year(value: Any) -> Optional[int]:
    """Takes the first four-digit run out of a year-ish value ("1977", "1977-10-14", 1977)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    match = _YEAR_RE.search(str(value))
    return int(match.group()) if match else None


def parse_partial_date(value: Any) -> Optional[date]:
    """Parses "YYYY", "YYYY-MM" or "YYYY-MM-DD"; missing parts default to 1."""
    if not isinstance(value, str) or not value.strip():
        return None
    parts = value.strip().split("-")
    try:
        numbers = [int(part) for part in parts[:3]]
        while len(numbers) < 3:
            numbers.append(1)
        return date(numbers[0], numbers[1] or 1, numbers[2] or 1)
    except ValueError:
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_duration(value: Any) -> Optional[timedelta]:
    """Parses "m:ss" or "h:mm:ss" strings."""
    if not isinstance(value, str):
        return None
    match = _DURATION_RE.match(value.strip())
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return timedelta(hours=int(hours or 0), minutes=int(minutes), seconds=int(seconds))


def milliseconds(value: Any) -> Optional[timedelta]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return timedelta(milliseconds=value)


def object_list(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def str_list(data: Dict[str, Any], key: str, field: Optional[str] = None) -> List[str]:
    """Strings from a list field, or from `field` of each object in it."""
    value = data.get(key)
    if not isinstance(value, list):
        return []
    result = []
    for item in value:
        if field is not None:
            item = item.get(field) if isinstance(item, dict) else None
        if item is None:
            continue
        text = str(item).strip()
        if text:
            result.append(text)
    return result


def joined(values: List[str]) -> Optional[str]:
    return ", ".join(values) if values else None
