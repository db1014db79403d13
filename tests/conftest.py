import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock

from playground.domain.interfaces.user_interface import UserInterface
from playground.domain.models.resilience import RetryConfiguration
from playground.infrastructure.config import settings
from playground.infrastructure.resilience.executor import ResilientExecutor
from playground.infrastructure.resilience.rate_gate import RateGate
from playground.infrastructure.resilience.retry_policy import is_transient_http_failure


class SleepRecorder:
    """Async stand-in for asyncio.sleep that records the requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode(), headers={"Content-Type": "application/json"})


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def rate_gate():
    return RateGate()


@pytest.fixture
def make_executor(rate_gate, sleep_recorder):
    """Builds executors sharing one gate and one sleep recorder."""

    def _make(
        config: Optional[RetryConfiguration] = None,
        is_retryable=is_transient_http_failure,
    ) -> ResilientExecutor:
        return ResilientExecutor(
            rate_gate,
            retry_configuration=config or RetryConfiguration(max_attempts=2, initial_delay=0.5, backoff_multiplier=2.0),
            is_retryable=is_retryable,
            sleep=sleep_recorder,
        )

    return _make


@pytest.fixture
def make_transport():
    def _make(routes: Dict[str, Any]) -> RecordingTransport:
        """Routes map a URL path to a payload, an httpx.Response or a callable(request)."""

        def handler(request: httpx.Request) -> httpx.Response:
            route = routes.get(request.url.path)
            if route is None:
                return httpx.Response(404, json={"message": "Resource not found."})
            if callable(route):
                return route(request)
            if isinstance(route, httpx.Response):
                return httpx.Response(route.status_code, content=route.content, headers=route.headers)
            return json_response(route)

        return RecordingTransport(handler)

    return _make


@pytest.fixture(autouse=True)
def isolated_config():
    """Keeps test config overrides from leaking between tests."""
    yield
    settings.clear_test_config()
