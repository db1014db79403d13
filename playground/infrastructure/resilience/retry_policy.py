"""Exponential backoff retry policy.

The policy re-runs a zero-argument async operation while the raised
exception is considered retry-worthy and the retry budget is not spent.
The last exception is re-raised unmodified.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from playground.domain.models.resilience import RetryConfiguration
from playground.infrastructure.providers.errors import ProviderHttpError

logger = logging.getLogger(__name__)

RetryPredicate = Callable[[BaseException], bool]
RetryCallback = Callable[[int, float, str], None]
SleepFunction = Callable[[float], Awaitable[Any]]
Operation = Callable[[], Awaitable[Any]]

# --- Predicates ---

def retry_on_any_failure(exc: BaseException) -> bool:
    """Every regular exception is worth another attempt."""
    return isinstance(exc, Exception)


def is_transient_http_failure(exc: BaseException) -> bool:
    """Connection errors, timeouts, 429 and 5xx are retried; other 4xx statuses are terminal."""
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, ProviderHttpError) and exc.is_transient

# --- Policy ---

class RetryPolicy:
    """Runs an operation with retries and exponential backoff."""

    def __init__(
        self,
        config: RetryConfiguration,
        is_retryable: RetryPredicate = retry_on_any_failure,
        on_retry: Optional[RetryCallback] = None,
        sleep: SleepFunction = asyncio.sleep,
    ):
        """Initializes the policy.

        Args:
            config: Attempt count, base delay and multiplier.
            is_retryable: Decides whether a raised exception is retried.
            on_retry: Called as (attempt_number, delay_seconds, message) before each backoff.
            sleep: Awaitable sleep, replaceable in tests.
        """
        self.config = config
        self.is_retryable = is_retryable
        self.on_retry = on_retry
        self._sleep = sleep

    async def run(self, operation: Operation) -> Any:
        """Executes `operation` until it succeeds or the failure is terminal.

        Args:
            operation: Zero-argument callable returning an awaitable.

        Returns:
            Whatever the operation returns on its first successful attempt.

        Raises:
            Exception: The last failure, once it is non-retryable or the
                retry budget is exhausted.
        """
        retries_so_far = 0
        while True:
            try:
                return await operation()
            except Exception as e:
                if retries_so_far >= self.config.max_attempts or not self.is_retryable(e):
                    raise
                retries_so_far += 1
                delay = self.config.delay_for(retries_so_far)
                if self.on_retry is not None:
                    self.on_retry(retries_so_far, delay, str(e) or type(e).__name__)
                await self._sleep(delay)


def build_retry_policy(
    config: RetryConfiguration,
    is_retryable: RetryPredicate = retry_on_any_failure,
    on_retry: Optional[RetryCallback] = None,
    sleep: SleepFunction = asyncio.sleep,
) -> RetryPolicy:
    """Builds a RetryPolicy; see RetryPolicy.__init__ for the arguments."""
    return RetryPolicy(config, is_retryable=is_retryable, on_retry=on_retry, sleep=sleep)
