"""The single choke-point for outbound provider calls.

Every call is serialized through the shared RateGate, delayed by the
provider throttle and wrapped in the retry policy.
"""

import asyncio
import logging
from typing import Any, Optional, Union

from playground.domain.models.resilience import (
    DEFAULT_RETRY_CONFIGURATION,
    ProviderThrottle,
    RetryConfiguration,
)
from playground.infrastructure.resilience.rate_gate import RateGate
from playground.infrastructure.resilience.retry_policy import (
    Operation,
    RetryPredicate,
    SleepFunction,
    build_retry_policy,
    retry_on_any_failure,
)

logger = logging.getLogger(__name__)


class ResilientExecutor:
    """Runs provider operations under the gate, throttle and retry policy."""

    def __init__(
        self,
        rate_gate: RateGate,
        retry_configuration: RetryConfiguration = DEFAULT_RETRY_CONFIGURATION,
        is_retryable: RetryPredicate = retry_on_any_failure,
        sleep: SleepFunction = asyncio.sleep,
    ):
        """Initializes the executor.

        Args:
            rate_gate: The gate shared with every other executor in the process.
            retry_configuration: Backoff parameters for each call.
            is_retryable: Retry-worthiness predicate for raised exceptions.
            sleep: Awaitable sleep used for throttle and backoff delays.
        """
        self.rate_gate = rate_gate
        self.retry_configuration = retry_configuration
        self.is_retryable = is_retryable
        self._sleep = sleep
        logger.debug(
            f"ResilientExecutor initialized: max_attempts={retry_configuration.max_attempts}, "
            f"initial_delay={retry_configuration.initial_delay}s, "
            f"multiplier={retry_configuration.backoff_multiplier}"
        )

    async def execute(
        self,
        operation: Operation,
        throttle: Union[float, ProviderThrottle],
        source_tag: str,
        not_found: Optional[RetryPredicate] = None,
    ) -> Any:
        """Executes one outbound operation.

        Args:
            operation: Zero-argument callable returning an awaitable; one HTTP call.
            throttle: Seconds to wait before the call, or a ProviderThrottle.
            source_tag: Provider name used in retry log lines.
            not_found: Optional predicate; a failure it matches is returned
                as None instead of raised, and is never retried.

        Returns:
            The operation result, or None for a failure matched by `not_found`.

        Raises:
            Exception: The terminal failure, unmodified.
        """
        if isinstance(throttle, ProviderThrottle):
            throttle_seconds = throttle.min_inter_call_spacing
        else:
            throttle_seconds = float(throttle)

        max_attempts = self.retry_configuration.max_attempts

        def on_retry(attempt: int, delay: float, message: str) -> None:
            logger.warning(f"[{source_tag}] Retry {attempt}/{max_attempts} in {delay:.1f}s: {message}")

        def should_retry(exc: BaseException) -> bool:
            if not_found is not None and not_found(exc):
                return False
            return self.is_retryable(exc)

        policy = build_retry_policy(
            self.retry_configuration,
            is_retryable=should_retry,
            on_retry=on_retry,
            sleep=self._sleep,
        )

        async with self.rate_gate.acquire():
            if throttle_seconds > 0:
                await self._sleep(throttle_seconds)
            try:
                return await policy.run(operation)
            except Exception as e:
                if not_found is not None and not_found(e):
                    logger.debug(f"[{source_tag}] Resource not found: {e}")
                    return None
                raise
