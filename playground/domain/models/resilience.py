"""Value objects for the outbound call resiliency layer.

Holds the retry configuration presets and the per-provider throttle table.
Both are immutable; the composition root decides which preset each
executor uses.
"""

from dataclasses import dataclass
from typing import Dict

from .common import DISCOGS, MAILTM, MUSICBRAINZ, ProviderTag


@dataclass(frozen=True)
class RetryConfiguration:
    """Exponential backoff parameters.

    Attributes:
        max_attempts: Number of retries after the first attempt. 0 means
            the operation is tried exactly once.
        initial_delay: Delay in seconds before the first retry.
        backoff_multiplier: Factor applied to the delay for each further retry.
    """
    max_attempts: int = 10
    initial_delay: float = 3.0
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0, got {self.max_attempts}")
        if self.initial_delay < 0:
            raise ValueError(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.backoff_multiplier < 1.0:
            raise ValueError(f"backoff_multiplier must be >= 1.0, got {self.backoff_multiplier}")

    def delay_for(self, attempt_number: int) -> float:
        """Returns the delay in seconds before retry number `attempt_number` (1-based)."""
        return self.initial_delay * self.backoff_multiplier ** (attempt_number - 1)


# Centralized policy shared by the music providers.
DEFAULT_RETRY_CONFIGURATION = RetryConfiguration(max_attempts=10, initial_delay=3.0, backoff_multiplier=2.0)
# Older, lighter policy still used by the mail.tm client.
LEGACY_RETRY_CONFIGURATION = RetryConfiguration(max_attempts=5, initial_delay=1.0, backoff_multiplier=2.0)


@dataclass(frozen=True)
class ProviderThrottle:
    """Minimum spacing, in seconds, inserted before every call to a provider."""
    provider_name: ProviderTag
    min_inter_call_spacing: float


DISCOGS_THROTTLE = ProviderThrottle(DISCOGS, 1.5)
MUSICBRAINZ_THROTTLE = ProviderThrottle(MUSICBRAINZ, 2.0)
MAILTM_THROTTLE = ProviderThrottle(MAILTM, 0.0)

PROVIDER_THROTTLES: Dict[str, ProviderThrottle] = {
    throttle.provider_name.lower(): throttle
    for throttle in (DISCOGS_THROTTLE, MUSICBRAINZ_THROTTLE, MAILTM_THROTTLE)
}


def throttle_for(provider: str) -> ProviderThrottle:
    """Looks up the throttle for a provider tag (case-insensitive).

    Unknown providers get a zero-spacing throttle.
    """
    throttle = PROVIDER_THROTTLES.get(provider.lower())
    if throttle is None:
        return ProviderThrottle(ProviderTag(provider), 0.0)
    return throttle
