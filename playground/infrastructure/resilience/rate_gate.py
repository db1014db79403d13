"""Process-wide mutual exclusion for outbound calls.

A single RateGate is created by the composition root and shared by every
provider client, so at most one outbound call is in flight at a time.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class ScopedPermit:
    """The right to make one outbound call. Must be released exactly once."""

    def __init__(self, lock: asyncio.Lock):
        self._lock = lock
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            raise RuntimeError("Permit already released")
        self._released = True
        self._lock.release()


class RateGate:
    """Single-permit gate built on asyncio.Lock. Not FIFO-fair."""

    def __init__(self):
        self._lock = asyncio.Lock()

    @property
    def locked(self) -> bool:
        """True while a permit is held."""
        return self._lock.locked()

    async def acquire_permit(self) -> ScopedPermit:
        """Waits for the permit. The caller owns the release."""
        await self._lock.acquire()
        logger.debug("Rate gate permit acquired.")
        return ScopedPermit(self._lock)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[ScopedPermit]:
        """Holds the permit for the duration of the `async with` block.

        The permit is released on every exit path, including cancellation,
        unless the block already released it.
        """
        permit = await self.acquire_permit()
        try:
            yield permit
        finally:
            if not permit.released:
                permit.release()
                logger.debug("Rate gate permit released.")
