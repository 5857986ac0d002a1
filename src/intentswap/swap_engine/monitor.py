"""Polling loop that follows an active swap to a terminal state."""

import asyncio
import inspect
import logging
import random
from typing import Any, Awaitable, Callable, Optional, Protocol

from intentswap.config import Settings, get_settings
from intentswap.models import ActiveSwap

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[ActiveSwap], Any]


class SwapRefresher(Protocol):
    async def refresh(self, swap: ActiveSwap) -> ActiveSwap: ...


class SwapMonitor:
    """Polls with jittered backoff while the status does not change."""

    def __init__(
        self,
        service: SwapRefresher,
        interval_seconds: float = 10,
        max_interval_seconds: float = 60,
        backoff_factor: float = 1.5,
        jitter: float = 0.1,
        max_attempts: int = 360,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.service = service
        self.interval_seconds = interval_seconds
        self.max_interval_seconds = max_interval_seconds
        self.backoff_factor = backoff_factor
        self.jitter = jitter
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(
        cls, service: SwapRefresher, settings: Optional[Settings] = None, **kwargs
    ) -> "SwapMonitor":
        settings = settings or get_settings()
        return cls(
            service,
            interval_seconds=settings.poll_interval_seconds,
            max_interval_seconds=settings.poll_max_interval_seconds,
            backoff_factor=settings.poll_backoff_factor,
            jitter=settings.poll_jitter,
            max_attempts=settings.poll_max_attempts,
            **kwargs,
        )

    def next_delay(self, previous: float, changed: bool) -> float:
        """Base delay before the next poll, without jitter."""
        if changed:
            return self.interval_seconds
        return min(previous * self.backoff_factor, self.max_interval_seconds)

    def jittered(self, delay: float) -> float:
        if self.jitter <= 0:
            return delay
        return max(0.0, delay * (1 + self._rng.uniform(-self.jitter, self.jitter)))

    async def watch(
        self, swap: ActiveSwap, on_update: Optional[UpdateCallback] = None
    ) -> ActiveSwap:
        """
        Poll until the swap is terminal or attempts run out.

        Args:
            swap: Swap to follow
            on_update: Called (sync or async) whenever the status changes

        Returns:
            The swap as last refreshed
        """
        delay = self.interval_seconds
        attempts = 0

        while not swap.is_terminal and attempts < self.max_attempts:
            previous = swap.status
            swap = await self.service.refresh(swap)
            attempts += 1

            changed = swap.status != previous
            if changed:
                logger.info(f"Swap {swap.id}: {previous.value} -> {swap.status.value}")
                if on_update is not None:
                    result = on_update(swap)
                    if inspect.isawaitable(result):
                        await result

            if swap.is_terminal or attempts >= self.max_attempts:
                break

            delay = self.next_delay(delay, changed or attempts == 1)
            await self._sleep(self.jittered(delay))

        if not swap.is_terminal:
            logger.warning(
                f"Stopped watching swap {swap.id} after {attempts} polls "
                f"(status {swap.status.value})"
            )
        return swap
