"""
Outbound transfer queue.

Durable-storage uploads are the one resource shared across runs: at most two
transfers run at once and each slot is held for a short pacing delay after its
job finishes.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

from shared.config import settings
from shared.errors import ConfigError
from shared.logging import get_logger

T = TypeVar("T")
logger = get_logger("transfer_queue")

MAX_CONCURRENT_TRANSFERS = 2


class TransferQueue:
    """Bounded, paced executor for outbound transfers."""

    def __init__(self, max_concurrency: int = 2, pacing_seconds: float = 0.2):
        if not 1 <= max_concurrency <= MAX_CONCURRENT_TRANSFERS:
            raise ConfigError(
                f"Transfer concurrency must be between 1 and {MAX_CONCURRENT_TRANSFERS}, got {max_concurrency}"
            )
        self.max_concurrency = max_concurrency
        self.pacing_seconds = pacing_seconds
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._active = 0

    @property
    def active(self) -> int:
        """Transfers currently running."""
        return self._active

    async def submit(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """
        Run `func` once a slot is free and return its result.

        Exceptions from `func` propagate to the caller; the slot is released either way.
        """
        async with self._semaphore:
            self._active += 1
            try:
                return await func(*args, **kwargs)
            finally:
                self._active -= 1
                # Slot stays taken during pacing so the next job starts after the delay
                await asyncio.sleep(self.pacing_seconds)


_queue: Optional[TransferQueue] = None


def get_transfer_queue() -> TransferQueue:
    """Process-wide queue built from settings."""
    global _queue
    if _queue is None:
        _queue = TransferQueue(
            max_concurrency=settings.transfer_max_concurrency,
            pacing_seconds=settings.transfer_pacing_seconds
        )
        logger.info(
            "Transfer queue created",
            extra={"max_concurrency": _queue.max_concurrency, "pacing_seconds": _queue.pacing_seconds}
        )
    return _queue
