"""
Bounded retry and polling helpers.

`retry_with_backoff` retries a callable on retryable errors with a fixed or
growing delay; `poll_until` repeats a status check at a fixed interval until it
yields a result, the deadline passes, or the caller cancels.
"""

import asyncio
import functools
import time
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

from shared.cancellation import CancellationToken
from shared.errors import PollTimeout, RateLimitError, RetryableError
from shared.logging import get_logger

T = TypeVar("T")
logger = get_logger("retry")


def _delay_for(attempt: int, base_delay: float, backoff: float) -> float:
    # backoff=1.0 keeps the delay fixed; 2.0 gives 2s, 4s, 8s for base_delay=2
    return base_delay * (backoff ** attempt)


def _retry_delay(error: Exception, attempt: int, base_delay: float, backoff: float) -> float:
    # a provider-supplied Retry-After wins over the computed delay
    retry_after = getattr(error, "retry_after", None)
    if retry_after is not None:
        return retry_after
    return _delay_for(attempt, base_delay, backoff)


def retry_with_backoff(
    max_attempts: int = 3,
    base_delay: float = 2,
    backoff: float = 2.0,
    retryable_exceptions: Tuple[Type[Exception], ...] = (RetryableError, RateLimitError)
):
    """
    Decorator for retrying functions with a bounded number of attempts.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        base_delay: Delay in seconds before the first retry (default: 2)
        backoff: Multiplier applied to the delay after each retry; 1.0 means fixed delay
        retryable_exceptions: Exception types that trigger a retry

    Returns:
        Decorated function

    Example:
        @retry_with_backoff(max_attempts=3, base_delay=2)
        async def call_api():
            # Will retry on RetryableError
            return await api_client.call(...)
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> T:
                for attempt in range(max_attempts):
                    try:
                        return await func(*args, **kwargs)
                    except retryable_exceptions as e:
                        if attempt == max_attempts - 1:
                            logger.error(
                                f"All {max_attempts} retry attempts failed for {func.__name__}",
                                extra={"error": str(e)}
                            )
                            raise
                        delay = _retry_delay(e, attempt, base_delay, backoff)
                        logger.warning(
                            f"Retry attempt {attempt + 1}/{max_attempts} for {func.__name__} "
                            f"after {delay}s delay",
                            extra={"error": str(e), "attempt": attempt + 1}
                        )
                        await asyncio.sleep(delay)
                raise RuntimeError(f"Function {func.__name__} failed after {max_attempts} attempts")

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except retryable_exceptions as e:
                    if attempt == max_attempts - 1:
                        logger.error(
                            f"All {max_attempts} retry attempts failed for {func.__name__}",
                            extra={"error": str(e)}
                        )
                        raise
                    delay = _retry_delay(e, attempt, base_delay, backoff)
                    logger.warning(
                        f"Retry attempt {attempt + 1}/{max_attempts} for {func.__name__} "
                        f"after {delay}s delay",
                        extra={"error": str(e), "attempt": attempt + 1}
                    )
                    time.sleep(delay)
            raise RuntimeError(f"Function {func.__name__} failed after {max_attempts} attempts")

        return sync_wrapper

    return decorator


async def poll_until(
    check: Callable[[], Awaitable[Optional[T]]],
    interval: float,
    timeout: float,
    cancel_token: Optional[CancellationToken] = None,
    clock: Callable[[], float] = time.monotonic
) -> T:
    """
    Call `check` every `interval` seconds until it returns a non-None value.

    Args:
        check: Async callable returning the terminal result, or None while pending
        interval: Seconds between checks
        timeout: Total seconds allowed before giving up
        cancel_token: Optional token, checked before every check
        clock: Monotonic clock (injectable for tests)

    Returns:
        The first non-None value returned by `check`

    Raises:
        PollTimeout: If `timeout` elapses first, including while a check is still running
        JobCancelled: If the token is cancelled
    """
    started = clock()
    while True:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        elapsed = clock() - started
        remaining = timeout - elapsed
        if remaining <= 0:
            raise PollTimeout(elapsed)

        # a stalled check only gets the time left before the deadline
        try:
            result = await asyncio.wait_for(check(), timeout=remaining)
        except asyncio.TimeoutError as e:
            raise PollTimeout(clock() - started) from e
        if result is not None:
            return result

        remaining = timeout - (clock() - started)
        if remaining > 0:
            await asyncio.sleep(min(interval, remaining))
