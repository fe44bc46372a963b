import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 3,
    delay_seconds: float = 1.0,
) -> T:
    """Run an async operation up to `attempts` times with linear backoff.

    The wait before retry n is `delay_seconds * n`. The last error is re-raised
    once every attempt has failed.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    last_error: Exception = None
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except Exception as e:
            last_error = e
            logger.warning("Store operation failed (attempt %s/%s): %s", attempt, attempts, e)
            if attempt < attempts:
                await asyncio.sleep(delay_seconds * attempt)

    raise last_error
