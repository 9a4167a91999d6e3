import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
    """
    Await `operation()` up to `max_attempts` times with exponential backoff
    (base_delay * 2 ** attempt) between attempts.

    Only exceptions listed in `retry_on` are retried; anything else propagates
    immediately. The last error is re-raised when all attempts fail.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            if attempt == max_attempts:
                logger.error(f"❌ Operation failed after {max_attempts} attempts: {e}")
                raise

            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(
                f"🔄 Attempt {attempt}/{max_attempts} failed: {e}. "
                f"Retrying in {delay:.1f}s..."
            )
            await asyncio.sleep(delay)

    # Unreachable: the loop either returns or raises
    raise RuntimeError("retry_operation exhausted without result")
