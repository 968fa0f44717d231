import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
Sleep = Callable[[float], Awaitable[None]]


class RetryExhaustedError(RuntimeError):
    """Raised by ``retry_with_backoff`` with the last attempt's error as ``__cause__``."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"{attempts} attempt(s) failed: {last_error.__class__.__name__}: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def backoff_delay(base_delay: float, attempt: int) -> float:
    """Delay slept after failed attempt ``attempt`` (0-based)."""
    return base_delay * (2**attempt)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Sleep = asyncio.sleep,
    label: str = "operation",
) -> tuple[T, int]:
    """Run ``operation`` until it succeeds, at most ``max_attempts`` times.

    Every exception counts as retryable. Returns the result together with the
    number of attempts it took.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    for attempt in range(max_attempts):
        try:
            return await operation(), attempt + 1
        except Exception as exc:
            if attempt == max_attempts - 1:
                logger.warning(
                    "retry.exhausted label=%s attempts=%d type=%s",
                    label,
                    max_attempts,
                    exc.__class__.__name__,
                )
                raise RetryExhaustedError(max_attempts, exc) from exc
            delay = backoff_delay(base_delay, attempt)
            logger.info(
                "retry.scheduled label=%s attempt=%d delay=%.2fs type=%s",
                label,
                attempt + 1,
                delay,
                exc.__class__.__name__,
            )
            await sleep(delay)
    raise AssertionError("unreachable")
