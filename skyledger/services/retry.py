"""
Bounded retry with exponential backoff for external calls.

Every call to the profile API, the document store and the notification
sink goes through retry_async so no operation waits indefinitely.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY = 1.0
DEFAULT_BACKOFF_FACTOR = 2.0


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget for one external call."""

    attempts: int = DEFAULT_ATTEMPTS
    initial_delay: float = DEFAULT_INITIAL_DELAY
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR

    def delay_for(self, attempt_index: int) -> float:
        """Seconds to wait after the given zero-based failed attempt."""
        return self.initial_delay * self.backoff_factor**attempt_index


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    description: str,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """
    Await an operation, retrying on failure.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        policy: Attempt count and backoff schedule
        description: Human label used in warning logs
        retry_on: Exception types that trigger a retry. Others propagate immediately.

    Returns:
        The operation's result from the first successful attempt

    Raises:
        ValueError: If the policy allows no attempts
        The last exception raised by the operation once attempts are exhausted
    """
    if policy.attempts < 1:
        raise ValueError(f"Retry policy needs at least one attempt, got {policy.attempts}")

    for attempt in range(policy.attempts):
        try:
            return await operation()
        except retry_on as e:
            logger.warning(
                "%s failed (attempt %d/%d): %s",
                description,
                attempt + 1,
                policy.attempts,
                e,
            )
            if attempt == policy.attempts - 1:
                raise
            await asyncio.sleep(policy.delay_for(attempt))

    # Unreachable: the loop either returns or raises
    raise AssertionError("retry loop exited without result")
