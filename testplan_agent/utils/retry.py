"""Bounded retry with exponential backoff"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

error_logger = logging.getLogger("testplan.error")
llm_logger = logging.getLogger("testplan.llm")

T = TypeVar("T")


def exponential_backoff(attempt: int) -> float:
    """Seconds to wait after the given failed attempt: 2, 4, 8, ..."""
    return float(2**attempt)


@dataclass
class RetryPolicy:
    """
    Retry an async operation up to ``max_attempts`` times.

    Every exception counts as retryable. After a failed attempt the policy
    waits ``backoff(attempt)`` seconds; the last failure is re-raised.
    """

    max_attempts: int = 3
    backoff: Callable[[int], float] = exponential_backoff
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    async def run(
        self, operation: Callable[[], Awaitable[T]], description: str = "operation"
    ) -> T:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except Exception as e:
                if attempt >= self.max_attempts:
                    error_logger.error(
                        f"{description} failed after {attempt} attempts: {e}"
                    )
                    raise

                delay = self.backoff(attempt)
                llm_logger.info(
                    f"{description} attempt {attempt}/{self.max_attempts} failed "
                    f"({type(e).__name__}: {e}), retrying in {delay:.0f}s"
                )
                await self.sleep(delay)

        raise RuntimeError("max_attempts must be at least 1")
